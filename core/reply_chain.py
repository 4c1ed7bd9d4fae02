"""
core/reply_chain.py

Ordered fallback chain that produces the assistant's reply to a command.

Tiers are tried in priority order and each one at most once per command:
1. Remote tier – the completion proxy, reached over HTTP.
2. Widget tier – the embedded conversational widget, only when one was injected and is attached.
3. Static tier – a fixed guidance message that never fails.

A failing tier is logged and counted, then the chain moves on. The operator never sees a raw
tier error; in the worst case they get the static reply.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from agent_api.base import ExecutionResult, WidgetCapability
from config.logging_config import get_logger
from monitoring.metrics import REPLY_TIER_OUTCOMES
from shared.errors import ReplyTierError, TransportFailure, UpstreamFailure, WidgetUnavailable
from shared.models import Message, ReplyEnvelope
from shared.reply_client import ReplyClientError, ReplyClientTimeoutError, post_chat_from_config

logger = get_logger(__name__)

STATIC_FALLBACK_MESSAGE = (
    "I'm processing your request. Due to a temporary communication issue, I'll provide "
    "updates as the execution progresses. You can monitor the action queue and execution "
    "log for real-time status."
)


@dataclass(frozen=True)
class ReplyRequest:
    """
    Everything a reply source may use to answer one command.

    `conversation_history` is the recent window sent to the completion proxy; `full_history` is
    the whole conversation before this command, handed to the widget. `command_id` correlates
    the chain's log records with the orchestrator's.
    """
    command: str
    execution_result: ExecutionResult = field(default_factory=ExecutionResult)
    conversation_history: Tuple[Message, ...] = ()
    full_history: Tuple[Message, ...] = ()
    command_id: str = "no_id"
    agents: Tuple[Dict[str, Any], ...] = ()
    metrics: Mapping[str, Any] = field(default_factory=dict)

    def history_items(self) -> List[Dict[str, str]]:
        return [message.to_history_item() for message in self.conversation_history]

    def full_history_items(self) -> List[Dict[str, str]]:
        return [message.to_history_item() for message in self.full_history]


class ReplySource(ABC):
    """One tier of the reply chain."""

    name: str = "source"

    def is_available(self) -> bool:
        """Whether the tier should be attempted at all for this call. Checked at call time."""
        return True

    @abstractmethod
    async def generate(self, request: ReplyRequest) -> ReplyEnvelope:
        """
        Produce a reply envelope or raise.

        Raises:
            ReplyTierError: Or any other exception; the chain treats both as tier failure.
        """
        raise NotImplementedError


class RemoteReplySource(ReplySource):
    """
    Reply tier backed by the completion proxy.

    The HTTP call is blocking (stdlib urllib), so it runs in a worker thread to keep the event
    loop free. `post_fn` defaults to `post_chat_from_config` and can be replaced in tests.
    """

    name = "remote"

    def __init__(self, post_fn: Optional[Callable[[str, List[Dict[str, str]]], Mapping[str, Any]]] = None) -> None:
        self._post_fn = post_fn or post_chat_from_config

    async def generate(self, request: ReplyRequest) -> ReplyEnvelope:
        try:
            payload = await asyncio.to_thread(self._post_fn, request.command, request.history_items())
        except ReplyClientTimeoutError as exc:
            raise TransportFailure(str(exc)) from exc
        except ReplyClientError as exc:
            if exc.status is None:
                raise TransportFailure(str(exc)) from exc
            raise UpstreamFailure(str(exc)) from exc
        except OSError as exc:
            raise TransportFailure(str(exc)) from exc

        if not isinstance(payload, Mapping):
            raise UpstreamFailure(f"Completion proxy returned {type(payload).__name__}, expected an object")
        try:
            envelope = ReplyEnvelope(**payload)
        except ValidationError as exc:
            raise UpstreamFailure(f"Malformed reply envelope: {exc.error_count()} validation error(s)") from exc

        if envelope.is_error:
            raise UpstreamFailure("Completion proxy returned an error envelope")

        envelope.metadata.setdefault("source", self.name)
        return envelope


class WidgetReplySource(ReplySource):
    """
    Reply tier backed by the optional embedded conversational widget.

    The widget is injected at construction. Its absence is not an error: the tier simply
    reports itself unavailable and is skipped.
    """

    name = "widget_fallback"

    def __init__(self, widget: Optional[WidgetCapability] = None) -> None:
        self.widget = widget

    def is_available(self) -> bool:
        return self.widget is not None and self.widget.is_attached

    async def generate(self, request: ReplyRequest) -> ReplyEnvelope:
        if not self.is_available():
            raise WidgetUnavailable("No attached widget capability")

        options = {
            "context": request.full_history_items(),
            "agents": [dict(agent) for agent in request.agents],
            "metrics": dict(request.metrics),
        }
        try:
            reply = await self.widget.chat(request.command, options)
        except Exception as exc:
            raise WidgetUnavailable(f"Widget chat failed: {exc}") from exc

        message = reply.get("message") if isinstance(reply, Mapping) else None
        if not isinstance(message, str) or not message.strip():
            raise WidgetUnavailable("Widget reply has no message text")
        return ReplyEnvelope(message=message, metadata={"source": self.name})


class StaticReplySource(ReplySource):
    """Terminal tier: a fixed, deterministic guidance message. Never fails."""

    name = "fallback"

    def __init__(self, message: str = STATIC_FALLBACK_MESSAGE) -> None:
        self.message = message

    async def generate(self, request: ReplyRequest) -> ReplyEnvelope:
        return ReplyEnvelope(message=self.message, metadata={"source": self.name})


class ReplySourceChain:
    """
    Try reply sources in order and return the first envelope produced.

    A `StaticReplySource` is appended when the given sources do not already end with one, so
    `get_reply()` always returns an envelope.
    """

    def __init__(self, sources: Sequence[ReplySource]) -> None:
        self.sources: List[ReplySource] = list(sources)
        if not self.sources or not isinstance(self.sources[-1], StaticReplySource):
            self.sources.append(StaticReplySource())

    @classmethod
    def default(
        cls,
        widget: Optional[WidgetCapability] = None,
        post_fn: Optional[Callable[[str, List[Dict[str, str]]], Mapping[str, Any]]] = None,
    ) -> "ReplySourceChain":
        """Build the standard remote → widget → static chain."""
        return cls([RemoteReplySource(post_fn=post_fn), WidgetReplySource(widget), StaticReplySource()])

    async def get_reply(self, request: ReplyRequest) -> ReplyEnvelope:
        """
        Resolve a reply for `request` through the tiers.

        Args:
            request (ReplyRequest): Command, dispatch result and context snapshots.

        Returns:
            ReplyEnvelope: The first successful tier's envelope.
        """
        for source in self.sources:
            tier_extra = {"reply_tier": source.name, "command_id": request.command_id}
            if not source.is_available():
                REPLY_TIER_OUTCOMES.labels(tier=source.name, outcome="skipped").inc()
                logger.debug("Reply tier %s unavailable, skipping", source.name, extra=tier_extra)
                continue
            try:
                envelope = await source.generate(request)
            except Exception as exc:
                REPLY_TIER_OUTCOMES.labels(tier=source.name, outcome="failure").inc()
                reason = "failed" if isinstance(exc, ReplyTierError) else "raised unexpectedly"
                logger.warning(
                    "Reply tier %s %s (%s: %s)", source.name, reason, type(exc).__name__, exc,
                    extra=tier_extra,
                )
                continue
            REPLY_TIER_OUTCOMES.labels(tier=source.name, outcome="success").inc()
            logger.info("Reply resolved by tier %s", source.name, extra=tier_extra)
            return envelope

        # Only reachable when a custom terminal tier misbehaves.
        logger.error("All reply tiers failed, using static guidance", extra={"command_id": request.command_id})
        return await StaticReplySource().generate(request)
