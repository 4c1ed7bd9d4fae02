"""Tests for the ordered reply source chain."""

import asyncio
from unittest.mock import MagicMock

from agent_api.base import ExecutionResult, QueuedAction
from agent_api.mock_client import MockWidgetCapability
from core.reply_chain import (
    STATIC_FALLBACK_MESSAGE,
    RemoteReplySource,
    ReplyRequest,
    ReplySource,
    ReplySourceChain,
    StaticReplySource,
    WidgetReplySource,
)
from shared.models import Message, MessageRole, ReplyEnvelope
from shared.reply_client import ReplyClientError, ReplyClientTimeoutError


def _request(command="Call all leads from yesterday"):
    history = (
        Message.create(MessageRole.USER, "Book the team dinner"),
        Message.create(MessageRole.AGENT, "Reservation queued"),
    )
    return ReplyRequest(
        command=command,
        execution_result=ExecutionResult(actions=(QueuedAction(kind="call", agent_id="agent-voice"),)),
        conversation_history=history,
        full_history=history,
        command_id="1700000000000-7",
        agents=({"id": "agent-voice", "name": "Voice Caller"},),
        metrics={"queued_actions": 1},
    )


class RecordingSource(ReplySource):
    """Reply source that records calls and either answers or raises."""

    def __init__(self, name, message=None, error=None):
        self.name = name
        self.message = message
        self.error = error
        self.calls = 0

    async def generate(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ReplyEnvelope(message=self.message, metadata={"source": self.name})


def test_chain_always_ends_with_static_source():
    chain = ReplySourceChain([RecordingSource("a", message="x")])
    assert isinstance(chain.sources[-1], StaticReplySource)

    explicit = ReplySourceChain([StaticReplySource()])
    assert len(explicit.sources) == 1


def test_remote_success_short_circuits_lower_tiers():
    post_fn = MagicMock(return_value={"message": "Calling 12 leads now.", "metadata": {}})
    widget = MockWidgetCapability()
    widget.attach()
    chain = ReplySourceChain.default(widget=widget, post_fn=post_fn)

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.message == "Calling 12 leads now."
    assert envelope.metadata["source"] == "remote"
    assert widget.calls == []
    command, history = post_fn.call_args.args
    assert command == "Call all leads from yesterday"
    assert history == [
        {"type": "user", "content": "Book the team dinner"},
        {"type": "agent", "content": "Reservation queued"},
    ]


def test_remote_error_envelope_without_widget_gives_static_text():
    post_fn = MagicMock(return_value={"message": "Failed to get response from AI.", "metadata": {"error": True}})
    chain = ReplySourceChain.default(widget=None, post_fn=post_fn)

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.message == STATIC_FALLBACK_MESSAGE
    assert envelope.message.startswith("I'm processing your request. Due to a temporary communication issue")
    assert envelope.metadata == {"source": "fallback"}


def test_each_tier_is_attempted_once_in_order():
    first = RecordingSource("first", error=RuntimeError("down"))
    second = RecordingSource("second", error=ValueError("bad"))
    third = RecordingSource("third", message="third answer")
    chain = ReplySourceChain([first, second, third])

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.message == "third answer"
    assert (first.calls, second.calls, third.calls) == (1, 1, 1)


def test_widget_tier_answers_when_remote_fails():
    post_fn = MagicMock(side_effect=ReplyClientTimeoutError("Request timed out after 20s"))
    widget = MockWidgetCapability()
    widget.attach()
    chain = ReplySourceChain.default(widget=widget, post_fn=post_fn)

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.metadata == {"source": "widget_fallback"}
    assert "1 agents" in envelope.message
    options = widget.calls[0]["options"]
    assert options["context"][0] == {"type": "user", "content": "Book the team dinner"}
    assert options["agents"] == [{"id": "agent-voice", "name": "Voice Caller"}]
    assert options["metrics"] == {"queued_actions": 1}


def test_detached_widget_is_skipped():
    post_fn = MagicMock(side_effect=ReplyClientError("HTTP 502", status=502))
    widget = MockWidgetCapability()
    chain = ReplySourceChain.default(widget=widget, post_fn=post_fn)

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.metadata["source"] == "fallback"
    assert widget.calls == []


def test_widget_reply_without_message_falls_through():
    widget = MagicMock()
    widget.is_attached = True

    async def chat(command, options):
        return {"message": "   "}

    widget.chat = chat
    source = WidgetReplySource(widget)
    chain = ReplySourceChain([source])

    envelope = asyncio.run(chain.get_reply(_request()))

    assert envelope.metadata["source"] == "fallback"


def test_malformed_remote_payloads_are_tier_failures():
    for payload in ({"metadata": {}}, ["not", "an", "object"], {"message": 42, "metadata": "x"}):
        chain = ReplySourceChain([RemoteReplySource(post_fn=MagicMock(return_value=payload))])
        envelope = asyncio.run(chain.get_reply(_request()))
        assert envelope.metadata["source"] == "fallback"


def test_remote_keeps_upstream_source_when_present():
    post_fn = MagicMock(return_value={"message": "ok", "metadata": {"source": "remote", "model": "m"}})
    envelope = asyncio.run(RemoteReplySource(post_fn=post_fn).generate(_request()))
    assert envelope.metadata == {"source": "remote", "model": "m"}
