"""
Collaborator contracts for the agent platform behind the command center.

The command pipeline talks to four external collaborators: the execution subsystem
that turns a command into queued real-world actions (calls, bookings, emails), the
directory that describes the agent roster and system metrics, the optional third-party
conversational widget, and the voice capture device. Each one is declared here as an
Abstract Base Class (ABC) so the orchestrator and the reply chain only depend on a
small, stable surface while concrete integrations live in their own modules.

The execution payload types (`QueuedAction`, `ExecutionResult`) are owned by the
dispatcher side. The core treats them as opaque data and only looks at how many
actions were queued.

A deterministic in-memory implementation of every contract ships in
`agent_api.mock_client`, so the service runs end to end without credentials.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class DispatchError(Exception):
    """
    Raised by an execution dispatcher that rejects or fails to execute a command.

    The orchestrator converts any dispatch failure into a visible, flagged error
    message, so implementations should put a human-readable reason in the message.
    """


@dataclass(frozen=True)
class QueuedAction:
    """
    Opaque reference to one action the execution subsystem queued for a command.

    `kind` is the tag ("call", "schedule", "email", ...) and `payload` holds whatever
    the owning agent needs. Nothing in the command pipeline interprets either field.
    """
    kind: str
    agent_id: str
    description: str = ""
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "agentId": self.agent_id,
            "description": self.description,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Result of dispatching one command: zero or more queued actions, in queue order."""
    actions: Tuple[QueuedAction, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def action_count(self) -> int:
        return len(self.actions)


class ExecutionDispatcher(ABC):
    """Hands a raw command string to the execution subsystem."""

    @abstractmethod
    async def dispatch(self, command: str) -> ExecutionResult:
        """
        Execute or queue the actions described by `command`.

        Args:
            command (str): The stripped, non-blank command text typed by the operator.

        Returns:
            ExecutionResult: The queued actions, possibly none.

        Raises:
            DispatchError: If the execution subsystem rejects the command. Any other
                exception is treated the same way by the orchestrator.
        """
        raise NotImplementedError


class AgentDirectory(ABC):
    """Read-only view of the agent roster and live system metrics."""

    @abstractmethod
    def list_agents(self) -> List[Dict[str, Any]]:
        """
        Return the agent roster.

        Each item should at least carry `id`, `name`, `status` and `capabilities`
        (a list of strings). The reply chain forwards the roster to the widget tier
        as context.
        """
        raise NotImplementedError

    @abstractmethod
    def get_system_metrics(self) -> Dict[str, Any]:
        """Return a flat mapping of system-level counters (queue depth, success rate, ...)."""
        raise NotImplementedError


class WidgetCapability(ABC):
    """
    Third-party conversational widget that can answer a command when the remote tier fails.

    The widget has an explicit lifecycle: it is only usable between `attach()` and
    `detach()`. Use `widget_session()` to guarantee the detach.
    """

    @property
    @abstractmethod
    def is_attached(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def attach(self) -> None:
        """Load the widget so its chat capability becomes available."""
        raise NotImplementedError

    @abstractmethod
    def detach(self) -> None:
        """Unload the widget. Must be safe to call when already detached."""
        raise NotImplementedError

    @abstractmethod
    async def chat(self, command: str, options: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Ask the widget for a reply.

        Args:
            command (str): The operator's command.
            options (Mapping[str, Any]): Context with keys `context` (conversation
                history as wire dicts), `agents` (roster) and `metrics`.

        Returns:
            Mapping[str, Any]: A mapping with at least a `message` string.
        """
        raise NotImplementedError


@contextmanager
def widget_session(widget: Optional[WidgetCapability]) -> Iterator[Optional[WidgetCapability]]:
    """
    Attach `widget` for the duration of the block and always detach it afterwards.

    A `None` widget is passed through untouched, so callers do not need to branch on
    whether the capability was configured.
    """
    if widget is None:
        yield None
        return
    widget.attach()
    try:
        yield widget
    finally:
        widget.detach()


class VoiceCapability(ABC):
    """Opaque start/stop access to the voice capture device."""

    @abstractmethod
    async def start_recording(self) -> bool:
        """Start capturing audio. Returns False if the device could not be started."""
        raise NotImplementedError

    @abstractmethod
    def stop_recording(self) -> None:
        """Stop capturing audio."""
        raise NotImplementedError

    @property
    def live_transcription(self) -> str:
        return ""
