"""
Deterministic mock agent platform for local runs, demos, and tests.

This module provides reference implementations of every collaborator contract in
`agent_api.base` so the command center can be exercised end to end without any
credentials or network access. The dispatcher routes commands to three agents by
keyword, the directory reports a fixed roster plus metrics derived from the
dispatcher's in-memory queue, the widget acknowledges commands while attached, and
the voice capability only records start/stop calls. Because behavior is stable,
tests and manual demos are reproducible across machines.

Real integrations implement the same interfaces in their own modules and are
passed to `main.create_app()`.
"""

import datetime
from typing import Any, Dict, List, Mapping, Optional

from .base import (
    AgentDirectory,
    DispatchError,
    ExecutionDispatcher,
    ExecutionResult,
    QueuedAction,
    VoiceCapability,
    WidgetCapability,
)

CALL_AGENT_ID = "agent-voice"
SCHEDULE_AGENT_ID = "agent-scheduler"
EMAIL_AGENT_ID = "agent-email"

# (agent id, action kind, keywords) in queue order
_ROUTES = (
    (CALL_AGENT_ID, "call", ("call", "phone", "dial")),
    (SCHEDULE_AGENT_ID, "schedule", ("book", "schedule", "meeting", "demo", "reservation", "calendar")),
    (EMAIL_AGENT_ID, "email", ("email", "e-mail", "follow-up", "follow up", "send")),
)


class MockExecutionDispatcher(ExecutionDispatcher):
    """
    In-memory dispatcher that queues one action per agent whose keywords appear in the command.

    Every dispatched command is also recorded in an execution log. Commands longer than
    `max_command_length` are rejected with `DispatchError`, which gives demos a way to
    see the flagged error path.
    """

    def __init__(self, max_command_length: int = 2000) -> None:
        self.max_command_length = max_command_length
        self.action_queue: List[QueuedAction] = []
        self.execution_log: List[Dict[str, Any]] = []

    async def dispatch(self, command: str) -> ExecutionResult:
        if len(command) > self.max_command_length:
            raise DispatchError(
                f"command is {len(command)} characters long, the limit is {self.max_command_length}"
            )

        lowered = command.lower()
        actions = []
        for agent_id, kind, keywords in _ROUTES:
            if any(keyword in lowered for keyword in keywords):
                actions.append(QueuedAction(
                    kind=kind,
                    agent_id=agent_id,
                    description=command,
                    payload={"priority": "normal", "status": "queued"},
                ))

        self.action_queue.extend(actions)
        self.execution_log.append({
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "command": command,
            "queued": len(actions),
        })
        return ExecutionResult(actions=tuple(actions))


class MockAgentDirectory(AgentDirectory):
    """Fixed three-agent roster with metrics computed from an optional mock dispatcher."""

    def __init__(self, dispatcher: Optional[MockExecutionDispatcher] = None) -> None:
        self._dispatcher = dispatcher
        self._agents: List[Dict[str, Any]] = [
            {
                "id": CALL_AGENT_ID,
                "name": "Voice Caller",
                "status": "active",
                "capabilities": ["outbound_calls", "lead_qualification"],
            },
            {
                "id": SCHEDULE_AGENT_ID,
                "name": "Scheduler",
                "status": "active",
                "capabilities": ["calendar_booking", "reservations"],
            },
            {
                "id": EMAIL_AGENT_ID,
                "name": "Email Assistant",
                "status": "idle",
                "capabilities": ["follow_up_emails", "campaigns"],
            },
        ]

    def list_agents(self) -> List[Dict[str, Any]]:
        return [dict(agent) for agent in self._agents]

    def get_system_metrics(self) -> Dict[str, Any]:
        queued = len(self._dispatcher.action_queue) if self._dispatcher else 0
        commands = len(self._dispatcher.execution_log) if self._dispatcher else 0
        return {
            "active_agents": sum(1 for agent in self._agents if agent["status"] == "active"),
            "queued_actions": queued,
            "commands_dispatched": commands,
        }


class MockWidgetCapability(WidgetCapability):
    """Widget stand-in that acknowledges the command while attached."""

    def __init__(self) -> None:
        self._attached = False
        self.calls: List[Dict[str, Any]] = []

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        self._attached = True

    def detach(self) -> None:
        self._attached = False

    async def chat(self, command: str, options: Mapping[str, Any]) -> Mapping[str, Any]:
        if not self._attached:
            raise RuntimeError("widget is not attached")
        self.calls.append({"command": command, "options": dict(options)})
        agents = options.get("agents") or []
        return {
            "message": (
                f"Received \"{command}\". {len(agents)} agents are available to work on it; "
                "progress will show up in the action queue."
            )
        }


class MockVoiceCapability(VoiceCapability):
    """Voice device stand-in. `available=False` simulates a missing microphone."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.recording = False
        self._transcription = ""

    async def start_recording(self) -> bool:
        if not self.available:
            return False
        self.recording = True
        return True

    def stop_recording(self) -> None:
        self.recording = False

    @property
    def live_transcription(self) -> str:
        return self._transcription
