"""
agent_api package: contracts and mock implementations for the agent platform.

The command center depends on a handful of external collaborators (execution
dispatcher, agent directory, conversational widget, voice capture). This package
keeps those concerns isolated behind small abstract interfaces, following the
adapter pattern: the orchestrator and reply chain speak to the contracts in `base`,
while concrete integrations live in their own modules.

Included modules:
- base: the abstract interfaces, the opaque execution payload types and
  `widget_session()` for scoped widget attach/detach.
- mock_client: deterministic, in-memory implementations used for local
  development, tests and demos.
"""

from .base import (
    AgentDirectory,
    DispatchError,
    ExecutionDispatcher,
    ExecutionResult,
    QueuedAction,
    VoiceCapability,
    WidgetCapability,
    widget_session,
)
from .mock_client import (
    MockAgentDirectory,
    MockExecutionDispatcher,
    MockVoiceCapability,
    MockWidgetCapability,
)

__all__ = [
    "AgentDirectory",
    "DispatchError",
    "ExecutionDispatcher",
    "ExecutionResult",
    "QueuedAction",
    "VoiceCapability",
    "WidgetCapability",
    "widget_session",
    "MockAgentDirectory",
    "MockExecutionDispatcher",
    "MockVoiceCapability",
    "MockWidgetCapability",
]
