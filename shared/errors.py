"""
shared/errors.py

Failure taxonomy of the command pipeline.

Reply tier failures are recovered inside the reply chain and never reach the
operator. A busy orchestrator rejects new commands with `OrchestratorBusyError`.
Dispatch failures (`agent_api.base.DispatchError`) are the one class the operator
sees, as a flagged error message.
"""


class ReplyTierError(Exception):
    """Base class for a reply tier that could not produce an envelope."""


class TransportFailure(ReplyTierError):
    """Network or HTTP transport error (including timeouts) reaching the completion proxy."""


class UpstreamFailure(ReplyTierError):
    """Non-success status, error envelope, or malformed envelope from the completion proxy."""


class WidgetUnavailable(ReplyTierError):
    """Widget capability absent, detached, failing, or returning an unusable reply."""


class OrchestratorBusyError(RuntimeError):
    """Raised when a command is submitted while another one is still in flight."""
