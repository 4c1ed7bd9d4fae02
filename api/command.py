"""
api/command.py (command, conversation, quick-action, status and voice endpoints)

Handles the dashboard-facing endpoints of the command center. The collaborators (orchestrator,
voice capture, widget, agent directory) are created by `main.create_app()` and read from
`request.app.state`, so tests can build an app around fakes.

Endpoints:
  - POST /command: Runs one operator command through dispatch and the reply chain.
  - GET /conversation: Returns the conversation log, optionally only the last `limit` messages.
  - GET /quick-actions: Preset commands offered by the dashboard.
  - GET /status: Busy flag, voice state, widget availability, agents, metrics and run mode.
  - POST /voice/toggle: Starts or stops voice capture.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from llm_cloud.provider import has_credentials
from shared.errors import OrchestratorBusyError
from shared.utils import truncate_message_for_logging

logger = logging.getLogger(__name__)

router = APIRouter()

QUICK_ACTIONS = [
    "Call all leads from this week and schedule follow-up meetings",
    "Book restaurant reservations for team dinner next Friday",
    "Send personalized follow-up emails to all demo attendees",
]


class CommandRequest(BaseModel):
    """Request body of POST /command."""
    command: str = Field(..., description="Natural-language instruction typed or spoken by the operator")


@router.post("/command")
async def handle_command(req: CommandRequest, request: Request):
    """
    Execute one operator command.

    Returns:
        dict: {"reply": <agent message>, "conversationLength": <messages stored>}

    Raises:
        HTTPException: 400 for a blank command, 409 while another command is in flight.
    """
    orchestrator = request.app.state.orchestrator
    logger.info(f"[handle_command] Received command: '{truncate_message_for_logging(req.command)}'")

    try:
        reply = await orchestrator.execute_command(req.command)
    except OrchestratorBusyError as e:
        logger.warning(f"[handle_command] Rejected, orchestrator busy: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    if reply is None:
        raise HTTPException(status_code=400, detail="Command must not be blank")

    return {"reply": reply.to_dict(), "conversationLength": len(orchestrator.store)}


@router.get("/conversation")
def get_conversation(request: Request, limit: Optional[int] = Query(None, ge=0)):
    store = request.app.state.orchestrator.store
    messages = store.all() if limit is None else store.recent(limit)
    return {"messages": [message.to_dict() for message in messages]}


@router.get("/quick-actions")
def get_quick_actions():
    return {"actions": list(QUICK_ACTIONS)}


@router.get("/status")
def get_status(request: Request):
    """
    Report the dashboard's live state.

    `mode` is "live" when credentials for the configured LLM provider are present and "demo"
    otherwise; in demo mode replies come from the lower reply tiers.
    """
    state = request.app.state
    widget = state.widget
    directory = state.directory

    agents, metrics = [], {}
    if directory is not None:
        try:
            agents = directory.list_agents()
            metrics = directory.get_system_metrics()
        except Exception as e:
            logger.warning(f"[get_status] Agent directory unavailable: {type(e).__name__}: {e}")

    return {
        "busy": state.orchestrator.is_busy,
        "voice": state.voice.state.value,
        "widgetAvailable": widget is not None and widget.is_attached,
        "agents": agents,
        "metrics": metrics,
        "mode": "live" if has_credentials() else "demo",
    }


@router.post("/voice/toggle")
async def toggle_voice(request: Request):
    voice = request.app.state.voice
    new_state = await voice.toggle()
    logger.info(f"[toggle_voice] Voice capture is now {new_state.value}")
    return {"state": new_state.value, "liveTranscription": voice.live_transcription}
