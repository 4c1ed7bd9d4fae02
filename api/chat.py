"""
api/chat.py

Remote Completion Proxy endpoint.

  - POST /chat: Receives the operator's command plus recent conversation history, forwards them to
                the configured LLM provider (via the llm_cloud module) and returns a reply envelope
                {"message", "metadata"}.

The proxy is stateless: every request carries the whole context it needs. Any failure is converted
into the error envelope below with HTTP 500, which the reply chain's remote tier recognises and
treats as a tier failure.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from llm_cloud.completion import request_completion
from shared.models import CompletionRequest
from shared.utils import truncate_message_for_logging

logger = logging.getLogger(__name__)

router = APIRouter()

PROXY_FAILURE_MESSAGE = "Failed to get response from AI."


@router.post("/chat")
def handle_chat(req: CompletionRequest) -> JSONResponse:
    """
    Produce a natural-language reply to a command through the LLM provider.

    The handler is a plain `def` because the provider SDK call is blocking; FastAPI runs it in its
    worker thread pool.

    Args:
        req (CompletionRequest): `command` and ordered `conversationHistory` items ({type, content}).

    Returns:
        JSONResponse: The reply envelope with HTTP 200, or
            {"message": "Failed to get response from AI.", "metadata": {"error": true}} with HTTP 500
            when the provider call fails for any reason (missing credentials, transport error,
            non-success status, malformed response).
    """
    logger.info(
        f"[handle_chat] Completion requested with {len(req.conversationHistory)} history items - "
        f"Command: '{truncate_message_for_logging(req.command)}'"
    )
    history = [item.model_dump() for item in req.conversationHistory]
    try:
        envelope = request_completion(req.command, history)
    except Exception as e:
        logger.error(f"[handle_chat] Completion failed: {type(e).__name__}: {e}")
        return JSONResponse(
            content={"message": PROXY_FAILURE_MESSAGE, "metadata": {"error": True}},
            status_code=500,
        )
    return JSONResponse(content=envelope.model_dump())
