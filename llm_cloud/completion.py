"""
llm_cloud/completion.py

Stateless completion call behind the completion proxy endpoint.

Given the operator's command and the recent conversation history, this module builds the
provider's chat-style message list (history first, command last as a user turn), sends it to
the configured model with a fixed sampling temperature, and maps the first choice back into a
`ReplyEnvelope`. Nothing is retained between calls.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config import CONFIG
from llm_cloud.provider import get_client
from monitoring.metrics import LLM_REQUEST_TIME, track_errors
from shared.models import ReplyEnvelope

logger = logging.getLogger(__name__)

COMPLETION_TEMPERATURE = 0.7
REMOTE_SOURCE = "remote"


class CompletionError(Exception):
    """The provider answered, but the response carries no usable reply text."""


def build_provider_messages(command: str, history: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """
    Convert conversation history plus the new command into provider chat messages.

    History items use the conversation's `type` field: "user" stays "user" and anything else
    becomes "assistant". The command is appended as the final user turn.

    Args:
        command (str): The operator's command.
        history (Iterable[Mapping[str, Any]]): Prior turns with `type` and `content` keys.

    Returns:
        List[Dict[str, str]]: Ordered `{"role", "content"}` messages.
    """
    messages = []
    for item in history:
        role = "user" if item.get("type") == "user" else "assistant"
        messages.append({"role": role, "content": str(item.get("content") or "")})
    messages.append({"role": "user", "content": command})
    return messages


@track_errors('proxy', 'request_completion')
def request_completion(
    command: str,
    history: Iterable[Mapping[str, Any]],
    client: Optional[Any] = None,
) -> ReplyEnvelope:
    """
    Ask the configured model for a reply to `command` given `history`.

    Args:
        command (str): The operator's command.
        history (Iterable[Mapping[str, Any]]): Prior turns with `type` and `content` keys.
        client: Optional OpenAI-compatible client; built with `get_client()` when omitted.

    Returns:
        ReplyEnvelope: The first choice's text with metadata {"source": "remote"}.

    Raises:
        CompletionError: If the response has no choices or no text content.
        Exception: Transport, authentication and status errors from the SDK propagate.
    """
    client = client or get_client()
    model_name = CONFIG["llm"]["models"]["completion"]["name"]
    messages = build_provider_messages(command, history)

    logger.info(
        "Making LLM request",
        extra={'extra_fields': {'model': model_name, 'turns': len(messages)}}
    )

    with LLM_REQUEST_TIME.labels(model=model_name).time():
        response = client.chat.completions.create(
            model=model_name,
            messages=messages,
            temperature=COMPLETION_TEMPERATURE,
        )

    choices = getattr(response, "choices", None) or []
    if not choices:
        raise CompletionError("Provider response contained no choices")
    content = getattr(getattr(choices[0], "message", None), "content", None)
    if not isinstance(content, str) or not content.strip():
        raise CompletionError("Provider response contained no reply text")

    return ReplyEnvelope(message=content, metadata={"source": REMOTE_SOURCE})
