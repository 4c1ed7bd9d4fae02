"""
HTTP client for the completion proxy (stdlib-only).

The remote reply tier calls the completion proxy endpoint with the operator's command and
the recent conversation history. This module issues that HTTP (Hypertext Transfer
Protocol) POST with Python's standard library and returns the parsed JSON body on any HTTP 2xx status.
An explicit timeout is always applied so a slow provider cannot hold the operator's command
open indefinitely. The error taxonomy is kept small so the caller can tell timeouts and
network errors apart from non-2xx responses and unparseable bodies.
"""

from __future__ import annotations

import json
import socket
from typing import Any, Dict, List
from urllib import error as urlerror
from urllib import request as urlrequest

from config import CONFIG


class ReplyClientError(Exception):
    """
    Base exception for completion proxy client errors.

    Raised for non-timeout failures: non-2xx HTTP responses, invalid JSON payloads and
    generic network errors. `status` carries the HTTP status when one was received.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReplyClientTimeoutError(ReplyClientError):
    """Raised when the request to the completion proxy exceeds the timeout."""


def post_chat(
    base_url: str,
    command: str,
    conversation_history: List[Dict[str, str]],
    path: str = "/api/chat",
    timeout_s: float = 20.0,
) -> Dict[str, Any]:
    """
    POST a command and its conversation history to the completion proxy.

    Args:
        base_url (str): Proxy base URL (e.g., "http://localhost:8080").
        command (str): The operator's command.
        conversation_history (List[Dict[str, str]]): Prior turns as {"type", "content"} dicts.
        path (str): Endpoint path appended to base_url.
        timeout_s (float): Socket timeout in seconds.

    Returns:
        Dict[str, Any]: Parsed JSON payload returned by the proxy on any 2xx status.

    Raises:
        ReplyClientTimeoutError: When the request exceeds the given timeout.
        ReplyClientError: For non-2xx HTTP responses, invalid JSON bodies or network errors.
    """
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    payload = {
        "command": command,
        "conversationHistory": conversation_history,
    }
    data = json.dumps(payload).encode("utf-8")

    req = urlrequest.Request(url, data=data, method="POST")
    req.add_header("Content-Type", "application/json")

    try:
        with urlrequest.urlopen(req, timeout=timeout_s) as resp:
            status = getattr(resp, "status", 200)
            body = resp.read().decode("utf-8", errors="replace")
            if not 200 <= status < 300:
                raise ReplyClientError(f"Completion proxy HTTP {status}: {body[:200]}", status=status)
            try:
                return json.loads(body)
            except json.JSONDecodeError as exc:
                raise ReplyClientError(
                    f"Invalid JSON from completion proxy: {exc}: body={body[:200]}", status=status
                ) from exc
    except urlerror.HTTPError as exc:
        # urlopen raises HTTPError for 4xx/5xx before we can inspect the status
        body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
        raise ReplyClientError(f"Completion proxy HTTP {exc.code}: {body[:200]}", status=exc.code) from exc
    except socket.timeout as exc:
        raise ReplyClientTimeoutError(f"Request timed out after {timeout_s}s") from exc
    except urlerror.URLError as exc:
        if isinstance(exc.reason, socket.timeout):
            raise ReplyClientTimeoutError(f"Request timed out after {timeout_s}s") from exc
        raise ReplyClientError(f"Network error calling completion proxy: {exc}") from exc


def post_chat_from_config(command: str, conversation_history: List[Dict[str, str]]) -> Dict[str, Any]:
    """
    Convenience wrapper that reads the proxy location and timeout from CONFIG["reply_chain"].

    Raises:
        ReplyClientError: If the base URL is missing; request errors from post_chat propagate.
        ReplyClientTimeoutError: When the request exceeds the configured timeout.
    """
    chain_cfg = CONFIG.get("reply_chain", {}) or {}
    base_url = chain_cfg.get("remote_base_url")
    if not isinstance(base_url, str) or not base_url.strip():
        raise ReplyClientError("Missing CONFIG['reply_chain']['remote_base_url'] for completion proxy client")

    return post_chat(
        base_url=base_url,
        command=command,
        conversation_history=conversation_history,
        path=chain_cfg.get("remote_path", "/api/chat"),
        timeout_s=float(chain_cfg.get("timeout_s", 20.0)),
    )
