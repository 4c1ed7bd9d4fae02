"""Top-level package exports for llm_cloud.

This package holds the LLM infrastructure behind the completion proxy:
    • provider.py   – LLM client configuration and provider routing
    • completion.py – history-to-messages mapping and the completion call
"""

from .completion import (
    COMPLETION_TEMPERATURE,
    CompletionError,
    build_provider_messages,
    request_completion,
)

__all__ = [
    "COMPLETION_TEMPERATURE",
    "CompletionError",
    "build_provider_messages",
    "request_completion",
]
