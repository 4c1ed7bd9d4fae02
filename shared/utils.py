"""
shared/utils.py

Shared utility functions used across multiple modules.
"""

DISPATCH_ERROR_TEMPLATE = (
    "I encountered an error while processing your command: {error}. "
    "Please try again or rephrase your request."
)

def truncate_message_for_logging(message: str, max_length: int = 100) -> str:
    """
    Truncate long messages for logging purposes.

    Args:
        message (str): Message to truncate
        max_length (int): Maximum length before truncation (default: 100)

    Returns:
        str: Truncated message with ellipsis if needed
    """
    if len(message) <= max_length:
        return message
    return message[:max_length] + "..."

def describe_error(error: BaseException) -> str:
    """
    Return the human-readable part of an exception for operator-facing messages.

    Falls back to the exception class name when the exception carries no message,
    so the operator never sees an empty reason.
    """
    text = str(error).strip()
    return text or type(error).__name__

def create_dispatch_error_message(error: BaseException) -> str:
    """Build the text of the flagged agent message shown when a command cannot be executed."""
    return DISPATCH_ERROR_TEMPLATE.format(error=describe_error(error))
