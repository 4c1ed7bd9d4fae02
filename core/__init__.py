"""Command pipeline core: orchestrator, reply chain and voice capture."""

from .orchestrator import CommandOrchestrator
from .reply_chain import (
    STATIC_FALLBACK_MESSAGE,
    RemoteReplySource,
    ReplyRequest,
    ReplySource,
    ReplySourceChain,
    StaticReplySource,
    WidgetReplySource,
)
from .voice import VoiceCapture, VoiceState

__all__ = [
    "CommandOrchestrator",
    "STATIC_FALLBACK_MESSAGE",
    "RemoteReplySource",
    "ReplyRequest",
    "ReplySource",
    "ReplySourceChain",
    "StaticReplySource",
    "WidgetReplySource",
    "VoiceCapture",
    "VoiceState",
]
