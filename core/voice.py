"""
core/voice.py

Two-state voice capture control (idle / listening) on top of a VoiceCapability.

Voice capture is independent of command processing: toggling it never touches the
orchestrator's busy flag.
"""

from enum import Enum

from agent_api.base import VoiceCapability
from config.logging_config import get_logger

logger = get_logger(__name__)


class VoiceState(Enum):
    IDLE = "idle"
    LISTENING = "listening"


class VoiceCapture:
    """Starts and stops the voice device, tracking whether it is listening."""

    def __init__(self, capability: VoiceCapability) -> None:
        self.capability = capability
        self.state = VoiceState.IDLE

    @property
    def is_listening(self) -> bool:
        return self.state is VoiceState.LISTENING

    @property
    def live_transcription(self) -> str:
        return self.capability.live_transcription

    async def start(self) -> bool:
        """
        Start listening.

        Returns:
            bool: True if listening afterwards. False when the device refused to start,
            in which case the state stays IDLE.
        """
        if self.is_listening:
            return True
        started = await self.capability.start_recording()
        if started:
            self.state = VoiceState.LISTENING
            logger.info("Voice capture started")
        else:
            logger.warning("Voice device could not be started")
        return bool(started)

    def stop(self) -> None:
        if not self.is_listening:
            return
        self.capability.stop_recording()
        self.state = VoiceState.IDLE
        logger.info("Voice capture stopped")

    async def toggle(self) -> VoiceState:
        if self.is_listening:
            self.stop()
        else:
            await self.start()
        return self.state
