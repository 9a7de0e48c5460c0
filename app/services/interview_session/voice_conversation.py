"""
Voice Conversation Client Module

This module defines the contract the interview session controller uses to
drive a real-time voice conversation, and the configuration handed to it when
a conversation starts.

Dependencies:
- abc: For the abstract base class.
- dataclasses: For the start configuration, which carries callbacks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional
from app.schemas.interview_session.session_state import TranscriptEvent

TranscriptCallback = Callable[[TranscriptEvent], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]


@dataclass
class VoiceSessionConfig:
    """Everything the voice provider needs to start an interview conversation."""
    assistant_id: str
    on_transcript: TranscriptCallback
    on_error: ErrorCallback
    metadata: Dict[str, Any] = field(default_factory=dict)
    # The assistant opens the conversation
    first_message: bool = True


class VoiceConversationClient(ABC):
    """Real-time voice conversation provider."""

    @property
    def conversation_id(self) -> Optional[str]:
        """Provider reference of the current conversation, once known."""
        return None

    @abstractmethod
    async def start(self, config: VoiceSessionConfig) -> None:
        """Start a conversation; returns once the provider confirms it started.

        Raises:
            Exception: Any failure to start the conversation.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop the conversation. Stopping twice is harmless."""

    @abstractmethod
    async def set_muted(self, muted: bool) -> None:
        """Mute or unmute the candidate's microphone."""
