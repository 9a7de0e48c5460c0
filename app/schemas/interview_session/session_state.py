"""
Interview Session State Schemas

This module defines typed schemas for the live state of one voice interview
attempt: its lifecycle status, the visible timer, the transcript and the
notifications surfaced to the candidate.

Dependencies:
- pydantic: For data validation and serialization
- typing: For type hints
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional
from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle of an interview attempt."""
    IDLE = "idle"
    CONNECTING = "connecting"
    RECORDING = "recording"
    PAUSED = "paused"
    ENDED = "ended"


class EndReason(str, Enum):
    USER_REQUEST = "user_request"
    TIME_LIMIT = "time_limit"
    VOICE_ERROR = "voice_error"
    DISCONNECTED = "disconnected"


class InterviewSessionState(BaseModel):
    """Client-visible state of the interview attempt."""
    status: SessionStatus = Field(default=SessionStatus.IDLE, description="Current lifecycle status")
    elapsed_seconds: int = Field(default=0, ge=0, description="Seconds spent recording, excluding pauses")
    remaining_seconds: int = Field(default=0, ge=0, description="Seconds left before the session auto-ends")
    transcript_text: str = Field(default="", description="Latest transcript text shown to the candidate")
    connected: bool = Field(default=False, description="Whether the voice conversation is connected")
    mic_enabled: bool = Field(default=False, description="Whether the microphone is unmuted")
    warning_shown: bool = Field(default=False, description="Whether the time warning was already emitted")


class TranscriptEvent(BaseModel):
    """One transcript update delivered by the voice provider."""
    role: Literal["assistant", "user"] = "user"
    text: str


class Notification(BaseModel):
    """User-visible, non-blocking notification."""
    level: Literal["info", "success", "warning", "error"]
    message: str
    auto_dismiss_seconds: Optional[int] = None
