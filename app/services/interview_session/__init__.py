"""
Interview Session Module

State machine, timer and voice conversation clients for live interview sessions.
"""

from .session_controller import InterviewSessionController
from .session_timer import SessionTimer
from .voice_conversation import VoiceConversationClient, VoiceSessionConfig
from .websocket_voice_conversation import WebSocketVoiceConversation

__all__ = [
    "InterviewSessionController",
    "SessionTimer",
    "VoiceConversationClient",
    "VoiceSessionConfig",
    "WebSocketVoiceConversation",
]
