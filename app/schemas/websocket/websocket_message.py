"""
Description: 
This module defines the schemas for WebSocket messages used by the interview session socket.

# SessionClientMessage is the schema for every message the browser sends.
# SessionServerMessage is the base class for all messages sent from the server.

Dependencies:
- pydantic: For data validation and settings management.
- typing: For type annotations.
"""

from pydantic import BaseModel
from typing import Any, Dict, Literal, Optional

# Messages sent by the browser
class SessionClientMessage(BaseModel):
    type: Literal[
        "start",
        "pause",
        "resume",
        "stop",
        "transcript",
        "voice_started",
        "voice_start_failed",
        "voice_error",
    ]
    microphone_granted: Optional[bool] = None
    resume_id: Optional[str] = None
    job_title: Optional[str] = None
    role: Literal["assistant", "user"] = "user"
    text: Optional[str] = None
    conversation_id: Optional[str] = None
    message: Optional[str] = None

# Messages sent by the server
class SessionServerMessage(BaseModel):
    type: Literal["state", "notification", "voice_command", "report", "error"]
    content: Dict[str, Any]
    timestamp: str
