"""
Description:
Schemas for interview report generation: the exchange turns a report is
computed from and the report itself, which is also the response body of the
report endpoint.

Dependencies:
- pydantic: For data validation and settings management.
"""
from pydantic import BaseModel, Field
from typing import Dict, Literal

class ExchangeTurn(BaseModel):
    """One role-tagged utterance of a conversation, in order."""
    role: Literal["assistant", "user"]
    content: str

class InterviewReport(BaseModel):
    score: int = Field(..., ge=0, le=100)
    feedback: str
    feedback_categories: Dict[str, int]
