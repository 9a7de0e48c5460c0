"""
Description:
Request and response schemas for the interview and interview result endpoints.

Dependencies:
- pydantic: For data validation and settings management.
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

class ScheduleInterviewRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    date: Optional[datetime] = None
    time: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    resume_id: Optional[str] = None
    questions: List[str] = Field(default_factory=list)

class UpdateInterviewRequest(BaseModel):
    """Partial update; only fields that are set are written."""
    date: Optional[datetime] = None
    time: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    resume_id: Optional[str] = None
    questions: Optional[List[str]] = None
    conversation_id: Optional[str] = None

class ScheduleInterviewResponse(BaseModel):
    interview_id: str

class MessageResponse(BaseModel):
    message: str
