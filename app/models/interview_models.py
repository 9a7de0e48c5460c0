"""Record Models Module

This module defines the document shapes stored in the record store for the
interview practice platform. Each model maps to one collection; the document
id is exposed under the collection's id field (``interview_id``,
``interview_result_id``, ``student_id``).

Timestamps are assigned by the store on create/update and are therefore
optional when a record is built client-side.

Dependencies:
- pydantic: For data validation and serialization.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

INTERVIEWS_COLLECTION = "interviews"
INTERVIEW_RESULTS_COLLECTION = "interview_results"
STUDENTS_COLLECTION = "students"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class Interview(BaseModel):
    """A scheduled or completed practice interview."""
    model_config = ConfigDict(extra="allow")

    interview_id: str
    student_id: str
    date: Optional[datetime] = None
    time: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    questions: List[str] = Field(default_factory=list)
    status: InterviewStatus = InterviewStatus.SCHEDULED
    conversation_id: Optional[str] = Field(None, description="Voice provider call id for the finished session")
    job_title: Optional[str] = None
    resume_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InterviewResult(BaseModel):
    """Scored outcome of a completed interview. Written once, never updated."""
    model_config = ConfigDict(extra="allow")

    interview_result_id: str
    interview_id: str
    student_id: str
    score: int = Field(..., ge=0, le=100)
    feedback: str
    feedback_categories: Dict[str, int] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Student(BaseModel):
    model_config = ConfigDict(extra="allow")

    student_id: str
    institution_id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    first_interview_completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
