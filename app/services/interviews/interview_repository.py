"""Interview Data Access Module

This module provides the data-access functions for interviews, interview
results and the student fields the interview flow touches. Every function
takes the RecordStore explicitly so the caller controls which backend is used.

Reads return pydantic models (or None when a record does not exist). Writes
translate store failures into PersistenceError so route handlers answer 500
with a generic message.

Dependencies:
- loguru: For logging operations.
- app.models.interview_models: For record models and collection names.
- app.services.record_store: For the RecordStore contract.
- app.errors.exceptions: For PersistenceError and RecordStoreError.
"""

from typing import Any, Dict, List, Optional
from loguru import logger
from app.errors.exceptions import PersistenceError, RecordStoreError
from app.models.interview_models import (
    INTERVIEW_RESULTS_COLLECTION,
    INTERVIEWS_COLLECTION,
    STUDENTS_COLLECTION,
    Interview,
    InterviewResult,
    InterviewStatus,
)
from app.services.record_store import RecordStore

# Timestamps are owned by the store; document ids are never stored as fields.
_STORE_FIELDS = {"created_at", "updated_at"}


def _writable(fields: Dict[str, Any], id_field: str) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in _STORE_FIELDS and k != id_field}


async def get_interviews(store: RecordStore, student_id: Optional[str] = None) -> List[Interview]:
    """Get all interviews, optionally filtered by student."""
    filters = {"student_id": student_id} if student_id else None
    records = await store.list(INTERVIEWS_COLLECTION, filters, id_field="interview_id")
    return [Interview(**record) for record in records]


async def get_interview(store: RecordStore, interview_id: str) -> Optional[Interview]:
    record = await store.get(INTERVIEWS_COLLECTION, interview_id, id_field="interview_id")
    return Interview(**record) if record else None


async def schedule_interview(store: RecordStore, fields: Dict[str, Any]) -> str:
    """Schedule a new interview.

    Args:
        store (RecordStore): Record store
        fields (Dict[str, Any]): Interview fields; must include student_id

    Returns:
        str: The new interview id

    Raises:
        PersistenceError: If the write fails
    """
    data = {**_writable(fields, "interview_id"), "status": InterviewStatus.SCHEDULED.value}
    try:
        interview_id = await store.create(INTERVIEWS_COLLECTION, data)
    except RecordStoreError as e:
        logger.error(f"Error scheduling interview: {e}")
        raise PersistenceError("Failed to schedule interview.") from e
    logger.info(f"Scheduled interview {interview_id} for student {data.get('student_id')}")
    return interview_id


async def update_interview(store: RecordStore, interview_id: str, fields: Dict[str, Any]) -> None:
    try:
        await store.update(INTERVIEWS_COLLECTION, interview_id, _writable(fields, "interview_id"))
    except RecordStoreError as e:
        logger.error(f"Error updating interview {interview_id}: {e}")
        raise PersistenceError(f"Failed to update interview {interview_id}.") from e


async def delete_interview(store: RecordStore, interview_id: str) -> None:
    try:
        await store.delete(INTERVIEWS_COLLECTION, interview_id)
    except RecordStoreError as e:
        logger.error(f"Error deleting interview {interview_id}: {e}")
        raise PersistenceError(f"Failed to delete interview {interview_id}.") from e


async def mark_interview_completed(store: RecordStore, interview_id: str, conversation_id: Optional[str] = None) -> None:
    """Mark an interview completed, recording the voice conversation reference if known."""
    fields: Dict[str, Any] = {"status": InterviewStatus.COMPLETED.value}
    if conversation_id:
        fields["conversation_id"] = conversation_id
    await update_interview(store, interview_id, fields)
    logger.info(f"Interview {interview_id} marked completed")


async def get_interview_results(
    store: RecordStore,
    student_id: Optional[str] = None,
    interview_id: Optional[str] = None,
) -> List[InterviewResult]:
    """Get interview results, optionally filtered by student and/or interview."""
    filters: Dict[str, Any] = {}
    if student_id:
        filters["student_id"] = student_id
    if interview_id:
        filters["interview_id"] = interview_id
    records = await store.list(INTERVIEW_RESULTS_COLLECTION, filters or None, id_field="interview_result_id")
    return [InterviewResult(**record) for record in records]


async def get_interview_result(store: RecordStore, result_id: str) -> Optional[InterviewResult]:
    record = await store.get(INTERVIEW_RESULTS_COLLECTION, result_id, id_field="interview_result_id")
    return InterviewResult(**record) if record else None


async def update_student(store: RecordStore, student_id: str, fields: Dict[str, Any]) -> None:
    try:
        await store.update(STUDENTS_COLLECTION, student_id, _writable(fields, "student_id"))
    except RecordStoreError as e:
        logger.error(f"Error updating student {student_id}: {e}")
        raise PersistenceError(f"Failed to update student {student_id}.") from e


async def create_interview_result(store: RecordStore, fields: Dict[str, Any]) -> str:
    """Create an interview result and flag the student's first interview as completed.

    The student flag is a denormalised convenience: a missing or unwritable
    student record is logged and does not fail the result write.

    Args:
        store (RecordStore): Record store
        fields (Dict[str, Any]): interview_id, student_id, score, feedback, feedback_categories

    Returns:
        str: The new interview result id

    Raises:
        PersistenceError: If the result write fails
    """
    try:
        result_id = await store.create(INTERVIEW_RESULTS_COLLECTION, _writable(fields, "interview_result_id"))
    except RecordStoreError as e:
        logger.error(f"Error creating interview result: {e}")
        raise PersistenceError("Failed to save interview result.") from e

    student_id = fields.get("student_id")
    if student_id:
        try:
            await update_student(store, student_id, {"first_interview_completed": True})
        except PersistenceError as e:
            logger.warning(f"Could not flag first interview for student {student_id}: {e.detail}")
    return result_id
