"""
Interview Records API Routes

Description:
This module defines the FastAPI routes for scheduling, reading, updating and
deleting interviews, and for reading interview results.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- app.services.interviews.interview_repository: For the data-access functions.
- loguru: For logging information about the requests.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger
from starlette.status import HTTP_201_CREATED
from app.core.dependencies import get_record_store
from app.errors.exceptions import InterviewNotFound, InterviewResultNotFound
from app.models.interview_models import Interview, InterviewResult
from app.schemas.interviews.interview_requests import (
    MessageResponse,
    ScheduleInterviewRequest,
    ScheduleInterviewResponse,
    UpdateInterviewRequest,
)
from app.services.interviews import interview_repository
from app.services.record_store import RecordStore

router = APIRouter(
    prefix="/api",
    tags=["interviews"],
    responses={404: {"description": "Not found"}}
)


@router.get("/interviews", response_model=List[Interview])
async def list_interviews(
    student_id: Optional[str] = Query(None),
    store: RecordStore = Depends(get_record_store),
):
    return await interview_repository.get_interviews(store, student_id)


@router.get("/interviews/{interview_id}", response_model=Interview)
async def get_interview(interview_id: str, store: RecordStore = Depends(get_record_store)):
    interview = await interview_repository.get_interview(store, interview_id)
    if interview is None:
        raise InterviewNotFound(interview_id)
    return interview


@router.post("/interviews", response_model=ScheduleInterviewResponse, status_code=HTTP_201_CREATED)
async def schedule_interview(body: ScheduleInterviewRequest, store: RecordStore = Depends(get_record_store)):
    interview_id = await interview_repository.schedule_interview(store, body.model_dump(exclude_none=True))
    return {"interview_id": interview_id}


@router.patch("/interviews/{interview_id}", response_model=MessageResponse)
async def update_interview(
    interview_id: str,
    body: UpdateInterviewRequest,
    store: RecordStore = Depends(get_record_store),
):
    if await interview_repository.get_interview(store, interview_id) is None:
        raise InterviewNotFound(interview_id)
    await interview_repository.update_interview(store, interview_id, body.model_dump(exclude_unset=True))
    logger.info(f"Interview {interview_id} updated")
    return {"message": "Interview updated successfully."}


@router.delete("/interviews/{interview_id}", response_model=MessageResponse)
async def delete_interview(interview_id: str, store: RecordStore = Depends(get_record_store)):
    if await interview_repository.get_interview(store, interview_id) is None:
        raise InterviewNotFound(interview_id)
    await interview_repository.delete_interview(store, interview_id)
    logger.info(f"Interview {interview_id} deleted")
    return {"message": "Interview deleted successfully."}


@router.get("/interview-results", response_model=List[InterviewResult])
async def list_interview_results(
    student_id: Optional[str] = Query(None),
    interview_id: Optional[str] = Query(None),
    store: RecordStore = Depends(get_record_store),
):
    return await interview_repository.get_interview_results(store, student_id, interview_id)


@router.get("/interview-results/{result_id}", response_model=InterviewResult)
async def get_interview_result(result_id: str, store: RecordStore = Depends(get_record_store)):
    result = await interview_repository.get_interview_result(store, result_id)
    if result is None:
        raise InterviewResultNotFound(result_id)
    return result
