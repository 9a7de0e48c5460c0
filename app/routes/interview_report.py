"""
Interview Report API Route

Description:
This module defines the FastAPI route that generates the scored report of a
completed interview from its recorded voice conversation.

Arguments:
- interviewId: Query parameter naming the interview to report on.

Returns:
- An InterviewReport with score, feedback and feedback_categories.
- 400 when the id or the interview's conversation reference is missing,
  404 when the interview does not exist, 500 on any other failure.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- app.services.report_generation: For computing and persisting the report.
- loguru: For logging information about the request and any errors that occur.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from app.core.dependencies import get_report_generator
from app.core.route_limiters import REPORT_RATE_LIMIT, limiter
from app.errors.exceptions import BadRequest, InternalServerError
from app.schemas.report.interview_report import InterviewReport
from app.services.report_generation import ReportGenerator

router = APIRouter(
    tags=["interview-report"],
    responses={404: {"description": "Not found"}}
)


@router.get("/generateInterviewReport", response_model=InterviewReport)
@limiter.limit(REPORT_RATE_LIMIT)
async def generate_interview_report(
    request: Request,
    interview_id: Optional[str] = Query(None, alias="interviewId"),
    report_generator: ReportGenerator = Depends(get_report_generator),
):
    """
    Generate (or return the already generated) report for an interview.
    """
    if not interview_id or not interview_id.strip():
        raise BadRequest("Missing interviewId query parameter.")
    try:
        return await report_generator.generate_for_interview(interview_id.strip())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating interview report for {interview_id}: {e}")
        raise InternalServerError("Error generating interview report") from e
