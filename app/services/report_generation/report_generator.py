"""
Interview Report Generator Module

This module turns a finished interview conversation into a scored report and
persists it as the interview's InterviewResult.

Scoring is a deterministic heuristic over the conversation's size:
- a base of 70 points,
- up to 15 points for the number of turns (half a point per turn),
- up to 10 points for the average turn length (a point per 20 characters).

Category sub-scores start from the overall score, receive a small random
perturbation (0-9) and a fixed per-category offset, and are capped at 100.
The random source is injected so tests can pin exact outputs.

Dependencies:
- random: For the category perturbation source.
- loguru: For logging operations.
- app.services.interviews.interview_repository: For reading interviews and writing results.
- app.services.report_generation.conversation_source: For fetching finished conversations.
"""

import math
import random
from typing import Dict, List, Optional, Sequence
from loguru import logger
from app.errors.exceptions import InterviewNotFound, InvalidState
from app.schemas.report.interview_report import ExchangeTurn, InterviewReport
from app.services.interviews import interview_repository
from app.services.record_store import RecordStore
from app.services.report_generation.conversation_source import ConversationSource

BASE_SCORE = 70
MAX_TURN_BONUS = 15
MAX_LENGTH_BONUS = 10
CHARS_PER_LENGTH_POINT = 20
MAX_PERTURBATION = 9

CATEGORY_OFFSETS: Dict[str, int] = {
    "communication": 0,
    "technical_knowledge": -5,
    "problem_solving": -2,
}

EXCELLENT_FEEDBACK = (
    "Excellent performance! You demonstrated strong communication skills and deep "
    "knowledge throughout the interview."
)
GOOD_FEEDBACK = (
    "Good job! You communicated clearly and showed solid understanding. Keep refining "
    "your answers with more specific examples."
)
SATISFACTORY_FEEDBACK = (
    "Satisfactory performance. You covered the basics, but there is room to improve the "
    "depth and structure of your responses."
)
NEEDS_IMPROVEMENT_FEEDBACK = (
    "Needs improvement. Focus on giving more complete, structured answers and practise "
    "speaking about your experience."
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_score(turns: Sequence[ExchangeTurn]) -> int:
    """Overall score in [70, 95] from the turn count and average turn length."""
    message_count = len(turns)
    avg_length = sum(len(turn.content) for turn in turns) / message_count if message_count else 0
    raw = (
        BASE_SCORE
        + min(MAX_TURN_BONUS, message_count / 2)
        + min(MAX_LENGTH_BONUS, avg_length / CHARS_PER_LENGTH_POINT)
    )
    return _round_half_up(raw)


def select_feedback(score: int) -> str:
    if score >= 90:
        return EXCELLENT_FEEDBACK
    if score >= 80:
        return GOOD_FEEDBACK
    if score >= 70:
        return SATISFACTORY_FEEDBACK
    return NEEDS_IMPROVEMENT_FEEDBACK


def calculate_categories(score: int, rng: random.Random) -> Dict[str, int]:
    return {
        category: min(100, score + rng.randint(0, MAX_PERTURBATION) + offset)
        for category, offset in CATEGORY_OFFSETS.items()
    }


def compute_report(turns: Sequence[ExchangeTurn], rng: random.Random) -> InterviewReport:
    """
    Compute the report for a finished conversation.

    Args:
        turns: Ordered exchange turns of the conversation.
        rng: Random source for the category perturbation.

    Returns:
        InterviewReport: Score, feedback text and category sub-scores.
    """
    score = calculate_score(turns)
    # Nothing was said, so there is nothing to praise.
    feedback = select_feedback(score) if turns else NEEDS_IMPROVEMENT_FEEDBACK
    return InterviewReport(
        score=score,
        feedback=feedback,
        feedback_categories=calculate_categories(score, rng),
    )


class ReportGenerator:
    """
    Generates and persists interview reports.

    A result is written at most once per interview: if one already exists it
    is returned instead of computing a new one. This check is best-effort and
    not transactional.
    """

    def __init__(
        self,
        store: RecordStore,
        conversation_source: Optional[ConversationSource] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.conversation_source = conversation_source
        self.rng = rng or random.Random()

    async def _existing_report(self, interview_id: str) -> Optional[InterviewReport]:
        results = await interview_repository.get_interview_results(self.store, interview_id=interview_id)
        if not results:
            return None
        result = results[0]
        logger.info(f"Report for interview {interview_id} already exists ({result.interview_result_id})")
        return InterviewReport(
            score=result.score,
            feedback=result.feedback,
            feedback_categories=result.feedback_categories,
        )

    async def _persist(self, interview_id: str, student_id: str, turns: List[ExchangeTurn]) -> InterviewReport:
        report = compute_report(turns, self.rng)
        result_id = await interview_repository.create_interview_result(self.store, {
            "interview_id": interview_id,
            "student_id": student_id,
            **report.model_dump(),
        })
        logger.info(f"Saved report {result_id} for interview {interview_id} with score {report.score}")
        return report

    async def generate_for_interview(self, interview_id: str) -> InterviewReport:
        """
        Generate the report for an interview from its recorded conversation.

        Args:
            interview_id (str): Interview to report on.

        Returns:
            InterviewReport: The new (or already stored) report.

        Raises:
            InterviewNotFound: If the interview does not exist.
            InvalidState: If the interview has no conversation reference.
            PersistenceError: If the result cannot be written.
        """
        interview = await interview_repository.get_interview(self.store, interview_id)
        if interview is None:
            raise InterviewNotFound(interview_id)
        if not interview.conversation_id:
            raise InvalidState(f"Interview '{interview_id}' has no conversation reference.")

        existing = await self._existing_report(interview_id)
        if existing is not None:
            return existing

        if self.conversation_source is None:
            raise InvalidState("No conversation source is configured.")
        turns = await self.conversation_source.fetch_turns(interview.conversation_id)
        return await self._persist(interview_id, interview.student_id, turns)

    async def generate_from_turns(self, interview_id: str, turns: Sequence[ExchangeTurn]) -> InterviewReport:
        """Generate the report from turns captured during a live session."""
        interview = await interview_repository.get_interview(self.store, interview_id)
        if interview is None:
            raise InterviewNotFound(interview_id)

        existing = await self._existing_report(interview_id)
        if existing is not None:
            return existing
        return await self._persist(interview_id, interview.student_id, list(turns))
