"""
Test Interview Report Generator Module

This module tests report scoring, feedback tiers, category sub-scores and
the persistence rules of the ReportGenerator.

Dependencies:
- pytest: For testing framework
- pytest-asyncio: For async test support
- app.services.report_generation.report_generator: The module being tested
"""

import random
import pytest
from app.errors.exceptions import InterviewNotFound, InvalidState
from app.models.interview_models import INTERVIEW_RESULTS_COLLECTION, STUDENTS_COLLECTION
from app.schemas.report.interview_report import ExchangeTurn
from app.services.report_generation import ConversationSource, ReportGenerator, compute_report
from app.services.report_generation.report_generator import (
    EXCELLENT_FEEDBACK,
    GOOD_FEEDBACK,
    NEEDS_IMPROVEMENT_FEEDBACK,
    SATISFACTORY_FEEDBACK,
    calculate_categories,
    calculate_score,
    select_feedback,
)


def make_turns(count, length):
    roles = ("assistant", "user")
    return [ExchangeTurn(role=roles[i % 2], content="x" * length) for i in range(count)]


class MaxRandom(random.Random):
    def randint(self, a, b):
        return b


class StaticConversationSource(ConversationSource):
    def __init__(self, turns):
        self.turns = turns
        self.requested = []

    async def fetch_turns(self, conversation_id):
        self.requested.append(conversation_id)
        return self.turns


async def seed_interview(store, conversation_id="call-1", student_fields=None):
    student_id = await store.create(STUDENTS_COLLECTION, student_fields or {"full_name": "Ada"})
    interview_id = await store.create("interviews", {
        "student_id": student_id,
        "title": "Customer Support",
        "status": "completed",
        "conversation_id": conversation_id,
    })
    return interview_id, student_id


class TestScoring:

    def test_empty_conversation(self):
        """No turns scores the base and gets the needs-improvement text."""
        report = compute_report([], random.Random(1))
        assert report.score == 70
        assert report.feedback == NEEDS_IMPROVEMENT_FEEDBACK

    def test_score_from_turns_and_length(self):
        # 70 + 4/2 + 40/20
        assert calculate_score(make_turns(4, 40)) == 74

    def test_score_rounds_half_up(self):
        # 70 + 0.5 + 0.5
        assert calculate_score(make_turns(1, 10)) == 71
        # 70 + 1.5 + 0
        assert calculate_score(make_turns(3, 0)) == 72

    def test_bonuses_are_capped(self):
        assert calculate_score(make_turns(100, 1000)) == 95

    def test_score_always_in_range(self):
        for count in (0, 1, 5, 17, 40):
            for length in (0, 3, 50, 400):
                assert 70 <= calculate_score(make_turns(count, length)) <= 95

    @pytest.mark.parametrize("score, feedback", [
        (95, EXCELLENT_FEEDBACK),
        (90, EXCELLENT_FEEDBACK),
        (89, GOOD_FEEDBACK),
        (80, GOOD_FEEDBACK),
        (79, SATISFACTORY_FEEDBACK),
        (70, SATISFACTORY_FEEDBACK),
        (69, NEEDS_IMPROVEMENT_FEEDBACK),
    ])
    def test_feedback_tiers(self, score, feedback):
        assert select_feedback(score) == feedback

    def test_categories_follow_seeded_rng(self):
        """The same seed yields the same sub-scores."""
        expected_rng = random.Random(7)
        expected = {
            "communication": min(100, 80 + expected_rng.randint(0, 9)),
            "technical_knowledge": min(100, 80 + expected_rng.randint(0, 9) - 5),
            "problem_solving": min(100, 80 + expected_rng.randint(0, 9) - 2),
        }
        assert calculate_categories(80, random.Random(7)) == expected

    def test_categories_capped_at_100(self):
        categories = calculate_categories(95, MaxRandom())
        assert categories == {
            "communication": 100,
            "technical_knowledge": 99,
            "problem_solving": 100,
        }

    def test_categories_within_bounds(self):
        rng = random.Random(3)
        for score in range(70, 96):
            categories = calculate_categories(score, rng)
            assert score <= categories["communication"] <= min(100, score + 9)
            assert score - 5 <= categories["technical_knowledge"] <= min(100, score + 4)
            assert score - 2 <= categories["problem_solving"] <= min(100, score + 7)


class TestReportGenerator:

    @pytest.mark.asyncio
    async def test_missing_interview_writes_nothing(self, store, report_generator):
        with pytest.raises(InterviewNotFound):
            await report_generator.generate_for_interview("does-not-exist")
        assert await store.list(INTERVIEW_RESULTS_COLLECTION) == []

    @pytest.mark.asyncio
    async def test_interview_without_conversation_reference(self, store, report_generator):
        interview_id, _ = await seed_interview(store, conversation_id=None)
        with pytest.raises(InvalidState):
            await report_generator.generate_for_interview(interview_id)
        assert await store.list(INTERVIEW_RESULTS_COLLECTION) == []

    @pytest.mark.asyncio
    async def test_generates_from_conversation_source(self, store):
        """The report is computed from the fetched turns and persisted."""
        turns = make_turns(6, 60)
        source = StaticConversationSource(turns)
        generator = ReportGenerator(store, source, random.Random(42))
        interview_id, student_id = await seed_interview(store, conversation_id="call-9")

        report = await generator.generate_for_interview(interview_id)

        assert source.requested == ["call-9"]
        assert report.score == 76
        assert report.feedback == SATISFACTORY_FEEDBACK
        results = await store.list(INTERVIEW_RESULTS_COLLECTION)
        assert len(results) == 1
        assert results[0]["interview_id"] == interview_id
        assert results[0]["student_id"] == student_id
        assert results[0]["score"] == 76
        student = await store.get(STUDENTS_COLLECTION, student_id)
        assert student["first_interview_completed"] is True

    @pytest.mark.asyncio
    async def test_existing_result_is_not_duplicated(self, store):
        source = StaticConversationSource(make_turns(2, 20))
        generator = ReportGenerator(store, source, random.Random(42))
        interview_id, _ = await seed_interview(store)

        first = await generator.generate_for_interview(interview_id)
        source.turns = make_turns(30, 400)
        second = await generator.generate_for_interview(interview_id)

        assert second == first
        assert len(await store.list(INTERVIEW_RESULTS_COLLECTION)) == 1
        assert source.requested == ["call-1"]

    @pytest.mark.asyncio
    async def test_no_conversation_source_configured(self, store, report_generator):
        interview_id, _ = await seed_interview(store)
        with pytest.raises(InvalidState):
            await report_generator.generate_for_interview(interview_id)

    @pytest.mark.asyncio
    async def test_generate_from_turns(self, store, report_generator):
        """Turns captured during a live session are scored and saved."""
        interview_id, student_id = await seed_interview(store, conversation_id=None)

        report = await report_generator.generate_from_turns(interview_id, make_turns(20, 200))

        assert report.score == 90
        assert report.feedback == EXCELLENT_FEEDBACK
        assert set(report.feedback_categories) == {"communication", "technical_knowledge", "problem_solving"}
        student = await store.get(STUDENTS_COLLECTION, student_id)
        assert student["first_interview_completed"] is True

    @pytest.mark.asyncio
    async def test_missing_student_does_not_fail_report(self, store, report_generator):
        interview_id = await store.create("interviews", {"student_id": "gone", "status": "completed"})
        report = await report_generator.generate_from_turns(interview_id, [])
        assert report.score == 70
        assert len(await store.list(INTERVIEW_RESULTS_COLLECTION)) == 1
