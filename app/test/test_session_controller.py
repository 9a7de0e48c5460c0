"""
Test Interview Session Controller Module

This module tests the interview session state machine: start/permission
handling, pause and resume, the elapsed timer, the one-time time warning,
auto-end at the time limit, idempotent stop and transcript handling.

Dependencies:
- pytest: For testing framework
- pytest-asyncio: For async test support
- app.services.interview_session.session_controller: The module being tested
"""

import asyncio
import pytest
from app.core.service_config import TranscriptMode
from app.errors.exceptions import CollaboratorInitFailure, InvalidSessionTransition, PermissionDenied
from app.schemas.interview_session.session_state import EndReason, SessionStatus, TranscriptEvent
from app.services.interview_session import SessionTimer


async def tick_times(controller, count):
    for _ in range(count):
        await controller.tick()


class TestStart:
    """Starting a session."""

    @pytest.mark.asyncio
    async def test_start_enters_recording(self, make_controller, voice_client, notifications):
        """A granted microphone and a confirmed start lead to recording."""
        controller = make_controller()
        await controller.start({"resume_id": "resume-1", "job_title": "Support Specialist"})

        assert controller.status == SessionStatus.RECORDING
        assert controller.state.connected is True
        assert controller.state.mic_enabled is True
        assert controller.timer.running is True
        assert voice_client.start_calls == 1
        assert voice_client.config.assistant_id == "assistant-1"
        assert voice_client.config.metadata == {"resume_id": "resume-1", "job_title": "Support Specialist"}
        assert "success" in notifications.levels()

    @pytest.mark.asyncio
    async def test_permission_denied_returns_to_idle(self, make_controller, voice_client, notifications):
        """A refused microphone resets to idle without touching the voice provider."""
        controller = make_controller(granted=False)
        with pytest.raises(PermissionDenied):
            await controller.start()

        assert controller.status == SessionStatus.IDLE
        assert voice_client.start_calls == 0
        assert notifications.levels() == ["error"]
        assert "Microphone access denied" in notifications.notifications[0].message

    @pytest.mark.asyncio
    async def test_init_failure_returns_to_idle_and_allows_retry(self, make_controller, failing_voice_client, notifications):
        """A failed provider start resets to idle so the candidate can retry."""
        controller = make_controller(client=failing_voice_client)
        with pytest.raises(CollaboratorInitFailure):
            await controller.start()

        assert controller.status == SessionStatus.IDLE
        assert "assistant unavailable" in notifications.with_level("error")[0].message

        failing_voice_client.start_error = None
        await controller.start()
        assert controller.status == SessionStatus.RECORDING

    @pytest.mark.asyncio
    async def test_start_twice_is_rejected(self, make_controller):
        controller = make_controller()
        await controller.start()
        with pytest.raises(InvalidSessionTransition):
            await controller.start()


class TestTimer:
    """Elapsed time, pausing and the time warning."""

    @pytest.mark.asyncio
    async def test_elapsed_frozen_before_recording(self, make_controller):
        controller = make_controller()
        await tick_times(controller, 5)
        assert controller.state.elapsed_seconds == 0

    @pytest.mark.asyncio
    async def test_elapsed_monotonic_while_recording(self, make_controller):
        """Elapsed time grows by one per tick while recording."""
        controller = make_controller()
        await controller.start()
        previous = controller.state.elapsed_seconds
        for _ in range(10):
            await controller.tick()
            assert controller.state.elapsed_seconds == previous + 1
            previous = controller.state.elapsed_seconds
        assert controller.state.remaining_seconds == 890

    @pytest.mark.asyncio
    async def test_pause_freezes_and_resume_continues(self, make_controller, voice_client):
        """Pausing mutes the microphone and freezes elapsed time."""
        controller = make_controller()
        await controller.start()
        await tick_times(controller, 3)

        await controller.pause()
        assert controller.status == SessionStatus.PAUSED
        assert controller.state.mic_enabled is False
        assert controller.timer.running is False
        await tick_times(controller, 5)
        assert controller.state.elapsed_seconds == 3

        await controller.resume()
        assert controller.status == SessionStatus.RECORDING
        assert controller.state.mic_enabled is True
        await tick_times(controller, 2)
        assert controller.state.elapsed_seconds == 5
        assert voice_client.mute_calls == [True, False]

    @pytest.mark.asyncio
    async def test_pause_requires_recording(self, make_controller):
        controller = make_controller()
        with pytest.raises(InvalidSessionTransition):
            await controller.pause()

    @pytest.mark.asyncio
    async def test_warning_fires_once(self, make_controller, notifications):
        """The time warning fires when 120 seconds remain and never again."""
        controller = make_controller()
        await controller.start()

        await tick_times(controller, 779)
        assert notifications.with_level("warning") == []

        await controller.tick()  # 120 seconds remaining
        warnings = notifications.with_level("warning")
        assert len(warnings) == 1
        assert warnings[0].message == "Only 2 minutes remaining in your interview!"
        assert warnings[0].auto_dismiss_seconds == 5

        await tick_times(controller, 60)
        assert len(notifications.with_level("warning")) == 1

    @pytest.mark.asyncio
    async def test_warning_not_repeated_after_pause(self, make_controller, notifications):
        controller = make_controller(max_duration_seconds=130, warning_threshold_seconds=120)
        await controller.start()
        await tick_times(controller, 10)
        await controller.pause()
        await controller.resume()
        await tick_times(controller, 5)
        assert len(notifications.with_level("warning")) == 1


class TestStop:
    """Ending a session."""

    @pytest.mark.asyncio
    async def test_auto_end_at_time_limit(self, make_controller, voice_client, notifications):
        """Reaching 900 seconds ends the session exactly once."""
        ended_calls = []
        controller = make_controller(ended_calls=ended_calls)
        await controller.start()

        await tick_times(controller, 900)
        assert controller.status == SessionStatus.ENDED
        assert controller.end_reason == EndReason.TIME_LIMIT
        assert controller.state.elapsed_seconds == 900
        assert len(ended_calls) == 1
        assert voice_client.stop_calls == 1
        assert any("time limit reached" in n.message for n in notifications.with_level("info"))

        await controller.stop()
        await tick_times(controller, 5)
        assert controller.state.elapsed_seconds == 900
        assert len(ended_calls) == 1
        assert voice_client.stop_calls == 1

    @pytest.mark.asyncio
    async def test_stop_twice_generates_one_report(self, make_controller, voice_client):
        ended_calls = []
        controller = make_controller(ended_calls=ended_calls)
        await controller.start()
        await tick_times(controller, 30)

        await controller.stop()
        await controller.stop()

        assert controller.status == SessionStatus.ENDED
        assert len(ended_calls) == 1
        assert voice_client.stop_calls == 1
        assert controller.timer.cancelled is True
        assert controller.state.connected is False
        assert controller.state.mic_enabled is False

    @pytest.mark.asyncio
    async def test_stop_from_paused(self, make_controller):
        ended_calls = []
        controller = make_controller(ended_calls=ended_calls)
        await controller.start()
        await controller.pause()
        await controller.stop()
        assert controller.status == SessionStatus.ENDED
        assert len(ended_calls) == 1

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_noop(self, make_controller, voice_client):
        ended_calls = []
        controller = make_controller(ended_calls=ended_calls)
        await controller.stop()
        assert controller.status == SessionStatus.IDLE
        assert ended_calls == []
        assert voice_client.stop_calls == 0

    @pytest.mark.asyncio
    async def test_runtime_error_forces_end_with_captured_turns(self, make_controller, notifications):
        """A provider error while recording ends the session and still reports."""
        ended_calls = []
        controller = make_controller(ended_calls=ended_calls)
        await controller.start()
        await controller.handle_transcript(TranscriptEvent(role="assistant", text="Tell me about yourself."))

        await controller.handle_error(RuntimeError("connection dropped"))

        assert controller.status == SessionStatus.ENDED
        assert controller.end_reason == EndReason.VOICE_ERROR
        assert len(ended_calls) == 1
        _, turns = ended_calls[0]
        assert [t.content for t in turns] == ["Tell me about yourself."]
        assert any("connection dropped" in n.message for n in notifications.with_level("error"))

    @pytest.mark.asyncio
    async def test_end_handler_failure_is_notified(self, make_controller, voice_client, notifications):
        async def failing_end(state, turns):
            raise RuntimeError("store offline")

        controller = make_controller()
        controller.on_session_ended = failing_end
        await controller.start()
        await controller.stop()

        assert controller.status == SessionStatus.ENDED
        assert any("report" in n.message for n in notifications.with_level("error"))


class TestTranscript:
    """Transcript handling in both modes."""

    @pytest.mark.asyncio
    async def test_replace_mode_replaces_text(self, make_controller):
        controller = make_controller()
        await controller.start()
        await controller.handle_transcript(TranscriptEvent(role="assistant", text="Hello"))
        await controller.handle_transcript(TranscriptEvent(role="assistant", text="Hello, welcome"))
        await controller.handle_transcript(TranscriptEvent(role="user", text="Thanks"))

        assert controller.state.transcript_text == "Thanks"
        assert [(t.role, t.content) for t in controller.turns] == [
            ("assistant", "Hello, welcome"),
            ("user", "Thanks"),
        ]

    @pytest.mark.asyncio
    async def test_accumulate_mode_appends_text(self, make_controller):
        controller = make_controller(transcript_mode=TranscriptMode.ACCUMULATE)
        await controller.start()
        await controller.handle_transcript(TranscriptEvent(role="assistant", text="Hello"))
        await controller.handle_transcript(TranscriptEvent(role="assistant", text="welcome"))
        await controller.handle_transcript(TranscriptEvent(role="user", text="Thanks"))

        assert controller.state.transcript_text == "Hello welcome Thanks"
        assert [(t.role, t.content) for t in controller.turns] == [
            ("assistant", "Hello welcome"),
            ("user", "Thanks"),
        ]

    @pytest.mark.asyncio
    async def test_transcript_ignored_after_end(self, make_controller):
        controller = make_controller()
        await controller.start()
        await controller.handle_transcript(TranscriptEvent(role="user", text="Final answer"))
        await controller.stop()
        await controller.handle_transcript(TranscriptEvent(role="user", text="late update"))

        assert controller.state.transcript_text == "Final answer"
        assert len(controller.turns) == 1


class TestWarningText:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold, expected", [
        (120, "Only 2 minutes remaining in your interview!"),
        (60, "Only 1 minute remaining in your interview!"),
        (90, "Only 90 seconds remaining in your interview!"),
        (30, "Only 30 seconds remaining in your interview!"),
    ])
    async def test_warning_names_the_threshold(self, make_controller, notifications, threshold, expected):
        controller = make_controller(max_duration_seconds=200, warning_threshold_seconds=threshold)
        await controller.start()
        await tick_times(controller, 200 - threshold)
        assert [n.message for n in notifications.with_level("warning")] == [expected]

    @pytest.mark.asyncio
    async def test_short_time_limit_named_in_seconds(self, make_controller, notifications):
        controller = make_controller(max_duration_seconds=45, warning_threshold_seconds=10)
        await controller.start()
        await tick_times(controller, 45)
        assert [n.message for n in notifications.with_level("info")] == [
            "Interview ended: 45 second time limit reached"
        ]


async def wait_for_condition(condition, timeout=2.0):
    async def _poll():
        while not condition():
            await asyncio.sleep(0.005)
    await asyncio.wait_for(_poll(), timeout)


class TestRealTimer:
    """Controller driven by a real SessionTimer with a short interval."""

    @pytest.mark.asyncio
    async def test_pause_resume_and_auto_end(self, make_controller, voice_client, notifications):
        ended_calls = []
        controller = make_controller(
            ended_calls=ended_calls,
            max_duration_seconds=5,
            warning_threshold_seconds=2,
            timer_factory=lambda on_tick: SessionTimer(on_tick, interval=0.01),
        )
        await controller.start()
        assert controller.timer.running is True

        await wait_for_condition(lambda: controller.state.elapsed_seconds >= 1)
        await controller.pause()
        paused_at = controller.state.elapsed_seconds
        assert controller.timer.running is False
        await asyncio.sleep(0.05)
        assert controller.state.elapsed_seconds == paused_at

        await controller.resume()
        await wait_for_condition(lambda: controller.status == SessionStatus.ENDED)

        assert controller.end_reason == EndReason.TIME_LIMIT
        assert controller.state.elapsed_seconds == 5
        assert [state.elapsed_seconds for state, _ in ended_calls] == [5]
        assert len(notifications.with_level("warning")) == 1
        assert voice_client.stop_calls == 1

        await asyncio.sleep(0.05)
        assert controller.timer.running is False
        assert controller.state.elapsed_seconds == 5


class TestSessionTimer:

    @pytest.mark.asyncio
    async def test_ticks_until_paused(self):
        ticks = []

        async def on_tick():
            ticks.append(1)

        timer = SessionTimer(on_tick, interval=0.01)
        timer.start()
        timer.start()
        await wait_for_condition(lambda: len(ticks) >= 3)
        timer.pause()
        count = len(ticks)
        await asyncio.sleep(0.05)
        assert len(ticks) == count

        timer.resume()
        await wait_for_condition(lambda: len(ticks) > count)
        timer.cancel()

    @pytest.mark.asyncio
    async def test_cancel_from_inside_tick(self):
        ticks = []
        timer = None

        async def on_tick():
            ticks.append(1)
            timer.cancel()

        timer = SessionTimer(on_tick, interval=0.01)
        timer.start()
        await wait_for_condition(lambda: ticks)
        await asyncio.sleep(0.05)

        assert ticks == [1]
        assert timer.running is False
        timer.start()
        assert timer.running is False

    @pytest.mark.asyncio
    async def test_failing_tick_keeps_ticking(self):
        ticks = []

        async def on_tick():
            ticks.append(1)
            raise RuntimeError("tick failed")

        timer = SessionTimer(on_tick, interval=0.01)
        timer.start()
        await wait_for_condition(lambda: len(ticks) >= 2)
        timer.cancel()
