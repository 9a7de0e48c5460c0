"""
Shared test fixtures.

The service is configured for the in-memory record store before the app
module is imported, so no Firebase credentials are needed.
"""

import os

os.environ.setdefault("RECORD_STORE_BACKEND", "memory")

import random
import pytest
from typing import List
from app.core.route_limiters import limiter
from app.schemas.interview_session.session_state import Notification
from app.services.interview_session.voice_conversation import VoiceConversationClient, VoiceSessionConfig
from app.services.record_store import InMemoryRecordStore
from app.services.report_generation import ReportGenerator


class FakeVoiceClient(VoiceConversationClient):
    """Records calls; start succeeds unless start_error is set."""

    def __init__(self, start_error: Exception = None):
        self.start_error = start_error
        self.config: VoiceSessionConfig = None
        self.start_calls = 0
        self.stop_calls = 0
        self.mute_calls: List[bool] = []

    @property
    def conversation_id(self):
        return "call-123" if self.config else None

    async def start(self, config: VoiceSessionConfig) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error
        self.config = config

    async def stop(self) -> None:
        self.stop_calls += 1

    async def set_muted(self, muted: bool) -> None:
        self.mute_calls.append(muted)


class ManualTimer:
    """Timer stand-in; tests call controller.tick() themselves."""

    def __init__(self, on_tick):
        self.on_tick = on_tick
        self.running = False
        self.cancelled = False

    def start(self):
        if not self.cancelled:
            self.running = True

    def pause(self):
        self.running = False

    def resume(self):
        self.start()

    def cancel(self):
        self.cancelled = True
        self.running = False


class NotificationLog:
    def __init__(self):
        self.notifications: List[Notification] = []

    async def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def levels(self) -> List[str]:
        return [n.level for n in self.notifications]

    def with_level(self, level: str) -> List[Notification]:
        return [n for n in self.notifications if n.level == level]


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def report_generator(store):
    return ReportGenerator(store, conversation_source=None, rng=random.Random(42))


@pytest.fixture
def voice_client():
    return FakeVoiceClient()


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def make_controller(voice_client, notifications):
    """Build a controller with a manual timer and recorded end calls."""
    from app.services.interview_session import InterviewSessionController

    def _make(granted: bool = True, client: VoiceConversationClient = None, ended_calls: list = None, **kwargs):
        async def request_microphone():
            return granted

        async def on_session_ended(state, turns):
            if ended_calls is not None:
                ended_calls.append((state, turns))

        timer_factory = kwargs.pop("timer_factory", ManualTimer)
        return InterviewSessionController(
            voice_client=client or voice_client,
            request_microphone=request_microphone,
            notify=notifications,
            assistant_id="assistant-1",
            on_session_ended=on_session_ended,
            timer_factory=timer_factory,
            **kwargs,
        )

    return _make


@pytest.fixture
def failing_voice_client():
    return FakeVoiceClient(start_error=RuntimeError("assistant unavailable"))
