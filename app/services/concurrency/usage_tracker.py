from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Callable, Optional, Tuple
from loguru import logger
from app.schemas.concurrency.concurrency_usage import UsageReading


class UsageSource(ABC):
    """Provides the current voice-session concurrency figures."""

    @abstractmethod
    async def read_usage(self) -> UsageReading:
        ...


class SessionUsageTracker(UsageSource):
    """
    Local estimate of voice-session concurrency.

    The interview session route reports every session start and end. The
    tracker keeps the active count and the highest count seen today and in
    the current ISO week; peaks start over when the day or week rolls over.
    """

    def __init__(self, limit: int, clock: Optional[Callable[[], datetime]] = None):
        if limit <= 0:
            raise ValueError("Concurrency limit must be positive")
        self.limit = limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.current_active = 0
        self._day: Optional[date] = None
        self._week: Optional[Tuple[int, int]] = None
        self._peak_today = 0
        self._peak_this_week = 0
        self._roll_over()

    def _roll_over(self) -> None:
        today = self._clock().date()
        iso = today.isocalendar()
        week = (iso[0], iso[1])
        if today != self._day:
            self._day = today
            self._peak_today = self.current_active
        if week != self._week:
            self._week = week
            self._peak_this_week = self.current_active

    def _record_peak(self) -> None:
        self._peak_today = max(self._peak_today, self.current_active)
        self._peak_this_week = max(self._peak_this_week, self.current_active)

    def session_started(self) -> None:
        self._roll_over()
        self.current_active += 1
        self._record_peak()
        logger.debug(f"Voice session started ({self.current_active}/{self.limit} active)")

    def session_ended(self) -> None:
        self._roll_over()
        if self.current_active == 0:
            logger.warning("Voice session end reported with no active sessions")
            return
        self.current_active -= 1
        logger.debug(f"Voice session ended ({self.current_active}/{self.limit} active)")

    async def read_usage(self) -> UsageReading:
        self._roll_over()
        return UsageReading(
            limit=self.limit,
            current_active=self.current_active,
            peak_today=self._peak_today,
            peak_this_week=self._peak_this_week,
        )
