"""
Concurrency Advisory Module

Compares voice-session concurrency against the provisioned limit and
recommends how many slots to add. Recommendations kick in once the weekly
peak reaches 80% of the limit and aim for 20% headroom above that peak,
rounded up to a multiple of 5 slots.

The advisor refreshes on demand and on a fixed timer for the lifetime of the
application. Each refresh is an independent read of the usage source.

Dependencies:
- asyncio: For the periodic refresh loop.
- loguru: For logging operations.
- app.services.concurrency.usage_tracker: For the usage source contract.
"""

import asyncio
from typing import Optional
from loguru import logger
from app.schemas.concurrency.concurrency_usage import ConcurrencyUsageSnapshot, UsageLevel
from app.services.concurrency.usage_tracker import UsageSource

SLOT_INCREMENT = 5
CRITICAL_USAGE_PERCENT = 90
WARNING_USAGE_PERCENT = 70


def recommend_additional_slots(limit: int, peak_this_week: int) -> int:
    """
    Slots to add so the weekly peak has 20% headroom.

    Returns 0 while peak_this_week < 0.8 * limit, otherwise
    ceil((peak_this_week * 1.2 - limit) / 5) * 5, never negative.
    """
    # Integer form of the thresholds: 0.8 = 4/5 and 1.2 = 6/5.
    if peak_this_week * 5 < limit * 4:
        return 0
    shortfall = peak_this_week * 6 - limit * 5  # (peak * 1.2 - limit) * 5
    if shortfall <= 0:
        return 0
    return -(-shortfall // (SLOT_INCREMENT * 5)) * SLOT_INCREMENT


def usage_level(current_active: int, limit: int) -> UsageLevel:
    """Classify usage: above 90% is critical, above 70% is a warning."""
    percentage = current_active / limit * 100
    if percentage > CRITICAL_USAGE_PERCENT:
        return UsageLevel.CRITICAL
    if percentage > WARNING_USAGE_PERCENT:
        return UsageLevel.WARNING
    return UsageLevel.HEALTHY


class ConcurrencyAdvisor:
    """
    Builds concurrency snapshots from a usage source.

    Args:
        source: Where current and peak concurrency figures are read from.
    """

    def __init__(self, source: UsageSource):
        self.source = source
        self.latest: Optional[ConcurrencyUsageSnapshot] = None

    async def refresh(self) -> ConcurrencyUsageSnapshot:
        reading = await self.source.read_usage()
        snapshot = ConcurrencyUsageSnapshot(
            limit=reading.limit,
            current_active=reading.current_active,
            peak_today=reading.peak_today,
            peak_this_week=reading.peak_this_week,
            recommended_additional_slots=recommend_additional_slots(reading.limit, reading.peak_this_week),
            usage_level=usage_level(reading.current_active, reading.limit),
        )
        self.latest = snapshot
        logger.debug(
            f"Concurrency usage: {snapshot.current_active}/{snapshot.limit} active, "
            f"weekly peak {snapshot.peak_this_week}, recommend +{snapshot.recommended_additional_slots}"
        )
        return snapshot

    async def run_periodic(self, interval_seconds: float) -> None:
        """Refresh every interval until cancelled. A failed refresh keeps the last snapshot."""
        logger.info(f"Concurrency advisory refreshing every {interval_seconds}s")
        while True:
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Concurrency usage refresh failed: {e}")
            await asyncio.sleep(interval_seconds)
