"""
Concurrency Advisory Module

Tracks voice-session concurrency and recommends capacity changes.
"""

from .concurrency_advisory import ConcurrencyAdvisor, recommend_additional_slots, usage_level
from .usage_tracker import SessionUsageTracker, UsageSource

__all__ = [
    "ConcurrencyAdvisor",
    "recommend_additional_slots",
    "usage_level",
    "SessionUsageTracker",
    "UsageSource",
]
