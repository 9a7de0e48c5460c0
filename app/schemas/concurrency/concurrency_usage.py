"""
Description:
Schemas for voice-session concurrency usage: the raw reading taken from a
usage source and the snapshot served by the concurrency endpoint.

Dependencies:
- pydantic: For data validation and settings management.
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

class UsageLevel(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

class UsageReading(BaseModel):
    """Concurrency figures as reported by a usage source."""
    limit: int = Field(..., gt=0)
    current_active: int = Field(..., ge=0)
    peak_today: int = Field(..., ge=0)
    peak_this_week: int = Field(..., ge=0)

class ConcurrencyUsageSnapshot(BaseModel):
    """
    Concurrency usage with a scaling recommendation.

    Field aliases are the wire names used by the concurrency endpoint.
    """
    model_config = ConfigDict(populate_by_name=True)

    limit: int = Field(..., gt=0, alias="total_concurrency_limit")
    current_active: int = Field(..., ge=0, alias="current_active_sessions")
    peak_today: int = Field(..., ge=0, alias="peak_sessions_today")
    peak_this_week: int = Field(..., ge=0, alias="peak_sessions_this_week")
    recommended_additional_slots: int = Field(..., ge=0)
    usage_level: UsageLevel
