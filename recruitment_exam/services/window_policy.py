"""
services/window_policy.py

Exam window: one fixed start time and duration shared by every candidate.
The policy is a value object handed to whoever needs it; "now" is always
passed in so callers (and tests) own the clock.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

import config

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WindowPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: datetime = Field(..., description="Exam opens (timezone-aware)")
    duration_minutes: int = Field(..., gt=0)
    max_tab_switches: int = Field(default=5, ge=0)

    @field_validator("start_time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Naive values would not compare with the aware clock.
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    @classmethod
    def from_config(cls) -> "WindowPolicy":
        return cls(
            start_time=config.EXAM_START_TIME,
            duration_minutes=config.EXAM_DURATION_MINUTES,
            max_tab_switches=config.MAX_TAB_SWITCHES,
        )

    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    def is_available(self, now: Optional[datetime] = None) -> bool:
        """True from the start time onwards."""
        return (now or utcnow()) >= self.start_time

    def is_closed(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.end_time()

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        if not self.is_available(now):
            return self.duration_minutes * 60
        return max(0, int((self.end_time() - now).total_seconds()))
