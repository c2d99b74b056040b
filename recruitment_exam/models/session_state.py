"""
models/session_state.py

Per-user exam status record (``userTestStatus`` collection).
Pydantic BaseModel; stored field names are the camelCase aliases.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


class SessionStatus(BaseModel):
    """
    One candidate's progress through the exam.

    Attributes:
        user_id:          Document key.
        has_submitted:    Set once the answer sheet has been recorded.
        submission_time:  When ``has_submitted`` was set.
        tab_switch_count: Number of times the candidate left the exam tab.
        is_cancelled:     Set when the exam was cancelled for this candidate.
        last_activity:    Refreshed on every write.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    user_id: str
    has_submitted: bool = False
    submission_time: Optional[datetime] = Field(default=None, alias="submissionDate")
    tab_switch_count: int = Field(default=0, ge=0)
    is_cancelled: bool = Field(default=False, alias="isTestCancelled")
    last_activity: datetime

    @property
    def phase(self) -> SessionPhase:
        # A stored record is never NOT_STARTED; that phase means "no record yet".
        if self.is_cancelled:
            return SessionPhase.CANCELLED
        if self.has_submitted:
            return SessionPhase.SUBMITTED
        return SessionPhase.IN_PROGRESS

    @property
    def is_finished(self) -> bool:
        return self.phase in (SessionPhase.SUBMITTED, SessionPhase.CANCELLED)

    @classmethod
    def default(cls, user_id: str, now: datetime) -> "SessionStatus":
        return cls(user_id=user_id, last_activity=now)

    @classmethod
    def wire_name(cls, field: str) -> str:
        """Stored (camelCase) name of a model field; unknown names pass through."""
        info = cls.model_fields.get(field)
        if info is None:
            return field
        return info.alias or to_camel(field)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
