"""
models/result_model.py

Scoring and result records (``testResults`` collection).
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recruitment_exam.models.question_model import Answer


class ResultStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    ABANDONED = "abandoned"


class ScoreSummary(BaseModel):
    score: int = Field(..., ge=0, description="Number of correct answers")
    percentage: int = Field(..., ge=0, le=100)


class Grade(BaseModel):
    grade: str
    message: str


class TestResultCreate(BaseModel):
    """A finished attempt before the store assigns it an id."""

    model_config = ConfigDict(
        populate_by_name=True, alias_generator=to_camel, use_enum_values=True
    )
    __test__ = False  # keep pytest from collecting this class

    user_id: str
    user_name: str
    user_email: str
    admission_number: str
    branch: str
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    percentage: int = Field(..., ge=0, le=100)
    time_spent_seconds: int = Field(default=0, ge=0, alias="timeSpent")
    answers: List[Answer] = Field(default_factory=list)
    # Overwritten with the server time by ResultRecorder.submit().
    completed_at: Optional[datetime] = None
    status: ResultStatus = ResultStatus.COMPLETED

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="python")


class TestResult(TestResultCreate):
    id: str
    completed_at: datetime
