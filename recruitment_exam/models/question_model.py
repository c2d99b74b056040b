from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

OPTION_COUNT = 4


class Category(str, Enum):
    GENERAL = "General"
    TECHNICAL = "Technical"
    ELECTRONICS = "Electronics"


class Question(BaseModel):
    """
    Recruitment quiz item.

    Field aliases match the stored question documents
    (``question``, ``correctAnswer``), so an exported bank loads as-is.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique question id"
    )
    text: str = Field(
        ...,
        min_length=1,
        alias="question",
        description="Question body"
    )
    options: List[str] = Field(
        ...,
        description="Answer choices, in display order"
    )
    correct_option: int = Field(
        ...,
        alias="correctAnswer",
        description="Index of the correct choice (0-based)"
    )
    category: Category = Field(
        ...,
        description="Drives branch quotas in the question selector"
    )

    @field_validator("options")
    @classmethod
    def validate_options_length(cls, v: List[str]) -> List[str]:
        if len(v) != OPTION_COUNT:
            raise ValueError(f"A question needs exactly {OPTION_COUNT} options, got {len(v)}.")
        return v

    @model_validator(mode="after")
    def validate_correct_option(self) -> "Question":
        if not 0 <= self.correct_option < len(self.options):
            raise ValueError(
                f"correct option {self.correct_option} is outside options {self.options}"
            )
        return self

    def public_dict(self) -> dict:
        """Serialized form sent to candidates (no answer key)."""
        return {
            "id": self.id,
            "question": self.text,
            "options": list(self.options),
            "category": self.category.value,
        }


class Answer(BaseModel):
    """One graded response. ``selected_option`` is None for a skipped question."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    question_id: str
    selected_option: Optional[int] = Field(default=None, alias="selectedAnswer")
    is_correct: bool = False
