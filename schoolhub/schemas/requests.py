"""Request payloads for quiz authoring and submission"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..models.enums import QuestionType


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so open/close comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class QuizPayload(BaseModel):
    """Quiz metadata as submitted from the quiz form"""
    title: str = Field(..., description="Quiz title")
    description: Optional[str] = Field(default=None, description="Quiz description")
    date_open: datetime = Field(..., description="When the quiz opens")
    date_close: datetime = Field(..., description="When the quiz closes")
    duration: float = Field(..., ge=0, description="Duration in minutes, 0 means no limit")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Quiz title is required")
        return value

    @field_validator("date_open", "date_close")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return as_utc(value)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Midterm",
                "description": "Chapters 1-4",
                "date_open": "2024-10-01T08:00:00Z",
                "date_close": "2024-10-08T08:00:00Z",
                "duration": 45
            }
        }


class OptionPayload(BaseModel):
    answer: str = Field(..., description="Answer text")
    is_correct: bool = Field(default=False, description="Whether this option is a correct answer")

    @field_validator("answer")
    @classmethod
    def answer_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Answer must be provided for each option")
        return value.strip()


class QuestionPayload(BaseModel):
    """One question with its answer options"""
    title: str = Field(..., description="Question text")
    type: QuestionType = Field(..., description="Question type")
    points: float = Field(..., ge=0, description="Points awarded for a correct answer")
    options: List[OptionPayload] = Field(..., description="Answer options")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Question title is required")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "title": "2+2?",
                "type": "Identification",
                "points": 5,
                "options": [{"answer": "4", "is_correct": True}]
            }
        }


# An answer id, several answer ids, or free text
SubmittedResponse = Union[int, List[int], str]


class QuizSubmissionRequest(BaseModel):
    answers: Dict[str, SubmittedResponse] = Field(
        default_factory=dict,
        description="Question id mapped to the selected answer id(s) or the typed answer"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "answers": {
                    "7b1f...": 12,
                    "9c2e...": "photosynthesis"
                }
            }
        }
