"""Response schemas for the quiz API"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ..models.enums import QuestionType


class QuizResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date_open: datetime
    date_close: datetime
    duration: float
    subject_id: str
    teacher_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AnswerResponse(BaseModel):
    id: int
    answer: str
    is_correct: bool

    class Config:
        from_attributes = True


class QuestionResponse(BaseModel):
    id: str
    quiz_id: str
    title: str
    type: QuestionType
    points: float
    ordinal: int = Field(..., description="Display number of the question within its quiz")
    answers: List[AnswerResponse] = Field(default_factory=list)


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class StepOutcomeResponse(BaseModel):
    status: str = Field(..., description="saved, invalid, failed or partially_saved")
    message: Optional[str] = None
    errors: List[FieldErrorResponse] = Field(default_factory=list)
    quiz_id: Optional[str] = None
    question_id: Optional[str] = None
    ordinal: Optional[int] = Field(None, description="Number given to the question just saved")
    next_ordinal: Optional[int] = Field(None, description="Number of the next question to author")
    redirect_to: Optional[str] = None
    quiz: Optional[QuizResponse] = None
    questions: List[QuestionResponse] = Field(default_factory=list)


class SessionSnapshotResponse(BaseModel):
    quiz: Optional[QuizResponse] = None
    questions: List[QuestionResponse] = Field(default_factory=list)
    next_ordinal: int
    state: str


class OptionSlotResponse(BaseModel):
    answer: str
    is_correct: bool
    text_editable: bool
    correctness_editable: bool


class QuestionTemplateResponse(BaseModel):
    type: QuestionType
    points: float
    options: List[OptionSlotResponse]


class ExitResponse(BaseModel):
    redirect_to: str


class QuestionGradeResponse(BaseModel):
    question_id: str
    response: Any = None
    correct_answers: List[str] = Field(default_factory=list)
    is_correct: bool
    score: float
    max_score: float


class SubmissionResultResponse(BaseModel):
    submission_id: Optional[int] = None
    quiz_id: str
    student_id: str
    score: float
    max_score: float
    percentage: float
    submitted_at: Optional[datetime] = None
    results: List[QuestionGradeResponse] = Field(default_factory=list)


class SubmissionSummaryResponse(BaseModel):
    submission_id: int
    quiz_id: str
    student_id: str
    score: float
    max_score: float
    percentage: float
    submitted_at: Optional[datetime] = None
