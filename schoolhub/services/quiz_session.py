import asyncio
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import structlog
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..core.context import RequestContext
from ..core.exceptions import (
    AuthorizationError,
    PartialWriteError,
    PersistenceError,
    SessionBusyError,
    SessionStateError,
)
from ..models.enums import QuestionType
from ..models.question import Question
from ..models.quiz import Quiz
from ..repositories.question_repository import QuestionRepository
from ..repositories.quiz_repository import QuizRepository
from ..utils.navigation import ADD_QUESTION_LEAF, EDIT_LEAF, sibling_route
from .answer_options import AnswerOptionSet
from .question_builder import QuestionBuilder
from .schema_validator import FieldError, validate_question, validate_quiz

logger = structlog.get_logger(__name__)

# One guard per quiz, shared by every controller editing it in this process
_quiz_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def quiz_lock(quiz_id: str) -> asyncio.Lock:
    lock = _quiz_locks.get(quiz_id)
    if lock is None:
        lock = asyncio.Lock()
        _quiz_locks[quiz_id] = lock
    return lock


class SessionState(str, Enum):
    IDLE = "idle"
    QUIZ_SAVED = "quiz_saved"
    AWAITING_QUESTION = "awaiting_question"
    QUESTION_SUBMITTED = "question_submitted"
    EXITING = "exiting"


class StepStatus(str, Enum):
    SAVED = "saved"
    INVALID = "invalid"
    FAILED = "failed"
    PARTIALLY_SAVED = "partially_saved"


@dataclass
class StepOutcome:
    status: StepStatus
    errors: List[FieldError] = field(default_factory=list)
    message: Optional[str] = None
    quiz_id: Optional[str] = None
    question_id: Optional[str] = None
    ordinal: Optional[int] = None
    next_ordinal: Optional[int] = None
    redirect_to: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SAVED


@dataclass
class QuizForm:
    title: str = ""
    description: Optional[str] = ""
    date_open: Optional[datetime] = None
    date_close: Optional[datetime] = None
    duration: float = 60

    @classmethod
    def defaults(cls, settings: Settings) -> "QuizForm":
        now = datetime.now(timezone.utc)
        return cls(
            date_open=now,
            date_close=now + timedelta(days=settings.default_quiz_window_days),
            duration=settings.default_quiz_duration_minutes,
        )

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizForm":
        return cls(
            title=quiz.title,
            description=quiz.description,
            date_open=quiz.date_open,
            date_close=quiz.date_close,
            duration=quiz.duration,
        )


@dataclass
class QuestionDraft:
    title: str = ""
    points: float = 1
    options: AnswerOptionSet = field(default_factory=AnswerOptionSet)

    @property
    def type(self) -> QuestionType:
        return self.options.question_type

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type.value,
            "points": self.points,
            "options": self.options.to_options(),
        }


class QuizSessionController:
    """Drives one teacher's pass through the quiz authoring screens.

    Without a quiz id the first ``save_quiz`` creates the quiz; with one the
    session is in edit mode, ``resume`` preloads what is stored, and
    ``save_quiz`` updates it. Questions are then added one at a time. Every
    step reports a ``StepOutcome``; storage failures are logged and reported
    there rather than raised.
    """

    def __init__(
        self,
        context: RequestContext,
        quiz_repo: QuizRepository,
        question_repo: QuestionRepository,
        builder: QuestionBuilder,
        subject_id: Optional[str] = None,
        quiz_id: Optional[str] = None,
        current_path: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        if subject_id is None and quiz_id is None:
            raise ValueError("A subject id is required to author a new quiz")

        self.context = context
        self.quiz_repo = quiz_repo
        self.question_repo = question_repo
        self.builder = builder
        self.subject_id = subject_id
        self.quiz_id = quiz_id
        self.current_path = current_path
        self.settings = settings or get_settings()

        self.state = SessionState.IDLE
        self.quiz: Optional[Quiz] = None
        self.quiz_form = QuizForm.defaults(self.settings)
        self.questions: List[Question] = []
        self.ordinal = 1
        self.draft = self._new_draft()
        self._lock = quiz_lock(quiz_id) if quiz_id else asyncio.Lock()

    @property
    def is_edit_mode(self) -> bool:
        return self.quiz_id is not None

    async def resume(self) -> "QuizSessionController":
        self._ensure_open("resume")
        if self.quiz_id is None:
            raise SessionStateError("resume", "not bound to a quiz")

        result = self.quiz_repo.get(self.quiz_id)
        if not result.ok:
            logger.warning("Could not load quiz for editing", quiz_id=self.quiz_id, error=result.error)
        elif result.data is None:
            logger.warning("Quiz to edit was not found", quiz_id=self.quiz_id)
        else:
            self._check_owner(result.data)
            self._set_quiz(result.data)

        await self._refresh_questions()
        await self._derive_ordinal()
        self.state = SessionState.AWAITING_QUESTION
        return self

    async def save_quiz(self, payload: Any) -> StepOutcome:
        async with self._step("save the quiz"):
            outcome = validate_quiz(payload)
            if not outcome.is_valid:
                logger.info("Quiz rejected", quiz_id=self.quiz_id, fields=[e.field for e in outcome.errors])
                return StepOutcome(StepStatus.INVALID, errors=outcome.errors, quiz_id=self.quiz_id)

            fields = outcome.value.model_dump()
            creating = self.quiz_id is None
            if creating:
                result = self.quiz_repo.create(self.subject_id, self.context.user_id, fields)
            else:
                result = self.quiz_repo.update(self.quiz_id, fields)

            if not result.ok:
                logger.error("Failed to save quiz", quiz_id=self.quiz_id, error=result.error)
                return StepOutcome(StepStatus.FAILED, message="Could not save the quiz", quiz_id=self.quiz_id)
            if result.data is None:
                logger.error("Quiz to update was not found", quiz_id=self.quiz_id)
                return StepOutcome(StepStatus.FAILED, message="Quiz not found", quiz_id=self.quiz_id)

            self._set_quiz(result.data)
            if self.state == SessionState.IDLE:
                self.state = SessionState.QUIZ_SAVED

            logger.info("Quiz saved", quiz_id=self.quiz_id, created=creating)
            return StepOutcome(
                StepStatus.SAVED,
                quiz_id=self.quiz_id,
                next_ordinal=self.ordinal,
                redirect_to=self._route(ADD_QUESTION_LEAF) if creating else None,
            )

    async def add_question(self, payload: Any = None) -> StepOutcome:
        """Validate and store one question, then get ready for the next.

        With no payload the current draft is submitted.
        """
        async with self._step("add a question"):
            if self.state == SessionState.IDLE:
                raise SessionStateError("add a question", self.state.value)
            if self.state == SessionState.QUIZ_SAVED:
                await self._derive_ordinal()
                self.state = SessionState.AWAITING_QUESTION

            data = self._normalize(payload if payload is not None else self.draft.to_payload())
            outcome = validate_question(data, require_correct_answer=self.settings.require_correct_answer)
            if not outcome.is_valid:
                logger.info("Question rejected", quiz_id=self.quiz_id, fields=[e.field for e in outcome.errors])
                return StepOutcome(StepStatus.INVALID, errors=outcome.errors, quiz_id=self.quiz_id, next_ordinal=self.ordinal)

            ordinal = self.ordinal
            try:
                built = await self.builder.build(self.quiz_id, outcome.value, position=ordinal)
            except PartialWriteError as e:
                logger.error(
                    "Question saved without answers",
                    quiz_id=self.quiz_id,
                    question_id=e.question_id,
                    error=e.message,
                )
                await self._refresh_questions()
                await self._derive_ordinal()
                return StepOutcome(
                    StepStatus.PARTIALLY_SAVED,
                    message="The question was saved but its answers were not",
                    quiz_id=self.quiz_id,
                    question_id=e.question_id,
                    next_ordinal=self.ordinal,
                )
            except PersistenceError as e:
                logger.error("Failed to save question", quiz_id=self.quiz_id, error=e.message)
                return StepOutcome(
                    StepStatus.FAILED,
                    message="Could not save the question",
                    quiz_id=self.quiz_id,
                    next_ordinal=self.ordinal,
                )

            self.state = SessionState.QUESTION_SUBMITTED
            self.draft = self._new_draft()
            await self._refresh_questions()
            self.ordinal += 1
            self.state = SessionState.AWAITING_QUESTION

            return StepOutcome(
                StepStatus.SAVED,
                quiz_id=self.quiz_id,
                question_id=built.question_id,
                ordinal=ordinal,
                next_ordinal=self.ordinal,
                redirect_to=self._route(ADD_QUESTION_LEAF),
            )

    def exit(self) -> str:
        """Leave the authoring screens; requests still in flight are abandoned."""
        if self.state == SessionState.EXITING:
            raise SessionStateError("exit", self.state.value)
        self.state = SessionState.EXITING
        logger.info("Authoring session closed", quiz_id=self.quiz_id)
        return self._route(EDIT_LEAF)

    def change_question_type(self, question_type: QuestionType) -> None:
        self._ensure_open("change the question type")
        self.draft.options.change_type(question_type)

    def set_choice_count(self, count: int) -> None:
        self._ensure_open("change the number of choices")
        self.draft.options.set_choice_count(count)

    @asynccontextmanager
    async def _step(self, action: str):
        self._ensure_open(action)
        if self._lock.locked():
            raise SessionBusyError(action)
        async with self._lock:
            yield

    def _ensure_open(self, action: str) -> None:
        if self.state == SessionState.EXITING:
            raise SessionStateError(action, self.state.value)

    def _check_owner(self, quiz: Quiz) -> None:
        if quiz.teacher_id != self.context.user_id:
            raise AuthorizationError(
                f"Quiz {quiz.id} belongs to another teacher",
                error_code="NOT_QUIZ_OWNER",
                details={"quiz_id": quiz.id},
            )

    def _set_quiz(self, quiz: Quiz) -> None:
        self.quiz = quiz
        self.quiz_id = quiz.id
        self._lock = quiz_lock(quiz.id)
        self.subject_id = quiz.subject_id
        self.quiz_form = QuizForm.from_quiz(quiz)

    def _new_draft(self) -> QuestionDraft:
        return QuestionDraft(points=self.settings.default_question_points)

    async def _refresh_questions(self) -> None:
        result = self.question_repo.list_with_answers(self.quiz_id)
        if not result.ok:
            logger.warning("Could not load questions", quiz_id=self.quiz_id, error=result.error)
            return
        self.questions = result.data or []

    async def _derive_ordinal(self) -> None:
        try:
            self.ordinal = await self.builder.count_questions(self.quiz_id) + 1
        except PersistenceError as e:
            logger.warning("Could not count questions", quiz_id=self.quiz_id, error=e.message)

    def _normalize(self, payload: Any) -> Any:
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        if not isinstance(payload, Mapping):
            return payload

        data = dict(payload)
        option_set = AnswerOptionSet.from_submission(data.get("type"), data.get("options"))
        if option_set is not None:
            data["options"] = option_set.to_options()
        return data

    def _route(self, leaf: str) -> str:
        path = self.current_path or (
            f"/teacher/subjects/{self.subject_id}/quizzes/{self.quiz_id}/{ADD_QUESTION_LEAF}"
        )
        return sibling_route(path, leaf, self.settings.site_url)
