from datetime import datetime, timezone
from typing import List, Optional, Tuple

import structlog

from ..core.context import RequestContext
from ..core.exceptions import PersistenceError, QuizClosedError, QuizNotFoundError
from ..models.quiz import Quiz
from ..models.submission import QuizSubmission
from ..repositories.question_repository import QuestionRepository
from ..repositories.quiz_repository import QuizRepository
from ..repositories.submission_repository import SubmissionRepository
from ..schemas.requests import QuizSubmissionRequest, as_utc
from .quiz_grader import GradeReport, QuizGrader

logger = structlog.get_logger(__name__)


class SubmissionService:

    def __init__(
        self,
        quiz_repo: QuizRepository,
        question_repo: QuestionRepository,
        submission_repo: SubmissionRepository,
        grader: Optional[QuizGrader] = None,
    ):
        self.quiz_repo = quiz_repo
        self.question_repo = question_repo
        self.submission_repo = submission_repo
        self.grader = grader or QuizGrader()

    async def get_quiz(self, quiz_id: str) -> Quiz:
        result = self.quiz_repo.get(quiz_id)
        if not result.ok:
            raise PersistenceError(f"Failed to load quiz {quiz_id}: {result.error}", table="quizzes")
        if result.data is None:
            raise QuizNotFoundError(quiz_id)
        return result.data

    async def submit(
        self,
        context: RequestContext,
        quiz_id: str,
        request: QuizSubmissionRequest,
        now: Optional[datetime] = None,
    ) -> Tuple[QuizSubmission, GradeReport]:
        quiz = await self.get_quiz(quiz_id)

        now = now or datetime.now(timezone.utc)
        if not self.is_open(quiz, now):
            raise QuizClosedError(quiz_id)

        questions = self.question_repo.list_with_answers(quiz_id)
        if not questions.ok:
            raise PersistenceError(f"Failed to load questions for quiz {quiz_id}: {questions.error}", table="questions")

        report = self.grader.grade(questions.data or [], request.answers)

        saved = self.submission_repo.create(
            quiz_id=quiz_id,
            student_id=context.user_id,
            responses=request.answers,
            results=report.results_as_dicts(),
            score=report.score,
            max_score=report.max_score,
            percentage=report.percentage,
        )
        if not saved.ok:
            raise PersistenceError(f"Failed to save submission: {saved.error}", table="quiz_submissions")

        logger.info(
            "Quiz submitted",
            quiz_id=quiz_id,
            student_id=context.user_id,
            score=report.score,
            max_score=report.max_score,
        )
        return saved.data, report

    async def list_submissions(self, quiz_id: str, student_id: Optional[str] = None) -> List[QuizSubmission]:
        result = self.submission_repo.list_for_quiz(quiz_id, student_id)
        if not result.ok:
            raise PersistenceError(f"Failed to load submissions for quiz {quiz_id}: {result.error}", table="quiz_submissions")
        return result.data or []

    @staticmethod
    def is_open(quiz: Quiz, now: datetime) -> bool:
        # SQLite hands datetimes back without tzinfo
        return as_utc(quiz.date_open) <= as_utc(now) <= as_utc(quiz.date_close)
