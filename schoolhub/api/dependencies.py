from typing import Optional

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..config import get_settings
from ..core.context import RequestContext, Role
from ..core.database import get_db
from ..core.firebase import context_from_claims, verify_firebase_token
from ..repositories.answer_repository import AnswerRepository
from ..repositories.question_repository import QuestionRepository
from ..repositories.quiz_repository import QuizRepository
from ..repositories.submission_repository import SubmissionRepository
from ..services.question_builder import QuestionBuilder
from ..services.submission_service import SubmissionService

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_quiz_repository(db: Session = Depends(get_db)) -> QuizRepository:
    return QuizRepository(db)


def get_question_repository(db: Session = Depends(get_db)) -> QuestionRepository:
    return QuestionRepository(db)


def get_answer_repository(db: Session = Depends(get_db)) -> AnswerRepository:
    return AnswerRepository(db)


def get_submission_repository(db: Session = Depends(get_db)) -> SubmissionRepository:
    return SubmissionRepository(db)


def get_question_builder(
    question_repo: QuestionRepository = Depends(get_question_repository),
    answer_repo: AnswerRepository = Depends(get_answer_repository),
) -> QuestionBuilder:
    return QuestionBuilder(question_repo, answer_repo)


def get_submission_service(
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    submission_repo: SubmissionRepository = Depends(get_submission_repository),
) -> SubmissionService:
    return SubmissionService(quiz_repo, question_repo, submission_repo)


def demo_context() -> RequestContext:
    settings = get_settings()
    return RequestContext(user_id=settings.demo_user_id, role=Role.parse(settings.demo_user_role))


async def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> RequestContext:
    """
    Identity of the caller for this request.
    - If authentication_enabled=False: the configured demo identity
    - Otherwise a verified Firebase ID token is required; demo_mode falls back
      to the demo identity when no token is sent
    """
    settings = get_settings()

    if not settings.authentication_enabled:
        return demo_context()

    if not credentials or not credentials.credentials:
        if settings.demo_mode:
            return demo_context()
        raise HTTPException(status_code=401, detail="Authentication required. Please provide a valid ID token.")

    claims = verify_firebase_token(credentials.credentials)
    context = context_from_claims(claims) if claims else None
    if not context:
        raise HTTPException(status_code=401, detail="Invalid or expired ID token.")
    return context


async def require_teacher(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not context.is_teacher:
        logger.warning("Teacher-only route refused", user_id=context.user_id, role=context.role.value)
        raise HTTPException(status_code=403, detail="Only teachers can author quizzes.")
    return context


async def require_student(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not context.is_student:
        logger.warning("Student-only route refused", user_id=context.user_id, role=context.role.value)
        raise HTTPException(status_code=403, detail="Only students can submit quizzes.")
    return context
