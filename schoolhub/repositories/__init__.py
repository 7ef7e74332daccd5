from .base import GatewayResult
from .quiz_repository import QuizRepository
from .question_repository import QuestionRepository
from .answer_repository import AnswerRepository
from .submission_repository import SubmissionRepository

__all__ = ["GatewayResult", "QuizRepository", "QuestionRepository", "AnswerRepository", "SubmissionRepository"]
