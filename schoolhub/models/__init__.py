from .enums import QuestionType
from .quiz import Quiz
from .question import Question
from .answer import Answer, QuestionAnswer
from .submission import QuizSubmission

__all__ = ["QuestionType", "Quiz", "Question", "Answer", "QuestionAnswer", "QuizSubmission"]
