from .quiz_response_mapper import QuizResponseMapper

__all__ = ["QuizResponseMapper"]
