from .requests import QuizPayload, OptionPayload, QuestionPayload, QuizSubmissionRequest

__all__ = ["QuizPayload", "OptionPayload", "QuestionPayload", "QuizSubmissionRequest"]
