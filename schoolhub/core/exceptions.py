from typing import Optional, Dict, Any, List


class SchoolhubError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(SchoolhubError):
    def __init__(self, message: str, field_errors: Optional[List[Any]] = None):
        self.field_errors = list(field_errors or [])
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"fields": [{"field": e.field, "message": e.message} for e in self.field_errors]}
        )


class OptionEditError(ValidationError):
    pass


class PersistenceError(SchoolhubError):
    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="PERSISTENCE_ERROR",
            details={"table": table} if table else {}
        )
        self.table = table


class PartialWriteError(PersistenceError):
    """The question row was written but its answers were not attached."""

    def __init__(self, question_id: str, cause: str):
        super().__init__(f"Question {question_id} was saved without its answers: {cause}", table="question_answers")
        self.error_code = "PARTIAL_WRITE"
        self.question_id = question_id
        self.details["question_id"] = question_id


class SessionStateError(SchoolhubError):
    def __init__(self, action: str, state: str):
        super().__init__(
            message=f"Cannot {action} while the authoring session is {state}",
            error_code="INVALID_SESSION_STATE",
            details={"action": action, "state": state}
        )


class SessionBusyError(SchoolhubError):
    def __init__(self, action: str):
        super().__init__(
            message=f"Cannot {action}: a previous step is still in progress",
            error_code="SESSION_BUSY",
            details={"action": action}
        )


class QuizNotFoundError(SchoolhubError):
    def __init__(self, quiz_id: str):
        super().__init__(
            message=f"Quiz {quiz_id} not found",
            error_code="QUIZ_NOT_FOUND",
            details={"quiz_id": quiz_id}
        )


class QuizClosedError(SchoolhubError):
    def __init__(self, quiz_id: str):
        super().__init__(
            message=f"Quiz {quiz_id} is not open for submissions",
            error_code="QUIZ_CLOSED",
            details={"quiz_id": quiz_id}
        )


class AuthorizationError(SchoolhubError):
    pass
