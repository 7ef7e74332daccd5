"""Field-level validation of quiz and question payloads.

Both entry points return a ``ValidationOutcome`` holding either the typed
payload or a list of ``FieldError`` entries keyed by dotted field path
(``date_open``, ``options.2.answer``). Nothing here raises for bad input and
nothing touches storage.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..models.enums import QuestionType
from ..schemas.requests import QuizPayload, QuestionPayload, as_utc

T = TypeVar("T")

DATE_ORDER_MESSAGE = "Opening date must be earlier than closing date"
NO_CORRECT_ANSWER_MESSAGE = "There should at least be one correct answer"
TRUE_FALSE_TEXTS = ("True", "False")
MIN_CHOICES = 2
MAX_CHOICES = 5

QUIZ_REQUIRED_MESSAGES = {
    "title": "Quiz title is required",
    "date_open": "Date to start is required",
    "date_close": "Date to close is required",
    "duration": "Duration is required",
}

QUESTION_REQUIRED_MESSAGES = {
    "title": "Question title is required",
    "type": "Question Type is required",
    "points": "Points is required",
    "options": "Every option must be filled with answers",
    "answer": "Answer must be provided for each option",
}

# (minimum, maximum, message) per question type
OPTION_COUNT_RULES: Dict[QuestionType, Tuple[int, int, str]] = {
    QuestionType.MULTIPLE_CHOICE: (MIN_CHOICES, MAX_CHOICES, f"Multiple choice questions need between {MIN_CHOICES} and {MAX_CHOICES} options"),
    QuestionType.TRUE_OR_FALSE: (2, 2, "True or false questions need exactly 2 options"),
    QuestionType.IDENTIFICATION: (1, 1, "Identification questions need exactly 1 answer"),
}

_datetime_adapter = TypeAdapter(datetime)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class ValidationOutcome(Generic[T]):
    value: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def messages_for(self, field_name: str) -> List[str]:
        return [e.message for e in self.errors if e.field == field_name]


def validate_quiz(payload: Any) -> ValidationOutcome[QuizPayload]:
    data = _as_mapping(payload)
    errors: List[FieldError] = []
    value = None

    try:
        value = QuizPayload.model_validate(data)
    except PydanticValidationError as exc:
        errors.extend(_translate(exc, QUIZ_REQUIRED_MESSAGES))

    # Checked on the raw dates so the ordering error shows up alongside any other field error
    date_error = _check_date_order(data)
    if date_error:
        errors.append(date_error)

    if errors:
        return ValidationOutcome(errors=errors)
    return ValidationOutcome(value=value)


def validate_question(payload: Any, require_correct_answer: bool = False) -> ValidationOutcome[QuestionPayload]:
    data = _as_mapping(payload)

    try:
        value = QuestionPayload.model_validate(data)
    except PydanticValidationError as exc:
        return ValidationOutcome(errors=_translate(exc, QUESTION_REQUIRED_MESSAGES))

    errors = _check_option_rules(value, require_correct_answer)
    if errors:
        return ValidationOutcome(errors=errors)
    return ValidationOutcome(value=value)


def _as_mapping(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    if isinstance(payload, Mapping):
        return dict(payload)
    return payload


def _field_path(loc: Tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "payload"


def _translate(exc: PydanticValidationError, required_messages: Mapping[str, str]) -> List[FieldError]:
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        path = _field_path(loc)
        leaf = str(loc[-1]) if loc else ""

        if leaf in required_messages and (err["type"] == "missing" or err.get("input") is None):
            message = required_messages[leaf]
        elif err["type"] == "value_error" and err.get("ctx", {}).get("error") is not None:
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        errors.append(FieldError(field=path, message=message))
    return errors


def _check_date_order(data: Any) -> Optional[FieldError]:
    if not isinstance(data, Mapping):
        return None
    try:
        date_open = as_utc(_datetime_adapter.validate_python(data.get("date_open")))
        date_close = as_utc(_datetime_adapter.validate_python(data.get("date_close")))
    except PydanticValidationError:
        return None

    if date_open > date_close:
        return FieldError(field="date_open", message=DATE_ORDER_MESSAGE)
    return None


def _check_option_rules(question: QuestionPayload, require_correct_answer: bool) -> List[FieldError]:
    errors = []
    options = question.options
    minimum, maximum, count_message = OPTION_COUNT_RULES[question.type]

    if not minimum <= len(options) <= maximum:
        return [FieldError(field="options", message=count_message)]

    correct_count = sum(1 for option in options if option.is_correct)

    if question.type == QuestionType.TRUE_OR_FALSE:
        if tuple(option.answer for option in options) != TRUE_FALSE_TEXTS:
            errors.append(FieldError(field="options", message="True or false options must be 'True' and 'False'"))
        if correct_count > 1:
            errors.append(FieldError(field="options", message="Only one of 'True' or 'False' can be correct"))

    if question.type == QuestionType.IDENTIFICATION and correct_count != 1:
        errors.append(FieldError(field="options.0.is_correct", message="The identification answer must be marked correct"))

    if require_correct_answer and correct_count == 0:
        errors.append(FieldError(field="options", message=NO_CORRECT_ANSWER_MESSAGE))

    return errors
