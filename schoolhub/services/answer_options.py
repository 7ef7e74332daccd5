from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..core.exceptions import OptionEditError
from ..models.enums import QuestionType
from .schema_validator import FieldError, MAX_CHOICES, MIN_CHOICES, TRUE_FALSE_TEXTS


@dataclass(frozen=True)
class OptionSlot:
    answer: str = ""
    is_correct: bool = False
    text_editable: bool = True
    correctness_editable: bool = True

    def as_option(self) -> dict:
        return {"answer": self.answer, "is_correct": self.is_correct}


class AnswerOptionSet:
    """Answer slots of the question being authored.

    The shape depends on the question type: Identification has one editable
    answer that is always correct, True or False has the two fixed texts with
    toggleable correctness, and Multiple Choice has as many blank slots as the
    author asks for (2 to 5). Changing the type throws away every slot.
    """

    def __init__(self, question_type: QuestionType = QuestionType.MULTIPLE_CHOICE):
        self._question_type = QuestionType(question_type)
        self._slots: List[OptionSlot] = self._template(self._question_type)

    @property
    def question_type(self) -> QuestionType:
        return self._question_type

    @property
    def slots(self) -> Tuple[OptionSlot, ...]:
        return tuple(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def change_type(self, question_type: QuestionType) -> None:
        self._question_type = QuestionType(question_type)
        self._slots = self._template(self._question_type)

    def set_choice_count(self, count: int) -> None:
        if self._question_type != QuestionType.MULTIPLE_CHOICE:
            raise OptionEditError(
                f"Choice count only applies to {QuestionType.MULTIPLE_CHOICE.value} questions",
                [FieldError("options", "Number of choices cannot be changed for this question type")],
            )
        if not MIN_CHOICES <= count <= MAX_CHOICES:
            raise OptionEditError(
                f"Choice count must be between {MIN_CHOICES} and {MAX_CHOICES}",
                [FieldError("options", f"Choose between {MIN_CHOICES} and {MAX_CHOICES} options")],
            )
        self._slots = [OptionSlot() for _ in range(count)]

    def set_answer(self, index: int, text: str) -> None:
        slot = self._slot(index)
        if not slot.text_editable:
            raise OptionEditError(
                f"Option {index} text is fixed",
                [FieldError(f"options.{index}.answer", "This option's text cannot be edited")],
            )
        self._slots[index] = replace(slot, answer=text)

    def set_correct(self, index: int, is_correct: bool) -> None:
        slot = self._slot(index)
        if not slot.correctness_editable:
            raise OptionEditError(
                f"Option {index} correctness is fixed",
                [FieldError(f"options.{index}.is_correct", "This option is always correct")],
            )
        self._slots[index] = replace(slot, is_correct=bool(is_correct))

    def to_options(self) -> List[dict]:
        return [slot.as_option() for slot in self._slots]

    @classmethod
    def from_submission(cls, question_type: Any, options: Optional[Sequence[Any]]) -> Optional["AnswerOptionSet"]:
        """Lay submitted options over the type's template.

        Returns None when the type is unknown, the option count does not fit
        the type, or True or False texts are not the fixed pair, leaving the
        raw options for the validator to report on.
        """
        try:
            kind = QuestionType(question_type)
        except ValueError:
            return None
        if not isinstance(options, (list, tuple)) or not all(isinstance(o, Mapping) for o in options):
            return None

        option_set = cls(kind)
        if kind == QuestionType.MULTIPLE_CHOICE:
            if not MIN_CHOICES <= len(options) <= MAX_CHOICES:
                return None
            option_set.set_choice_count(len(options))
        elif len(options) != len(option_set):
            return None

        if kind == QuestionType.TRUE_OR_FALSE:
            return cls._true_false_by_text(option_set, options)

        for index, submitted in enumerate(options):
            slot = option_set._slots[index]
            if slot.text_editable and isinstance(submitted.get("answer"), str):
                option_set.set_answer(index, submitted["answer"])
            if slot.correctness_editable:
                option_set.set_correct(index, bool(submitted.get("is_correct", False)))
        return option_set

    @staticmethod
    def _true_false_by_text(
        option_set: "AnswerOptionSet", options: Sequence[Mapping[str, Any]]
    ) -> Optional["AnswerOptionSet"]:
        """Correctness follows the submitted text, whatever order it came in.

        Anything other than the two fixed texts is left for the validator.
        """
        correct_by_text = {}
        for submitted in options:
            text = submitted.get("answer")
            if not isinstance(text, str):
                return None
            correct_by_text[text.strip().lower()] = bool(submitted.get("is_correct", False))

        if set(correct_by_text) != {t.lower() for t in TRUE_FALSE_TEXTS}:
            return None

        for index, slot in enumerate(option_set.slots):
            option_set.set_correct(index, correct_by_text[slot.answer.lower()])
        return option_set

    def _slot(self, index: int) -> OptionSlot:
        if not 0 <= index < len(self._slots):
            raise OptionEditError(
                f"No option at index {index}",
                [FieldError(f"options.{index}", "Option does not exist")],
            )
        return self._slots[index]

    @staticmethod
    def _template(question_type: QuestionType) -> List[OptionSlot]:
        if question_type == QuestionType.IDENTIFICATION:
            return [OptionSlot(answer="", is_correct=True, text_editable=True, correctness_editable=False)]
        if question_type == QuestionType.TRUE_OR_FALSE:
            return [
                OptionSlot(answer=text, is_correct=False, text_editable=False, correctness_editable=True)
                for text in TRUE_FALSE_TEXTS
            ]
        return []
