from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

import structlog

from ..models.answer import Answer
from ..models.enums import QuestionType
from ..models.question import Question

logger = structlog.get_logger(__name__)

TRUE_VALUES = ["true", "t", "yes", "1"]
FALSE_VALUES = ["false", "f", "no", "0"]


@dataclass
class QuestionGrade:
    question_id: str
    response: Any
    correct_answers: List[str]
    is_correct: bool
    score: float
    max_score: float


@dataclass
class GradeReport:
    score: float = 0.0
    max_score: float = 0.0
    percentage: float = 0.0
    results: List[QuestionGrade] = field(default_factory=list)

    def results_as_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(result) for result in self.results]


class QuizGrader:
    """Scores a student's responses against the stored correct answers.

    Choice questions (Multiple Choice, True or False) are right when the
    selected answers are exactly the correct ones. Identification answers
    are compared as trimmed, case-insensitive text.
    """

    def grade(self, questions: Sequence[Question], responses: Mapping[str, Any]) -> GradeReport:
        report = GradeReport()

        for question in questions:
            response = responses.get(question.id)
            correct_answers = [a.answer for a in question.answers if a.is_correct]
            is_correct = self._is_correct(question, response)
            score = question.points if is_correct else 0.0

            report.max_score += question.points
            report.score += score
            report.results.append(QuestionGrade(
                question_id=question.id,
                response=response,
                correct_answers=correct_answers,
                is_correct=is_correct,
                score=score,
                max_score=question.points,
            ))

        if report.max_score > 0:
            report.percentage = round((report.score / report.max_score) * 100, 2)

        logger.debug("Quiz graded", score=report.score, max_score=report.max_score)
        return report

    def _is_correct(self, question: Question, response: Any) -> bool:
        if response is None or response == "" or response == []:
            return False

        answers = question.answers
        correct = [a for a in answers if a.is_correct]
        if not correct:
            return False

        if question.type == QuestionType.IDENTIFICATION.value:
            if not isinstance(response, str):
                return self._selected_ids(question, response) == {a.id for a in correct}
            submitted = self._normalize_text(response)
            return any(submitted == self._normalize_text(a.answer) for a in correct)

        return self._selected_ids(question, response) == {a.id for a in correct}

    def _selected_ids(self, question: Question, response: Any) -> Set[int]:
        items = response if isinstance(response, list) else [response]
        selected: Set[int] = set()
        for item in items:
            if isinstance(item, bool):
                continue
            if isinstance(item, int):
                selected.add(item)
            elif isinstance(item, str):
                match = self._match_text(question, item)
                if match is not None:
                    selected.add(match.id)
        return selected

    def _match_text(self, question: Question, text: str) -> Optional[Answer]:
        wanted = self._normalize_text(text)
        if question.type == QuestionType.TRUE_OR_FALSE.value:
            wanted = self._normalize_boolean(wanted)

        for answer in question.answers:
            candidate = self._normalize_text(answer.answer)
            if question.type == QuestionType.TRUE_OR_FALSE.value:
                candidate = self._normalize_boolean(candidate)
            if candidate == wanted:
                return answer
        return None

    @staticmethod
    def _normalize_text(value: str) -> str:
        return " ".join(str(value).split()).lower()

    @staticmethod
    def _normalize_boolean(value: str) -> str:
        if value in TRUE_VALUES:
            return "true"
        if value in FALSE_VALUES:
            return "false"
        return value
