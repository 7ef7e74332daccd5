from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog

from ..core.exceptions import PartialWriteError, PersistenceError
from ..repositories.answer_repository import AnswerRepository
from ..repositories.question_repository import QuestionRepository
from ..schemas.requests import OptionPayload, QuestionPayload

logger = structlog.get_logger(__name__)


@dataclass
class AttachedAnswers:
    question_id: str
    answer_ids: List[int] = field(default_factory=list)
    link_ids: List[int] = field(default_factory=list)


@dataclass
class BuiltQuestion:
    question_id: str
    position: Optional[int]
    answers: AttachedAnswers


class QuestionBuilder:
    """Writes one validated question and its answers, in that order."""

    def __init__(self, question_repo: QuestionRepository, answer_repo: AnswerRepository):
        self.question_repo = question_repo
        self.answer_repo = answer_repo

    async def count_questions(self, quiz_id: str) -> int:
        result = self.question_repo.count_for_quiz(quiz_id)
        if not result.ok:
            raise PersistenceError(f"Failed to count questions for quiz {quiz_id}: {result.error}", table="questions")
        return result.data or 0

    async def create_question(self, quiz_id: str, question: QuestionPayload, position: Optional[int] = None) -> str:
        result = self.question_repo.create(
            quiz_id=quiz_id,
            title=question.title,
            question_type=question.type.value,
            points=question.points,
            position=position,
        )
        if not result.ok or result.data is None:
            raise PersistenceError(f"Failed to save question: {result.error}", table="questions")

        logger.info("Question created", quiz_id=quiz_id, question_id=result.data.id, position=position)
        return result.data.id

    async def attach_answers(self, question_id: str, options: Sequence[OptionPayload]) -> AttachedAnswers:
        result = self.answer_repo.create_with_links(
            question_id,
            [(option.answer, option.is_correct) for option in options],
        )
        if not result.ok:
            raise PersistenceError(f"Failed to save answers: {result.error}", table="answers")

        links = result.data or []
        logger.info("Answers attached", question_id=question_id, answer_count=len(links))
        return AttachedAnswers(
            question_id=question_id,
            answer_ids=[link.answer_id for link in links],
            link_ids=[link.id for link in links],
        )

    async def build(self, quiz_id: str, question: QuestionPayload, position: Optional[int] = None) -> BuiltQuestion:
        question_id = await self.create_question(quiz_id, question, position)
        try:
            answers = await self.attach_answers(question_id, question.options)
        except PersistenceError as e:
            # The question row stays behind without answers
            raise PartialWriteError(question_id, e.message) from e

        return BuiltQuestion(question_id=question_id, position=position, answers=answers)
