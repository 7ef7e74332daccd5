from typing import List, Optional

from sqlalchemy.orm import selectinload

from ..models.question import Question
from ..models.answer import QuestionAnswer
from .base import GatewayResult, TableRepository


class QuestionRepository(TableRepository):
    table_name = "questions"

    def create(
        self,
        quiz_id: str,
        title: str,
        question_type: str,
        points: float,
        position: Optional[int] = None,
    ) -> GatewayResult[Question]:
        def _insert() -> Question:
            question = Question(
                quiz_id=quiz_id,
                title=title,
                type=question_type,
                points=points,
                position=position,
            )
            self.session.add(question)
            self.session.commit()
            self.session.refresh(question)
            return question

        return self._run("insert", _insert)

    def count_for_quiz(self, quiz_id: str) -> GatewayResult[int]:
        return self._run(
            "count",
            lambda: self.session.query(Question).filter(Question.quiz_id == quiz_id).count(),
        )

    def list_with_answers(self, quiz_id: str) -> GatewayResult[List[Question]]:
        """Questions of a quiz with their linked answers, in authoring order."""
        return self._run(
            "select",
            lambda: (
                self.session.query(Question)
                .options(selectinload(Question.question_answers).joinedload(QuestionAnswer.answer))
                .filter(Question.quiz_id == quiz_id)
                .order_by(Question.position, Question.created_at)
                .all()
            ),
        )
