from typing import Any, Dict, List, Optional

from ..models.quiz import Quiz
from .base import GatewayResult, TableRepository


class QuizRepository(TableRepository):
    table_name = "quizzes"

    def create(self, subject_id: str, teacher_id: str, fields: Dict[str, Any]) -> GatewayResult[Quiz]:
        def _insert() -> Quiz:
            quiz = Quiz(subject_id=subject_id, teacher_id=teacher_id, **fields)
            self.session.add(quiz)
            self.session.commit()
            self.session.refresh(quiz)
            return quiz

        return self._run("insert", _insert)

    def update(self, quiz_id: str, fields: Dict[str, Any]) -> GatewayResult[Optional[Quiz]]:
        def _update() -> Optional[Quiz]:
            quiz = self.session.query(Quiz).filter(Quiz.id == quiz_id).first()
            if not quiz:
                return None
            for key, value in fields.items():
                setattr(quiz, key, value)
            self.session.commit()
            self.session.refresh(quiz)
            return quiz

        return self._run("update", _update)

    def get(self, quiz_id: str) -> GatewayResult[Optional[Quiz]]:
        return self._run(
            "select",
            lambda: self.session.query(Quiz).filter(Quiz.id == quiz_id).first(),
        )

    def list_by_subject(self, subject_id: str) -> GatewayResult[List[Quiz]]:
        return self._run(
            "select",
            lambda: (
                self.session.query(Quiz)
                .filter(Quiz.subject_id == subject_id)
                .order_by(Quiz.date_open)
                .all()
            ),
        )
