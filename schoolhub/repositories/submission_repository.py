from typing import Any, Dict, List, Optional

from sqlalchemy import desc

from ..models.submission import QuizSubmission
from .base import GatewayResult, TableRepository


class SubmissionRepository(TableRepository):
    table_name = "quiz_submissions"

    def create(
        self,
        quiz_id: str,
        student_id: str,
        responses: Dict[str, Any],
        results: List[Dict[str, Any]],
        score: float,
        max_score: float,
        percentage: float,
    ) -> GatewayResult[QuizSubmission]:
        def _insert() -> QuizSubmission:
            submission = QuizSubmission(
                quiz_id=quiz_id,
                student_id=student_id,
                responses=responses,
                results=results,
                score=score,
                max_score=max_score,
                percentage=percentage,
            )
            self.session.add(submission)
            self.session.commit()
            self.session.refresh(submission)
            return submission

        return self._run("insert", _insert)

    def list_for_quiz(self, quiz_id: str, student_id: Optional[str] = None) -> GatewayResult[List[QuizSubmission]]:
        def _select() -> List[QuizSubmission]:
            query = self.session.query(QuizSubmission).filter(QuizSubmission.quiz_id == quiz_id)
            if student_id:
                query = query.filter(QuizSubmission.student_id == student_id)
            return query.order_by(desc(QuizSubmission.submitted_at), desc(QuizSubmission.id)).all()

        return self._run("select", _select)
