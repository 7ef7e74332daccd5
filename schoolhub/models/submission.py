from typing import Dict, Any
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func

from ..core.database import Base


class QuizSubmission(Base):
    """
    A student's graded answers to one quiz
    """
    __tablename__ = "quiz_submissions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(String, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String, nullable=False, index=True)

    # question_id -> submitted response, plus per-question grading detail
    responses = Column(JSON, nullable=False, default=dict)
    results = Column(JSON, nullable=True)

    score = Column(Float, nullable=False, default=0)
    max_score = Column(Float, nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    def summary(self) -> Dict[str, Any]:
        return {
            "submission_id": self.id,
            "quiz_id": self.quiz_id,
            "student_id": self.student_id,
            "score": self.score,
            "max_score": self.max_score,
            "percentage": self.percentage,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }

    def __repr__(self):
        return f"<QuizSubmission(id={self.id}, quiz_id={self.quiz_id}, score={self.score})>"
