import uuid
from sqlalchemy import Column, Float, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    quiz_id = Column(String, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)
    points = Column(Float, nullable=False, default=1)
    # Ordinal at creation time; display numbering is still re-derived from the count
    position = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    quiz = relationship("Quiz", back_populates="questions")
    question_answers = relationship(
        "QuestionAnswer",
        back_populates="question",
        order_by="QuestionAnswer.id",
        cascade="all, delete-orphan",
    )

    @property
    def answers(self):
        return [link.answer for link in self.question_answers if link.answer is not None]

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, type={self.type!r})>"
