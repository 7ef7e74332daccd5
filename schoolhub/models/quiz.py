import uuid
from sqlalchemy import Column, Float, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base


def generate_uuid():
    return str(uuid.uuid4())


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(String, primary_key=True, index=True, default=generate_uuid)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    date_open = Column(DateTime(timezone=True), nullable=False)
    date_close = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Float, nullable=False, default=60)  # minutes, 0 = unlimited
    subject_id = Column(String, nullable=False, index=True)
    teacher_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.position",
        lazy="select",
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title!r}, subject_id={self.subject_id})>"
