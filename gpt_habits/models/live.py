# gpt_habits/models/live.py
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid, text
)
from sqlalchemy.orm import relationship

from gpt_habits.core.timeutils import utcnow
from gpt_habits.db.base_class import Base

# Única fila posible en live_session
SESSION_SLOT = "main"


class LiveSession(Base):
    __tablename__ = "live_session"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slot = Column(String, unique=True, nullable=False, default=SESSION_SLOT, server_default=text("'main'"))

    current_question = Column(Integer, nullable=False, default=-1)  # -1 lobby, 0..4 pregunta
    is_active = Column(Boolean, nullable=False, default=False)
    question_start_time = Column(DateTime(timezone=True), nullable=True)
    timer_duration = Column(Integer, nullable=False, default=30)  # segundos
    session_start_time = Column(DateTime(timezone=True), nullable=True)

    answers = relationship("LiveAnswer", back_populates="session", passive_deletes=True)


class LiveAnswer(Base):
    __tablename__ = "live_responses"
    __table_args__ = (
        UniqueConstraint("user_id", "session_id", "question_number", name="uq_live_answer_user_session_question"),
        Index("ix_live_responses_session_question", "session_id", "question_number"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String, nullable=False)
    question_number = Column(Integer, nullable=False)
    answer = Column(Text, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("live_session.id", ondelete="CASCADE"), nullable=False)
    is_favorited = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    session = relationship("LiveSession", back_populates="answers")
