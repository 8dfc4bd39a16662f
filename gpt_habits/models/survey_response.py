# gpt_habits/models/survey_response.py
import uuid

from sqlalchemy import Column, DateTime, String, Text, Uuid

from gpt_habits.core.timeutils import utcnow
from gpt_habits.db.base_class import Base


class SurveyResponse(Base):
    """Una participación completa en la encuesta estática (q1..q5). No se modifica nunca."""

    __tablename__ = "responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    q1 = Column(Text, nullable=False)   # último prompt (texto libre)
    q2 = Column(Text, nullable=False)   # lo más molesto (texto libre)
    q3 = Column(String, nullable=False)  # Yes | No | Sometimes
    q4 = Column(String, nullable=False)  # 1-3 times .. 30+ times
    q5 = Column(String, nullable=False)  # Yes | No | Depends
    user_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
