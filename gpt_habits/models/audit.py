# gpt_habits/models/audit.py
import uuid

from sqlalchemy import JSON, Column, DateTime, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from gpt_habits.core.timeutils import utcnow
from gpt_habits.db.base_class import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id        = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    accion    = Column(String, nullable=False, index=True)
    payload   = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    ip        = Column(String, nullable=True)
    ua        = Column(Text, nullable=True)
    creado_en = Column(DateTime(timezone=True), default=utcnow, nullable=False)
