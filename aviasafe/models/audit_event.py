# aviasafe/models/audit_event.py
from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, func

from aviasafe.db.base import Base


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)
    meta = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


Index("ix_audit_events_entity", AuditEvent.entity_type, AuditEvent.entity_id)
