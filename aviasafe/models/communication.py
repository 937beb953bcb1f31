# aviasafe/models/communication.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from aviasafe.db.base import Base


class Communication(Base):
    __tablename__ = "communications"

    id = Column(Integer, primary_key=True)
    investigation_id = Column(
        Integer,
        ForeignKey("investigations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime, nullable=False, index=True)
    # email | phone | meeting | letter | other
    channel = Column(String(20), nullable=False, server_default="email")
    participants = Column(String(500), nullable=True)
    subject = Column(String(255), nullable=True)
    summary = Column(Text, nullable=True)
    # draft | sent | received
    status = Column(String(20), nullable=False, server_default="sent")

    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
