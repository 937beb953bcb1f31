# aviasafe/models/interview.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from aviasafe.db.base import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True)
    investigation_id = Column(
        Integer,
        ForeignKey("investigations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime, nullable=False, index=True)
    interviewee = Column(String(255), nullable=False)
    interviewer_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    summary = Column(Text, nullable=True)
    # scheduled | completed | cancelled
    status = Column(String(20), nullable=False, server_default="scheduled")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
