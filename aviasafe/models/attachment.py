# aviasafe/models/attachment.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from aviasafe.db.base import Base


class Attachment(Base):
    """
    File evidence attached to an occurrence. The object itself lives in the
    attachments bucket under `file_path`.
    """

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True)
    occurrence_id = Column(
        Integer,
        ForeignKey("occurrences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    file_path = Column(Text, nullable=False)
    file_type = Column(String(120), nullable=False)
    file_size = Column(Integer, nullable=False)
    public_url = Column(Text, nullable=True)
    uploaded_by = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
