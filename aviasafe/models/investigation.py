# aviasafe/models/investigation.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from aviasafe.db.base import Base
from aviasafe.models.profile import Profile


class Investigation(Base):
    """
    Structured follow-up of an occurrence. One investigation per occurrence;
    `stage` is always one of the six investigation stages.
    """

    __tablename__ = "investigations"

    id = Column(Integer, primary_key=True)
    occurrence_id = Column(
        Integer,
        ForeignKey("occurrences.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # not_started | data_collection | analysis | recommendations | review | completed
    stage = Column(String(30), nullable=False, server_default="not_started", index=True)
    lead_investigator_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )

    findings = Column(Text, nullable=True)
    root_causes = Column(Text, nullable=True)
    contributing_factors = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)

    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    lead_investigator = relationship(Profile, foreign_keys=[lead_investigator_id], lazy="joined")
    occurrence = relationship("Occurrence", back_populates="investigations")

    def __repr__(self) -> str:
        return f"<Investigation id={self.id} occurrence={self.occurrence_id} stage={self.stage!r}>"


Index("ix_investigations_stage_updated", Investigation.stage, Investigation.updated_at)
