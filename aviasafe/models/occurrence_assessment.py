# aviasafe/models/occurrence_assessment.py
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from aviasafe.db.base import Base
from aviasafe.models.profile import Profile


class OccurrenceAssessment(Base):
    """
    Triage record of an occurrence; at most one per occurrence.
    """

    __tablename__ = "occurrence_assessments"

    id = Column(Integer, primary_key=True)
    occurrence_id = Column(
        Integer,
        ForeignKey("occurrences.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # pending_assessment | invalid | valid
    status = Column(
        String(30), nullable=False, server_default="pending_assessment", index=True
    )
    assessment_date = Column(DateTime, nullable=True)
    # operational | technical | environmental | human_factors | organizational | other
    incident_classification = Column(String(30), nullable=True)
    reasoning = Column(Text, nullable=True)

    assigned_investigator_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    date_assigned = Column(Date, nullable=True)
    completion_due_date = Column(Date, nullable=True, index=True)

    cfi_approved = Column(Boolean, nullable=False, default=False)
    cfi_approval_date = Column(Date, nullable=True)

    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    assigned_investigator = relationship(
        Profile, foreign_keys=[assigned_investigator_id], lazy="joined"
    )
