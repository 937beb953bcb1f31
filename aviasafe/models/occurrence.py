# aviasafe/models/occurrence.py
from __future__ import annotations

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from aviasafe.db.base import Base
from aviasafe.models.aircraft import Aircraft
from aviasafe.models.profile import Profile


class Occurrence(Base):
    """
    A reported safety occurrence (incident report).

    Never hard-deleted; `deleted_at` marks soft-deleted rows, which are
    excluded from listings and statistics.
    """

    __tablename__ = "occurrences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # OCC-<year>-<seq>
    occurrence_number = Column(String(32), unique=True, index=True, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    occurrence_date = Column(DateTime, nullable=True, index=True)
    location = Column(String(255), nullable=True)

    # new | in_progress | under_investigation | closed
    status = Column(String(30), nullable=False, server_default="new", index=True)
    # low | medium | high | critical
    severity = Column(String(20), nullable=False, server_default="low", index=True)
    occurrence_type = Column(String(50), nullable=True, index=True)

    reporter_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_to = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    aircraft_id = Column(
        Integer, ForeignKey("aircraft.id", ondelete="SET NULL"), nullable=True, index=True
    )

    deleted_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    reporter = relationship(Profile, foreign_keys=[reporter_id], lazy="joined")
    assigned_user = relationship(Profile, foreign_keys=[assigned_to], lazy="joined")
    aircraft = relationship(Aircraft, lazy="joined")
    investigations = relationship(
        "Investigation",
        back_populates="occurrence",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Occurrence id={self.id} number={self.occurrence_number!r} "
            f"status={self.status!r} severity={self.severity!r}>"
        )


class OccurrenceDetails(Base):
    """Optional extended details of an occurrence (flight phase, weather, narrative...)."""

    __tablename__ = "occurrences_details"

    id = Column(Integer, primary_key=True)
    occurrence_id = Column(
        Integer,
        ForeignKey("occurrences.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    flight_phase = Column(String(50), nullable=True)
    weather_conditions = Column(String(255), nullable=True)
    narrative = Column(Text, nullable=True)
    details_json = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


Index("ix_occurrences_status_severity", Occurrence.status, Occurrence.severity)
