# aviasafe/crud/investigation.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from aviasafe.models.communication import Communication
from aviasafe.models.interview import Interview
from aviasafe.models.investigation import Investigation
from aviasafe.models.occurrence import Occurrence
from aviasafe.services.stages import Stage, stage_index


def _active(q: Query) -> Query:
    return q.filter(Investigation.deleted_at.is_(None))


def _apply_filters(
    q: Query,
    *,
    stage: Optional[str] = None,
    start: Optional[datetime] = None,
    end_exclusive: Optional[datetime] = None,
) -> Query:
    if stage:
        q = q.filter(Investigation.stage == stage)
    if start:
        q = q.filter(Investigation.created_at >= start)
    if end_exclusive:
        q = q.filter(Investigation.created_at < end_exclusive)
    return q


def _with_occurrence(q: Query) -> Query:
    return q.options(
        joinedload(Investigation.occurrence).joinedload(Occurrence.reporter),
        joinedload(Investigation.occurrence).joinedload(Occurrence.aircraft),
    )


def list_investigations(
    db: Session,
    *,
    stage: Optional[str] = None,
    start: Optional[datetime] = None,
    end_exclusive: Optional[datetime] = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Investigation], int]:
    """Filtered page (most recently updated first) and the filtered total."""
    filters = dict(stage=stage, start=start, end_exclusive=end_exclusive)
    total = _apply_filters(_active(db.query(func.count(Investigation.id))), **filters).scalar() or 0
    rows = (
        _apply_filters(_with_occurrence(_active(db.query(Investigation))), **filters)
        .order_by(Investigation.updated_at.desc(), Investigation.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, int(total)


def filtered_all(
    db: Session,
    *,
    stage: Optional[str] = None,
    start: Optional[datetime] = None,
    end_exclusive: Optional[datetime] = None,
) -> List[Investigation]:
    return (
        _apply_filters(
            _with_occurrence(_active(db.query(Investigation))),
            stage=stage,
            start=start,
            end_exclusive=end_exclusive,
        )
        .order_by(Investigation.updated_at.desc(), Investigation.id.desc())
        .all()
    )


def rows_for_stats(db: Session) -> List[Any]:
    """(stage, created_at) of every non-deleted investigation."""
    return _active(db.query(Investigation.stage, Investigation.created_at)).all()


def get_investigation(db: Session, investigation_id: int) -> Optional[Investigation]:
    return (
        _with_occurrence(_active(db.query(Investigation)))
        .filter(Investigation.id == investigation_id)
        .first()
    )


def get_for_occurrence(db: Session, occurrence_id: int) -> Optional[Investigation]:
    return (
        _active(db.query(Investigation))
        .filter(Investigation.occurrence_id == occurrence_id)
        .first()
    )


def create_investigation(
    db: Session, occurrence: Occurrence, lead_investigator_id: Optional[int]
) -> Investigation:
    """Open the investigation of an occurrence and move the occurrence under investigation."""
    obj = Investigation(
        occurrence_id=occurrence.id,
        stage=Stage.NOT_STARTED.value,
        lead_investigator_id=lead_investigator_id,
    )
    occurrence.status = "under_investigation"
    db.add(obj)
    db.add(occurrence)
    db.commit()
    db.refresh(obj)
    return obj


def update_investigation(
    db: Session, obj: Investigation, changes: Dict[str, Any]
) -> Investigation:
    """
    Partial update, last write wins. Stage moves stamp started_at (first move
    off not_started) and completed_at (set on reaching completed, cleared when
    moving back).
    """
    now = datetime.utcnow()
    if "stage" in changes and changes["stage"] is not None:
        new_stage = changes["stage"]
        idx = stage_index(new_stage)
        if idx > 0 and obj.started_at is None:
            obj.started_at = now
        if new_stage == Stage.COMPLETED.value:
            if obj.completed_at is None:
                obj.completed_at = now
        else:
            obj.completed_at = None

    for k, v in changes.items():
        setattr(obj, k, v)
    obj.updated_at = now

    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# ---------------------------
# Interviews / communications
# ---------------------------
def list_interviews(db: Session, investigation_id: int) -> List[Interview]:
    return (
        db.query(Interview)
        .filter(Interview.investigation_id == investigation_id)
        .order_by(Interview.date.desc(), Interview.id.desc())
        .all()
    )


def create_interview(db: Session, investigation_id: int, data: Dict[str, Any]) -> Interview:
    obj = Interview(investigation_id=investigation_id, **data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def list_communications(db: Session, investigation_id: int) -> List[Communication]:
    return (
        db.query(Communication)
        .filter(Communication.investigation_id == investigation_id)
        .order_by(Communication.date.desc(), Communication.id.desc())
        .all()
    )


def create_communication(
    db: Session, investigation_id: int, data: Dict[str, Any], created_by: Optional[int]
) -> Communication:
    obj = Communication(investigation_id=investigation_id, created_by=created_by, **data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
