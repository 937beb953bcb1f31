# aviasafe/crud/occurrence.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from aviasafe.models.occurrence import Occurrence, OccurrenceDetails

_DETAIL_COLUMNS = ("flight_phase", "weather_conditions", "narrative")


def _active(q: Query) -> Query:
    return q.filter(Occurrence.deleted_at.is_(None))


def _apply_filters(
    q: Query,
    *,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    start: Optional[datetime] = None,
    end_exclusive: Optional[datetime] = None,
) -> Query:
    if status:
        q = q.filter(Occurrence.status == status)
    if severity:
        q = q.filter(Occurrence.severity == severity)
    if start:
        q = q.filter(Occurrence.occurrence_date >= start)
    if end_exclusive:
        q = q.filter(Occurrence.occurrence_date < end_exclusive)
    return q


def list_occurrences(
    db: Session,
    *,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    start: Optional[datetime] = None,
    end_exclusive: Optional[datetime] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Occurrence], int]:
    """Filtered page of occurrences (newest first) and the filtered total."""
    filters = dict(status=status, severity=severity, start=start, end_exclusive=end_exclusive)

    total = _apply_filters(_active(db.query(func.count(Occurrence.id))), **filters).scalar() or 0

    rows = (
        _apply_filters(_active(db.query(Occurrence)), **filters)
        .order_by(Occurrence.created_at.desc(), Occurrence.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, int(total)


def rows_for_stats(db: Session) -> List[Any]:
    """(status, created_at) of every non-deleted occurrence."""
    return _active(db.query(Occurrence.status, Occurrence.created_at)).all()


def get_occurrence(db: Session, occurrence_id: int) -> Optional[Occurrence]:
    return _active(db.query(Occurrence)).filter(Occurrence.id == occurrence_id).first()


def get_details(db: Session, occurrence_id: int) -> Optional[OccurrenceDetails]:
    return (
        db.query(OccurrenceDetails)
        .filter(OccurrenceDetails.occurrence_id == occurrence_id)
        .first()
    )


def next_occurrence_number(db: Session, year: int) -> str:
    prefix = f"OCC-{year}-"
    count = (
        db.query(func.count(Occurrence.id))
        .filter(Occurrence.occurrence_number.like(f"{prefix}%"))
        .scalar()
        or 0
    )
    return f"{prefix}{count + 1:04d}"


def create_occurrence(
    db: Session, data: Dict[str, Any], reporter_id: Optional[int]
) -> Occurrence:
    details = data.pop("details", None)
    obj = Occurrence(
        occurrence_number=next_occurrence_number(db, datetime.utcnow().year),
        reporter_id=reporter_id,
        status="new",
        **data,
    )
    db.add(obj)
    db.flush()

    if details:
        known = {k: details.get(k) for k in _DETAIL_COLUMNS if k in details}
        rest = {k: v for k, v in details.items() if k not in _DETAIL_COLUMNS}
        db.add(
            OccurrenceDetails(
                occurrence_id=obj.id,
                details_json=rest or None,
                **known,
            )
        )

    db.commit()
    db.refresh(obj)
    return obj


def update_occurrence(db: Session, obj: Occurrence, data: Dict[str, Any]) -> Occurrence:
    for k, v in data.items():
        setattr(obj, k, v)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

