# aviasafe/api/v1/occurrences.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from aviasafe.api.deps import changes_from, date_bounds
from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud import investigation as investigation_crud
from aviasafe.crud import occurrence as occurrence_crud
from aviasafe.crud.profile import get_profile
from aviasafe.models.aircraft import Aircraft
from aviasafe.models.profile import Profile
from aviasafe.schemas.common import Pagination
from aviasafe.schemas.investigation import InvestigationOut
from aviasafe.schemas.occurrence import (
    OccurrenceCreate,
    OccurrenceDetailsOut,
    OccurrenceEnvelope,
    OccurrenceListItem,
    OccurrenceListOut,
    OccurrenceOut,
    OccurrenceUpdate,
)
from aviasafe.services.audit import audit_log, ip_from_request
from aviasafe.services.stages import OccurrenceStatus, Severity, is_known_stage
from aviasafe.services.statistics import occurrence_stats
from aviasafe.services.views import unplaced_item

router = APIRouter(prefix="/occurrences", tags=["occurrences"])


def _ensure_aircraft(db: Session, aircraft_id: Optional[int]) -> None:
    if aircraft_id is None:
        return
    if not db.query(Aircraft.id).filter(Aircraft.id == aircraft_id).first():
        raise HTTPException(status_code=400, detail="Aircraft not found")


def _investigation_view(investigation) -> Optional[Dict[str, Any]]:
    if investigation is None:
        return None
    if not is_known_stage(investigation.stage):
        return unplaced_item(investigation)
    return InvestigationOut.model_validate(investigation).model_dump(
        mode="json", exclude={"occurrence"}
    )


def _ensure_assignee(db: Session, profile_id: Optional[int]) -> None:
    if profile_id is None:
        return
    if not get_profile(db, profile_id):
        raise HTTPException(status_code=400, detail="Assigned user not found")


# ---------------------------
# LIST / FILTER
# ---------------------------
@router.get("", response_model=OccurrenceListOut)
def list_occurrences(
    status_f: Optional[OccurrenceStatus] = Query(None, alias="status"),
    severity: Optional[Severity] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    start, end = date_bounds(start_date, end_date)
    rows, total = occurrence_crud.list_occurrences(
        db,
        status=status_f.value if status_f else None,
        severity=severity.value if severity else None,
        start=start,
        end_exclusive=end,
        limit=limit,
        offset=offset,
    )
    stats = occurrence_stats(occurrence_crud.rows_for_stats(db))
    return OccurrenceListOut(
        occurrences=[OccurrenceListItem.model_validate(r) for r in rows],
        pagination=Pagination(total=total, limit=limit, offset=offset),
        stats=stats,
    )


# ---------------------------
# CREATE (report submission)
# ---------------------------
@router.post("", response_model=OccurrenceEnvelope, status_code=status.HTTP_201_CREATED)
def create_occurrence(
    payload: OccurrenceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _ensure_aircraft(db, payload.aircraft_id)
    obj = occurrence_crud.create_occurrence(db, changes_from(payload), current_user.id)

    audit_log(
        db,
        user_id=current_user.id,
        action="OCCURRENCE_REPORTED",
        entity_type="occurrence",
        entity_id=obj.id,
        meta={"number": obj.occurrence_number, "severity": obj.severity},
        ip=ip_from_request(request),
    )
    return OccurrenceEnvelope(occurrence=OccurrenceOut.model_validate(obj))


# ---------------------------
# READ (by id)
# ---------------------------
@router.get("/{occurrence_id}")
def get_occurrence(
    occurrence_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    obj = occurrence_crud.get_occurrence(db, occurrence_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Occurrence not found")

    details = occurrence_crud.get_details(db, occurrence_id)
    investigation = investigation_crud.get_for_occurrence(db, occurrence_id)

    return {
        "occurrence": OccurrenceOut.model_validate(obj).model_dump(mode="json"),
        "details": (
            OccurrenceDetailsOut.model_validate(details).model_dump(mode="json")
            if details
            else None
        ),
        "investigation": _investigation_view(investigation),
    }


# ---------------------------
# UPDATE
# ---------------------------
@router.patch("/{occurrence_id}", response_model=OccurrenceEnvelope)
def update_occurrence(
    occurrence_id: int,
    payload: OccurrenceUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    obj = occurrence_crud.get_occurrence(db, occurrence_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Occurrence not found")

    data = changes_from(payload, required=("title", "status", "severity"))
    _ensure_aircraft(db, data.get("aircraft_id"))
    _ensure_assignee(db, data.get("assigned_to"))
    before = {"status": obj.status, "severity": obj.severity}
    obj = occurrence_crud.update_occurrence(db, obj, data)

    audit_log(
        db,
        user_id=current_user.id,
        action="OCCURRENCE_UPDATED",
        entity_type="occurrence",
        entity_id=obj.id,
        meta={"changes": sorted(data), "before": before},
        ip=ip_from_request(request),
    )
    return OccurrenceEnvelope(occurrence=OccurrenceOut.model_validate(obj))
