# aviasafe/api/v1/investigations.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from aviasafe.api.deps import changes_from, date_bounds
from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud import attachment as attachment_crud
from aviasafe.crud import investigation as investigation_crud
from aviasafe.crud import occurrence as occurrence_crud
from aviasafe.crud.profile import get_profile
from aviasafe.models.investigation import Investigation
from aviasafe.models.profile import Profile
from aviasafe.schemas.common import Pagination
from aviasafe.schemas.investigation import (
    CommunicationCreate,
    CommunicationOut,
    InterviewCreate,
    InterviewOut,
    InvestigationCreate,
    InvestigationDetailOut,
    InvestigationEnvelope,
    InvestigationListOut,
    InvestigationOut,
    InvestigationUpdate,
)
from aviasafe.schemas.occurrence import OccurrenceDetailsOut
from aviasafe.services.audit import audit_log, events_for, ip_from_request
from aviasafe.services.stages import INVESTIGATOR_ROLES, is_known_stage, parse_stage
from aviasafe.services.statistics import investigation_stats
from aviasafe.services.views import (
    detail_tabs,
    kanban_columns,
    progress_view,
    timeline,
    unplaced_item,
)

router = APIRouter(prefix="/investigations", tags=["investigations"])


def _load_or_404(db: Session, investigation_id: int) -> Investigation:
    obj = investigation_crud.get_investigation(db, investigation_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Investigation not found")
    return obj


def _check_investigator(db: Session, profile_id: Optional[int]) -> None:
    if profile_id is None:
        return
    p = get_profile(db, profile_id)
    if not p or p.role not in INVESTIGATOR_ROLES:
        raise HTTPException(status_code=400, detail="Lead investigator not found")


def _stage_filter(stage: Optional[str]) -> Optional[str]:
    if not stage:
        return None
    return parse_stage(stage).value


def _to_out(obj: Investigation) -> InvestigationOut:
    # stored stage outside the six known ones -> UnknownStageError (400)
    parse_stage(obj.stage)
    return InvestigationOut.model_validate(obj)


def _split_known(rows: List[Investigation]):
    placed = [r for r in rows if is_known_stage(r.stage)]
    unplaced = [unplaced_item(r) for r in rows if not is_known_stage(r.stage)]
    return placed, unplaced


# ---------------------------
# LIST / FILTER
# ---------------------------
@router.get("", response_model=InvestigationListOut)
def list_investigations(
    stage: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(10, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    start, end = date_bounds(start_date, end_date)
    rows, total = investigation_crud.list_investigations(
        db,
        stage=_stage_filter(stage),
        start=start,
        end_exclusive=end,
        limit=limit,
        offset=offset,
    )
    stats = investigation_stats(investigation_crud.rows_for_stats(db))
    placed, unplaced = _split_known(rows)
    return InvestigationListOut(
        investigations=[InvestigationOut.model_validate(r) for r in placed],
        pagination=Pagination(total=total, limit=limit, offset=offset),
        stats=stats,
        unplaced=unplaced,
    )


# ---------------------------
# KANBAN
# ---------------------------
@router.get("/board")
def investigation_board(
    stage: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Stage-keyed columns over the filtered investigations. Rows whose stored
    stage is not one of the six known stages are listed under `unplaced`.
    """
    start, end = date_bounds(start_date, end_date)
    rows = investigation_crud.filtered_all(
        db, stage=_stage_filter(stage), start=start, end_exclusive=end
    )
    board = kanban_columns(rows)
    for column in board["columns"]:
        column["items"] = [
            InvestigationOut.model_validate(r).model_dump(mode="json")
            for r in column["items"]
        ]
    return {
        "columns": board["columns"],
        "total": board["total"],
        "unplaced": [unplaced_item(r) for r in board["unplaced"]],
    }


# ---------------------------
# CREATE
# ---------------------------
@router.post("", response_model=InvestigationEnvelope, status_code=status.HTTP_201_CREATED)
def create_investigation(
    payload: InvestigationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    occ = occurrence_crud.get_occurrence(db, payload.occurrence_id)
    if not occ:
        raise HTTPException(status_code=404, detail="Occurrence not found")
    if investigation_crud.get_for_occurrence(db, occ.id):
        raise HTTPException(
            status_code=409, detail="Occurrence already has an investigation"
        )
    _check_investigator(db, payload.lead_investigator_id)

    obj = investigation_crud.create_investigation(db, occ, payload.lead_investigator_id)
    audit_log(
        db,
        user_id=current_user.id,
        action="INVESTIGATION_OPENED",
        entity_type="investigation",
        entity_id=obj.id,
        meta={"occurrence_id": occ.id},
        ip=ip_from_request(request),
    )
    obj = _load_or_404(db, obj.id)
    return InvestigationEnvelope(investigation=_to_out(obj))


# ---------------------------
# READ (by id)
# ---------------------------
@router.get("/{investigation_id}", response_model=InvestigationDetailOut)
def get_investigation(
    investigation_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    obj = _load_or_404(db, investigation_id)
    details = occurrence_crud.get_details(db, obj.occurrence_id)
    interviews = investigation_crud.list_interviews(db, obj.id)
    communications = investigation_crud.list_communications(db, obj.id)
    attachments = attachment_crud.list_for_occurrence(db, obj.occurrence_id)

    return InvestigationDetailOut(
        investigation=_to_out(obj),
        occurrence_details=OccurrenceDetailsOut.model_validate(details) if details else None,
        interviews=[InterviewOut.model_validate(i) for i in interviews],
        communications=[CommunicationOut.model_validate(c) for c in communications],
        tabs=detail_tabs(
            {
                "interviews": len(interviews),
                "communications": len(communications),
                "attachments": len(attachments),
            }
        ),
    )


# ---------------------------
# UPDATE
# ---------------------------
@router.patch("/{investigation_id}", response_model=InvestigationEnvelope)
def update_investigation(
    investigation_id: int,
    payload: InvestigationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Partial update. Concurrent edits are not detected: the last write wins.
    """
    obj = _load_or_404(db, investigation_id)
    changes = changes_from(payload)
    if changes.get("stage") is None:
        changes.pop("stage", None)
    else:
        changes["stage"] = parse_stage(changes["stage"]).value
    _check_investigator(db, changes.get("lead_investigator_id"))

    before_stage = obj.stage
    obj = investigation_crud.update_investigation(db, obj, changes)

    audit_log(
        db,
        user_id=current_user.id,
        action="INVESTIGATION_STAGE_CHANGED" if obj.stage != before_stage else "INVESTIGATION_UPDATED",
        entity_type="investigation",
        entity_id=obj.id,
        meta={"changes": sorted(changes), "old_stage": before_stage, "new_stage": obj.stage},
        ip=ip_from_request(request),
    )
    return InvestigationEnvelope(investigation=_to_out(obj))


# ---------------------------
# VIEW MODELS
# ---------------------------
@router.get("/{investigation_id}/progress")
def investigation_progress(
    investigation_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Dict[str, Any]:
    obj = _load_or_404(db, investigation_id)
    return progress_view(obj.stage)


@router.get("/{investigation_id}/timeline")
def investigation_timeline(
    investigation_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Dict[str, List[Dict[str, Any]]]:
    obj = _load_or_404(db, investigation_id)
    entries = timeline(
        obj,
        interviews=investigation_crud.list_interviews(db, obj.id),
        communications=investigation_crud.list_communications(db, obj.id),
        events=events_for(db, "investigation", obj.id),
    )
    return {"timeline": [{**e, "at": e["at"].isoformat()} for e in entries]}


# ---------------------------
# INTERVIEWS / COMMUNICATIONS
# ---------------------------
@router.get("/{investigation_id}/interviews", response_model=Dict[str, List[InterviewOut]])
def list_interviews(
    investigation_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _load_or_404(db, investigation_id)
    rows = investigation_crud.list_interviews(db, investigation_id)
    return {"interviews": [InterviewOut.model_validate(r) for r in rows]}


@router.post(
    "/{investigation_id}/interviews",
    response_model=Dict[str, InterviewOut],
    status_code=status.HTTP_201_CREATED,
)
def create_interview(
    investigation_id: int,
    payload: InterviewCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _load_or_404(db, investigation_id)
    if payload.interviewer_id is not None and not get_profile(db, payload.interviewer_id):
        raise HTTPException(status_code=400, detail="Interviewer not found")
    obj = investigation_crud.create_interview(db, investigation_id, changes_from(payload))
    audit_log(
        db,
        user_id=current_user.id,
        action="INTERVIEW_ADDED",
        entity_type="investigation",
        entity_id=investigation_id,
        meta={"interview_id": obj.id, "interviewee": obj.interviewee},
        ip=ip_from_request(request),
    )
    return {"interview": InterviewOut.model_validate(obj)}


@router.get(
    "/{investigation_id}/communications",
    response_model=Dict[str, List[CommunicationOut]],
)
def list_communications(
    investigation_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _load_or_404(db, investigation_id)
    rows = investigation_crud.list_communications(db, investigation_id)
    return {"communications": [CommunicationOut.model_validate(r) for r in rows]}


@router.post(
    "/{investigation_id}/communications",
    response_model=Dict[str, CommunicationOut],
    status_code=status.HTTP_201_CREATED,
)
def create_communication(
    investigation_id: int,
    payload: CommunicationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _load_or_404(db, investigation_id)
    obj = investigation_crud.create_communication(
        db, investigation_id, changes_from(payload), current_user.id
    )
    audit_log(
        db,
        user_id=current_user.id,
        action="COMMUNICATION_LOGGED",
        entity_type="investigation",
        entity_id=investigation_id,
        meta={"communication_id": obj.id, "channel": obj.channel},
        ip=ip_from_request(request),
    )
    return {"communication": CommunicationOut.model_validate(obj)}
