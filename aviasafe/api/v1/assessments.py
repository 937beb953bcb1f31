# aviasafe/api/v1/assessments.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from aviasafe.api.deps import changes_from
from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud import assessment as assessment_crud
from aviasafe.crud import occurrence as occurrence_crud
from aviasafe.crud.profile import get_profile
from aviasafe.models.profile import Profile
from aviasafe.schemas.assessment import AssessmentEnvelope, AssessmentOut, AssessmentUpdate
from aviasafe.services.audit import audit_log, ip_from_request
from aviasafe.services.stages import INVESTIGATOR_ROLES

log = logging.getLogger("aviasafe.assessments")

router = APIRouter(prefix="/occurrences", tags=["assessments"])


def _load_occurrence_or_404(db: Session, occurrence_id: int):
    occ = occurrence_crud.get_occurrence(db, occurrence_id)
    if not occ:
        raise HTTPException(status_code=404, detail="Occurrence not found")
    return occ


@router.get("/{occurrence_id}/assessment", response_model=AssessmentEnvelope)
def get_assessment(
    occurrence_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Return the occurrence's assessment. The first read creates a
    pending_assessment record; later reads return that same record.
    """
    _load_occurrence_or_404(db, occurrence_id)
    obj, created = assessment_crud.ensure_assessment(db, occurrence_id, current_user.id)

    if created:
        log.info("assessment created occurrence_id=%s id=%s", occurrence_id, obj.id)
        audit_log(
            db,
            user_id=current_user.id,
            action="ASSESSMENT_CREATED",
            entity_type="occurrence",
            entity_id=occurrence_id,
            meta={"assessment_id": obj.id},
            ip=ip_from_request(request),
        )
    return AssessmentEnvelope(assessment=AssessmentOut.model_validate(obj))


@router.patch("/{occurrence_id}/assessment", response_model=AssessmentEnvelope)
def update_assessment(
    occurrence_id: int,
    payload: AssessmentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    _load_occurrence_or_404(db, occurrence_id)
    changes = changes_from(payload, required=("status", "cfi_approved"))

    investigator_id = changes.get("assigned_investigator_id")
    if investigator_id is not None:
        investigator = get_profile(db, investigator_id)
        if not investigator or investigator.role not in INVESTIGATOR_ROLES:
            raise HTTPException(status_code=400, detail="Assigned investigator not found")

    # PATCH on a missing record behaves like GET-then-PATCH
    obj, _ = assessment_crud.ensure_assessment(db, occurrence_id, current_user.id)
    before_status = obj.status
    obj = assessment_crud.update_assessment(db, obj, changes, current_user.id)

    audit_log(
        db,
        user_id=current_user.id,
        action="ASSESSMENT_UPDATED",
        entity_type="occurrence",
        entity_id=occurrence_id,
        meta={
            "assessment_id": obj.id,
            "changes": sorted(changes),
            "old_status": before_status,
            "new_status": obj.status,
        },
        ip=ip_from_request(request),
    )
    return AssessmentEnvelope(assessment=AssessmentOut.model_validate(obj))
