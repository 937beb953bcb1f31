# aviasafe/crud/assessment.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aviasafe.models.occurrence_assessment import OccurrenceAssessment
from aviasafe.services.stages import AssessmentStatus


def get_assessment(db: Session, occurrence_id: int) -> Optional[OccurrenceAssessment]:
    return (
        db.query(OccurrenceAssessment)
        .filter(OccurrenceAssessment.occurrence_id == occurrence_id)
        .first()
    )


def ensure_assessment(
    db: Session, occurrence_id: int, actor_id: Optional[int]
) -> Tuple[OccurrenceAssessment, bool]:
    """
    Return the occurrence's assessment, creating a pending one if none exists.
    Idempotent: repeated calls return the same row. The second element is
    True only when this call created the row.

    The caller must have checked that the occurrence exists.
    """
    existing = get_assessment(db, occurrence_id)
    if existing is not None:
        return existing, False

    obj = OccurrenceAssessment(
        occurrence_id=occurrence_id,
        status=AssessmentStatus.PENDING_ASSESSMENT.value,
        cfi_approved=False,
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request created it first (unique occurrence_id)
        db.rollback()
        existing = get_assessment(db, occurrence_id)
        if existing is None:
            raise
        return existing, False
    db.refresh(obj)
    return obj, True


def update_assessment(
    db: Session,
    obj: OccurrenceAssessment,
    changes: Dict[str, Any],
    actor_id: Optional[int],
) -> OccurrenceAssessment:
    """
    Apply a partial update. Derived dates are filled in when the caller
    did not send them:
      - assigning an investigator stamps date_assigned
      - approving by the CFI stamps cfi_approval_date
      - leaving pending_assessment stamps assessment_date
    """
    today = date.today()

    if (
        "assigned_investigator_id" in changes
        and changes["assigned_investigator_id"] is not None
        and changes["assigned_investigator_id"] != obj.assigned_investigator_id
        and "date_assigned" not in changes
    ):
        changes["date_assigned"] = today

    if changes.get("cfi_approved") and not obj.cfi_approved and "cfi_approval_date" not in changes:
        changes["cfi_approval_date"] = today
    if changes.get("cfi_approved") is False and "cfi_approval_date" not in changes:
        changes["cfi_approval_date"] = None

    new_status = changes.get("status")
    if (
        new_status is not None
        and new_status != AssessmentStatus.PENDING_ASSESSMENT.value
        and new_status != obj.status
    ):
        obj.assessment_date = datetime.utcnow()

    for k, v in changes.items():
        setattr(obj, k, v)
    obj.updated_by = actor_id
    obj.updated_at = datetime.utcnow()

    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def overdue_pending(db: Session, today: Optional[date] = None):
    """Pending assessments whose completion due date has passed."""
    today = today or date.today()
    return (
        db.query(OccurrenceAssessment)
        .filter(
            OccurrenceAssessment.status == AssessmentStatus.PENDING_ASSESSMENT.value,
            OccurrenceAssessment.completion_due_date.isnot(None),
            OccurrenceAssessment.completion_due_date < today,
        )
        .all()
    )
