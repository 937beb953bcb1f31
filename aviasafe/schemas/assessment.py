# aviasafe/schemas/assessment.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, conint

from aviasafe.schemas.common import ProfileBrief
from aviasafe.services.stages import AssessmentStatus, IncidentClassification


class AssessmentUpdate(BaseModel):
    """
    Partial update of the triage record. Only the fields sent are written.
    `null` clears an optional field; `status` and `cfi_approved` cannot be
    cleared.
    """
    status: Optional[AssessmentStatus] = None
    incident_classification: Optional[IncidentClassification] = None
    reasoning: Optional[str] = None
    assigned_investigator_id: Optional[conint(ge=1)] = None
    date_assigned: Optional[date] = None
    completion_due_date: Optional[date] = None
    cfi_approved: Optional[bool] = None
    cfi_approval_date: Optional[date] = None


class AssessmentOut(BaseModel):
    id: int
    occurrence_id: int
    status: AssessmentStatus
    assessment_date: Optional[datetime] = None
    incident_classification: Optional[IncidentClassification] = None
    reasoning: Optional[str] = None
    assigned_investigator_id: Optional[int] = None
    assigned_investigator: Optional[ProfileBrief] = None
    date_assigned: Optional[date] = None
    completion_due_date: Optional[date] = None
    cfi_approved: bool = False
    cfi_approval_date: Optional[date] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AssessmentEnvelope(BaseModel):
    assessment: AssessmentOut
