# aviasafe/schemas/investigation.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, conint, constr

from aviasafe.schemas.common import Pagination, ProfileBrief
from aviasafe.schemas.occurrence import AircraftBrief, OccurrenceDetailsOut
from aviasafe.services.stages import OccurrenceStatus, Severity, Stage

InterviewStatus = Literal["scheduled", "completed", "cancelled"]
CommunicationChannel = Literal["email", "phone", "meeting", "letter", "other"]
CommunicationStatus = Literal["draft", "sent", "received"]


class InvestigationOccurrenceBrief(BaseModel):
    id: int
    occurrence_number: str
    title: str
    description: Optional[str] = None
    occurrence_date: Optional[datetime] = None
    location: Optional[str] = None
    status: OccurrenceStatus
    severity: Severity
    occurrence_type: Optional[str] = None
    reporter: Optional[ProfileBrief] = None
    aircraft: Optional[AircraftBrief] = None

    class Config:
        from_attributes = True


class InvestigationCreate(BaseModel):
    occurrence_id: conint(ge=1)
    lead_investigator_id: Optional[conint(ge=1)] = None


class InvestigationUpdate(BaseModel):
    """
    Partial update; each long-form section is editable independently.
    """
    # validated against the stage list by the route (unknown stage -> 400)
    stage: Optional[str] = None
    lead_investigator_id: Optional[conint(ge=1)] = None
    findings: Optional[str] = None
    root_causes: Optional[str] = None
    contributing_factors: Optional[str] = None
    recommendations: Optional[str] = None


class InvestigationOut(BaseModel):
    id: int
    occurrence_id: int
    stage: Stage
    lead_investigator_id: Optional[int] = None
    lead_investigator: Optional[ProfileBrief] = None
    findings: Optional[str] = None
    root_causes: Optional[str] = None
    contributing_factors: Optional[str] = None
    recommendations: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    occurrence: Optional[InvestigationOccurrenceBrief] = None

    class Config:
        from_attributes = True


class InterviewCreate(BaseModel):
    date: datetime
    interviewee: constr(strip_whitespace=True, min_length=1, max_length=255)
    interviewer_id: Optional[conint(ge=1)] = None
    summary: Optional[str] = None
    status: InterviewStatus = "scheduled"


class InterviewOut(BaseModel):
    id: int
    investigation_id: int
    date: datetime
    interviewee: str
    interviewer_id: Optional[int] = None
    summary: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CommunicationCreate(BaseModel):
    date: datetime
    channel: CommunicationChannel = "email"
    participants: Optional[constr(strip_whitespace=True, max_length=500)] = None
    subject: Optional[constr(strip_whitespace=True, max_length=255)] = None
    summary: Optional[str] = None
    status: CommunicationStatus = "sent"


class CommunicationOut(BaseModel):
    id: int
    investigation_id: int
    date: datetime
    channel: str
    participants: Optional[str] = None
    subject: Optional[str] = None
    summary: Optional[str] = None
    status: str
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InvestigationListOut(BaseModel):
    investigations: List[InvestigationOut]
    pagination: Pagination
    stats: Dict[str, int]
    unplaced: List[Dict[str, Any]] = Field(default_factory=list)


class InvestigationEnvelope(BaseModel):
    investigation: InvestigationOut


class InvestigationDetailOut(BaseModel):
    investigation: InvestigationOut
    occurrence_details: Optional[OccurrenceDetailsOut] = None
    interviews: List[InterviewOut] = Field(default_factory=list)
    communications: List[CommunicationOut] = Field(default_factory=list)
    tabs: List[Dict[str, Any]] = Field(default_factory=list)
