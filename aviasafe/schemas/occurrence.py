# aviasafe/schemas/occurrence.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, conint, constr

from aviasafe.schemas.common import Pagination, ProfileBrief
from aviasafe.services.stages import OccurrenceStatus, Severity


class AircraftBrief(BaseModel):
    id: int
    registration: str
    type: Optional[str] = None
    model: Optional[str] = None

    class Config:
        from_attributes = True


class OccurrenceInvestigationBrief(BaseModel):
    id: int
    # stored value as-is; unknown stages still list
    stage: str
    lead_investigator_id: Optional[int] = None
    lead_investigator: Optional[ProfileBrief] = None

    class Config:
        from_attributes = True


class OccurrenceCreate(BaseModel):
    """
    Report submission. `reporter_id` is taken from the session on the server side.
    """
    title: constr(strip_whitespace=True, min_length=3, max_length=255)
    description: Optional[str] = None
    occurrence_date: Optional[datetime] = Field(
        default=None, description="When the occurrence happened (if known)"
    )
    location: Optional[constr(strip_whitespace=True, max_length=255)] = None
    severity: Severity = Severity.LOW
    occurrence_type: Optional[constr(strip_whitespace=True, max_length=50)] = None
    aircraft_id: Optional[conint(ge=1)] = None
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional extended details: flight_phase, weather_conditions, narrative, ...",
    )


class OccurrenceUpdate(BaseModel):
    """
    Partial update payload. All fields optional.
    """
    title: Optional[constr(strip_whitespace=True, min_length=3, max_length=255)] = None
    description: Optional[str] = None
    occurrence_date: Optional[datetime] = None
    location: Optional[constr(strip_whitespace=True, max_length=255)] = None
    status: Optional[OccurrenceStatus] = None
    severity: Optional[Severity] = None
    occurrence_type: Optional[constr(strip_whitespace=True, max_length=50)] = None
    aircraft_id: Optional[conint(ge=1)] = None
    assigned_to: Optional[conint(ge=1)] = None


class OccurrenceOut(BaseModel):
    id: int
    occurrence_number: str
    title: str
    description: Optional[str] = None
    occurrence_date: Optional[datetime] = None
    location: Optional[str] = None
    status: OccurrenceStatus
    severity: Severity
    occurrence_type: Optional[str] = None
    reporter_id: Optional[int] = None
    assigned_to: Optional[int] = None
    aircraft_id: Optional[int] = None
    reporter: Optional[ProfileBrief] = None
    assigned_user: Optional[ProfileBrief] = None
    aircraft: Optional[AircraftBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OccurrenceListItem(OccurrenceOut):
    investigations: List[OccurrenceInvestigationBrief] = []


class OccurrenceDetailsOut(BaseModel):
    id: int
    occurrence_id: int
    flight_phase: Optional[str] = None
    weather_conditions: Optional[str] = None
    narrative: Optional[str] = None
    details_json: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class OccurrenceListOut(BaseModel):
    occurrences: List[OccurrenceListItem]
    pagination: Pagination
    stats: Dict[str, int]


class OccurrenceEnvelope(BaseModel):
    occurrence: OccurrenceOut
