# aviasafe/services/stages.py
"""
Investigation stage model and the other closed workflow enums.

Stages are ordered; the order drives the progress tracker, the kanban
columns and the stage statistics. Everything here is pure lookup logic.
"""
from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple, Union


class UnknownStageError(ValueError):
    """Raised when a value is not one of the six investigation stages."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown investigation stage: {value!r}")


class Stage(str, enum.Enum):
    NOT_STARTED = "not_started"
    DATA_COLLECTION = "data_collection"
    ANALYSIS = "analysis"
    RECOMMENDATIONS = "recommendations"
    REVIEW = "review"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]

    @property
    def icon(self) -> str:
        return _STAGE_ICONS[self]


STAGES: Tuple[Stage, ...] = tuple(Stage)
_STAGE_VALUES = frozenset(s.value for s in STAGES)

_STAGE_LABELS: Dict[Stage, str] = {
    Stage.NOT_STARTED: "Not Started",
    Stage.DATA_COLLECTION: "Data Collection",
    Stage.ANALYSIS: "Analysis",
    Stage.RECOMMENDATIONS: "Recommendations",
    Stage.REVIEW: "Review",
    Stage.COMPLETED: "Completed",
}

_STAGE_ICONS: Dict[Stage, str] = {
    Stage.NOT_STARTED: "file-text",
    Stage.DATA_COLLECTION: "clipboard",
    Stage.ANALYSIS: "alert-circle",
    Stage.RECOMMENDATIONS: "message-square",
    Stage.REVIEW: "book-open",
    Stage.COMPLETED: "check-circle",
}

StageLike = Union[Stage, str]


def parse_stage(value: StageLike) -> Stage:
    """Coerce a string (or Stage) into a Stage; raise UnknownStageError otherwise."""
    if isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except ValueError:
        raise UnknownStageError(value) from None


def is_known_stage(value: object) -> bool:
    return isinstance(value, Stage) or value in _STAGE_VALUES


def stage_index(stage: StageLike) -> int:
    return STAGES.index(parse_stage(stage))


def stage_label(stage: StageLike) -> str:
    return parse_stage(stage).label


def stage_icon(stage: StageLike) -> str:
    return parse_stage(stage).icon


def progress_fraction(index: int) -> float:
    """
    Fill fraction of the progress bar for a stage position:
    0.0 for the first stage, 1.0 for the last, linear in between.
    """
    last = len(STAGES) - 1
    if index < 0 or index > last:
        raise ValueError(f"Stage index out of range: {index}")
    if index == 0:
        return 0.0
    if index == last:
        return 1.0
    return index / last


def next_stage(stage: StageLike) -> Optional[Stage]:
    idx = stage_index(stage)
    if idx == len(STAGES) - 1:
        return None
    return STAGES[idx + 1]


# ---------------------------
# Occurrence / assessment enums
# ---------------------------
class OccurrenceStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    UNDER_INVESTIGATION = "under_investigation"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return {
            OccurrenceStatus.NEW: "New",
            OccurrenceStatus.IN_PROGRESS: "In Progress",
            OccurrenceStatus.UNDER_INVESTIGATION: "Under Investigation",
            OccurrenceStatus.CLOSED: "Closed",
        }[self]


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return {
            Severity.LOW: "Low",
            Severity.MEDIUM: "Medium",
            Severity.HIGH: "High",
            Severity.CRITICAL: "Critical",
        }[self]


class AssessmentStatus(str, enum.Enum):
    PENDING_ASSESSMENT = "pending_assessment"
    INVALID = "invalid"
    VALID = "valid"

    @property
    def label(self) -> str:
        return {
            AssessmentStatus.PENDING_ASSESSMENT: "Pending Assessment",
            AssessmentStatus.INVALID: "Invalid",
            AssessmentStatus.VALID: "Valid",
        }[self]


class IncidentClassification(str, enum.Enum):
    OPERATIONAL = "operational"
    TECHNICAL = "technical"
    ENVIRONMENTAL = "environmental"
    HUMAN_FACTORS = "human_factors"
    ORGANIZATIONAL = "organizational"
    OTHER = "other"

    @property
    def label(self) -> str:
        return {
            IncidentClassification.OPERATIONAL: "Operational",
            IncidentClassification.TECHNICAL: "Technical",
            IncidentClassification.ENVIRONMENTAL: "Environmental",
            IncidentClassification.HUMAN_FACTORS: "Human Factors",
            IncidentClassification.ORGANIZATIONAL: "Organizational",
            IncidentClassification.OTHER: "Other",
        }[self]


class ProfileRole(str, enum.Enum):
    ADMIN = "admin"
    INVESTIGATOR = "investigator"
    SAFETY_OFFICER = "safety_officer"
    REPORTER = "reporter"


# Roles that can be assigned to an occurrence/investigation
INVESTIGATOR_ROLES: Tuple[str, ...] = (
    ProfileRole.INVESTIGATOR.value,
    ProfileRole.SAFETY_OFFICER.value,
)
