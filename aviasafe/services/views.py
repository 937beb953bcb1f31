# aviasafe/services/views.py
"""
View models for the dashboard screens: the six-stage progress tracker,
the stage kanban board, investigation detail tabs and the timeline.
"""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from aviasafe.services.attachment_policy import (
    ALLOWED_FILE_TYPES,
    MAX_FILE_SIZE,
    format_size,
    is_allowed_size,
    is_allowed_type,
)
from aviasafe.services.stages import (
    STAGES,
    StageLike,
    parse_stage,
    progress_fraction,
)

DETAIL_TABS = (
    ("overview", "Overview"),
    ("findings", "Findings"),
    ("interviews", "Interviews"),
    ("communications", "Communications"),
    ("attachments", "Attachments"),
    ("timeline", "Timeline"),
)


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        v = record.get(key, default)
    else:
        v = getattr(record, key, default)
    if isinstance(v, enum.Enum):
        return v.value
    return v


# ---------------------------
# Progress tracker
# ---------------------------
def progress_view(stage: StageLike) -> Dict[str, Any]:
    current = parse_stage(stage)
    current_index = STAGES.index(current)
    fraction = progress_fraction(current_index)
    steps = [
        {
            "id": s.value,
            "label": s.label,
            "icon": s.icon,
            "index": i,
            "is_past": i < current_index,
            "is_current": i == current_index,
            "is_active": i <= current_index,
        }
        for i, s in enumerate(STAGES)
    ]
    return {
        "current_stage": current.value,
        "current_index": current_index,
        "progress": fraction,
        "progress_width": f"{fraction * 100:g}%",
        "steps": steps,
    }


# ---------------------------
# Kanban board
# ---------------------------
def kanban_columns(records: Sequence[Any], key: str = "stage") -> Dict[str, Any]:
    """
    Partition the records into one column per stage by equality on `key`.
    Records whose value is not a known stage end up in `unplaced`.
    """
    columns: List[Dict[str, Any]] = []
    placed = 0
    for s in STAGES:
        items = [r for r in records if _get(r, key) == s.value]
        placed += len(items)
        columns.append(
            {"stage": s.value, "label": s.label, "count": len(items), "items": items}
        )
    known = {s.value for s in STAGES}
    unplaced = [r for r in records if _get(r, key) not in known]
    return {"columns": columns, "total": placed, "unplaced": unplaced}


def unplaced_item(record: Any) -> Dict[str, Any]:
    """Minimal listing of a record that could not be placed on the board."""
    return {
        "id": _get(record, "id"),
        "occurrence_id": _get(record, "occurrence_id"),
        "stage": _get(record, "stage"),
    }


# ---------------------------
# Detail tabs
# ---------------------------
def detail_tabs(counts: Optional[Mapping[str, int]] = None) -> List[Dict[str, Any]]:
    counts = counts or {}
    return [
        {"id": tab_id, "label": label, "count": counts.get(tab_id)}
        for tab_id, label in DETAIL_TABS
    ]


# ---------------------------
# Timeline
# ---------------------------
def _as_datetime(v: Any) -> Optional[datetime]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.replace(tzinfo=None) if v.tzinfo else v
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day)
    return None


def timeline(
    investigation: Any,
    interviews: Iterable[Any] = (),
    communications: Iterable[Any] = (),
    events: Iterable[Any] = (),
) -> List[Dict[str, Any]]:
    """Merge dated entries of an investigation into one list, newest first."""
    entries: List[Dict[str, Any]] = []

    created = _as_datetime(_get(investigation, "created_at"))
    if created:
        entries.append({"at": created, "kind": "created", "title": "Investigation opened"})
    started = _as_datetime(_get(investigation, "started_at"))
    if started:
        entries.append({"at": started, "kind": "started", "title": "Investigation started"})
    completed = _as_datetime(_get(investigation, "completed_at"))
    if completed:
        entries.append(
            {"at": completed, "kind": "completed", "title": "Investigation completed"}
        )

    for iv in interviews:
        at = _as_datetime(_get(iv, "date"))
        if at:
            entries.append(
                {
                    "at": at,
                    "kind": "interview",
                    "title": f"Interview with {_get(iv, 'interviewee') or 'unknown'}",
                    "summary": _get(iv, "summary"),
                    "ref_id": _get(iv, "id"),
                }
            )

    for c in communications:
        at = _as_datetime(_get(c, "date"))
        if at:
            entries.append(
                {
                    "at": at,
                    "kind": "communication",
                    "title": _get(c, "subject") or f"{(_get(c, 'channel') or 'other').title()} communication",
                    "summary": _get(c, "summary"),
                    "ref_id": _get(c, "id"),
                }
            )

    for ev in events:
        at = _as_datetime(_get(ev, "created_at"))
        if at:
            entries.append(
                {
                    "at": at,
                    "kind": "audit",
                    "title": _get(ev, "action"),
                    "summary": _get(ev, "meta"),
                    "ref_id": _get(ev, "id"),
                }
            )

    entries.sort(key=lambda e: e["at"], reverse=True)
    return entries


# ---------------------------
# Upload validation
# ---------------------------
def validate_upload(file_name: Optional[str], mime: Optional[str], size: int) -> Optional[Dict[str, Any]]:
    """
    Validate a file before upload. Returns None when acceptable, otherwise an
    error payload shaped like the upload route's 400 response.
    """
    if not file_name:
        return {"error": "No file provided"}
    if not is_allowed_type(mime):
        return {"error": "File type not allowed", "allowedTypes": list(ALLOWED_FILE_TYPES)}
    if not is_allowed_size(size):
        return {
            "error": f"File size exceeds the maximum allowed size ({format_size(MAX_FILE_SIZE)})",
            "maxSize": MAX_FILE_SIZE,
        }
    return None
