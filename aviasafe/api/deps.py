# aviasafe/api/deps.py
"""Shared route helpers: date-range parsing and payload normalisation."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from fastapi import HTTPException
from pydantic import BaseModel

from aviasafe.services.filters import parse_date_bound


def date_bounds(
    start_date: Optional[str], end_date: Optional[str]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """(inclusive start, exclusive end) from startDate/endDate, or 400."""
    try:
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end=True)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date range")
    return start, end


def changes_from(payload: BaseModel, required: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Fields the client actually sent, with enum members reduced to their values.
    An explicit null for any of `required` (NOT NULL columns) is a 400.
    """
    data = payload.model_dump(exclude_unset=True)
    nulls = sorted(k for k in required if k in data and data[k] is None)
    if nulls:
        raise HTTPException(
            status_code=400,
            detail={"error": "Required field cannot be null", "fields": nulls},
        )
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in data.items()}
