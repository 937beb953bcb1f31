# aviasafe/services/filters.py
"""
List filter state <-> query-string mapping used by the occurrence and
investigation list views.

Only present (non-empty) fields are serialised; absent fields are omitted
entirely instead of being sent as empty strings. Changing any filter resets
the page to 1.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# attribute name -> query-string key
_WIRE_KEYS: Dict[str, str] = {
    "stage": "stage",
    "status": "status",
    "severity": "severity",
    "start_date": "startDate",
    "end_date": "endDate",
}

_PAGINATOR_WINDOW = 5


@dataclass(frozen=True)
class ListFilter:
    stage: Optional[str] = None
    status: Optional[str] = None
    severity: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def is_empty(self) -> bool:
        return not any(getattr(self, attr) for attr in _WIRE_KEYS)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _to_int(raw: Optional[str], default: int) -> int:
    if not _present(raw):
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def to_query(flt: ListFilter) -> Dict[str, str]:
    """Serialise a filter to query parameters, omitting absent fields and default paging."""
    out: Dict[str, str] = {}
    for attr, key in _WIRE_KEYS.items():
        value = getattr(flt, attr)
        if _present(value):
            out[key] = str(value).strip()
    if flt.page != DEFAULT_PAGE:
        out["page"] = str(flt.page)
    if flt.limit != DEFAULT_LIMIT:
        out["limit"] = str(flt.limit)
    return out


def to_query_string(flt: ListFilter) -> str:
    return urlencode(to_query(flt))


def from_query(source: Union[str, Mapping[str, Any], None]) -> ListFilter:
    """
    Build a filter from a query string (leading '?' allowed) or a mapping.
    Empty values are treated as absent; page/limit default to 1/10.
    """
    if source is None:
        params: Mapping[str, Any] = {}
    elif isinstance(source, str):
        params = dict(parse_qsl(source.lstrip("?"), keep_blank_values=True))
    else:
        params = source

    values: Dict[str, Any] = {}
    for attr, key in _WIRE_KEYS.items():
        raw = params.get(key)
        values[attr] = str(raw).strip() if _present(raw) else None

    return ListFilter(
        page=_to_int(params.get("page"), DEFAULT_PAGE),
        limit=_to_int(params.get("limit"), DEFAULT_LIMIT),
        **values,
    )


def with_changes(flt: ListFilter, **changes: Any) -> ListFilter:
    """
    Return a new filter with the given fields replaced.
    Any change other than the page itself resets page to 1.
    """
    known = {f.name for f in fields(ListFilter)}
    unknown = set(changes) - known
    if unknown:
        raise TypeError(f"Unknown filter field(s): {', '.join(sorted(unknown))}")

    normalised = {
        k: (v if k in ("page", "limit") or _present(v) else None)
        for k, v in changes.items()
    }
    if any(k != "page" for k in normalised):
        normalised["page"] = DEFAULT_PAGE
    return replace(flt, **normalised)


def reset(flt: ListFilter) -> ListFilter:
    """Clear every filter, keep the page size."""
    return ListFilter(limit=flt.limit)


def to_api_params(flt: ListFilter) -> Dict[str, str]:
    """Parameters sent to the list endpoints: filters plus limit/offset."""
    out = {k: v for k, v in to_query(flt).items() if k not in ("page", "limit")}
    out["limit"] = str(flt.limit)
    out["offset"] = str(flt.offset)
    return out


def total_pages(total: int, limit: int) -> int:
    if limit <= 0 or total <= 0:
        return 0
    return math.ceil(total / limit)


def page_window(page: int, total: int, limit: int) -> List[int]:
    """Page numbers shown by the paginator: up to five pages around the current one."""
    pages = total_pages(total, limit)
    if pages == 0:
        return []
    start = max(1, page - 2)
    end = min(pages, start + _PAGINATOR_WINDOW - 1)
    start = max(1, end - _PAGINATOR_WINDOW + 1)
    return list(range(start, end + 1))


def parse_date_bound(value: Optional[str], *, end: bool = False) -> Optional[datetime]:
    """
    Parse a startDate/endDate value (ISO date or datetime, trailing Z allowed).
    End bounds are returned exclusive: a date-only end becomes the start of
    the following day so the end date itself is included.
    Raises ValueError on malformed input.
    """
    if not _present(value):
        return None
    raw = str(value).strip()
    if len(raw) == 10:
        d = date.fromisoformat(raw)
        dt = datetime(d.year, d.month, d.day)
        return dt + timedelta(days=1) if end else dt
    dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt + timedelta(microseconds=1) if end else dt
