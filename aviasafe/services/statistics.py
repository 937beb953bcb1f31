# aviasafe/services/statistics.py
from __future__ import annotations

import enum
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from aviasafe.services.stages import STAGES, OccurrenceStatus

OCCURRENCE_BUCKETS: Sequence[str] = tuple(s.value for s in OccurrenceStatus)
STAGE_BUCKETS: Sequence[str] = tuple(s.value for s in STAGES)


def _value(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        v = record.get(key)
    else:
        v = getattr(record, key, None)
    if isinstance(v, enum.Enum):
        return v.value
    return v


def _empty_distribution(buckets: Iterable[str]) -> Dict[str, int]:
    return {k: 0 for k in buckets}


def count_by(records: Sequence[Any], key: str, buckets: Iterable[str]) -> Dict[str, int]:
    """
    Count records per known bucket of `key`. Every bucket is present (0 when
    unused) and `total` is the number of input records, including records
    whose value is outside the known buckets.
    """
    dist = _empty_distribution(buckets)
    for r in records:
        v = _value(r, key)
        if v in dist:
            dist[v] += 1
    dist["total"] = len(records)
    return dist


def percent_of_total(count: int, total: int) -> float:
    """Share of total in percent; 0.0 when total is 0."""
    if not total:
        return 0.0
    return count / total * 100.0


def format_percent(count: int, total: int) -> str:
    return f"{percent_of_total(count, total):.0f}% of total"


def recent_counts(
    timestamps: Iterable[Optional[datetime]], now: Optional[datetime] = None
) -> Dict[str, int]:
    """
    this_week: created within the last 7 days.
    this_month: created since the first day of the current month.
    """
    now = now or datetime.utcnow()
    week_start = now - timedelta(days=7)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    week = month = 0
    for ts in timestamps:
        if ts is None:
            continue
        if ts.tzinfo is not None:
            ts = ts.replace(tzinfo=None)
        if week_start <= ts <= now:
            week += 1
        if month_start <= ts <= now:
            month += 1
    return {"this_week": week, "this_month": month}


def investigation_stats(rows: Sequence[Any], now: Optional[datetime] = None) -> Dict[str, int]:
    stats = count_by(rows, "stage", STAGE_BUCKETS)
    stats.update(recent_counts((_value(r, "created_at") for r in rows), now))
    return stats


def occurrence_distribution(rows: Sequence[Any]) -> Dict[str, int]:
    """Raw per-status counts plus total; the source of the status cards."""
    return count_by(rows, "status", OCCURRENCE_BUCKETS)


def occurrence_stats(rows: Sequence[Any], now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Stats block of the occurrence list. `in_progress` is the combined
    in_progress + under_investigation figure shown on the dashboard, so use
    `occurrence_distribution` for the per-status split.
    """
    stats = occurrence_distribution(rows)
    stats["pending"] = stats[OccurrenceStatus.NEW.value]
    stats["in_progress"] = (
        stats[OccurrenceStatus.IN_PROGRESS.value]
        + stats[OccurrenceStatus.UNDER_INVESTIGATION.value]
    )
    stats["completed"] = stats[OccurrenceStatus.CLOSED.value]
    stats.update(recent_counts((_value(r, "created_at") for r in rows), now))
    return stats


def stat_cards(stats: Mapping[str, int], buckets: Sequence[enum.Enum]) -> List[Dict[str, Any]]:
    """Dashboard card view models: one per bucket with count and share of total."""
    total = int(stats.get("total", 0) or 0)
    cards: List[Dict[str, Any]] = []
    for b in buckets:
        count = int(stats.get(b.value, 0) or 0)
        cards.append(
            {
                "key": b.value,
                "label": b.label,
                "count": count,
                "percent": round(percent_of_total(count, total), 1),
                "caption": format_percent(count, total),
            }
        )
    return cards
