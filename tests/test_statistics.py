from datetime import datetime, timedelta

from aviasafe.services.stages import STAGES, OccurrenceStatus
from aviasafe.services.statistics import (
    count_by,
    format_percent,
    investigation_stats,
    occurrence_distribution,
    occurrence_stats,
    percent_of_total,
    recent_counts,
    stat_cards,
)

NOW = datetime(2024, 6, 20, 12, 0, 0)


def test_count_by_fills_every_bucket_and_total():
    rows = [{"k": "A"}, {"k": "A"}, {"k": "B"}]
    assert count_by(rows, "k", ["A", "B", "C"]) == {"A": 2, "B": 1, "C": 0, "total": 3}


def test_unknown_values_count_towards_total_only():
    rows = [{"k": "A"}, {"k": "Z"}]
    assert count_by(rows, "k", ["A"]) == {"A": 1, "total": 2}


def test_empty_dataset_gives_zero_percent():
    stats = investigation_stats([], NOW)
    assert stats["total"] == 0
    assert all(stats[s.value] == 0 for s in STAGES)
    assert percent_of_total(0, 0) == 0.0
    assert format_percent(0, 0) == "0% of total"
    assert all(card["percent"] == 0.0 for card in stat_cards(stats, STAGES))


def test_recent_counts_week_and_month():
    stamps = [
        NOW - timedelta(days=1),
        NOW - timedelta(days=6),
        NOW - timedelta(days=10),  # same month, outside the week
        NOW - timedelta(days=40),
        None,
    ]
    assert recent_counts(stamps, NOW) == {"this_week": 2, "this_month": 3}


def test_occurrence_stats_aliases():
    rows = [
        {"status": "new", "created_at": NOW},
        {"status": "new", "created_at": NOW},
        {"status": "closed", "created_at": NOW - timedelta(days=60)},
    ]
    stats = occurrence_stats(rows, NOW)
    assert stats["total"] == 3
    assert stats["pending"] == 2
    assert stats["completed"] == 1
    assert stats["this_week"] == 2


def test_in_progress_alias_combines_active_statuses():
    rows = [{"status": "in_progress"}, {"status": "under_investigation"}, {"status": "new"}]
    stats = occurrence_stats(rows, NOW)
    assert stats["in_progress"] == 2
    assert stats["under_investigation"] == 1
    assert occurrence_distribution(rows)["in_progress"] == 1


def test_stat_cards_percentages():
    stats = {"new": 1, "closed": 3, "total": 4}
    cards = {c["key"]: c for c in stat_cards(stats, list(OccurrenceStatus))}
    assert cards["closed"]["percent"] == 75.0
    assert cards["closed"]["caption"] == "75% of total"
    assert cards["new"]["label"] == "New"
    assert cards["in_progress"]["count"] == 0
