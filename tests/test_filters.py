from datetime import datetime

import pytest

from aviasafe.services.filters import (
    ListFilter,
    from_query,
    page_window,
    parse_date_bound,
    reset,
    to_api_params,
    to_query,
    to_query_string,
    total_pages,
    with_changes,
)


def test_only_present_fields_are_serialised():
    flt = ListFilter(stage="analysis", page=1)
    assert to_query(flt) == {"stage": "analysis"}
    assert to_query_string(flt) == "stage=analysis"


def test_empty_filter_serialises_to_empty_string():
    assert to_query_string(ListFilter()) == ""
    assert ListFilter().is_empty()


def test_round_trip_through_query_string():
    flt = ListFilter(stage="analysis", start_date="2024-01-01", page=3, limit=25)
    assert from_query("?" + to_query_string(flt)) == flt


def test_from_query_defaults_and_blank_values():
    flt = from_query("stage=&severity=high&page=abc&limit=0")
    assert flt.stage is None
    assert flt.severity == "high"
    assert flt.page == 1
    assert flt.limit == 10


def test_from_query_accepts_mapping_and_none():
    assert from_query(None) == ListFilter()
    assert from_query({"status": "new", "page": "2"}) == ListFilter(status="new", page=2)


def test_changing_a_filter_resets_page():
    flt = ListFilter(stage="analysis", page=4)
    changed = with_changes(flt, severity="high")
    assert changed.page == 1
    assert changed.severity == "high"
    assert changed.stage == "analysis"


def test_changing_only_the_page_keeps_it():
    assert with_changes(ListFilter(stage="review"), page=3).page == 3


def test_clearing_a_field_with_blank_value():
    assert with_changes(ListFilter(stage="review"), stage="").stage is None


def test_unknown_field_rejected():
    with pytest.raises(TypeError):
        with_changes(ListFilter(), colour="red")


def test_reset_keeps_limit():
    assert reset(ListFilter(stage="review", page=2, limit=50)) == ListFilter(limit=50)


def test_api_params_use_offset():
    params = to_api_params(ListFilter(status="closed", page=3, limit=10))
    assert params == {"status": "closed", "limit": "10", "offset": "20"}


def test_paging_helpers():
    assert total_pages(0, 10) == 0
    assert total_pages(21, 10) == 3
    assert page_window(1, 100, 10) == [1, 2, 3, 4, 5]
    assert page_window(10, 100, 10) == [6, 7, 8, 9, 10]
    assert page_window(5, 100, 10) == [3, 4, 5, 6, 7]
    assert page_window(1, 0, 10) == []


def test_date_only_end_bound_includes_the_whole_day():
    assert parse_date_bound("2024-03-01") == datetime(2024, 3, 1)
    assert parse_date_bound("2024-03-01", end=True) == datetime(2024, 3, 2)


def test_datetime_bounds_are_normalised_to_naive_utc():
    assert parse_date_bound("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10)
    assert parse_date_bound("2024-03-01T12:00:00+02:00") == datetime(2024, 3, 1, 10)


def test_bad_date_raises():
    assert parse_date_bound("") is None
    with pytest.raises(ValueError):
        parse_date_bound("not-a-date")
