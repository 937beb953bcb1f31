from datetime import datetime

from aviasafe.services.attachment_policy import MAX_FILE_SIZE
from aviasafe.services.views import (
    detail_tabs,
    kanban_columns,
    progress_view,
    timeline,
    unplaced_item,
    validate_upload,
)


def test_kanban_places_each_record_in_its_stage_column():
    records = [
        {"id": 1, "stage": "analysis"},
        {"id": 2, "stage": "analysis"},
        {"id": 3, "stage": "completed"},
        {"id": 4, "stage": "unknown"},
    ]
    board = kanban_columns(records)
    by_stage = {c["stage"]: c for c in board["columns"]}
    assert [c["stage"] for c in board["columns"]][0] == "not_started"
    assert len(board["columns"]) == 6
    assert [r["id"] for r in by_stage["analysis"]["items"]] == [1, 2]
    assert by_stage["completed"]["count"] == 1
    assert by_stage["review"]["count"] == 0
    assert board["total"] == 3
    assert [r["id"] for r in board["unplaced"]] == [4]
    assert unplaced_item({"id": 4, "occurrence_id": 9, "stage": "unknown", "findings": "x"}) == {
        "id": 4,
        "occurrence_id": 9,
        "stage": "unknown",
    }


def test_progress_view_marks_past_and_current_steps():
    view = progress_view("analysis")
    assert view["current_index"] == 2
    assert view["progress_width"] == "40%"
    steps = view["steps"]
    assert [s["is_past"] for s in steps] == [True, True, False, False, False, False]
    assert [s["is_current"] for s in steps] == [False, False, True, False, False, False]
    assert steps[2]["label"] == "Analysis"


def test_progress_view_bounds():
    assert progress_view("not_started")["progress_width"] == "0%"
    assert progress_view("completed")["progress_width"] == "100%"


def test_detail_tabs_order():
    tabs = detail_tabs({"interviews": 2})
    assert [t["id"] for t in tabs] == [
        "overview",
        "findings",
        "interviews",
        "communications",
        "attachments",
        "timeline",
    ]
    assert tabs[2]["count"] == 2


def test_timeline_newest_first():
    inv = {
        "created_at": datetime(2024, 1, 1, 9),
        "started_at": datetime(2024, 1, 2, 9),
        "completed_at": None,
    }
    interviews = [{"id": 7, "date": datetime(2024, 1, 5), "interviewee": "Captain", "summary": "ok"}]
    comms = [{"id": 8, "date": datetime(2024, 1, 3), "channel": "email", "subject": None}]
    entries = timeline(inv, interviews, comms)
    assert [e["kind"] for e in entries] == ["interview", "communication", "started", "created"]
    assert entries[0]["title"] == "Interview with Captain"
    assert entries[1]["title"] == "Email communication"


def test_validate_upload():
    assert validate_upload("a.pdf", "application/pdf", 100) is None
    assert validate_upload(None, "application/pdf", 1) == {"error": "No file provided"}

    bad_type = validate_upload("a.exe", "application/x-msdownload", 100)
    assert bad_type["error"] == "File type not allowed"
    assert "application/pdf" in bad_type["allowedTypes"]

    too_big = validate_upload("a.pdf", "application/pdf", MAX_FILE_SIZE + 1)
    assert too_big["error"] == "File size exceeds the maximum allowed size (10 MB)"
    assert too_big["maxSize"] == MAX_FILE_SIZE
