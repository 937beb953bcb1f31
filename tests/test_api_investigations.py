from datetime import date, timedelta

from aviasafe.crud.assessment import ensure_assessment, update_assessment
from aviasafe.models.audit_event import AuditEvent
from aviasafe.models.investigation import Investigation
from aviasafe.worker.scheduler import flag_overdue_assessments


def _open(client, occurrence, **extra):
    resp = client.post("/api/investigations", json={"occurrence_id": occurrence["id"], **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()["investigation"]


def test_open_investigation_moves_occurrence_under_investigation(auth_client, occurrence, investigator):
    inv = _open(auth_client, occurrence, lead_investigator_id=investigator.id)
    assert inv["stage"] == "not_started"
    assert inv["lead_investigator"]["id"] == investigator.id
    assert inv["occurrence"]["occurrence_number"] == occurrence["occurrence_number"]

    occ = auth_client.get(f"/api/occurrences/{occurrence['id']}").json()
    assert occ["occurrence"]["status"] == "under_investigation"
    assert occ["investigation"]["id"] == inv["id"]


def test_second_investigation_conflicts(auth_client, occurrence):
    _open(auth_client, occurrence)
    resp = auth_client.post("/api/investigations", json={"occurrence_id": occurrence["id"]})
    assert resp.status_code == 409
    assert resp.json() == {"error": "Occurrence already has an investigation"}


def test_open_for_missing_occurrence(auth_client):
    resp = auth_client.post("/api/investigations", json={"occurrence_id": 777})
    assert resp.status_code == 404


def test_stage_moves_stamp_timestamps(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    url = f"/api/investigations/{inv['id']}"

    analysis = auth_client.patch(url, json={"stage": "analysis"}).json()["investigation"]
    assert analysis["started_at"] is not None
    assert analysis["completed_at"] is None

    done = auth_client.patch(url, json={"stage": "completed"}).json()["investigation"]
    assert done["completed_at"] is not None
    assert done["started_at"] == analysis["started_at"]

    reopened = auth_client.patch(url, json={"stage": "review"}).json()["investigation"]
    assert reopened["completed_at"] is None


def test_unknown_stage_is_a_400(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    resp = auth_client.patch(f"/api/investigations/{inv['id']}", json={"stage": "archived"})
    assert resp.status_code == 400
    assert "Unknown investigation stage" in resp.json()["error"]

    listing = auth_client.get("/api/investigations", params={"stage": "archived"})
    assert listing.status_code == 400


def test_sections_update_independently(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    url = f"/api/investigations/{inv['id']}"
    auth_client.patch(url, json={"findings": "Flap asymmetry"})
    body = auth_client.patch(url, json={"root_causes": "Worn actuator"}).json()["investigation"]
    assert body["findings"] == "Flap asymmetry"
    assert body["root_causes"] == "Worn actuator"
    assert body["recommendations"] is None


def test_concurrent_edits_last_write_wins(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    url = f"/api/investigations/{inv['id']}"
    auth_client.patch(url, json={"findings": "Editor A"})
    auth_client.patch(url, json={"findings": "Editor B"})
    detail = auth_client.get(url).json()
    assert detail["investigation"]["findings"] == "Editor B"


def test_list_filter_and_stats(auth_client):
    occs = [
        auth_client.post("/api/occurrences", json={"title": f"Report {i}"}).json()["occurrence"]
        for i in range(3)
    ]
    invs = [_open(auth_client, o) for o in occs]
    auth_client.patch(f"/api/investigations/{invs[0]['id']}", json={"stage": "analysis"})

    body = auth_client.get("/api/investigations").json()
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["limit"] == 10
    assert body["stats"]["total"] == 3
    assert body["stats"]["analysis"] == 1
    assert body["stats"]["not_started"] == 2

    only = auth_client.get("/api/investigations", params={"stage": "analysis"}).json()
    assert [i["id"] for i in only["investigations"]] == [invs[0]["id"]]


def test_board_columns(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    auth_client.patch(f"/api/investigations/{inv['id']}", json={"stage": "review"})

    board = auth_client.get("/api/investigations/board").json()
    assert [c["stage"] for c in board["columns"]] == [
        "not_started",
        "data_collection",
        "analysis",
        "recommendations",
        "review",
        "completed",
    ]
    review = next(c for c in board["columns"] if c["stage"] == "review")
    assert [i["id"] for i in review["items"]] == [inv["id"]]
    assert board["total"] == 1


def test_progress_view(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    auth_client.patch(f"/api/investigations/{inv['id']}", json={"stage": "analysis"})
    view = auth_client.get(f"/api/investigations/{inv['id']}/progress").json()
    assert view["current_stage"] == "analysis"
    assert view["progress"] == 0.4
    assert view["progress_width"] == "40%"
    assert [s["is_active"] for s in view["steps"]] == [True, True, True, False, False, False]


def test_interviews_communications_and_timeline(auth_client, occurrence, investigator):
    inv = _open(auth_client, occurrence)
    base = f"/api/investigations/{inv['id']}"

    iv = auth_client.post(
        f"{base}/interviews",
        json={
            "date": "2024-02-01T10:00:00",
            "interviewee": "First Officer",
            "interviewer_id": investigator.id,
            "summary": "Confirmed checklist was interrupted",
        },
    )
    assert iv.status_code == 201
    assert iv.json()["interview"]["status"] == "scheduled"

    comm = auth_client.post(
        f"{base}/communications",
        json={"date": "2024-02-02T09:00:00", "channel": "phone", "subject": "Call with ATC"},
    )
    assert comm.status_code == 201

    assert len(auth_client.get(f"{base}/interviews").json()["interviews"]) == 1
    assert len(auth_client.get(f"{base}/communications").json()["communications"]) == 1

    detail = auth_client.get(base).json()
    tabs = {t["id"]: t["count"] for t in detail["tabs"]}
    assert tabs["interviews"] == 1
    assert tabs["communications"] == 1
    assert tabs["attachments"] == 0

    entries = auth_client.get(f"{base}/timeline").json()["timeline"]
    kinds = [e["kind"] for e in entries]
    assert "interview" in kinds
    assert "communication" in kinds
    assert "audit" in kinds
    assert entries == sorted(entries, key=lambda e: e["at"], reverse=True)


def test_interview_with_unknown_interviewer(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    base = f"/api/investigations/{inv['id']}"
    resp = auth_client.post(
        f"{base}/interviews",
        json={"date": "2024-02-01T10:00:00", "interviewee": "Captain", "interviewer_id": 9999},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Interviewer not found"}
    assert auth_client.get(f"{base}/interviews").json()["interviews"] == []


def test_bad_communication_channel(auth_client, occurrence):
    inv = _open(auth_client, occurrence)
    resp = auth_client.post(
        f"/api/investigations/{inv['id']}/communications",
        json={"date": "2024-02-02T09:00:00", "channel": "pigeon"},
    )
    assert resp.status_code == 422


def test_overdue_assessments_flagged_once(db, occurrence, reporter):
    assessment, _ = ensure_assessment(db, occurrence["id"], reporter.id)
    update_assessment(
        db, assessment, {"completion_due_date": date.today() - timedelta(days=1)}, reporter.id
    )

    assert flag_overdue_assessments(db) == 1
    assert flag_overdue_assessments(db) == 0
    events = (
        db.query(AuditEvent)
        .filter(AuditEvent.action == "ASSESSMENT_OVERDUE", AuditEvent.entity_id == occurrence["id"])
        .all()
    )
    assert len(events) == 1


def _store_stage(db, investigation_id, stage):
    db.query(Investigation).filter(Investigation.id == investigation_id).update({"stage": stage})
    db.commit()


def test_legacy_stage_is_unplaced_on_board_and_list(auth_client, occurrence, db):
    inv = _open(auth_client, occurrence)
    _store_stage(db, inv["id"], "legacy_stage")

    board = auth_client.get("/api/investigations/board")
    assert board.status_code == 200
    body = board.json()
    assert body["total"] == 0
    assert all(c["count"] == 0 for c in body["columns"])
    assert body["unplaced"] == [
        {"id": inv["id"], "occurrence_id": occurrence["id"], "stage": "legacy_stage"}
    ]

    listing = auth_client.get("/api/investigations")
    assert listing.status_code == 200
    assert listing.json()["investigations"] == []
    assert [i["id"] for i in listing.json()["unplaced"]] == [inv["id"]]
    assert listing.json()["pagination"]["total"] == 1

    occ = auth_client.get(f"/api/occurrences/{occurrence['id']}").json()
    assert occ["investigation"]["stage"] == "legacy_stage"
    assert auth_client.get("/api/occurrences").status_code == 200


def test_legacy_stage_detail_is_a_400_until_restaged(auth_client, occurrence, db):
    inv = _open(auth_client, occurrence)
    _store_stage(db, inv["id"], "legacy_stage")

    resp = auth_client.get(f"/api/investigations/{inv['id']}")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Unknown investigation stage: 'legacy_stage'"
    assert auth_client.get(f"/api/investigations/{inv['id']}/progress").status_code == 400

    resp = auth_client.patch(f"/api/investigations/{inv['id']}", json={"stage": "analysis"})
    assert resp.status_code == 200
    assert resp.json()["investigation"]["stage"] == "analysis"
