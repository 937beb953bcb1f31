from datetime import datetime


def test_create_occurrence_assigns_number_and_reporter(auth_client, reporter):
    resp = auth_client.post(
        "/api/occurrences",
        json={
            "title": "Runway incursion at holding point",
            "severity": "critical",
            "location": "LDZA",
            "details": {"flight_phase": "taxi", "atc_frequency": "118.3"},
        },
    )
    assert resp.status_code == 201
    occ = resp.json()["occurrence"]
    assert occ["occurrence_number"] == f"OCC-{datetime.utcnow().year}-0001"
    assert occ["status"] == "new"
    assert occ["severity"] == "critical"
    assert occ["reporter_id"] == reporter.id

    detail = auth_client.get(f"/api/occurrences/{occ['id']}").json()
    assert detail["details"]["flight_phase"] == "taxi"
    assert detail["details"]["details_json"] == {"atc_frequency": "118.3"}
    assert detail["investigation"] is None


def test_occurrence_numbers_are_sequential(auth_client):
    numbers = [
        auth_client.post("/api/occurrences", json={"title": f"Report {i}"}).json()["occurrence"]["occurrence_number"]
        for i in range(3)
    ]
    assert [n[-4:] for n in numbers] == ["0001", "0002", "0003"]


def test_create_validation_error_shape(auth_client):
    resp = auth_client.post("/api/occurrences", json={"title": "x", "severity": "extreme"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Validation failed."
    assert body["details"]


def test_unknown_aircraft_rejected(auth_client):
    resp = auth_client.post("/api/occurrences", json={"title": "Hard landing", "aircraft_id": 999})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Aircraft not found"


def test_list_paginates_filters_and_reports_stats(auth_client):
    for i in range(5):
        auth_client.post(
            "/api/occurrences",
            json={"title": f"Report {i}", "severity": "high" if i % 2 else "low"},
        )

    page = auth_client.get("/api/occurrences", params={"limit": 2, "offset": 2}).json()
    assert len(page["occurrences"]) == 2
    assert page["pagination"] == {"total": 5, "limit": 2, "offset": 2}
    assert page["stats"]["total"] == 5
    assert page["stats"]["new"] == 5
    assert page["stats"]["pending"] == 5
    assert page["stats"]["this_week"] == 5

    high = auth_client.get("/api/occurrences", params={"severity": "high"}).json()
    assert high["pagination"]["total"] == 2
    assert {o["severity"] for o in high["occurrences"]} == {"high"}


def test_list_newest_first(auth_client):
    first = auth_client.post("/api/occurrences", json={"title": "First report"}).json()["occurrence"]
    second = auth_client.post("/api/occurrences", json={"title": "Second report"}).json()["occurrence"]
    ids = [o["id"] for o in auth_client.get("/api/occurrences").json()["occurrences"]]
    assert ids == [second["id"], first["id"]]


def test_date_filter_on_occurrence_date_with_inclusive_end(auth_client):
    auth_client.post(
        "/api/occurrences",
        json={"title": "Evening report", "occurrence_date": "2024-05-10T21:30:00"},
    )
    auth_client.post("/api/occurrences", json={"title": "Undated report"})
    day = "2024-05-10"

    hit = auth_client.get("/api/occurrences", params={"startDate": day, "endDate": day}).json()
    assert hit["pagination"]["total"] == 1

    miss = auth_client.get("/api/occurrences", params={"endDate": "2000-01-01"}).json()
    assert miss["pagination"]["total"] == 0


def test_invalid_date_range(auth_client):
    resp = auth_client.get("/api/occurrences", params={"startDate": "yesterday"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid date range"


def test_get_missing_occurrence(auth_client):
    resp = auth_client.get("/api/occurrences/4242")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Occurrence not found"}


def test_patch_occurrence(auth_client, occurrence):
    resp = auth_client.patch(
        f"/api/occurrences/{occurrence['id']}",
        json={"status": "in_progress", "location": "LDSP"},
    )
    assert resp.status_code == 200
    occ = resp.json()["occurrence"]
    assert occ["status"] == "in_progress"
    assert occ["location"] == "LDSP"
    assert occ["title"] == occurrence["title"]


def test_patch_rejects_null_for_required_columns(auth_client, occurrence):
    url = f"/api/occurrences/{occurrence['id']}"
    resp = auth_client.patch(url, json={"status": None, "severity": None})
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Required field cannot be null",
        "fields": ["severity", "status"],
    }

    resp = auth_client.patch(url, json={"title": None})
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["title"]

    occ = auth_client.get(url).json()["occurrence"]
    assert occ["status"] == "new"
    assert occ["severity"] == "high"


def test_patch_clears_optional_field(auth_client, occurrence):
    url = f"/api/occurrences/{occurrence['id']}"
    auth_client.patch(url, json={"location": "LDZA"})
    resp = auth_client.patch(url, json={"location": None})
    assert resp.status_code == 200
    assert resp.json()["occurrence"]["location"] is None


def test_patch_unknown_assignee_rejected(auth_client, occurrence, investigator):
    url = f"/api/occurrences/{occurrence['id']}"
    resp = auth_client.patch(url, json={"assigned_to": 9999})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Assigned user not found"}
    assert auth_client.get(url).json()["occurrence"]["assigned_to"] is None

    resp = auth_client.patch(url, json={"assigned_to": investigator.id})
    assert resp.status_code == 200
    assert resp.json()["occurrence"]["assigned_user"]["id"] == investigator.id


def test_list_stats_combine_in_progress_statuses(auth_client):
    ids = [
        auth_client.post("/api/occurrences", json={"title": f"Report {n}"}).json()["occurrence"]["id"]
        for n in range(3)
    ]
    auth_client.patch(f"/api/occurrences/{ids[0]}", json={"status": "in_progress"})
    auth_client.patch(f"/api/occurrences/{ids[1]}", json={"status": "under_investigation"})

    stats = auth_client.get("/api/occurrences").json()["stats"]
    assert stats["in_progress"] == 2
    assert stats["under_investigation"] == 1
    assert stats["pending"] == 1

    cards = {
        c["key"]: c
        for c in auth_client.get("/api/dashboard/summary").json()["occurrences"]["cards"]
    }
    assert cards["in_progress"]["count"] == 1
    assert cards["under_investigation"]["count"] == 1


def test_dashboard_summary(auth_client, occurrence):
    body = auth_client.get("/api/dashboard/summary").json()
    assert body["occurrences"]["stats"]["total"] == 1
    cards = {c["key"]: c for c in body["occurrences"]["cards"]}
    assert cards["new"]["percent"] == 100.0
    inv_cards = body["investigations"]["cards"]
    assert len(inv_cards) == 6
    assert all(c["percent"] == 0.0 for c in inv_cards)


def test_investigators_lists_only_investigator_roles(auth_client, make_profile):
    make_profile("investigator", full_name="Zed")
    make_profile("safety_officer", full_name="Ada")
    make_profile("admin", full_name="Root")
    names = [p["full_name"] for p in auth_client.get("/api/investigators").json()["investigators"]]
    assert names == ["Ada", "Zed"]
