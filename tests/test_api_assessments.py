from datetime import date

from aviasafe.models.audit_event import AuditEvent


def _url(occurrence):
    return f"/api/occurrences/{occurrence['id']}/assessment"


def test_first_read_creates_pending_assessment(auth_client, occurrence, db):
    first = auth_client.get(_url(occurrence))
    assert first.status_code == 200
    assessment = first.json()["assessment"]
    assert assessment["status"] == "pending_assessment"
    assert assessment["cfi_approved"] is False
    assert assessment["occurrence_id"] == occurrence["id"]

    second = auth_client.get(_url(occurrence)).json()["assessment"]
    assert second["id"] == assessment["id"]

    created_events = (
        db.query(AuditEvent)
        .filter(AuditEvent.action == "ASSESSMENT_CREATED", AuditEvent.entity_id == occurrence["id"])
        .count()
    )
    assert created_events == 1


def test_assessment_for_missing_occurrence(auth_client):
    resp = auth_client.get("/api/occurrences/999/assessment")
    assert resp.status_code == 404


def test_assigning_investigator_stamps_date(auth_client, occurrence, investigator):
    resp = auth_client.patch(
        _url(occurrence),
        json={"assigned_investigator_id": investigator.id, "completion_due_date": "2030-01-31"},
    )
    assert resp.status_code == 200
    body = resp.json()["assessment"]
    assert body["assigned_investigator_id"] == investigator.id
    assert body["assigned_investigator"]["full_name"] == "Ana Investigator"
    assert body["date_assigned"] == date.today().isoformat()
    assert body["completion_due_date"] == "2030-01-31"


def test_assigning_non_investigator_is_rejected(auth_client, occurrence, reporter):
    resp = auth_client.patch(_url(occurrence), json={"assigned_investigator_id": reporter.id})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Assigned investigator not found"


def test_cfi_approval_and_status_change(auth_client, occurrence):
    auth_client.get(_url(occurrence))
    resp = auth_client.patch(
        _url(occurrence),
        json={
            "status": "valid",
            "incident_classification": "human_factors",
            "reasoning": "Confirmed by ATC recording",
            "cfi_approved": True,
        },
    )
    body = resp.json()["assessment"]
    assert body["status"] == "valid"
    assert body["incident_classification"] == "human_factors"
    assert body["cfi_approval_date"] == date.today().isoformat()
    assert body["assessment_date"] is not None

    revoked = auth_client.patch(_url(occurrence), json={"cfi_approved": False}).json()["assessment"]
    assert revoked["cfi_approved"] is False
    assert revoked["cfi_approval_date"] is None


def test_patch_without_prior_read_creates_record(auth_client, occurrence):
    resp = auth_client.patch(_url(occurrence), json={"reasoning": "Initial triage"})
    assert resp.status_code == 200
    assert resp.json()["assessment"]["reasoning"] == "Initial triage"
    assert resp.json()["assessment"]["status"] == "pending_assessment"


def test_invalid_status_value(auth_client, occurrence):
    resp = auth_client.patch(_url(occurrence), json={"status": "maybe"})
    assert resp.status_code == 422


def test_null_status_or_approval_is_a_400(auth_client, occurrence):
    auth_client.get(_url(occurrence))
    resp = auth_client.patch(_url(occurrence), json={"status": None})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Required field cannot be null", "fields": ["status"]}

    resp = auth_client.patch(_url(occurrence), json={"cfi_approved": None})
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["cfi_approved"]

    body = auth_client.get(_url(occurrence)).json()["assessment"]
    assert body["status"] == "pending_assessment"
    assert body["cfi_approved"] is False


def test_null_clears_optional_assessment_field(auth_client, occurrence):
    auth_client.patch(_url(occurrence), json={"reasoning": "Needs review"})
    resp = auth_client.patch(_url(occurrence), json={"reasoning": None})
    assert resp.status_code == 200
    assert resp.json()["assessment"]["reasoning"] is None
