import pytest

from src.class_attendance.class_attendance.container import wire_services
from src.class_attendance.class_attendance.core.enums import AlertChannel
from src.class_attendance.class_attendance.main import create_app
from tests.fakes import CLASS_ID, TEACHER_ID, enroll


@pytest.fixture
def app(monkeypatch, roster, attendance_repo, reports_repo, sinks):
    monkeypatch.setenv("APP_ENV", "testing")
    container = wire_services(
        roster_repo=roster,
        attendance_repo=attendance_repo,
        reports_repo=reports_repo,
        sinks=sinks,
    )
    return create_app(container=container)


@pytest.fixture
def client(app):
    c = app.test_client()
    with c.session_transaction() as sess:
        sess["teacher_id"] = TEACHER_ID
        sess["name"] = "Ms. Rao"
    return c


def test_requires_login(app):
    resp = app.test_client().get(f"/api/classes/{CLASS_ID}/attendance?date=2026-03-02")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_attendance_round_trip(client, roster):
    a = enroll(roster, "1", "Asha")
    b = enroll(roster, "2", "Bilal")

    resp = client.get(f"/api/classes/{CLASS_ID}/attendance?date=2026-03-02")
    assert resp.status_code == 200
    sheet = resp.get_json()["data"]
    assert sheet["date"] == "2026-03-02"
    assert [r["status"] for r in sheet["records"]] == ["Present", "Present"]

    resp = client.post(
        f"/api/classes/{CLASS_ID}/attendance",
        json={"date": "2026-03-02", "records": [{"student_id": a, "status": "Absent"}, {"student_id": b, "status": "Late"}]},
    )
    assert resp.status_code == 200
    assert [r["status"] for r in resp.get_json()["data"]["records"]] == ["Absent", "Late"]

    resp = client.post(f"/api/classes/{CLASS_ID}/attendance/lock", json={"date": "2026-03-02"})
    assert resp.get_json()["data"]["is_locked"] is True

    resp = client.post(
        f"/api/classes/{CLASS_ID}/attendance",
        json={"date": "2026-03-02", "records": [{"student_id": a, "status": "Present"}]},
    )
    assert resp.status_code == 423
    assert resp.get_json()["error"] == "AttendanceLockedError"

    resp = client.get(f"/api/classes/{CLASS_ID}/attendance/history?start_date=2026-03-01&end_date=2026-03-31")
    assert len(resp.get_json()["data"]) == 1


def test_bad_status_is_400(client, roster):
    a = enroll(roster, "1", "Asha")

    resp = client.post(
        f"/api/classes/{CLASS_ID}/attendance",
        json={"date": "2026-03-02", "records": [{"student_id": a, "status": "Maybe"}]},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_unknown_class_is_404(client):
    resp = client.get("/api/classes/404/attendance?date=2026-03-02")

    assert resp.status_code == 404


def test_report_lifecycle(client, roster):
    enroll(roster, "1", "Asha")
    client.get(f"/api/classes/{CLASS_ID}/attendance?date=2026-03-02")

    resp = client.post(
        f"/api/classes/{CLASS_ID}/reports",
        json={"start_date": "2026-03-01", "end_date": "2026-03-31", "report_type": "Class"},
    )
    assert resp.status_code == 201
    report = resp.get_json()["data"]
    assert report["generated_by"] == TEACHER_ID
    assert report["data"]["class_info"]["teacher_name"] == "Ms. Rao"
    assert report["data"]["class_average"] == 100.0

    resp = client.post(f"/api/reports/{report['report_id']}/share", json={"share_via": "Email"})
    assert resp.get_json()["data"]["share_via"] == "Email"

    assert len(client.get(f"/api/classes/{CLASS_ID}/reports").get_json()["data"]) == 1
    assert client.delete(f"/api/reports/{report['report_id']}").status_code == 200
    assert client.get(f"/api/reports/{report['report_id']}").status_code == 404


def test_report_without_data_is_404(client, roster):
    enroll(roster, "1", "Asha")

    resp = client.post(
        f"/api/classes/{CLASS_ID}/reports",
        json={"start_date": "2026-03-01", "end_date": "2026-03-31", "report_type": "Class"},
    )

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NoDataError"


def test_low_attendance_alerts(client, roster, sinks):
    a = enroll(roster, "1", "Asha", parent_email="parent@example.com")
    client.get(f"/api/classes/{CLASS_ID}/attendance?date=2026-03-02")
    client.post(
        f"/api/classes/{CLASS_ID}/attendance",
        json={"date": "2026-03-02", "records": [{"student_id": a, "status": "Absent"}]},
    )

    listing = client.get(f"/api/classes/{CLASS_ID}/low-attendance?threshold=80").get_json()["data"]
    assert listing["count"] == 1

    resp = client.post(f"/api/classes/{CLASS_ID}/alerts/email", json={})
    outcomes = resp.get_json()["data"]
    assert outcomes[0]["status"] == "sent"
    assert outcomes[0]["target"] == "parent@example.com"
    assert len(sinks[AlertChannel.EMAIL].sent) == 1


def test_malformed_alert_student_ids_are_400(client, roster):
    enroll(roster, "1", "Asha", parent_phone="9111111111")

    resp = client.post(f"/api/classes/{CLASS_ID}/alerts/sms", json={"student_ids": ["abc"]})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"
