from dataclasses import dataclass
from datetime import date

import pytest

from src.shift_attendance.shift_attendance.attendance.service import AttendanceProcessingService
from src.shift_attendance.shift_attendance.main import create_app

DAY = date(2024, 3, 1)


@dataclass
class FakeContainer:
    attendance_service: AttendanceProcessingService


@pytest.fixture
def client(world, at):
    world.add_shift(1, "General", "09:00", "18:00")
    world.add_shift(2, "Long", "09:00", "18:30")
    world.add_employee("EMP001", designation_id=3)
    world.allow("designation", 3, 1, 2)
    world.punches.add("EMP001", at("2024-03-01", "09:00"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "18:15"), "OUT")

    app = create_app(container=FakeContainer(world.service()), settings_module="config.testing")
    return app.test_client()


def test_process_returns_attendance_and_confusions(client):
    res = client.post("/api/attendance/process", json={"employee_number": "EMP001", "date": "2024-03-01"})

    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["attendance"]["status"] == "PRESENT"
    assert body["attendance"]["segments"][0]["shift_id"] is None
    assert len(body["confused"]) == 1


def test_process_error_codes(client):
    missing = client.post("/api/attendance/process", json={"employee_number": "GHOST", "date": "2024-03-01"})
    bad_date = client.post("/api/attendance/process", json={"employee_number": "EMP001", "date": "yesterday"})

    assert missing.status_code == 404
    assert missing.get_json()["success"] is False
    assert bad_date.status_code == 400


def test_get_attendance_after_processing(client):
    assert client.get("/api/attendance/EMP001/2024-03-01").status_code == 404

    client.post("/api/attendance/process", json={"employee_number": "EMP001", "date": "2024-03-01"})
    res = client.get("/api/attendance/EMP001/2024-03-01")

    assert res.status_code == 200
    assert res.get_json()["attendance"]["work_date"] == "2024-03-01"


def test_review_flow(client):
    client.post("/api/attendance/process", json={"employee_number": "EMP001", "date": "2024-03-01"})

    listed = client.get("/api/confused-shifts?status=pending").get_json()["data"]
    confused_id = listed[0]["confused_id"]

    assert client.post(f"/api/confused-shifts/{confused_id}/resolve", json={}).status_code == 400
    assert client.post(f"/api/confused-shifts/{confused_id}/resolve", json={"shift_id": "x"}).status_code == 400

    res = client.post(f"/api/confused-shifts/{confused_id}/resolve", json={"shift_id": 2, "reviewed_by": "hr"})

    assert res.status_code == 200
    assert res.get_json()["attendance"]["segments"][0]["shift_id"] == 2
    assert client.get("/api/confused-shifts?status=pending").get_json()["data"] == []
    assert client.post(f"/api/confused-shifts/{confused_id}/resolve", json={"shift_id": 1}).status_code == 400


def test_auto_assign(client):
    client.post("/api/attendance/process", json={"employee_number": "EMP001", "date": "2024-03-01"})

    res = client.post("/api/confused-shifts/1/auto-assign")

    assert res.status_code == 200
    assert res.get_json()["attendance"]["segments"][0]["match_method"] == "manual"
    assert client.post("/api/confused-shifts/99/auto-assign").status_code == 404


def test_reprocess_range(client):
    res = client.post(
        "/api/attendance/reprocess",
        json={"employee_numbers": ["EMP001"], "start_date": "2024-03-01", "end_date": "2024-03-03"},
    )

    assert res.get_json() == {"success": True, "processed": 3, "failed": 0, "errors": []}
    assert client.post("/api/attendance/reprocess", json={"employee_numbers": "EMP001"}).status_code == 400
    assert client.post(
        "/api/attendance/reprocess", json={"start_date": "2024-03-03", "end_date": "2024-03-01"}
    ).status_code == 400
