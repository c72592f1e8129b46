"""API tests for timesheet notes and due-date tracking endpoints."""

from __future__ import annotations

import os
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_caseload.db")

import pytest
from fastapi.testclient import TestClient

from caseload.backend.src.db import get_engine, session_scope
from caseload.backend.src.main import app
from caseload.backend.src.models import DueDateItem, ProgressReport
from caseload.backend.src.models.base import Base


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


STUDENTS = [
    {"id": "s1", "name": "Alice Smith", "grade": "3"},
    {"id": "s2", "name": "Bob Jones", "grade": "K"},
]


def test_retrospective_note_endpoint(client: TestClient) -> None:
    payload = {
        "students": STUDENTS,
        "school": {"name": "Lincoln Elementary", "teletherapy": False},
        "useSpecificTimes": True,
        "sessions": [
            {
                "id": "1",
                "studentId": "s1",
                "date": "2025-03-12T09:00:00",
                "endTime": "2025-03-12T09:30:00",
            },
            {
                "id": "2",
                "studentId": "s2",
                "date": "2025-03-12T10:00:00",
                "missedSession": True,
            },
        ],
        "communications": [{"id": "c1", "date": "2025-03-12T11:00:00", "studentId": "s2"}],
    }

    response = client.post("/api/timesheet-notes/retrospective", json=payload)

    assert response.status_code == 200
    note = response.json()["note"]
    assert note.startswith("Direct services:\n\nDirect Therapy:\nAS (3) 9:00 am-9:30 am\n")
    assert "Session Documentation:\nAS (3), BJ (K)" in note
    assert "Email Correspondence:\nBJ (K)" in note


def test_teletherapy_school_switches_to_offsite_labels(client: TestClient) -> None:
    payload = {
        "students": STUDENTS,
        "school": {"name": "Remote Academy", "teletherapy": True},
        "sessions": [{"id": "1", "studentId": "s1", "date": "2025-03-12T09:00:00Z"}],
    }

    note = client.post("/api/timesheet-notes/retrospective", json=payload).json()["note"]

    assert note.startswith("Offsite Direct Services:\n\nDirect Therapy:\nAS (3) 9:00 am\n")


def test_explicit_teletherapy_flag_overrides_school(client: TestClient) -> None:
    payload = {
        "students": STUDENTS,
        "school": {"name": "Remote Academy", "teletherapy": True},
        "isTeletherapy": False,
        "sessions": [{"id": "1", "studentId": "s1", "date": "2025-03-12T09:00:00"}],
    }

    note = client.post("/api/timesheet-notes/retrospective", json=payload).json()["note"]

    assert note.startswith("Direct services:\n\nDirect Therapy:\nAS (3)\n")


def test_prospective_note_endpoint(client: TestClient) -> None:
    payload = {
        "students": STUDENTS,
        "targetDate": "2025-03-12",
        "useSpecificTimes": True,
        "scheduledSessions": [
            {
                "id": "tpl",
                "studentIds": ["s1", "s2"],
                "startTime": "08:15",
                "endTime": "08:45",
                "recurrencePattern": "weekly",
                "dayOfWeek": [3],
                "startDate": "2025-01-06",
            }
        ],
    }

    response = client.post("/api/timesheet-notes/prospective", json=payload)

    assert response.status_code == 200
    assert response.json()["note"].startswith(
        "Direct services:\n\nDirect Therapy:\nAS (3) 8:15 am-8:45 am, BJ (K) 8:15 am-8:45 am\n"
    )


def test_unparseable_date_returns_422(client: TestClient) -> None:
    payload = {
        "students": STUDENTS,
        "sessions": [{"id": "1", "studentId": "s1", "date": "not-a-date"}],
    }

    response = client.post("/api/timesheet-notes/retrospective", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["field"] == "date"
    assert body["value"] == "not-a-date"


def test_due_item_crud_lifecycle(client: TestClient) -> None:
    past_due = (date.today() - timedelta(days=3)).isoformat()

    created = client.post(
        "/api/due-date-items",
        json={"title": "Annual IEP", "due_date": past_due, "student_id": "s1"},
    )
    assert created.status_code == 201
    item = created.json()
    assert item["status"] == "overdue"

    completed = client.post(f"/api/due-date-items/{item['id']}/complete").json()
    assert completed["status"] == "completed"
    assert completed["completed_date"] is not None

    reopened = client.post(f"/api/due-date-items/{item['id']}/uncomplete").json()
    assert reopened["status"] == "overdue"
    assert reopened["completed_date"] is None

    moved = client.put(
        f"/api/due-date-items/{item['id']}",
        json={"due_date": (date.today() + timedelta(days=5)).isoformat()},
    ).json()
    assert moved["status"] == "pending"

    assert client.delete(f"/api/due-date-items/{item['id']}").status_code == 204
    assert client.get(f"/api/due-date-items/{item['id']}").status_code == 404


def test_blank_title_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/due-date-items",
        json={"title": "   ", "due_date": date.today().isoformat()},
    )

    assert response.status_code == 422


def test_list_endpoints_return_recomputed_statuses(client: TestClient) -> None:
    today = date.today()
    with session_scope() as session:
        session.add_all(
            [
                DueDateItem(title="Stale", due_date=today - timedelta(days=1), status="pending"),
                DueDateItem(title="Soon", due_date=today + timedelta(days=2), status="pending"),
                DueDateItem(title="Later", due_date=today + timedelta(days=60), status="pending"),
            ]
        )

    overdue = client.get("/api/due-date-items", params={"status": "overdue"}).json()
    upcoming = client.get("/api/due-date-items/upcoming").json()
    next_week = client.get("/api/due-date-items/upcoming", params={"days": 7}).json()

    assert [item["title"] for item in overdue] == ["Stale"]
    assert [item["title"] for item in upcoming] == ["Soon"]
    assert [item["title"] for item in next_week] == ["Soon"]


def test_progress_report_endpoints(client: TestClient) -> None:
    with session_scope() as session:
        report = ProgressReport(
            student_id="s1",
            due_date=date.today() - timedelta(days=1),
            status="pending",
        )
        session.add(report)

    listed = client.get("/api/progress-reports", params={"studentId": "s1"}).json()
    assert listed[0]["status"] == "overdue"

    completed = client.post(f"/api/progress-reports/{report.id}/complete").json()
    assert completed["status"] == "completed"

    fetched = client.get(f"/api/progress-reports/{report.id}").json()
    assert fetched["status"] == "completed"
    assert client.get("/api/progress-reports/999").status_code == 404


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/api/health/live").json() == {"status": "live"}
    assert client.get("/api/health/ready").json() == {"status": "ready"}
    assert client.get("/api/metrics").status_code == 200


@pytest.mark.parametrize("field", ["title", "due_date"])
def test_update_rejects_null_required_field(client: TestClient, field: str) -> None:
    created = client.post(
        "/api/due-date-items",
        json={"title": "Annual IEP", "due_date": date.today().isoformat()},
    ).json()

    response = client.put(f"/api/due-date-items/{created['id']}", json={field: None})

    assert response.status_code == 422
    fetched = client.get(f"/api/due-date-items/{created['id']}").json()
    assert fetched["title"] == "Annual IEP"
    assert fetched["due_date"] == created["due_date"]


def test_update_can_clear_optional_fields(client: TestClient) -> None:
    created = client.post(
        "/api/due-date-items",
        json={
            "title": "Annual IEP",
            "due_date": date.today().isoformat(),
            "description": "Bring draft goals",
            "student_id": "s1",
        },
    ).json()

    response = client.put(
        f"/api/due-date-items/{created['id']}",
        json={"description": None, "student_id": None},
    )

    assert response.status_code == 200
    assert response.json()["description"] is None
    assert response.json()["student_id"] is None


def test_update_rejects_blank_title(client: TestClient) -> None:
    created = client.post(
        "/api/due-date-items",
        json={"title": "Annual IEP", "due_date": date.today().isoformat()},
    ).json()

    response = client.put(f"/api/due-date-items/{created['id']}", json={"title": "  "})

    assert response.status_code == 422


def test_progress_report_crud_lifecycle(client: TestClient) -> None:
    today = date.today()

    created = client.post(
        "/api/progress-reports",
        json={
            "student_id": "s1",
            "due_date": (today - timedelta(days=2)).isoformat(),
            "report_type": "annual",
        },
    )
    assert created.status_code == 201
    report = created.json()
    assert report["status"] == "overdue"
    assert report["report_type"] == "annual"

    completed = client.put(
        f"/api/progress-reports/{report['id']}", json={"status": "completed"}
    ).json()
    assert completed["status"] == "completed"
    assert completed["completed_date"] is not None

    moved = client.put(
        f"/api/progress-reports/{report['id']}",
        json={"status": "pending", "due_date": (today + timedelta(days=10)).isoformat()},
    ).json()
    assert moved["status"] == "pending"
    assert moved["completed_date"] is None

    upcoming = client.get("/api/progress-reports/upcoming", params={"days": 14}).json()
    assert [item["id"] for item in upcoming] == [report["id"]]

    assert client.put(
        f"/api/progress-reports/{report['id']}", json={"student_id": None}
    ).status_code == 422

    assert client.delete(f"/api/progress-reports/{report['id']}").status_code == 204
    assert client.get(f"/api/progress-reports/{report['id']}").status_code == 404


def test_progress_report_accepts_scheduling_status(client: TestClient) -> None:
    created = client.post(
        "/api/progress-reports",
        json={
            "student_id": "s2",
            "due_date": (date.today() - timedelta(days=5)).isoformat(),
            "status": "scheduled",
        },
    ).json()

    assert created["status"] == "scheduled"
    assert client.get(f"/api/progress-reports/{created['id']}").json()["status"] == "scheduled"


def test_progress_report_rejects_unknown_status(client: TestClient) -> None:
    response = client.post(
        "/api/progress-reports",
        json={"student_id": "s2", "due_date": date.today().isoformat(), "status": "archived"},
    )

    assert response.status_code == 422
