import datetime as dt

import pytest
from fastapi.testclient import TestClient

from main import app, get_desk


@pytest.fixture
def client(desk):
    app.dependency_overrides[get_desk] = lambda: desk
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_student_and_attendance_flow(client):
    sid = client.post("/students", json={"name": "Asha", "batch": "A"}).json()["id"]
    client.post("/students", json={"name": "Ben", "batch": "B"})
    assert [s["name"] for s in client.get("/students", params={"batch": "A"}).json()] == ["Asha"]

    for status in ("Present", "Late"):
        res = client.post("/attendance", json={"studentId": sid, "date": "2024-01-01", "status": status})
        assert res.json()["marked"] is True

    body = client.get("/attendance", params={"date": "2024-01-01"}).json()
    assert body["counts"] == {"Present": 0, "Absent": 0, "Late": 1}
    roster = body["roster"]
    assert [(r["student"]["name"], r["status"]) for r in roster] == [("Asha", "Late"), ("Ben", None)]


def test_rejected_add_returns_null_id(client):
    assert client.post("/students", json={"name": "  ", "batch": "A"}).json() == {"id": None}
    assert client.get("/students").json() == []


def test_tests_split_and_summary(client):
    today = dt.date.today()
    client.post("/tests", json={"subject": "Algebra", "date": today.isoformat(), "totalMarks": 50})
    client.post("/tests", json={"subject": "History", "date": (today - dt.timedelta(days=3)).isoformat()})
    body = client.get("/tests").json()
    assert [t["subject"] for t in body["upcoming"]] == ["Algebra"]
    assert body["upcoming"][0]["totalMarks"] == 50
    assert [t["subject"] for t in body["completed"]] == ["History"]
    assert client.get("/summary").json()["average_score"] == "N/A"


def test_doubt_toggle(client):
    sid = client.post("/students", json={"name": "Asha", "batch": "C"}).json()["id"]
    did = client.post("/doubts", json={"studentId": sid, "subject": "Physics", "doubtText": "Why?"}).json()["id"]
    assert client.post(f"/doubts/{did}/toggle").json() == {"toggled": True}
    resolved = client.get("/doubts", params={"status": "Resolved"}).json()
    assert [(d["id"], d["studentName"]) for d in resolved] == [(did, "Asha")]
    assert client.get("/doubts", params={"status": "Open"}).json() == []
    assert client.post("/doubts/missing/toggle").json() == {"toggled": False}


def test_tab(client):
    assert client.put("/tab", json={"tab": "tests"}).json()["tab"] == "tests"
    assert client.put("/tab", json={"tab": "nope"}).json()["tab"] == "tests"


def test_schema(client):
    schema = client.get("/schema").json()
    assert set(schema) == {"Student", "AttendanceRecord", "Test", "Doubt"}
    assert "studentId" in schema["Doubt"]["properties"]


@pytest.mark.parametrize("total", ["NaN", "Infinity", "1e309"])
def test_non_finite_total_marks_rejected(client, total):
    body = '{"subject": "Algebra", "date": "2024-01-01", "totalMarks": %s}' % total
    res = client.post("/tests", content=body, headers={"Content-Type": "application/json"})
    assert res.status_code == 422
    assert client.get("/tests").json() == {"upcoming": [], "completed": []}


def test_attendance_counts_match_batch_roster(client):
    a = client.post("/students", json={"name": "Asha", "batch": "A"}).json()["id"]
    b = client.post("/students", json={"name": "Ben", "batch": "B"}).json()["id"]
    client.post("/attendance", json={"studentId": a, "date": "2024-01-01", "status": "Present"})
    client.post("/attendance", json={"studentId": b, "date": "2024-01-01", "status": "Absent"})
    body = client.get("/attendance", params={"date": "2024-01-01", "batch": "B"}).json()
    assert [r["student"]["name"] for r in body["roster"]] == ["Ben"]
    assert body["counts"] == {"Present": 0, "Absent": 1, "Late": 0}
