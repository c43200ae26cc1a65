from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from src.api import schemas

from .fakes import OWNER, STRANGER, headers

BASE = "/api/v1/task"


def create_task(client, title="Buy milk", user_id=OWNER, **extra) -> dict:
    res = client.post(BASE, json={"title": title, **extra}, headers=headers(user_id))
    assert res.status_code == 201, res.text
    return res.json()["data"]


def assert_task_shape(task: dict):
    for key in ["task_id", "user_id", "title", "description", "due_date", "status", "created_at", "updated_at"]:
        assert key in task
    uuid.UUID(task["task_id"])
    assert task["status"] in ("Pendente", "Concluída")
    # Timestamps are ISO8601 strings parseable by datetime.fromisoformat
    datetime.fromisoformat(task["created_at"])
    datetime.fromisoformat(task["updated_at"])
    if task["due_date"] is not None:
        datetime.fromisoformat(task["due_date"])


def assert_error(res, status: int, kind: str) -> dict:
    assert res.status_code == status
    body = res.json()
    assert body["error"] == kind
    assert body["status"] == status
    assert isinstance(body["message"], str) and body["message"]
    return body


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["tasks"] == 0
        assert data["max_records"] == 5


class TestExampleScenario:
    def test_create_then_complete(self, client, clock):
        res = client.post(BASE, json={"title": "Buy milk"}, headers=headers())
        assert res.status_code == 201
        created = res.json()["data"]
        assert_task_shape(created)
        assert created["status"] == "Pendente"
        assert created["description"] is None
        assert created["due_date"] is None
        assert created["created_at"] == created["updated_at"]

        clock.advance(1)
        res = client.put(
            f"{BASE}/{created['task_id']}",
            json={"title": "Buy milk", "status": "Concluída"},
            headers=headers(),
        )
        assert res.status_code == 200
        updated = res.json()["data"]
        assert updated["status"] == "Concluída"
        assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(created["created_at"])


class TestCreate:
    def test_create_with_all_fields(self, client, clock):
        due = (clock.now + timedelta(days=2)).replace(microsecond=0)
        task = create_task(client, title="  Pay bills  ", description="Electricity", due_date=due.isoformat())
        assert task["title"] == "Pay bills"
        assert task["description"] == "Electricity"
        assert task["user_id"] == OWNER
        assert datetime.fromisoformat(task["due_date"]) == due

    def test_validation_error_envelope(self, client):
        res = client.post(BASE, json={"title": "ab", "description": "d" * 501}, headers=headers())
        body = assert_error(res, 400, "VALIDATION_ERROR")
        assert body["detail"] == [
            {"field": "title", "message": schemas.TITLE_TOO_SHORT},
            {"field": "description", "message": schemas.DESCRIPTION_TOO_LONG},
        ]

    def test_past_due_date_rejected(self, client, clock):
        res = client.post(
            BASE,
            json={"title": "Buy milk", "due_date": clock.now.isoformat()},
            headers=headers(),
        )
        body = assert_error(res, 400, "VALIDATION_ERROR")
        assert body["detail"] == [{"field": "due_date", "message": schemas.DUE_DATE_IN_PAST}]

    def test_missing_body(self, client):
        res = client.post(BASE, headers=headers())
        body = assert_error(res, 400, "VALIDATION_ERROR")
        assert body["detail"][0]["field"] == "body"

    def test_malformed_json(self, client):
        res = client.post(
            BASE,
            content=b"{not json",
            headers={**headers(), "Content-Type": "application/json"},
        )
        assert_error(res, 400, "VALIDATION_ERROR")

    def test_undecodable_body(self, client):
        res = client.post(
            BASE,
            content=b'{"title": "\xff abc"}',
            headers={**headers(), "Content-Type": "application/json"},
        )
        assert_error(res, 400, "VALIDATION_ERROR")

    def test_missing_caller_header(self, client):
        res = client.post(BASE, json={"title": "Buy milk"})
        assert_error(res, 401, "UNAUTHENTICATED")

    def test_capacity_exceeded(self, client):
        for i in range(5):
            create_task(client, title=f"Task {i}")
        res = client.post(BASE, json={"title": "One too many"}, headers=headers())
        assert_error(res, 500, "CAPACITY_EXCEEDED")
        assert client.get("/").json()["tasks"] == 5


class TestFrameworkErrors:
    def test_unsupported_method(self, client):
        res = client.delete(f"{BASE}/{uuid.uuid4()}", headers=headers())
        assert_error(res, 405, "METHOD_NOT_ALLOWED")

    def test_unknown_route(self, client):
        res = client.get("/api/v1/nope", headers=headers())
        assert_error(res, 404, "NOT_FOUND")


class TestGet:
    def test_get_own_task(self, client):
        task = create_task(client)
        res = client.get(f"{BASE}/{task['task_id']}", headers=headers())
        assert res.status_code == 200
        assert res.json()["data"] == task

    def test_invalid_id(self, client):
        res = client.get(f"{BASE}/123", headers=headers())
        body = assert_error(res, 400, "VALIDATION_ERROR")
        assert body["detail"] == [{"field": "id", "message": schemas.TASK_ID_INVALID}]

    def test_not_found(self, client):
        res = client.get(f"{BASE}/{uuid.uuid4()}", headers=headers(STRANGER))
        body = assert_error(res, 404, "NOT_FOUND")
        assert body["message"] == "Task not found"
        assert "detail" not in body

    def test_other_owner_forbidden(self, client):
        task = create_task(client)
        res = client.get(f"{BASE}/{task['task_id']}", headers=headers(STRANGER))
        body = assert_error(res, 403, "UNAUTHORIZED")
        assert body["message"] == "Access denied"


class TestList:
    def test_lists_only_callers_tasks(self, client):
        mine = create_task(client, title="Mine")
        create_task(client, title="Theirs", user_id=STRANGER)
        res = client.get(BASE, headers=headers())
        assert res.status_code == 200
        assert [t["task_id"] for t in res.json()["data"]] == [mine["task_id"]]


class TestUpdate:
    def test_put_replaces_optional_fields(self, client, clock):
        due = (clock.now + timedelta(days=1)).isoformat()
        task = create_task(client, description="A", due_date=due)

        res = client.put(
            f"{BASE}/{task['task_id']}",
            json={"title": "Replaced", "status": "Pendente"},
            headers=headers(),
        )
        assert res.status_code == 200
        updated = res.json()["data"]
        assert updated["title"] == "Replaced"
        assert updated["description"] is None
        assert updated["due_date"] is None

    def test_put_not_found(self, client):
        res = client.put(
            f"{BASE}/{uuid.uuid4()}",
            json={"title": "Nope", "status": "Pendente"},
            headers=headers(),
        )
        assert_error(res, 404, "NOT_FOUND")

    def test_put_other_owner_forbidden(self, client):
        task = create_task(client)
        res = client.put(
            f"{BASE}/{task['task_id']}",
            json={"title": "Hijack", "status": "Concluída"},
            headers=headers(STRANGER),
        )
        assert_error(res, 403, "UNAUTHORIZED")
        assert client.get(f"{BASE}/{task['task_id']}", headers=headers()).json()["data"]["title"] == "Buy milk"

    def test_put_invalid_status(self, client):
        task = create_task(client)
        res = client.put(
            f"{BASE}/{task['task_id']}",
            json={"title": "Buy milk", "status": "Done"},
            headers=headers(),
        )
        body = assert_error(res, 400, "VALIDATION_ERROR")
        assert body["detail"] == [{"field": "status", "message": schemas.STATUS_INVALID}]

    def test_put_invalid_id(self, client):
        res = client.put(f"{BASE}/not-a-uuid", json={"title": "Buy milk", "status": "Pendente"}, headers=headers())
        assert_error(res, 400, "VALIDATION_ERROR")
