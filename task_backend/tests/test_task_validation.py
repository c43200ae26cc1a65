from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from src.api import schemas
from src.api.schemas import TaskStatus
from src.api.validation import FieldError, validate_create, validate_task_id, validate_update

NOW = datetime(2030, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.isoformat()


class TestTitle:
    @pytest.mark.parametrize("length", [3, 100])
    def test_boundary_lengths_pass(self, length):
        result = validate_create({"title": "x" * length}, now=NOW)
        assert result.ok
        assert result.data.title == "x" * length

    @pytest.mark.parametrize(
        "length,message",
        [(2, schemas.TITLE_TOO_SHORT), (101, schemas.TITLE_TOO_LONG)],
    )
    def test_out_of_range_lengths_fail(self, length, message):
        result = validate_create({"title": "x" * length}, now=NOW)
        assert not result.ok
        assert result.errors == [FieldError("title", message)]

    def test_title_is_trimmed_before_length_check(self):
        assert validate_create({"title": "  abc  "}, now=NOW).data.title == "abc"
        assert not validate_create({"title": "  ab   "}, now=NOW).ok

    @pytest.mark.parametrize("body", [{}, {"title": None}, {"title": 12345}])
    def test_missing_or_non_string_title(self, body):
        result = validate_create(body, now=NOW)
        assert result.errors == [FieldError("title", schemas.TITLE_REQUIRED)]


class TestDescription:
    def test_optional_and_defaults_to_none(self):
        assert validate_create({"title": "Buy milk"}, now=NOW).data.description is None

    def test_max_length(self):
        assert validate_create({"title": "Buy milk", "description": "d" * 500}, now=NOW).ok
        result = validate_create({"title": "Buy milk", "description": "d" * 501}, now=NOW)
        assert result.errors == [FieldError("description", schemas.DESCRIPTION_TOO_LONG)]

    def test_non_string(self):
        result = validate_create({"title": "Buy milk", "description": 5}, now=NOW)
        assert result.errors == [FieldError("description", schemas.DESCRIPTION_INVALID)]


class TestDueDate:
    def test_equal_to_now_fails(self):
        result = validate_create({"title": "Buy milk", "due_date": iso(NOW)}, now=NOW)
        assert result.errors == [FieldError("due_date", schemas.DUE_DATE_IN_PAST)]

    def test_in_the_past_fails(self):
        past = NOW - timedelta(days=1)
        assert not validate_create({"title": "Buy milk", "due_date": iso(past)}, now=NOW).ok

    def test_one_second_in_the_future_passes(self):
        due = NOW + timedelta(seconds=1)
        result = validate_create({"title": "Buy milk", "due_date": iso(due)}, now=NOW)
        assert result.ok
        assert result.data.due_date == due

    def test_zulu_suffix_is_accepted(self):
        result = validate_create({"title": "Buy milk", "due_date": "2031-01-01T08:00:00Z"}, now=NOW)
        assert result.data.due_date == datetime(2031, 1, 1, 8, tzinfo=timezone.utc)

    def test_naive_value_is_read_as_utc(self):
        result = validate_create({"title": "Buy milk", "due_date": "2031-01-01T08:00:00"}, now=NOW)
        assert result.data.due_date.tzinfo is not None
        assert result.data.due_date == datetime(2031, 1, 1, 8, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["not-a-date", "2031-01-01", "2031-13-01T00:00:00Z", 1700000000])
    def test_invalid_formats(self, value):
        result = validate_create({"title": "Buy milk", "due_date": value}, now=NOW)
        assert result.errors == [FieldError("due_date", schemas.DUE_DATE_INVALID)]

    def test_boundary_uses_validation_time_now(self):
        due = datetime.now(timezone.utc) + timedelta(hours=1)
        later = due + timedelta(seconds=1)
        assert validate_create({"title": "Buy milk", "due_date": iso(due)}).ok
        assert not validate_create({"title": "Buy milk", "due_date": iso(due)}, now=later).ok


class TestUpdateSchema:
    @pytest.mark.parametrize("status", ["Pendente", "Concluída"])
    def test_valid_statuses(self, status):
        result = validate_update({"title": "Buy milk", "status": status}, now=NOW)
        assert result.ok
        assert result.data.status is TaskStatus(status)

    @pytest.mark.parametrize("body", [{"title": "Buy milk"}, {"title": "Buy milk", "status": "Done"}])
    def test_missing_or_unknown_status(self, body):
        result = validate_update(body, now=NOW)
        assert result.errors == [FieldError("status", schemas.STATUS_INVALID)]

    def test_shares_create_rules(self):
        result = validate_update({"title": "ab", "status": "Pendente"}, now=NOW)
        assert result.errors == [FieldError("title", schemas.TITLE_TOO_SHORT)]

    def test_errors_follow_declaration_order(self):
        body = {
            "status": "nope",
            "due_date": "nope",
            "description": "d" * 501,
            "title": "a",
        }
        result = validate_update(body, now=NOW)
        assert [e.field for e in result.errors] == ["title", "description", "due_date", "status"]

    def test_unknown_fields_are_ignored(self):
        result = validate_update(
            {"title": "Buy milk", "status": "Pendente", "user_id": "intruder"}, now=NOW
        )
        assert result.ok
        assert not hasattr(result.data, "user_id")


class TestBodyShape:
    @pytest.mark.parametrize("body", [None, [], "title=Buy milk", 42])
    def test_non_object_body(self, body):
        result = validate_create(body, now=NOW)
        assert result.errors == [FieldError("body", schemas.BODY_INVALID)]


class TestTaskId:
    def test_valid_uuid(self):
        task_id = uuid.uuid4()
        result = validate_task_id({"id": str(task_id)})
        assert result.ok
        assert result.data.id == task_id

    @pytest.mark.parametrize("params", [{"id": "123"}, {"id": None}, {}, None])
    def test_invalid_ids(self, params):
        result = validate_task_id(params)
        assert result.errors == [FieldError("id", schemas.TASK_ID_INVALID)]
