"""
Client-side task form and mutation state.

The form mirrors the server's validation rules so obviously invalid input never
leaves the client, and strips unsafe markup from free-text fields before the
payload is built. The server stays authoritative: every rule is re-checked there.
"""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, cast

import nh3

from ..api.schemas import TaskCreate, TaskStatus
from ..api.validation import FieldError, ValidationResult, validate_create, validate_update
from .query_cache import QueryCache, QueryKey
from .task_client import TaskClient, TaskClientError

logger = logging.getLogger(__name__)

TASKS_KEY: QueryKey = ("tasks",)

CREATE_SUCCESS = "Tarefa criada com sucesso!"
CREATE_FAILED = "Erro ao criar tarefa"
UPDATE_SUCCESS = "Tarefa atualizada com sucesso!"
UPDATE_FAILED = "Erro ao atualizar tarefa"

Navigate = Callable[[str], None]


def task_key(task_id: str) -> QueryKey:
    return ("tasks", task_id)


def sanitize(value: str) -> str:
    """Remove scripts, event handlers and other unsafe markup from user text."""
    return nh3.clean(value)


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class FormValidationError(Exception):
    def __init__(self, errors: Sequence[FieldError]) -> None:
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))
        self.errors = list(errors)


# PUBLIC_INTERFACE
class TaskForm:
    """
    Editable values for the create / edit task screens.

    In edit mode a completed task is locked: only its status can change until it
    is reopened.
    """

    FIELDS = ("title", "description", "due_date", "status")

    def __init__(self, mode: FormMode = FormMode.CREATE, initial_values: Optional[Mapping[str, Any]] = None) -> None:
        initial = initial_values or {}
        self.mode = FormMode(mode)
        self.values: Dict[str, Any] = {
            "title": initial.get("title") or "",
            "description": initial.get("description") or "",
            "due_date": initial.get("due_date"),
            "status": TaskStatus(initial.get("status") or TaskStatus.PENDING),
        }
        self.errors: List[FieldError] = []

    @classmethod
    def from_task(cls, task: Mapping[str, Any]) -> "TaskForm":
        """Build an edit form from a task as returned by the API."""
        due = task.get("due_date")
        return cls(
            FormMode.EDIT,
            {
                "title": task.get("title"),
                "description": task.get("description"),
                "due_date": datetime.fromisoformat(due) if isinstance(due, str) else due,
                "status": task.get("status"),
            },
        )

    @property
    def is_edit_mode(self) -> bool:
        return self.mode is FormMode.EDIT

    @property
    def is_locked(self) -> bool:
        return self.is_edit_mode and self.values["status"] is TaskStatus.COMPLETED

    def set(self, name: str, value: Any) -> None:
        if name not in self.FIELDS:
            raise KeyError(name)
        if name == "status":
            if not self.is_edit_mode:
                raise ValueError("status can only be changed when editing a task")
            value = TaskStatus(value)
        elif self.is_locked:
            raise ValueError(f"{name} is read-only while the task is completed")
        self.values[name] = value

    def error_for(self, name: str) -> Optional[str]:
        for err in self.errors:
            if err.field == name:
                return err.message
        return None

    def _raw(self) -> Dict[str, Any]:
        # sanitized text is what gets validated and sent
        title = self.values["title"]
        description = self.values["description"]
        raw: Dict[str, Any] = {
            "title": sanitize(title) if isinstance(title, str) else title,
            "description": (sanitize(description) if isinstance(description, str) else description) or None,
            "due_date": self.values["due_date"],
        }
        if self.is_edit_mode:
            raw["status"] = self.values["status"].value
        return raw

    def _check(self, now: Optional[datetime]) -> ValidationResult:
        validator = validate_update if self.is_edit_mode else validate_create
        result = validator(self._raw(), now=now)
        self.errors = result.errors
        return result

    def validate(self, now: Optional[datetime] = None) -> bool:
        """Run the shared rule set; errors land in self.errors."""
        return self._check(now).ok

    def payload(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Validate and build the request body. Empty optionals are omitted and
        free text is sanitized.

        Raises:
            FormValidationError: when any field is invalid.
        """
        result = self._check(now)
        if not result.ok:
            raise FormValidationError(result.errors)
        data = cast(TaskCreate, result.data)

        body: Dict[str, Any] = {"title": data.title}
        if data.description:
            body["description"] = data.description
        if data.due_date is not None:
            body["due_date"] = data.due_date.isoformat()
        if self.is_edit_mode:
            body["status"] = data.status.value  # type: ignore[attr-defined]
        return body


class MutationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


# PUBLIC_INTERFACE
class TaskMutation:
    """
    Tracks one create/update action: idle -> pending -> success | error.

    On success the listed cache keys are invalidated and the user is sent to
    redirect_to. On failure the server's message is kept verbatim, falling back
    to error_fallback when the server gave none.
    """

    def __init__(
        self,
        action: Callable[[Mapping[str, Any]], Dict[str, Any]],
        cache: QueryCache,
        invalidate: Sequence[QueryKey],
        navigate: Navigate,
        success_message: str,
        error_fallback: str,
        redirect_to: str = "/",
    ) -> None:
        self._action = action
        self._cache = cache
        self._invalidate = list(invalidate)
        self._navigate = navigate
        self._success_message = success_message
        self._error_fallback = error_fallback
        self._redirect_to = redirect_to

        self.status = MutationStatus.IDLE
        self.data: Optional[Dict[str, Any]] = None
        self.error: Optional[TaskClientError] = None
        self.message: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status is MutationStatus.PENDING

    def mutate(self, payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        self.status = MutationStatus.PENDING
        self.error = None
        self.message = None
        try:
            data = self._action(payload)
        except TaskClientError as exc:
            self.status = MutationStatus.ERROR
            self.error = exc
            self.message = exc.message or self._error_fallback
            logger.warning("Task mutation failed status=%s: %s", exc.status_code, self.message)
            return None

        self.data = data
        self.status = MutationStatus.SUCCESS
        self.message = self._success_message
        for key in self._invalidate:
            self._cache.invalidate(key)
        self._navigate(self._redirect_to)
        return data

    def submit(self, form: TaskForm, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Validate the form and run the mutation; invalid forms never reach the API."""
        try:
            payload = form.payload(now=now)
        except FormValidationError:
            return None
        return self.mutate(payload)


def _stay(path: str) -> None:
    return None


# PUBLIC_INTERFACE
class TaskQueries:
    """
    Cached reads plus mutation factories bound to one TaskClient.
    """

    def __init__(self, client: TaskClient, cache: Optional[QueryCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    def get(self, task_id: str) -> Dict[str, Any]:
        return self.cache.fetch(task_key(task_id), lambda: self.client.get(task_id))

    def list(self) -> List[Dict[str, Any]]:
        return self.cache.fetch(TASKS_KEY, self.client.list)

    def edit_form(self, task_id: str) -> TaskForm:
        """
        Load a task into an edit form.

        Raises:
            TaskClientError: when the task cannot be loaded (unknown, foreign or bad id).
        """
        return TaskForm.from_task(self.get(task_id))

    def create_mutation(self, navigate: Navigate = _stay) -> TaskMutation:
        return TaskMutation(
            self.client.create,
            self.cache,
            invalidate=[TASKS_KEY],
            navigate=navigate,
            success_message=CREATE_SUCCESS,
            error_fallback=CREATE_FAILED,
        )

    def update_mutation(self, task_id: str, navigate: Navigate = _stay) -> TaskMutation:
        return TaskMutation(
            lambda payload: self.client.update(task_id, payload),
            self.cache,
            invalidate=[TASKS_KEY, task_key(task_id)],
            navigate=navigate,
            success_message=UPDATE_SUCCESS,
            error_fallback=UPDATE_FAILED,
        )
