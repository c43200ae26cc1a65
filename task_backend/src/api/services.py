from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, cast

from .errors import CapacityExceededError, ErrorKind, ServiceError
from .models import TaskEntity
from .repositories import Clock, TaskStore, utc_now
from .schemas import TaskCreate, TaskIdParams, TaskStatus, TaskUpdate
from .validation import validate_create, validate_task_id, validate_update

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskService:
    """
    Business rules for tasks: validation, ownership checks and store mutation.

    Every public method raises ServiceError for anything the caller should see;
    it is the single place where store conditions become API error kinds.
    """

    def __init__(self, store: TaskStore, clock: Optional[Clock] = None) -> None:
        self._store = store
        self._clock = clock or utc_now

    def create(self, caller_id: str, raw_body: Any) -> TaskEntity:
        """
        Create a task owned by caller_id.

        Raises:
            ServiceError VALIDATION_ERROR (400) when the body is invalid.
            ServiceError CAPACITY_EXCEEDED (500) when the store is full.
        """
        now = self._clock()
        result = validate_create(raw_body, now=now)
        if not result.ok:
            raise ServiceError.validation("Validation failed", result.errors)

        params = cast(TaskCreate, result.data)
        task: TaskEntity = {
            "task_id": str(uuid.uuid4()),
            "user_id": caller_id,
            "title": params.title,
            "description": params.description,
            "due_date": params.due_date,
            "status": TaskStatus.PENDING,
            "created_at": now,
            "updated_at": now,
        }
        try:
            created = self._store.add(task)
        except CapacityExceededError as exc:
            raise ServiceError(ErrorKind.CAPACITY_EXCEEDED, str(exc), 500) from exc

        logger.info("Task created task_id=%s user_id=%s", created["task_id"], caller_id)
        return created

    def get(self, caller_id: str, raw_params: Any) -> TaskEntity:
        """
        Return a task owned by caller_id.

        Raises:
            ServiceError VALIDATION_ERROR (400) for a malformed id.
            ServiceError NOT_FOUND (404) when the task does not exist.
            ServiceError UNAUTHORIZED (403) when the caller is not the owner.
        """
        task_id = self._parse_id(raw_params)
        return self._load_owned(caller_id, task_id)

    def update(self, caller_id: str, raw_params: Any, raw_body: Any) -> TaskEntity:
        """
        Replace title, description, due_date and status of an owned task.
        Optional fields missing from the body are cleared, not kept.

        Raises:
            ServiceError VALIDATION_ERROR (400) for a malformed id or body.
            ServiceError NOT_FOUND (404) / UNAUTHORIZED (403) as in get().
            ServiceError INTERNAL_ERROR (500) if the store loses the task mid-update.
        """
        task_id = self._parse_id(raw_params)

        result = validate_update(raw_body, now=self._clock())
        if not result.ok:
            raise ServiceError.validation("Validation failed", result.errors)
        data = cast(TaskUpdate, result.data)

        self._load_owned(caller_id, task_id)

        replacement: Dict[str, Any] = {
            "title": data.title,
            "description": data.description,
            "due_date": data.due_date,
            "status": data.status,
        }
        updated = self._store.update(task_id, replacement)
        if updated is None:
            logger.error("Task vanished between lookup and update task_id=%s", task_id)
            raise ServiceError.internal("Failed to update task")

        logger.info("Task updated task_id=%s status=%s", task_id, updated["status"].value)
        return updated

    def list(self, caller_id: str) -> List[TaskEntity]:
        """Return the caller's tasks in insertion order."""
        return [t for t in self._store.get_all() if t["user_id"] == caller_id]

    def _parse_id(self, raw_params: Any) -> str:
        result = validate_task_id(raw_params)
        if not result.ok:
            raise ServiceError.validation("Invalid ID", result.errors)
        return str(cast(TaskIdParams, result.data).id)

    def _load_owned(self, caller_id: str, task_id: str) -> TaskEntity:
        task = self._store.get_by_id(task_id)
        if task is None:
            logger.warning("Task not found task_id=%s", task_id)
            raise ServiceError.not_found()
        if task["user_id"] != caller_id:
            logger.warning("Access denied task_id=%s caller=%s", task_id, caller_id)
            raise ServiceError.unauthorized()
        return task
