from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from .errors import CapacityExceededError
from .models import TaskEntity

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_IMMUTABLE_FIELDS = frozenset({"task_id", "user_id", "created_at"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """Abstract store contract for task records."""

    @abstractmethod
    def add(self, record: TaskEntity) -> TaskEntity:
        """Insert a fully-formed record keyed by its task_id. Raise CapacityExceededError when full."""

    @abstractmethod
    def get_by_id(self, task_id: str) -> Optional[TaskEntity]:
        """Return a record by id, or None if not found."""

    @abstractmethod
    def get_all(self) -> List[TaskEntity]:
        """Return a snapshot of all records in insertion order."""

    @abstractmethod
    def update(self, task_id: str, fields: Mapping[str, Any]) -> Optional[TaskEntity]:
        """
        Merge fields onto an existing record and stamp updated_at.
        Return the updated record or None if not found.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""

    def __len__(self) -> int:
        return self.count()


class InMemoryTaskStore(TaskStore):
    """
    Thread-safe in-memory store with a maximum-capacity guard.

    The capacity check in add() and the read-modify-write in update() each run
    under the store lock.
    """

    def __init__(self, max_records: int = 1000, clock: Optional[Clock] = None) -> None:
        if max_records < 0:
            raise ValueError("max_records must be >= 0")
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}
        self._max_records = max_records
        self._clock = clock or utc_now

    @property
    def max_records(self) -> int:
        return self._max_records

    def add(self, record: TaskEntity) -> TaskEntity:
        with self._lock:
            if len(self._items) >= self._max_records:
                logger.warning(
                    "Task store full (max_records=%s); rejecting task_id=%s",
                    self._max_records,
                    record["task_id"],
                )
                raise CapacityExceededError(self._max_records)
            self._items[record["task_id"]] = record.copy()  # type: ignore[assignment]
            return record.copy()  # type: ignore[return-value]

    def get_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def get_all(self) -> List[TaskEntity]:
        with self._lock:
            # dicts keep insertion order
            return [t.copy() for t in self._items.values()]  # type: ignore[misc]

    def update(self, task_id: str, fields: Mapping[str, Any]) -> Optional[TaskEntity]:
        illegal = _IMMUTABLE_FIELDS.intersection(fields)
        if illegal:
            raise ValueError(f"Immutable task fields cannot be updated: {sorted(illegal)}")

        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            updated.update(fields)  # type: ignore[typeddict-item]
            # updated_at never precedes created_at, even if the clock steps back
            updated["updated_at"] = max(self._clock(), existing["created_at"])

            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def count(self) -> int:
        with self._lock:
            return len(self._items)
