from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict

from .schemas import TaskStatus


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task held by the in-memory store.

    Fields:
    - task_id: UUID4 string, generated by the service, never reused
    - user_id: Owner identifier, fixed at creation
    - title: Short title (3..100 chars, trimmed on input via schemas)
    - description: Optional detailed description (<= 500 chars)
    - due_date: Optional timezone-aware due datetime
    - status: TaskStatus (Pendente / Concluída)
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last update timestamp (datetime)
    """

    task_id: str
    user_id: str
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
