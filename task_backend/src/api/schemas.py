from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

TITLE_REQUIRED = "O título da tarefa é obrigatório."
TITLE_TOO_SHORT = "O título deve ter pelo menos 3 caracteres."
TITLE_TOO_LONG = "O título não pode exceder 100 caracteres."
DESCRIPTION_INVALID = "A descrição deve ser um texto."
DESCRIPTION_TOO_LONG = "A descrição não pode exceder 500 caracteres."
DUE_DATE_INVALID = "A data de vencimento informada é inválida. Utilize o formato esperado (ISO 8601)."
DUE_DATE_IN_PAST = "A data de vencimento não pode ser no passado."
STATUS_INVALID = "Status inválido. Valores permitidos: Pendente, Concluída."
TASK_ID_INVALID = "ID da tarefa inválido."
BODY_INVALID = "O corpo da requisição deve ser um objeto JSON."


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Lifecycle status of a task. Both transitions are always allowed."""

    PENDING = "Pendente"
    COMPLETED = "Concluída"


def _parse_due_date(value: Any) -> Optional[datetime]:
    """
    Normalize due_date input into an aware datetime.
    - Strings must be ISO8601 date-times; a bare date is rejected.
    - Naive values are read as UTC.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        s = value.strip()
        # a bare date would parse as midnight; require the time part
        if len(s) <= 10:
            raise PydanticCustomError("due_date_format", DUE_DATE_INVALID)
        try:
            parsed = datetime.fromisoformat(s)
        except ValueError:
            raise PydanticCustomError("due_date_format", DUE_DATE_INVALID) from None
    else:
        raise PydanticCustomError("due_date_format", DUE_DATE_INVALID)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Base rule set shared by create and update requests.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Comprar mantimentos",
                "description": "Leite, ovos, pão",
                "due_date": "2030-02-01T09:00:00Z",
            }
        },
    )

    title: str = Field(..., description="Short title for the task (3..100 characters)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time as an ISO8601 date-time; must lie in the future",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 3..100 length.
        """
        s = v.strip()
        if len(s) < TITLE_MIN_LENGTH:
            raise PydanticCustomError("title_too_short", TITLE_TOO_SHORT)
        if len(s) > TITLE_MAX_LENGTH:
            raise PydanticCustomError("title_too_long", TITLE_TOO_LONG)
        return s

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > DESCRIPTION_MAX_LENGTH:
            raise PydanticCustomError("description_too_long", DESCRIPTION_TOO_LONG)
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> Optional[datetime]:
        return _parse_due_date(v)

    @field_validator("due_date")
    @classmethod
    def ensure_future_due_date(cls, v: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        """
        Reject due dates that are not strictly later than the validation-time 'now'.
        The caller may pin 'now' through the validation context.
        """
        if v is None:
            return v
        now = (info.context or {}).get("now") or datetime.now(timezone.utc)
        if v <= now:
            raise PydanticCustomError("due_date_in_past", DUE_DATE_IN_PAST)
        return v


# PUBLIC_INTERFACE
class TaskUpdate(TaskCreate):
    """
    Schema for replacing an existing task: the create rules plus a required status.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Comprar mantimentos",
                "description": None,
                "due_date": None,
                "status": "Concluída",
            }
        },
    )

    status: TaskStatus = Field(..., description="Task status: Pendente or Concluída")


# PUBLIC_INTERFACE
class TaskIdParams(BaseModel):
    """Path parameters identifying a task."""

    id: UUID = Field(..., description="Task identifier (UUID)")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_id": "3f1c2a9e-5b7d-4c1e-9a2f-6d8e0b4c7a11",
                "user_id": "user-42",
                "title": "Comprar mantimentos",
                "description": None,
                "due_date": None,
                "status": "Pendente",
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-25T10:15:30.123456Z",
            }
        }
    )

    task_id: str = Field(..., description="Unique identifier of the task")
    user_id: str = Field(..., description="Owner of the task")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time as ISO8601")
    status: TaskStatus = Field(..., description="Task status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class TaskEnvelope(BaseModel):
    """Success envelope for a single task."""

    data: TaskOut


class TaskListEnvelope(BaseModel):
    """Success envelope for the caller's tasks."""

    data: List[TaskOut]


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ErrorEnvelope(BaseModel):
    """
    Error body shared by every failing endpoint.
    """

    error: str = Field(..., description="Machine-readable error kind")
    message: str = Field(..., description="Human-readable message")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[List[FieldErrorOut]] = Field(default=None, description="Field-level errors")
