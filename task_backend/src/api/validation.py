"""
Validators turning untyped request input into typed task schemas.

Each validator returns a ValidationResult holding either the parsed model or an
ordered list of FieldError entries (declaration order of the schema fields).
Nothing here touches the store.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .schemas import (
    BODY_INVALID,
    DESCRIPTION_INVALID,
    STATUS_INVALID,
    TASK_ID_INVALID,
    TITLE_REQUIRED,
    TaskCreate,
    TaskIdParams,
    TaskUpdate,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Messages for pydantic's built-in error types; custom errors already carry their own text.
_BUILTIN_MESSAGES: Dict[Tuple[str, str], str] = {
    ("title", "missing"): TITLE_REQUIRED,
    ("title", "string_type"): TITLE_REQUIRED,
    ("description", "string_type"): DESCRIPTION_INVALID,
    ("status", "missing"): STATUS_INVALID,
    ("status", "enum"): STATUS_INVALID,
    ("id", "missing"): TASK_ID_INVALID,
    ("id", "uuid_type"): TASK_ID_INVALID,
    ("id", "uuid_parsing"): TASK_ID_INVALID,
}


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class FieldError:
    """A single user-facing validation failure."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    """Outcome of a validation run: data on success, errors otherwise."""

    data: Optional[ModelT] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _to_field_errors(exc: ValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    for err in exc.errors():
        name = ".".join(str(part) for part in err["loc"]) or "body"
        message = _BUILTIN_MESSAGES.get((name, err["type"]), err["msg"])
        errors.append(FieldError(field=name, message=message))
    return errors


def _validate(model: Type[ModelT], raw: Any, now: Optional[datetime] = None) -> ValidationResult[ModelT]:
    if not isinstance(raw, Mapping):
        return ValidationResult(errors=[FieldError(field="body", message=BODY_INVALID)])
    context = {"now": now} if now is not None else None
    try:
        data = model.model_validate(dict(raw), context=context)
    except ValidationError as exc:
        return ValidationResult(errors=_to_field_errors(exc))
    return ValidationResult(data=data)


# PUBLIC_INTERFACE
def validate_create(raw: Any, now: Optional[datetime] = None) -> ValidationResult[TaskCreate]:
    """Validate a create request body. `now` pins the future-date boundary."""
    return _validate(TaskCreate, raw, now)


# PUBLIC_INTERFACE
def validate_update(raw: Any, now: Optional[datetime] = None) -> ValidationResult[TaskUpdate]:
    """Validate an update request body (create rules plus status)."""
    return _validate(TaskUpdate, raw, now)


# PUBLIC_INTERFACE
def validate_task_id(raw: Any) -> ValidationResult[TaskIdParams]:
    """Validate path parameters; a malformed id is reported under 'id'."""
    result = _validate(TaskIdParams, raw)
    if not result.ok and result.errors[0].field == "body":
        return ValidationResult(errors=[FieldError(field="id", message=TASK_ID_INVALID)])
    return result
