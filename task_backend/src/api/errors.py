from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .validation import FieldError


# PUBLIC_INTERFACE
class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced by the API."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    HTTP_ERROR = "HTTP_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CapacityExceededError(Exception):
    """Raised by a store when inserting would exceed its configured maximum."""

    def __init__(self, max_records: int) -> None:
        super().__init__(f"Maximum records limit reached ({max_records})")
        self.max_records = max_records


# PUBLIC_INTERFACE
class ServiceError(Exception):
    """
    Domain error raised by the service layer and rendered by the app's exception handler.

    Attributes:
        kind: ErrorKind of the failure.
        message: Human-readable message.
        status_code: HTTP status to answer with.
        details: Optional ordered field errors (validation failures only).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int,
        details: Optional[Sequence[FieldError]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.details: List[FieldError] = list(details) if details else []

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.kind.value,
            "message": self.message,
            "status": self.status_code,
        }
        if self.details:
            body["detail"] = [d.to_dict() for d in self.details]
        return body

    @classmethod
    def validation(cls, message: str, details: Sequence[FieldError]) -> "ServiceError":
        return cls(ErrorKind.VALIDATION_ERROR, message, 400, details)

    @classmethod
    def not_found(cls, message: str = "Task not found") -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, message, 404)

    @classmethod
    def unauthorized(cls, message: str = "Access denied") -> "ServiceError":
        return cls(ErrorKind.UNAUTHORIZED, message, 403)

    @classmethod
    def internal(cls, message: str = "Internal server error") -> "ServiceError":
        return cls(ErrorKind.INTERNAL_ERROR, message, 500)
