import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    """Failure categories returned by the service layer."""
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    REJECTED = "rejected"
    INTERNAL = "internal"


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service operation: either a value or an error kind.

    The API layer maps `error` to an HTTP status; services never raise for
    expected failures.
    """
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> "ServiceResult[T]":
        return cls(error=error, message=message, details=details or {})
