"""
Tagged result values for service operations.

Services return ``Ok(value)`` or ``Err(kind, detail)`` instead of raising for
expected business outcomes; the API layer maps ``ErrorKind`` to HTTP status
codes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Categories of expected failures."""
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    OVER_ALLOCATION = "over_allocation"
    INVALID_TRANSITION = "invalid_transition"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    detail: Any = None

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ValueError(f"Called unwrap on Err({self.kind.value}): {self.detail}")


Result = Union[Ok[T], Err]
