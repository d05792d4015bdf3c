"""
Result values returned by service operations.

Business failures travel as values carrying an ``ErrorKind``; only unexpected
collaborator errors are raised.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..domain.exceptions import DomainValidationError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class SchedulingFailure:
    """A distinguishable failure kind with a human readable message."""
    kind: ErrorKind
    message: str

    @classmethod
    def from_exception(cls, exc: DomainValidationError) -> "SchedulingFailure":
        return cls(kind=exc.kind, message=exc.message)


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Either a value or a failure, never both."""
    value: Optional[T] = None
    error: Optional[SchedulingFailure] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult[T]":
        return cls(error=SchedulingFailure(kind=kind, message=message))
