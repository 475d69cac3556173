from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class OperationResult(Generic[T]):
    """Outcome of a store operation.

    A successful result carries ``data`` and ``ErrorKind.NONE``; a failed one
    carries ``message`` and a specific ``error`` and never any data. Use
    :meth:`ok` and :meth:`failure` rather than the constructor.
    """

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: ErrorKind = ErrorKind.NONE

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, message: str, error: ErrorKind) -> "OperationResult[T]":
        if error is ErrorKind.NONE:
            raise ValueError("A failed result needs a concrete error kind.")
        return cls(success=False, message=message, error=error)

    def is_success(self) -> bool:
        return self.success

    def __bool__(self) -> bool:
        raise TypeError("OperationResult has no truth value; call is_success().")

    def __str__(self) -> str:
        if self.success:
            return f"Success: {self.data}"
        return f"Failure: {self.message} (Error: {self.error.name})"
