"""Result types for expected (non-exceptional) outcomes.

Use cases and handlers return ``Result`` values built with ``Return.ok`` /
``Return.err`` instead of raising for validation, authorization or
challenge failures. Exceptions stay reserved for faults.

Usage:
    result = await use_case.execute(...)
    if result.is_err():
        return Return.err(result.error)
    value = result.value
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Typed error carried by a failed Result.

    Attributes:
        code: Stable taxonomy key (e.g. ``INVALID_TOKEN``).
        message: Human readable message safe to show to clients.
        alerts: Optional field-level validation messages.
    """

    code: str
    message: str
    alerts: List[str] = field(default_factory=list)


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result is not an error")
        return self._error

    def __repr__(self) -> str:
        if self.is_err():
            return f"Result.err({self._error.code})"
        return f"Result.ok({self._value!r})"


class Return:
    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
