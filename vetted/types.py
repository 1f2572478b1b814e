"""
Type definitions for vetted.

Provides the Ok/Err result pair, the ValidationError record, the MISSING
sentinel for absent values and Pending for results that are still settling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator, Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Kinds of validation failure."""

    REQUIRED = "required"
    NULLABLE = "nullable"
    TYPE_MISMATCH = "type_mismatch"
    INVALID_DATE = "invalid_date"
    FORMAT = "format"
    CUSTOM = "custom"
    UNION_NO_MATCH = "union_no_match"


class _Missing:
    """Marker for a value that is absent, as opposed to present and None."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

Path = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A single failure, located by its path from the root of the input."""

    path: Path
    message: str
    kind: ErrorKind

    def prefixed(self, segment: str) -> ValidationError:
        return replace(self, path=(segment, *self.path))


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success result containing the (possibly transformed) value."""

    value: T

    @property
    def success(self) -> bool:
        return True

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False


@dataclass(frozen=True, slots=True, init=False)
class Err:
    """Failure result containing at least one ValidationError."""

    errors: tuple[ValidationError, ...]

    def __init__(self, errors: Iterable[ValidationError]):
        errors = tuple(errors)
        if not errors:
            raise ValueError("Err requires at least one ValidationError")
        object.__setattr__(self, "errors", errors)

    @property
    def success(self) -> bool:
        return False

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def prefixed(self, segment: str) -> Err:
        return Err(error.prefixed(segment) for error in self.errors)


ValidationResult = Ok[Any] | Err


class Pending:
    """
    A validation result that is still settling.

    Produced when an asynchronous predicate is reached somewhere in the
    schema tree. Await it to obtain the final Ok or Err; it may be awaited
    any number of times, by any number of tasks, and settles only once.
    Nothing is scheduled until the first await. Pending deliberately has no
    ``success`` attribute so it cannot be mistaken for a result.
    """

    __slots__ = ("_start", "_future")

    def __init__(self, start: Callable[[], Awaitable[ValidationResult]]):
        self._start = start
        self._future: asyncio.Future[ValidationResult] | None = None

    def __await__(self) -> Generator[Any, None, ValidationResult]:
        if self._future is None:
            self._future = asyncio.ensure_future(self._start())
        return self._future.__await__()

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def __repr__(self) -> str:
        state = "settled" if self.done() else "unsettled"
        return f"Pending({state})"


Outcome = Ok[Any] | Err | Pending


def fail(kind: ErrorKind, message: str) -> Err:
    """Build a failure holding one root-level error."""
    return Err([ValidationError(path=(), message=message, kind=kind)])
