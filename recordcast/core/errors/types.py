"""Result types and the error taxonomy

Casters and parameter rules report outcomes as values: ``Ok(value)`` on
success, ``Err(AppError)`` for bad data. The engine is the only place that
turns those values into collected field errors, so handlers never share
mutable state.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, Iterator, NoReturn, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound="AppError")
F = TypeVar("F", bound="AppError")


class ErrorCode(Enum):
    """Numbered error codes.

    E2xxx: bad input data. Collected per field, never raised by the engine.
    E9000-E9009: unexpected internal failures.
    E9010-E9099: schema configuration mistakes, raised immediately.
    """
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2004_INVALID_TYPE = 2004
    E2005_CONSTRAINT_VIOLATION = 2005
    E2006_FIELD_NOT_ALLOWED = 2006
    E2007_NULL_NOT_ALLOWED = 2007
    E2008_CAST_FAILED = 2008
    E2009_EMPTY_VALUE = 2009

    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001
    E9002_NOT_IMPLEMENTED = 9002
    E9010_UNKNOWN_TYPE = 9010
    E9011_INVALID_PARAMETER = 9011
    E9012_ASYNC_IN_SYNC_CONTEXT = 9012

    @property
    def category(self) -> str:
        for (low, high), name in _CATEGORIES.items():
            if low <= self.value < high:
                return name
        return "internal"

    @property
    def is_data_error(self) -> bool:
        return self.category == "validation"


_CATEGORIES = {
    (2000, 3000): "validation",
    (9010, 9100): "configuration",
}


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Where and when an error was produced."""
    correlation_id: str = field(default_factory=lambda: uuid4().hex[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    origin: str = ""


@dataclass(frozen=True, slots=True)
class AppError:
    """An error value.

    ``metadata`` holds structured details; data errors always carry the
    offending ``field`` and usually the ``constraint`` that produced them.
    """
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    @property
    def error_id(self) -> str:
        return f"{self.code.name}:{self.context.correlation_id}"

    @property
    def field(self) -> str | None:
        return self.metadata.get("field")

    def with_metadata(self, **kwargs: Any) -> AppError:
        return replace(self, metadata={**self.metadata, **kwargs})

    def chain(self, cause: Exception) -> AppError:
        return replace(self, cause=cause)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "category": self.code.category,
                "message": self.message,
                "field": self.field,
                "correlation_id": self.context.correlation_id,
                "timestamp": self.context.timestamp.isoformat(),
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        where = f" on '{self.field}'" if self.field else ""
        return f"[{self.code.name}]{where} {self.message}"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome holding ``value``."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, AppError]:
        return Ok(f(self.value))

    def map_err(self, f: Callable[[AppError], F]) -> Ok[T]:
        return self

    def and_then(self, f: Callable[[T], Result[U, AppError]]) -> Result[U, AppError]:
        return f(self.value)

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome holding an AppError."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:
        return self

    def __iter__(self) -> Iterator[Any]:
        return iter(())


Result = Union[Ok[T], Err[E]]


def from_exception(
    exc: Exception,
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    message: str | None = None,
    origin: str = "",
    **metadata: Any,
) -> Err[AppError]:
    """Wrap a caught exception as an Err, keeping it as the cause."""
    return Err(AppError(
        code=code,
        message=message or f"{type(exc).__name__}: {exc}",
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=exc,
    ))


def try_result(
    f: Callable[[], T],
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    origin: str = "",
    message: str | None = None,
    **metadata: Any,
) -> Result[T, AppError]:
    """Call ``f`` and return Ok(result), or Err if it raises.

    Used around third-party calls (codecs, parsers) whose exceptions
    mean bad input rather than a bug.
    """
    try:
        return Ok(f())
    except Exception as e:
        return from_exception(e, code=code, message=message, origin=origin, **metadata)
