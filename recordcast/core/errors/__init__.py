"""Monadic Error Handling System

Key components:
- Result[T, E]: Monadic container for success/failure
- AppError: Base error type with full context
- ErrorCode: Hierarchical error code taxonomy
- Builder functions: Ergonomic error construction

Usage:
    from recordcast.core.errors import Ok, Err, Result, AppError, cast_failed

    def cast_age(value) -> Result[int, AppError]:
        if not str(value).isdigit():
            return cast_failed("age", "number")
        return Ok(int(value))

    match cast_age("12"):
        case Ok(age):
            print(age)
        case Err(error):
            log.warning(error.message, code=error.code.name)
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    # Constructors
    from_exception,
    try_result,
)

from .builders import (
    # Data errors (E2xxx)
    validation_error,
    required_field,
    not_allowed,
    null_not_allowed,
    cast_failed,
    out_of_range,
    empty_value,
    constraint_violation,
    # Configuration / internal (E9xxx)
    internal_error,
    unknown_type,
    invalid_parameter,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "from_exception",
    "try_result",
    "validation_error",
    "required_field",
    "not_allowed",
    "null_not_allowed",
    "cast_failed",
    "out_of_range",
    "empty_value",
    "constraint_violation",
    "internal_error",
    "unknown_type",
    "invalid_parameter",
]
