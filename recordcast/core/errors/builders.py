"""Domain-Specific Error Builders

Ergonomic constructors for typed errors. Each builder creates an
AppError with the appropriate code and returns it wrapped in Err.
Data-error messages are the user-facing strings reported per field.
"""
from typing import Any

from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Data Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: Any = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def required_field(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        "Field required",
        code=ErrorCode.E2001_REQUIRED_FIELD_MISSING,
        field=field,
        constraint="required",
        origin=origin,
    )


def not_allowed(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        "Field not allowed",
        code=ErrorCode.E2006_FIELD_NOT_ALLOWED,
        field=field,
        constraint="allowed",
        origin=origin,
    )


def null_not_allowed(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        "Field cannot be null",
        code=ErrorCode.E2007_NULL_NOT_ALLOWED,
        field=field,
        constraint="canBeNull",
        origin=origin,
    )


def cast_failed(
    field: str, type_name: str, cause: Exception | None = None, origin: str = ""
) -> Err[AppError]:
    error = validation_error(
        "Error during casting",
        code=ErrorCode.E2008_CAST_FAILED,
        field=field,
        constraint="type",
        type=type_name,
        origin=origin,
    ).error
    return Err(error.chain(cause) if cause is not None else error)


def out_of_range(
    field: str,
    message: str,
    *,
    constraint: str,
    bound: int | float | None = None,
    origin: str = "",
) -> Err[AppError]:
    return validation_error(
        message,
        code=ErrorCode.E2003_OUT_OF_RANGE,
        field=field,
        constraint=constraint,
        bound=bound,
        origin=origin,
    )


def empty_value(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        "Field cannot be empty",
        code=ErrorCode.E2009_EMPTY_VALUE,
        field=field,
        constraint="notEmpty",
        origin=origin,
    )


def constraint_violation(
    field: str, message: str, *, constraint: str, origin: str = ""
) -> Err[AppError]:
    return validation_error(
        message,
        code=ErrorCode.E2005_CONSTRAINT_VIOLATION,
        field=field,
        constraint=constraint,
        origin=origin,
    )


# =============================================================================
# Configuration / Internal Errors (E9xxx)
# =============================================================================

def internal_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create internal/unexpected error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))


def unknown_type(type_name: str, field: str, origin: str = "") -> Err[AppError]:
    return internal_error(
        f"No casting function found, type probably wrong: {type_name}",
        code=ErrorCode.E9010_UNKNOWN_TYPE,
        type=type_name,
        field=field,
        origin=origin,
    )


def invalid_parameter(
    parameter: str, field: str, reason: str, origin: str = ""
) -> Err[AppError]:
    return internal_error(
        reason,
        code=ErrorCode.E9011_INVALID_PARAMETER,
        parameter=parameter,
        field=field,
        origin=origin,
    )
