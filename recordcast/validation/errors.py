"""Validation Error System

Two classes of failure:

- Data errors: collected per field as ValidationErrorDetail and returned
  with the result. Casters and parameter rules report them as Err values
  (or by raising CastError/ParamError).
- Configuration errors: SchemaConfigurationError, raised immediately.
  They indicate a schema-authoring bug, never bad data.

Error Format:
{
    "error": {
        "type": "validation_error",
        "message": "Validation failed",
        "errors": [
            {"field": "age", "message": "Field's value is too high", "constraint": "max"}
        ]
    }
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from recordcast.core.errors import AppError, ErrorCode, ErrorContext


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Validation error for a single field.

    - field: name of the offending field
    - message: human-readable message ("Field required", ...)
    - constraint: the type or parameter that produced it
    - code: error code from the taxonomy
    """
    field: str
    message: str
    constraint: str | None = None
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC

    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field, "message": self.message}
        if self.constraint:
            result["constraint"] = self.constraint
        return result

    @classmethod
    def from_app_error(cls, error: AppError, *, field: str, constraint: str | None = None) -> ValidationErrorDetail:
        """Create from an AppError produced by a caster or parameter rule."""
        return cls(
            field=error.metadata.get("field") or field,
            message=error.message,
            constraint=error.metadata.get("constraint") or constraint,
            code=error.code,
        )


@dataclass
class ValidationError(Exception):
    """Raised by ValidationResult.raise_for_errors when data errors exist."""
    message: str
    details: list[ValidationErrorDetail]

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.details: return self.message
        if len(self.details) == 1: return f"{(d := self.details[0]).field}: {d.message}"
        return f"{self.message} ({len(self.details)} errors)"

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorDetail]]:
        """Group errors by field."""
        result: dict[str, list[ValidationErrorDetail]] = {}
        for detail in self.details: result.setdefault(detail.field, []).append(detail)
        return result

    def to_app_error(self) -> AppError:
        return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=f"Validation failed: {len(self.details)} errors",
            metadata={"error_count": len(self.details), "errors": [d.to_dict() for d in self.details]})

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"type": "validation_error", "message": self.message,
            "error_count": len(self.details), "errors": [d.to_dict() for d in self.details]}}


class SchemaConfigurationError(Exception):
    """Schema-authoring bug: unknown type, non-callable validator, ...

    Wraps the AppError describing the problem. Never collected as a
    field error.
    """

    def __init__(self, error: AppError):
        self.error = error
        super().__init__(error.message)

    @classmethod
    def from_message(cls, message: str, code: ErrorCode = ErrorCode.E9011_INVALID_PARAMETER, **metadata) -> SchemaConfigurationError:
        return cls(AppError(code=code, message=message, context=ErrorContext(origin="schema"), metadata=metadata))


class CastError(Exception):
    """Raised by a caster that prefers exceptions over returning Err."""

    def __init__(self, field: str, message: str = "Error during casting"):
        self.field, self.message = field, message
        super().__init__(f"Error with field: {field}")


class ParamError(Exception):
    """Raised by a parameter rule that prefers exceptions over returning Err."""

    def __init__(self, field: str, message: str):
        self.field, self.message = field, message
        super().__init__(message)


@dataclass
class ErrorAccumulator:
    """Collect-all accumulator owned by a single validate call."""
    _errors: list[ValidationErrorDetail] = field(default_factory=list)

    def add_error(self, detail: ValidationErrorDetail) -> None:
        self._errors.append(detail)

    def add_app_error(self, error: AppError, *, field: str, constraint: str | None = None) -> None:
        self._errors.append(ValidationErrorDetail.from_app_error(error, field=field, constraint=constraint))

    def get_errors(self) -> list[ValidationErrorDetail]: return self._errors.copy()

    def __len__(self) -> int: return len(self._errors)
