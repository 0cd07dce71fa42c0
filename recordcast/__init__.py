"""recordcast: schema-driven casting and validation for plain records."""

__version__ = "0.1.0"

from recordcast.ids import IdStrategy, RandomIdStrategy
from recordcast.validation import (
    MISSING,
    Schema,
    ValidationOptions,
    ValidationResult,
    ValidationError,
    ValidationErrorDetail,
    SchemaConfigurationError,
    CastError,
    ParamError,
    TypeRegistry,
    ParamRegistry,
    validate,
    validate_async,
)

__all__ = [
    "__version__",
    "IdStrategy",
    "RandomIdStrategy",
    "MISSING",
    "Schema",
    "ValidationOptions",
    "ValidationResult",
    "ValidationError",
    "ValidationErrorDetail",
    "SchemaConfigurationError",
    "CastError",
    "ParamError",
    "TypeRegistry",
    "ParamRegistry",
    "validate",
    "validate_async",
]
