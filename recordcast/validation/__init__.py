"""Record Validation and Type Coercion

A schema maps field names to definitions. Validating a record runs, per
field, a type cast followed by the field's parameters, and returns a new
normalized record plus every data error found.

Key Features:
- Type Registry: string, number, timestamp, date, array, serialize,
  boolean, id, none/blob; extensible via TypeRegistry.register
- Parameter Registry: min, max, trim, uppercase, lowercase, default,
  notEmpty, validator; extensible via ParamRegistry.register
- Per-field overrides of global options (canBeNull, emptyAsNull)
- Skip lists for whole fields or single parameters
- Ordered, structured error collection; the input is never mutated
- Synchronous and asynchronous entry points

Usage:
    from recordcast.validation import Schema

    schema = Schema({
        "name": {"type": "string", "required": True, "trim": 50},
        "age": {"type": "number", "min": 10, "max": 20},
    })
    result = schema.validate({"name": "Tony", "age": 25})
    if not result.is_valid:
        for error in result.errors:
            print(error.field, error.message)
"""

from .context import (
    MISSING,
    CastContext,
    ParamContext,
    stringify,
)

from .options import (
    ValidationOptions,
    FieldPolicy,
    resolve_field_policy,
)

from .errors import (
    ValidationError,
    ValidationErrorDetail,
    SchemaConfigurationError,
    CastError,
    ParamError,
    ErrorAccumulator,
)

from .coercion import (
    TypeCaster,
    TypeRegistry,
    IdentityCaster,
    StringCaster,
    NumberCaster,
    TimestampCaster,
    DateCaster,
    ArrayCaster,
    SerializeCaster,
    BooleanCaster,
    IdCaster,
    parse_number,
    parse_leading_int,
    is_truthy,
)

from .parameters import (
    ParamRule,
    ParamRegistry,
    MinParam,
    MaxParam,
    ValidatorParam,
    CaseParam,
    TrimParam,
    DefaultParam,
    NotEmptyParam,
    RESERVED_PARAMETERS,
)

from .serialize import (
    Codec,
    CyclicJSONCodec,
    DEFAULT_CODEC,
)

from .schema import (
    Schema,
    ValidationResult,
    validate,
    validate_async,
)

__all__ = [
    # Contexts
    "MISSING",
    "CastContext",
    "ParamContext",
    "stringify",
    # Options
    "ValidationOptions",
    "FieldPolicy",
    "resolve_field_policy",
    # Errors
    "ValidationError",
    "ValidationErrorDetail",
    "SchemaConfigurationError",
    "CastError",
    "ParamError",
    "ErrorAccumulator",
    # Type Registry
    "TypeCaster",
    "TypeRegistry",
    "IdentityCaster",
    "StringCaster",
    "NumberCaster",
    "TimestampCaster",
    "DateCaster",
    "ArrayCaster",
    "SerializeCaster",
    "BooleanCaster",
    "IdCaster",
    "parse_number",
    "parse_leading_int",
    "is_truthy",
    # Parameter Registry
    "ParamRule",
    "ParamRegistry",
    "MinParam",
    "MaxParam",
    "ValidatorParam",
    "CaseParam",
    "TrimParam",
    "DefaultParam",
    "NotEmptyParam",
    "RESERVED_PARAMETERS",
    # Serialization
    "Codec",
    "CyclicJSONCodec",
    "DEFAULT_CODEC",
    # Engine
    "Schema",
    "ValidationResult",
    "validate",
    "validate_async",
]
