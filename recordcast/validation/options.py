"""Per-call options and per-field policy resolution.

Global options and field-level overrides are merged once per field by
resolve_field_policy; the engine only ever consults the resulting
FieldPolicy.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from recordcast.core.errors import ErrorCode
from .errors import SchemaConfigurationError


class ValidationOptions(BaseModel):
    """Options for a single validate call.

    Accepts snake_case names or their camelCase spellings
    (``onlyObjectValues``, ``skipFields``, ...). Unknown keys are kept
    and reachable through ``model_extra`` so custom casters and
    parameter rules can read their own options.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="allow",
    )

    only_object_values: bool = False
    skip_fields: frozenset[str] = frozenset()
    skip_params: dict[str, frozenset[str]] = Field(default_factory=dict)
    can_be_null: bool | None = None
    empty_as_null: bool | None = None
    not_required: frozenset[str] = frozenset()
    deserialize: bool = False

    @classmethod
    def coerce(cls, options: ValidationOptions | Mapping[str, Any] | None) -> ValidationOptions:
        """Build options from None, a mapping, or an existing instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        try:
            return cls.model_validate(dict(options))
        except PydanticValidationError as e:
            raise SchemaConfigurationError.from_message(
                f"Invalid validation options: {e.error_count()} problem(s)",
                code=ErrorCode.E9011_INVALID_PARAMETER,
                errors=[err["msg"] for err in e.errors()],
            ) from e

    def params_skipped_for(self, field_name: str) -> frozenset[str]:
        return self.skip_params.get(field_name, frozenset())

    def extra(self, name: str, default: Any = None) -> Any:
        return (self.model_extra or {}).get(name, default)


@dataclass(frozen=True, slots=True)
class FieldPolicy:
    """Effective skip/required/null/empty decisions for one field."""
    field_name: str
    skipped: bool
    required: bool
    required_waived: bool
    can_be_null: bool
    empty_as_null: bool
    skip_params: frozenset[str]

    @property
    def enforces_required(self) -> bool:
        return self.required and not self.required_waived

    def runs_param(self, parameter_name: str) -> bool:
        return parameter_name not in self.skip_params


def _field_or_global(definition: Mapping[str, Any], key: str, global_value: bool | None) -> bool:
    if key in definition:
        return bool(definition[key])
    if global_value is not None:
        return bool(global_value)
    return False


def resolve_field_policy(
    field_name: str,
    definition: Mapping[str, Any],
    options: ValidationOptions,
) -> FieldPolicy:
    """Merge field-level parameters with the call's options.

    Precedence for ``canBeNull``: an explicit ``default: None`` on the
    field, then the field's own ``canBeNull``, then the global option.
    ``emptyAsNull`` is the field's flag, then the global option.
    """
    skip_params = options.params_skipped_for(field_name)

    if "default" in definition and definition["default"] is None:
        can_be_null = True
    else:
        can_be_null = _field_or_global(definition, "canBeNull", options.can_be_null)

    return FieldPolicy(
        field_name=field_name,
        skipped=field_name in options.skip_fields,
        required=bool(definition.get("required", False)),
        required_waived=field_name in options.not_required or "required" in skip_params,
        can_be_null=can_be_null,
        empty_as_null=_field_or_global(definition, "emptyAsNull", options.empty_as_null),
        skip_params=skip_params,
    )
