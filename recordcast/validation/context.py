"""Per-field contexts handed to casters and parameter rules.

Contexts are immutable snapshots. The record views they carry are
read-only; handlers report changes by returning a Result, never by
writing into the record.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final, Mapping

if TYPE_CHECKING:
    from .options import ValidationOptions
    from .schema import Schema


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Marks a field absent from the input, as opposed to an explicit None.
# A handler returning Ok(MISSING) leaves the field unchanged.
MISSING: Final = _Missing.MISSING


def stringify(value: Any, _seen: frozenset[int] = frozenset()) -> str:
    """String rendering shared by the string type, empty checks and length checks.

    Integral floats drop their fraction ("15.0" renders as "15") and
    lists render as their comma-joined items, so an empty list renders
    as "". A list nested inside itself renders as "" at the repeat.
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        if id(value) in _seen:
            return ""
        seen = _seen | {id(value)}
        return ",".join(stringify(item, seen) for item in value)
    return str(value)


def field_value(record: Mapping[str, Any], field_name: str) -> Any:
    return record.get(field_name, MISSING)


@dataclass(frozen=True, slots=True)
class CastContext:
    """Everything a caster may look at."""
    field_name: str
    value: Any
    definition: Mapping[str, Any]
    options: ValidationOptions
    record: Mapping[str, Any]
    schema: Schema | None = None

    @property
    def type_name(self) -> str:
        return self.definition.get("type", "")


@dataclass(frozen=True, slots=True)
class ParamContext:
    """Everything a parameter rule may look at.

    - value: current value (after the cast and any earlier parameter)
    - record: read-only view of the normalized record so far
    - input_record: the caller's record, as passed in
    - value_before_cast: raw input value, MISSING when absent
    - value_before_params: value as it left the caster
    """
    field_name: str
    value: Any
    record: Mapping[str, Any]
    input_record: Mapping[str, Any]
    value_before_cast: Any
    value_before_params: Any
    definition: Mapping[str, Any]
    parameter_name: str
    parameter_value: Any
    options: ValidationOptions
    schema: Schema | None = None

    @property
    def type_name(self) -> str:
        return self.definition.get("type", "")

    @property
    def is_missing(self) -> bool:
        return self.value is MISSING


def read_only(record: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(record))
