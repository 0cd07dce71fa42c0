"""Type Registry: per-field casting

Each declared field type maps to a caster that turns a raw input value
into its canonical representation, or reports a cast failure.

Features:
- Casters are frozen dataclasses returning Result values
- Explicit name -> caster registry, extensible via register()
- Absent optional fields are never cast. An absent field whose
  `required` was waived is cast from MISSING and gets the type's
  empty value
"""
from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Awaitable, Callable, ClassVar, Iterator, Union

from recordcast.core.errors import AppError, ErrorCode, Ok, Result, cast_failed, try_result
from recordcast.core.logging import registry_logger
from .context import MISSING, CastContext, stringify
from .serialize import DEFAULT_CODEC, Codec

log = registry_logger()

CasterFn = Callable[[CastContext], Union[Result[Any, AppError], Awaitable[Result[Any, AppError]], Any]]

_PREFIXED_INT = re.compile(r"^0[xXoObB][0-9a-fA-F]+$")
_LEADING_INT = re.compile(r"^\s*([+-]?)(?:0[xX]([0-9a-fA-F]+)|(\d+))")


def parse_number(value: Any) -> int | float | Decimal | None:
    """Parse a numeric value. Returns None when the value is not a number.

    Blank strings parse as 0, booleans as 0/1, and ``0x``/``0o``/``0b``
    prefixes are honoured. NaN is never a valid result.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return 0
    if "_" in text:
        return None
    if _PREFIXED_INT.match(text):
        try:
            return int(text, 0)
        except ValueError:
            return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def parse_leading_int(value: Any) -> int | None:
    """Parse the leading integer of a value ("12abc" -> 12, 3.7 -> 3)."""
    if isinstance(value, bool) or value is None or value is MISSING:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    sign, hex_digits, digits = match.groups()
    number = int(hex_digits, 16) if hex_digits else int(digits)
    return -number if sign == "-" else number


def is_truthy(value: Any) -> bool:
    """Truthiness where only None, False, 0, NaN and "" are falsy.

    Empty containers count as true: they are values, not absence.
    """
    if value is None or value is MISSING or value is False:
        return False
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


@dataclass(frozen=True, slots=True)
class TypeCaster(ABC):
    """Base class for casters.

    ``cast`` returns Ok(value), Ok(MISSING) to leave the field as it is,
    or Err via ``fail``. It may also return an awaitable resolving to
    one of those.
    """
    type_name: ClassVar[str] = ""

    @abstractmethod
    def cast(self, context: CastContext) -> Result[Any, AppError]:
        """Cast context.value to this type."""

    def fail(self, context: CastContext, cause: Exception | None = None) -> Result[Any, AppError]:
        return cast_failed(context.field_name, context.type_name or self.type_name, cause)

    def __call__(self, context: CastContext) -> Result[Any, AppError]:
        return self.cast(context)


@dataclass(frozen=True, slots=True)
class IdentityCaster(TypeCaster):
    """``none`` and ``blob``: values pass through untouched."""
    type_name: ClassVar[str] = "none"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        return Ok(context.value)


@dataclass(frozen=True, slots=True)
class StringCaster(TypeCaster):
    """Stringify and strip, unless the field sets ``noTrim``/``notTrim``."""
    type_name: ClassVar[str] = "string"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        value = context.value
        try:
            text = stringify(value)
        except (TypeError, ValueError) as e:
            return self.fail(context, e)
        if context.definition.get("noTrim") or context.definition.get("notTrim"):
            return Ok(text)
        return Ok(text.strip())


@dataclass(frozen=True, slots=True)
class NumberCaster(TypeCaster):
    type_name: ClassVar[str] = "number"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        if context.value is MISSING:
            return Ok(0)
        number = parse_number(context.value)
        if number is None:
            return self.fail(context)
        return Ok(number)


@dataclass(frozen=True, slots=True)
class TimestampCaster(TypeCaster):
    """Like ``number``, with no default for absent values.

    Mapping empty strings to None is left to ``emptyAsNull``.
    """
    type_name: ClassVar[str] = "timestamp"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        number = parse_number(context.value) if context.value is not MISSING else None
        if number is None:
            return self.fail(context)
        return Ok(number)


@dataclass(frozen=True, slots=True)
class DateCaster(TypeCaster):
    """Cast to datetime.

    Accepts datetime/date objects, ISO8601 strings (with ``Z`` suffix)
    and epoch milliseconds. Naive results get ``default_timezone``.
    """
    type_name: ClassVar[str] = "date"
    default_timezone: timezone | None = timezone.utc

    def _parse(self, value: str) -> datetime:
        """Parse ISO8601 string handling Z suffix."""
        normalized = value.strip().replace("Z", "+00:00")
        dt = datetime.fromisoformat(normalized)
        if dt.tzinfo is None and self.default_timezone:
            dt = dt.replace(tzinfo=self.default_timezone)
        return dt

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        value = context.value
        if value is MISSING:
            return Ok(datetime.now(self.default_timezone))
        if isinstance(value, datetime):
            return Ok(value)
        if isinstance(value, date):
            return Ok(datetime.combine(value, time(), tzinfo=self.default_timezone))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return Ok(datetime.fromtimestamp(value / 1000, tz=self.default_timezone or timezone.utc))
            except (OverflowError, OSError, ValueError) as e:
                return self.fail(context, e)
        if isinstance(value, str):
            try:
                return Ok(self._parse(value))
            except ValueError as e:
                return self.fail(context, e)
        return self.fail(context)


@dataclass(frozen=True, slots=True)
class ArrayCaster(TypeCaster):
    type_name: ClassVar[str] = "array"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        value = context.value
        if value is MISSING:
            return Ok(MISSING)
        if isinstance(value, list):
            return Ok(value)
        if isinstance(value, tuple):
            return Ok(list(value))
        return Ok([value])


@dataclass(frozen=True, slots=True)
class SerializeCaster(TypeCaster):
    """Encode to a string, or decode one when ``options.deserialize`` is set."""
    type_name: ClassVar[str] = "serialize"
    codec: Codec = DEFAULT_CODEC

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        value = context.value
        if context.options.deserialize:
            if not isinstance(value, str):
                return self.fail(context)
            result = try_result(lambda: self.codec.decode(value), code=ErrorCode.E2008_CAST_FAILED)
        else:
            if value is MISSING:
                return Ok(MISSING)
            result = try_result(lambda: self.codec.encode(value), code=ErrorCode.E2008_CAST_FAILED)
        if result.is_err():
            return self.fail(context, result.unwrap_err().cause)
        return result


@dataclass(frozen=True, slots=True)
class BooleanCaster(TypeCaster):
    """Strings compare against literals, other values use is_truthy.

    A field may override the literals with ``stringFalseWhen`` and
    ``stringTrueWhen``; a ``stringTrueWhen`` override replaces both
    default true literals. Any other string is False.
    """
    type_name: ClassVar[str] = "boolean"
    false_literal: str = "false"
    true_literals: tuple[str, ...] = ("true", "on")

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        value = context.value
        if isinstance(value, str):
            false_literal = context.definition.get("stringFalseWhen") or self.false_literal
            true_override = context.definition.get("stringTrueWhen")
            true_literals = (true_override,) if true_override else self.true_literals
            if value == false_literal:
                return Ok(False)
            return Ok(value in true_literals)
        return Ok(is_truthy(value))


@dataclass(frozen=True, slots=True)
class IdCaster(TypeCaster):
    """Parses an already-chosen identifier; never generates one."""
    type_name: ClassVar[str] = "id"

    def cast(self, context: CastContext) -> Result[Any, AppError]:
        number = parse_leading_int(context.value)
        if number is None:
            return self.fail(context)
        return Ok(number)


@dataclass(slots=True)
class TypeRegistry:
    """Mapping from declared type name to caster.

    Usage:
        types = TypeRegistry.default()
        types.register("email", EmailCaster())
        caster = types.get("email")
    """
    _casters: dict[str, CasterFn] = field(default_factory=dict)

    def register(self, name: str, caster: CasterFn) -> TypeRegistry:
        """Register (or replace) the caster for ``name``. Returns self for chaining."""
        if not callable(caster):
            raise TypeError(f"Caster for type '{name}' must be callable")
        self._casters[name] = caster
        log.debug("type_registered", type_name=name, caster=type(caster).__name__)
        return self

    def get(self, name: str) -> CasterFn | None:
        return self._casters.get(name)

    def copy(self) -> TypeRegistry:
        return TypeRegistry(dict(self._casters))

    def __contains__(self, name: object) -> bool:
        return name in self._casters

    def __iter__(self) -> Iterator[str]:
        return iter(self._casters)

    @classmethod
    def default(cls) -> TypeRegistry:
        """Fresh registry holding the built-in types."""
        identity = IdentityCaster()
        return cls({
            "none": identity,
            "blob": identity,
            "string": StringCaster(),
            "number": NumberCaster(),
            "timestamp": TimestampCaster(),
            "date": DateCaster(),
            "array": ArrayCaster(),
            "serialize": SerializeCaster(),
            "boolean": BooleanCaster(),
            "id": IdCaster(),
        })
