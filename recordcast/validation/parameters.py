"""Parameter Registry: per-field constraints and transforms

Parameters run after a successful cast, in the order the field
definition declares them. Each rule returns:

- Ok(MISSING): no change
- Ok(value): the field's new value
- Err(AppError): a data error for the field

or an awaitable resolving to one of those. Rules never raise for bad
data; a misconfigured schema raises SchemaConfigurationError.
"""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Awaitable, Callable, ClassVar, Iterator, Union

from recordcast.core.errors import (
    AppError,
    Ok,
    Result,
    constraint_violation,
    empty_value,
    invalid_parameter,
    out_of_range,
)
from recordcast.core.logging import registry_logger
from .coercion import parse_number
from .context import MISSING, ParamContext, stringify
from .errors import SchemaConfigurationError

log = registry_logger()

ParamFn = Callable[[ParamContext], Union[Result[Any, AppError], Awaitable[Result[Any, AppError]], Any]]

# Definition keys consumed by the engine or by casters, never dispatched
# as parameters.
RESERVED_PARAMETERS = frozenset({
    "type",
    "required",
    "canBeNull",
    "emptyAsNull",
    "noTrim",
    "notTrim",
    "stringFalseWhen",
    "stringTrueWhen",
})

UNCHANGED: Result[Any, AppError] = Ok(MISSING)


@dataclass(frozen=True, slots=True)
class ParamRule(ABC):
    """Base class for parameter rules."""
    parameter_name: ClassVar[str] = ""

    @abstractmethod
    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        """Apply the rule to context.value."""

    def __call__(self, context: ParamContext) -> Result[Any, AppError]:
        return self.apply(context)


@dataclass(frozen=True, slots=True)
class MinParam(ParamRule):
    """Lower bound: numeric value for ``number``, length for ``string``."""
    parameter_name: ClassVar[str] = "min"

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        bound, value = context.parameter_value, context.value
        if value is MISSING or bound is None:
            return UNCHANGED
        if context.type_name == "number" and _is_number(value) and value < bound:
            return out_of_range(context.field_name, "Field's value is too low", constraint="min", bound=bound)
        if context.type_name == "string" and len(stringify(value)) < bound:
            return out_of_range(context.field_name, "Field is too short", constraint="min", bound=bound)
        return UNCHANGED


@dataclass(frozen=True, slots=True)
class MaxParam(ParamRule):
    """Upper bound: numeric value for ``number``, length for ``string``."""
    parameter_name: ClassVar[str] = "max"

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        bound, value = context.parameter_value, context.value
        if value is MISSING or bound is None:
            return UNCHANGED
        if context.type_name == "number" and _is_number(value) and value > bound:
            return out_of_range(context.field_name, "Field's value is too high", constraint="max", bound=bound)
        if context.type_name == "string" and len(stringify(value)) > bound:
            return out_of_range(context.field_name, "Field is too long", constraint="max", bound=bound)
        return UNCHANGED


@dataclass(frozen=True, slots=True)
class ValidatorParam(ParamRule):
    """Field-level custom check.

    The parameter value is called as ``fn(value, record, context)``; a
    returned string is the error message. Coroutine functions are
    awaited by the engine. Absent values are passed as None.
    """
    parameter_name: ClassVar[str] = "validator"

    def apply(self, context: ParamContext) -> Result[Any, AppError] | Awaitable[Result[Any, AppError]]:
        fn = context.parameter_value
        if not callable(fn):
            raise SchemaConfigurationError(invalid_parameter(
                "validator",
                context.field_name,
                f"Validator function needs to be a function, found: {type(fn).__name__}",
            ).error)
        value = None if context.value is MISSING else context.value
        outcome = fn(value, context.record, context)
        if inspect.isawaitable(outcome):
            return self._settle(outcome, context)
        return self._to_result(outcome, context)

    async def _settle(self, pending: Awaitable[Any], context: ParamContext) -> Result[Any, AppError]:
        return self._to_result(await pending, context)

    @staticmethod
    def _to_result(outcome: Any, context: ParamContext) -> Result[Any, AppError]:
        if isinstance(outcome, str):
            return constraint_violation(context.field_name, outcome, constraint="validator")
        return UNCHANGED


@dataclass(frozen=True, slots=True)
class CaseParam(ParamRule):
    """``uppercase`` / ``lowercase`` for string fields holding a str."""
    transform: Callable[[str], str] = str.upper

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        if not context.parameter_value:
            return UNCHANGED
        if context.type_name != "string" or not isinstance(context.value, str):
            return UNCHANGED
        return Ok(self.transform(context.value))


@dataclass(frozen=True, slots=True)
class TrimParam(ParamRule):
    """Truncate strings to N characters.

    Other types are never truncated: an integral pre-cast value whose
    rendering is longer than N characters is rejected instead, making
    ``trim`` a digit-count check for numbers.
    """
    parameter_name: ClassVar[str] = "trim"

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        limit = context.parameter_value
        if limit is None:
            return UNCHANGED
        if context.type_name == "string" and isinstance(context.value, str):
            return Ok(context.value[:limit])

        number = parse_number(context.value_before_cast) if context.value_before_cast is not MISSING else None
        if number is None or not _is_integral(number):
            return UNCHANGED
        if len(str(int(number))) > limit:
            return out_of_range(context.field_name, "Value out of range", constraint="trim", bound=limit)
        return UNCHANGED


@dataclass(frozen=True, slots=True)
class DefaultParam(ParamRule):
    """Fill absent fields with a literal or a producer's result.

    Producers taking a required positional argument receive the
    ParamContext; others are called with no arguments.
    """
    parameter_name: ClassVar[str] = "default"

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        if context.value_before_cast is not MISSING:
            return UNCHANGED
        default = context.parameter_value
        if callable(default):
            return Ok(_call_producer(default, context))
        return Ok(default)


@dataclass(frozen=True, slots=True)
class NotEmptyParam(ParamRule):
    parameter_name: ClassVar[str] = "notEmpty"

    def apply(self, context: ParamContext) -> Result[Any, AppError]:
        if not context.parameter_value or isinstance(context.value, list):
            return UNCHANGED
        if context.value_before_cast is MISSING:
            return UNCHANGED
        if stringify(context.value_before_cast) == "":
            return empty_value(context.field_name)
        return UNCHANGED


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_integral(number: Any) -> bool:
    if isinstance(number, int):
        return True
    try:
        return number == int(number)
    except (OverflowError, ValueError):
        return False


def _call_producer(producer: Callable[..., Any], context: ParamContext) -> Any:
    try:
        signature = inspect.signature(producer)
    except (TypeError, ValueError):
        return producer()
    wants_context = any(
        p.kind is inspect.Parameter.VAR_POSITIONAL
        or (p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            and p.default is inspect.Parameter.empty)
        for p in signature.parameters.values()
    )
    return producer(context) if wants_context else producer()


@dataclass(slots=True)
class ParamRegistry:
    """Mapping from parameter name to rule.

    Usage:
        params = ParamRegistry.default()
        params.register("slug", lambda ctx: Ok(slugify(ctx.value)))
    """
    _rules: dict[str, ParamFn] = field(default_factory=dict)

    def register(self, name: str, rule: ParamFn) -> ParamRegistry:
        """Register (or replace) the rule for ``name``. Returns self for chaining."""
        if name in RESERVED_PARAMETERS:
            raise ValueError(f"'{name}' is handled by the engine and cannot be registered")
        if not callable(rule):
            raise TypeError(f"Rule for parameter '{name}' must be callable")
        self._rules[name] = rule
        log.debug("param_registered", parameter=name, rule=type(rule).__name__)
        return self

    def get(self, name: str) -> ParamFn | None:
        return self._rules.get(name)

    def copy(self) -> ParamRegistry:
        return ParamRegistry(dict(self._rules))

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    @classmethod
    def default(cls) -> ParamRegistry:
        """Fresh registry holding the built-in parameters."""
        return cls({
            "min": MinParam(),
            "max": MaxParam(),
            "validator": ValidatorParam(),
            "uppercase": CaseParam(str.upper),
            "lowercase": CaseParam(str.lower),
            "trim": TrimParam(),
            "default": DefaultParam(),
            "notEmpty": NotEmptyParam(),
        })
