"""Validation Engine

Schema pairs a structure (field name -> field definition) with the type
and parameter registries, and validates records against it:

    schema = Schema({
        "name": {"type": "string", "required": True, "trim": 50},
        "age": {"type": "number", "min": 10, "max": 20},
    })
    result = schema.validate({"name": " Tony ", "age": "15"})
    result.normalized_record  # {"name": "Tony", "age": 15}
    result.errors             # []

Fields are processed one at a time in schema order (input order with
``only_object_values``). Each field's cast and parameter chain is awaited
before the next field starts, so error order is deterministic even when
validators are asynchronous.
"""
from __future__ import annotations

import copy
import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Coroutine, Iterable, Iterator, Mapping

from recordcast.core.errors import (
    AppError,
    ErrorCode,
    Err,
    Ok,
    internal_error,
    not_allowed,
    null_not_allowed,
    required_field,
    unknown_type,
)
from recordcast.core.logging import engine_logger
from recordcast.ids import IdStrategy, RandomIdStrategy
from .coercion import TypeRegistry
from .context import MISSING, CastContext, ParamContext, field_value, read_only, stringify
from .errors import (
    CastError,
    ErrorAccumulator,
    ParamError,
    SchemaConfigurationError,
    ValidationError,
    ValidationErrorDetail,
)
from .options import FieldPolicy, ValidationOptions, resolve_field_policy
from .parameters import RESERVED_PARAMETERS, ParamRegistry

log = engine_logger()

RecordValidator = Callable[[Mapping[str, Any], "Schema"], Any]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Normalized record plus the ordered data errors."""
    normalized_record: dict[str, Any]
    errors: list[ValidationErrorDetail] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorDetail]]:
        result: dict[str, list[ValidationErrorDetail]] = {}
        for detail in self.errors:
            result.setdefault(detail.field, []).append(detail)
        return result

    def errors_for(self, field_name: str) -> list[ValidationErrorDetail]:
        return [d for d in self.errors if d.field == field_name]

    def raise_for_errors(self, message: str = "Validation failed") -> dict[str, Any]:
        """Return the normalized record, or raise ValidationError if errors exist."""
        if self.errors:
            raise ValidationError(message=message, details=list(self.errors))
        return self.normalized_record

    def to_dict(self) -> dict[str, Any]:
        return {
            "normalized_record": self.normalized_record,
            "errors": [d.to_dict() for d in self.errors],
        }

    def __iter__(self) -> Iterator[Any]:
        yield self.normalized_record
        yield self.errors


@dataclass(frozen=True, slots=True)
class FieldOutcome:
    """What processing one field produced; MISSING value means untouched."""
    value: Any = MISSING
    errors: tuple[ValidationErrorDetail, ...] = ()


def _detail(error: AppError, field_name: str, constraint: str | None = None) -> ValidationErrorDetail:
    return ValidationErrorDetail.from_app_error(error, field=field_name, constraint=constraint)


async def _settle(outcome: Any) -> Any:
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


def _as_result(outcome: Any) -> Ok | Err:
    """Normalize a handler's return value; bare None means no change."""
    if isinstance(outcome, (Ok, Err)):
        return outcome
    if outcome is None:
        return Ok(MISSING)
    return Ok(outcome)


def _run_sync(coro: Coroutine[Any, Any, Any]) -> Any:
    """Drive a coroutine that is expected to finish without suspending."""
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value
    coro.close()
    raise SchemaConfigurationError(internal_error(
        "A caster or parameter suspended during synchronous validation; use validate_async",
        code=ErrorCode.E9012_ASYNC_IN_SYNC_CONTEXT,
    ).error)


class Schema:
    """A record schema bound to its type and parameter registries.

    Schemas are read-only during validation and hold no per-call state,
    so one instance can serve concurrent validate calls.
    """

    __slots__ = ("structure", "types", "params", "record_validator", "id_strategy")

    def __init__(
        self,
        structure: Mapping[str, Mapping[str, Any]],
        *,
        types: TypeRegistry | None = None,
        params: ParamRegistry | None = None,
        record_validator: RecordValidator | None = None,
        id_strategy: IdStrategy | None = None,
    ):
        self.structure = MappingProxyType(dict(structure))
        self.types = types if types is not None else TypeRegistry.default()
        self.params = params if params is not None else ParamRegistry.default()
        self.record_validator = record_validator
        self.id_strategy = id_strategy if id_strategy is not None else RandomIdStrategy()

    def __repr__(self) -> str:
        return f"Schema(fields={list(self.structure)})"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        record: Mapping[str, Any],
        options: ValidationOptions | Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Cast and check ``record`` synchronously.

        Raises SchemaConfigurationError if a handler needs to suspend;
        use validate_async for asynchronous validators.
        """
        return _run_sync(self.validate_async(record, options))

    async def validate_async(
        self,
        record: Mapping[str, Any],
        options: ValidationOptions | Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Cast and check ``record``, awaiting asynchronous handlers."""
        options = ValidationOptions.coerce(options)
        normalized = dict(record)
        errors = ErrorAccumulator()

        for key in record:
            if key not in self.structure:
                errors.add_app_error(not_allowed(key).error, field=key)

        targets = list(record) if options.only_object_values else list(self.structure)
        for field_name in targets:
            definition = self.structure.get(field_name)
            if definition is None:
                continue
            try:
                outcome = await self._process_field(field_name, definition, record, normalized, options)
            except SchemaConfigurationError as e:
                log.warning("schema_configuration_error", field=field_name, code=e.error.code.name, message=e.error.message)
                raise
            if outcome.value is not MISSING:
                normalized[field_name] = outcome.value
            for detail in outcome.errors:
                errors.add_error(detail)

        if self.record_validator is not None:
            for detail in await self._run_record_validator(normalized):
                errors.add_error(detail)

        log.debug(
            "validation_completed",
            fields=len(targets),
            error_count=len(errors),
            only_object_values=options.only_object_values,
        )
        return ValidationResult(normalized_record=normalized, errors=errors.get_errors())

    async def _process_field(
        self,
        field_name: str,
        definition: Mapping[str, Any],
        record: Mapping[str, Any],
        normalized: Mapping[str, Any],
        options: ValidationOptions,
    ) -> FieldOutcome:
        policy = resolve_field_policy(field_name, definition, options)
        raw = field_value(record, field_name)

        if policy.skipped:
            return FieldOutcome()

        if raw is MISSING and policy.enforces_required:
            return FieldOutcome(errors=(_detail(required_field(field_name).error, field_name),))

        if raw is None:
            if policy.can_be_null:
                return FieldOutcome()
            return FieldOutcome(errors=(_detail(null_not_allowed(field_name).error, field_name),))

        if raw is not MISSING and policy.empty_as_null and stringify(raw) == "":
            return FieldOutcome(value=None)

        # A waived required field is still cast when absent, so it gets
        # its type's empty value (or a cast error).
        value = raw
        if raw is not MISSING or policy.required:
            cast = await self._cast(field_name, definition, raw, record, options)
            if cast.is_err():
                return FieldOutcome(errors=(_detail(cast.unwrap_err(), field_name, "type"),))
            if cast.unwrap() is not MISSING:
                value = cast.unwrap()

        return await self._apply_params(field_name, definition, policy, raw, value, record, normalized, options)

    async def _cast(
        self,
        field_name: str,
        definition: Mapping[str, Any],
        raw: Any,
        record: Mapping[str, Any],
        options: ValidationOptions,
    ) -> Ok | Err:
        type_name = definition.get("type")
        caster = self.types.get(type_name) if isinstance(type_name, str) else None
        if caster is None:
            raise SchemaConfigurationError(unknown_type(str(type_name), field_name).error)

        context = CastContext(
            field_name=field_name,
            value=raw,
            definition=definition,
            options=options,
            record=read_only(record),
            schema=self,
        )
        try:
            return _as_result(await _settle(caster(context)))
        except CastError as e:
            return Err(AppError(code=ErrorCode.E2008_CAST_FAILED, message=e.message,
                metadata={"field": e.field or field_name, "constraint": "type"}))
        except SchemaConfigurationError:
            raise
        except Exception as e:
            raise SchemaConfigurationError(internal_error(
                f"Caster for type '{type_name}' raised {type(e).__name__}: {e}",
                field=field_name,
                cause=e,
            ).error) from e

    async def _apply_params(
        self,
        field_name: str,
        definition: Mapping[str, Any],
        policy: FieldPolicy,
        raw: Any,
        value: Any,
        record: Mapping[str, Any],
        normalized: Mapping[str, Any],
        options: ValidationOptions,
    ) -> FieldOutcome:
        view = dict(normalized)
        if value is not MISSING:
            view[field_name] = value
        value_before_params = value
        details: list[ValidationErrorDetail] = []

        for parameter_name, parameter_value in definition.items():
            if parameter_name in RESERVED_PARAMETERS or not policy.runs_param(parameter_name):
                continue
            rule = self.params.get(parameter_name)
            if rule is None:
                continue

            context = ParamContext(
                field_name=field_name,
                value=value,
                record=MappingProxyType(view),
                input_record=record,
                value_before_cast=raw,
                value_before_params=value_before_params,
                definition=definition,
                parameter_name=parameter_name,
                parameter_value=parameter_value,
                options=options,
                schema=self,
            )
            try:
                result = _as_result(await _settle(rule(context)))
            except ParamError as e:
                details.append(ValidationErrorDetail(field=e.field or field_name, message=e.message,
                    constraint=parameter_name, code=ErrorCode.E2005_CONSTRAINT_VIOLATION))
                continue
            except SchemaConfigurationError:
                raise
            except Exception as e:
                raise SchemaConfigurationError(internal_error(
                    f"Parameter '{parameter_name}' raised {type(e).__name__}: {e}",
                    field=field_name,
                    cause=e,
                ).error) from e

            if result.is_err():
                details.append(_detail(result.unwrap_err(), field_name, parameter_name))
            elif result.unwrap() is not MISSING:
                value = result.unwrap()
                view[field_name] = value

        return FieldOutcome(value=value, errors=tuple(details))

    async def _run_record_validator(self, normalized: Mapping[str, Any]) -> list[ValidationErrorDetail]:
        outcome = await _settle(self.record_validator(read_only(normalized), self))
        if outcome is None:
            return []
        if isinstance(outcome, Mapping):
            outcome = list(outcome.items())
        if isinstance(outcome, (str, bytes)) or not isinstance(outcome, Iterable):
            raise SchemaConfigurationError.from_message(
                "Record validator must return None, a mapping, or an iterable of (field, message) pairs",
                found=type(outcome).__name__,
            )
        details = []
        for item in outcome:
            if isinstance(item, ValidationErrorDetail):
                details.append(item)
            else:
                field_name, message = item
                details.append(ValidationErrorDetail(field=field_name, message=message,
                    constraint="record_validator", code=ErrorCode.E2005_CONSTRAINT_VIOLATION))
        return details

    # ------------------------------------------------------------------
    # Record helpers
    # ------------------------------------------------------------------

    def cleanup(self, record: dict[str, Any], marker: str) -> dict[str, Any]:
        """Move fields whose definition sets ``marker`` out of ``record``.

        ``record`` is modified in place; the removed fields are returned.
        Keys with no definition in the schema are left where they are.
        """
        extracted: dict[str, Any] = {}
        for key in list(record):
            definition = self.structure.get(key)
            if definition is None:
                log.debug("cleanup_unknown_field", field=key, marker=marker)
                continue
            if definition.get(marker):
                extracted[key] = record.pop(key)
        return extracted

    @staticmethod
    def clone(record: Mapping[str, Any]) -> dict[str, Any]:
        """Deep copy of a record, safe to hand to in-place helpers."""
        return copy.deepcopy(dict(record))

    async def make_id(self, record: Mapping[str, Any]) -> Any:
        """Ask the configured identifier strategy for a new id."""
        return await _settle(self.id_strategy.make_id(record))


def validate(
    schema: Schema | Mapping[str, Mapping[str, Any]],
    record: Mapping[str, Any],
    options: ValidationOptions | Mapping[str, Any] | None = None,
) -> ValidationResult:
    """Validate ``record`` against a Schema or a bare structure mapping."""
    return _ensure_schema(schema).validate(record, options)


async def validate_async(
    schema: Schema | Mapping[str, Mapping[str, Any]],
    record: Mapping[str, Any],
    options: ValidationOptions | Mapping[str, Any] | None = None,
) -> ValidationResult:
    return await _ensure_schema(schema).validate_async(record, options)


def _ensure_schema(schema: Schema | Mapping[str, Mapping[str, Any]]) -> Schema:
    return schema if isinstance(schema, Schema) else Schema(schema)
