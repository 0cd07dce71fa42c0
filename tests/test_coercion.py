"""Tests for the built-in casters and the type registry."""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from recordcast.core.errors import ErrorCode, Ok
from recordcast.validation import (
    MISSING,
    BooleanCaster,
    DateCaster,
    IdCaster,
    NumberCaster,
    SerializeCaster,
    StringCaster,
    TimestampCaster,
    TypeRegistry,
    is_truthy,
    parse_leading_int,
    parse_number,
)
from recordcast.validation.coercion import ArrayCaster, IdentityCaster

from .conftest import make_cast_context


def cast(caster, value, type_name, options=None, **definition):
    return caster(make_cast_context(value, type_name, options, **definition))


class TestParseNumber:
    def test_integers_stay_integers(self):
        assert parse_number("15") == 15
        assert isinstance(parse_number("15"), int)

    def test_floats(self):
        assert parse_number("1.5") == 1.5
        assert parse_number(" -2.25 ") == -2.25

    def test_blank_is_zero(self):
        assert parse_number("") == 0
        assert parse_number("   ") == 0

    def test_prefixed_integers(self):
        assert parse_number("0x10") == 16
        assert parse_number("0b101") == 5
        assert parse_number("0o17") == 15

    def test_booleans(self):
        assert parse_number(True) == 1
        assert parse_number(False) == 0

    def test_rejects_garbage(self):
        assert parse_number("abc") is None
        assert parse_number("12abc") is None
        assert parse_number("1_000") is None
        assert parse_number([1]) is None
        assert parse_number(None) is None

    def test_nan_is_never_a_number(self):
        assert parse_number("nan") is None
        assert parse_number(float("nan")) is None
        assert parse_number(Decimal("NaN")) is None

    @given(st.integers())
    @settings(max_examples=100)
    def test_integer_text_roundtrip(self, n):
        assert parse_number(str(n)) == n


class TestParseLeadingInt:
    @pytest.mark.parametrize("value, expected", [
        ("12abc", 12),
        ("42", 42),
        (" 7 ", 7),
        ("-5", -5),
        ("0x1f", 31),
        (3.7, 3),
        (-3.7, -3),
        (9, 9),
    ])
    def test_parses(self, value, expected):
        assert parse_leading_int(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, float("inf"), MISSING])
    def test_rejects(self, value):
        assert parse_leading_int(value) is None


class TestIsTruthy:
    @pytest.mark.parametrize("value", [None, MISSING, False, 0, 0.0, float("nan"), ""])
    def test_falsy(self, value):
        assert is_truthy(value) is False

    @pytest.mark.parametrize("value", [True, 1, -1, "0", "false", [], {}, 0.5])
    def test_truthy(self, value):
        assert is_truthy(value) is True


class TestStringCaster:
    def test_strips_by_default(self):
        assert cast(StringCaster(), "  hi  ", "string") == Ok("hi")

    def test_no_trim(self):
        assert cast(StringCaster(), "  hi  ", "string", noTrim=True) == Ok("  hi  ")
        assert cast(StringCaster(), "  hi  ", "string", notTrim=True) == Ok("  hi  ")

    def test_stringifies(self):
        assert cast(StringCaster(), 12, "string") == Ok("12")
        assert cast(StringCaster(), True, "string") == Ok("true")
        assert cast(StringCaster(), False, "string") == Ok("false")

    def test_absent_and_none_become_empty(self):
        assert cast(StringCaster(), MISSING, "string") == Ok("")
        assert cast(StringCaster(), None, "string") == Ok("")

    def test_integral_floats_drop_fraction(self):
        assert cast(StringCaster(), 15.0, "string") == Ok("15")
        assert cast(StringCaster(), 1.5, "string") == Ok("1.5")

    def test_lists_join_with_commas(self):
        assert cast(StringCaster(), [1, 2], "string") == Ok("1,2")
        assert cast(StringCaster(), [], "string") == Ok("")
        assert cast(StringCaster(), [None, [3.0, "a"]], "string") == Ok(",3,a")

    def test_self_referencing_list(self):
        value = [1]
        value.append(value)
        assert cast(StringCaster(), value, "string") == Ok("1,")


class TestNumberCaster:
    def test_casts_strings(self):
        assert cast(NumberCaster(), "15", "number") == Ok(15)

    def test_absent_is_zero(self):
        assert cast(NumberCaster(), MISSING, "number") == Ok(0)

    def test_failure(self):
        result = cast(NumberCaster(), "abc", "number")
        assert result.is_err()
        error = result.unwrap_err()
        assert error.message == "Error during casting"
        assert error.code == ErrorCode.E2008_CAST_FAILED
        assert error.metadata["field"] == "f"
        assert error.metadata["type"] == "number"


class TestTimestampCaster:
    def test_casts(self):
        assert cast(TimestampCaster(), "1700000000", "timestamp") == Ok(1700000000)
        assert cast(TimestampCaster(), 1.5, "timestamp") == Ok(1.5)

    def test_absent_fails(self):
        assert cast(TimestampCaster(), MISSING, "timestamp").is_err()

    def test_garbage_fails(self):
        assert cast(TimestampCaster(), "soon", "timestamp").is_err()


class TestDateCaster:
    def test_iso_with_z(self):
        result = cast(DateCaster(), "2024-01-15T10:30:00Z", "date")
        assert result.unwrap() == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_naive_iso_gets_utc(self):
        result = cast(DateCaster(), "2024-01-15", "date").unwrap()
        assert result == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert result.tzinfo is not None

    def test_date_object(self):
        result = cast(DateCaster(), date(2024, 1, 15), "date").unwrap()
        assert result == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_datetime_passes_through(self):
        value = datetime(2020, 5, 1, 8, 0, tzinfo=timezone.utc)
        assert cast(DateCaster(), value, "date").unwrap() is value

    def test_epoch_milliseconds(self):
        assert cast(DateCaster(), 0, "date").unwrap() == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert cast(DateCaster(), 86_400_000, "date").unwrap() == datetime(1970, 1, 2, tzinfo=timezone.utc)

    def test_absent_is_now(self):
        result = cast(DateCaster(), MISSING, "date").unwrap()
        assert abs(datetime.now(timezone.utc) - result) < timedelta(seconds=5)

    def test_garbage_fails(self):
        assert cast(DateCaster(), "not a date", "date").is_err()
        assert cast(DateCaster(), ["2024-01-01"], "date").is_err()


class TestArrayCaster:
    def test_list_passes_through(self):
        value = [1, 2]
        assert cast(ArrayCaster(), value, "array").unwrap() is value

    def test_tuple_becomes_list(self):
        assert cast(ArrayCaster(), (1, 2), "array") == Ok([1, 2])

    def test_scalar_is_wrapped(self):
        assert cast(ArrayCaster(), "a", "array") == Ok(["a"])

    def test_absent_stays_absent(self):
        assert cast(ArrayCaster(), MISSING, "array") == Ok(MISSING)


class TestIdentityCaster:
    def test_passes_through(self):
        value = object()
        assert cast(IdentityCaster(), value, "none").unwrap() is value


class TestBooleanCaster:
    @pytest.mark.parametrize("value, expected", [
        ("false", False),
        ("true", True),
        ("on", True),
        ("yes", False),
        ("", False),
        (0, False),
        (1, True),
        (None, False),
        ([], True),
        (True, True),
    ])
    def test_default_literals(self, value, expected):
        assert cast(BooleanCaster(), value, "boolean") == Ok(expected)

    def test_true_override_replaces_defaults(self):
        caster = BooleanCaster()
        assert cast(caster, "yes", "boolean", stringTrueWhen="yes") == Ok(True)
        assert cast(caster, "on", "boolean", stringTrueWhen="yes") == Ok(False)

    def test_false_override(self):
        caster = BooleanCaster()
        assert cast(caster, "no", "boolean", stringFalseWhen="no") == Ok(False)
        assert cast(caster, "true", "boolean", stringFalseWhen="no") == Ok(True)


class TestIdCaster:
    @pytest.mark.parametrize("value, expected", [("12abc", 12), (3.7, 3), ("0x1f", 31), ("42", 42)])
    def test_parses(self, value, expected):
        assert cast(IdCaster(), value, "id") == Ok(expected)

    @pytest.mark.parametrize("value", ["abc", True, None])
    def test_rejects(self, value):
        assert cast(IdCaster(), value, "id").is_err()


class TestSerializeCaster:
    def test_encodes_to_string(self):
        result = cast(SerializeCaster(), {"a": [1, 2]}, "serialize").unwrap()
        assert isinstance(result, str)

    def test_decodes_with_option(self):
        encoded = cast(SerializeCaster(), {"a": [1, 2]}, "serialize").unwrap()
        decoded = cast(SerializeCaster(), encoded, "serialize", {"deserialize": True})
        assert decoded == Ok({"a": [1, 2]})

    def test_decode_requires_string(self):
        assert cast(SerializeCaster(), 12, "serialize", {"deserialize": True}).is_err()

    def test_absent_is_left_alone(self):
        assert cast(SerializeCaster(), MISSING, "serialize") == Ok(MISSING)
        assert cast(SerializeCaster(), MISSING, "serialize", {"deserialize": True}).is_err()

    def test_decode_bad_payload(self):
        result = cast(SerializeCaster(), "{not json", "serialize", {"deserialize": True})
        assert result.is_err()
        assert result.unwrap_err().cause is not None


class TestTypeRegistry:
    def test_default_types(self):
        types = TypeRegistry.default()
        for name in ("none", "blob", "string", "number", "timestamp", "date", "array", "serialize", "boolean", "id"):
            assert name in types

    def test_register_is_chainable(self):
        types = TypeRegistry.default().register("upper", lambda ctx: Ok(str(ctx.value).upper()))
        assert "upper" in types
        assert types.get("upper")(make_cast_context("x", "upper")) == Ok("X")

    def test_register_rejects_non_callable(self):
        with pytest.raises(TypeError):
            TypeRegistry().register("broken", "not a function")

    def test_copy_is_independent(self):
        original = TypeRegistry.default()
        copied = original.copy().register("extra", IdentityCaster())
        assert "extra" in copied
        assert "extra" not in original

    def test_default_registries_are_fresh(self):
        TypeRegistry.default().register("extra", IdentityCaster())
        assert "extra" not in TypeRegistry.default()
