"""Tests for the Result types, error builders and validation error classes."""
import pytest

from recordcast.core.errors import (
    AppError,
    ErrorCode,
    Err,
    Ok,
    cast_failed,
    not_allowed,
    out_of_range,
    required_field,
    try_result,
    unknown_type,
    validation_error,
)
from recordcast.validation import (
    CastError,
    ErrorAccumulator,
    SchemaConfigurationError,
    ValidationError,
    ValidationErrorDetail,
)


class TestErrorCode:
    def test_categories(self):
        assert ErrorCode.E2001_REQUIRED_FIELD_MISSING.category == "validation"
        assert ErrorCode.E9010_UNKNOWN_TYPE.category == "configuration"
        assert ErrorCode.E9001_UNEXPECTED_ERROR.category == "internal"

    def test_is_data_error(self):
        assert ErrorCode.E2008_CAST_FAILED.is_data_error
        assert not ErrorCode.E9012_ASYNC_IN_SYNC_CONTEXT.is_data_error


class TestResult:
    def test_ok(self):
        result = Ok(2)
        assert result.is_ok() and not result.is_err()
        assert result.map(lambda v: v * 2) == Ok(4)
        assert result.and_then(lambda v: Ok(v + 1)) == Ok(3)
        assert result.unwrap_or(0) == 2
        assert list(result) == [2]

    def test_err(self):
        result = Err(AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message="bad"))
        assert result.is_err()
        assert result.map(lambda v: v * 2) is result
        assert result.unwrap_or(5) == 5
        assert list(result) == []
        with pytest.raises(ValueError):
            result.unwrap()

    def test_try_result(self):
        assert try_result(lambda: 1) == Ok(1)
        failed = try_result(lambda: int("x"), code=ErrorCode.E2008_CAST_FAILED, field="a")
        assert failed.is_err()
        assert failed.unwrap_err().code == ErrorCode.E2008_CAST_FAILED
        assert isinstance(failed.unwrap_err().cause, ValueError)
        assert failed.unwrap_err().metadata == {"field": "a"}

    def test_constructors_are_the_classes(self):
        import recordcast.core.errors as errors_package

        assert "Ok" in errors_package.__all__ and "Err" in errors_package.__all__
        assert not hasattr(errors_package, "ok")
        assert not hasattr(errors_package, "err")


class TestBuilders:
    def test_none_metadata_dropped(self):
        error = validation_error("bad", field="a").unwrap_err()
        assert error.metadata == {"field": "a"}
        assert error.field == "a"

    def test_data_error_messages(self):
        assert required_field("a").unwrap_err().message == "Field required"
        assert not_allowed("a").unwrap_err().message == "Field not allowed"
        assert cast_failed("a", "number").unwrap_err().message == "Error during casting"

    def test_cast_failed_chains_cause(self):
        cause = ValueError("nope")
        assert cast_failed("a", "date", cause).unwrap_err().cause is cause

    def test_out_of_range_bound(self):
        error = out_of_range("a", "Field is too long", constraint="max", bound=3).unwrap_err()
        assert error.metadata == {"field": "a", "constraint": "max", "bound": 3}

    def test_unknown_type(self):
        error = unknown_type("strnig", "a").unwrap_err()
        assert error.code == ErrorCode.E9010_UNKNOWN_TYPE
        assert error.message == "No casting function found, type probably wrong: strnig"

    def test_to_dict(self):
        data = required_field("a").unwrap_err().to_dict()["error"]
        assert data["code"] == "E2001_REQUIRED_FIELD_MISSING"
        assert data["category"] == "validation"
        assert data["metadata"]["field"] == "a"

    def test_with_metadata(self):
        error = required_field("a").unwrap_err()
        extended = error.with_metadata(hint="x")
        assert extended.metadata["hint"] == "x"
        assert "hint" not in error.metadata


class TestValidationErrorDetail:
    def test_from_app_error(self):
        detail = ValidationErrorDetail.from_app_error(required_field("a").unwrap_err(), field="ignored")
        assert detail == ValidationErrorDetail(
            field="a", message="Field required", constraint="required",
            code=ErrorCode.E2001_REQUIRED_FIELD_MISSING,
        )

    def test_to_dict_omits_empty_constraint(self):
        assert ValidationErrorDetail(field="a", message="m").to_dict() == {"field": "a", "message": "m"}


class TestValidationError:
    def test_single_error_str(self):
        error = ValidationError("Validation failed", [ValidationErrorDetail(field="a", message="Field required")])
        assert str(error) == "a: Field required"

    def test_many_errors(self):
        details = [
            ValidationErrorDetail(field="a", message="x"),
            ValidationErrorDetail(field="a", message="y"),
            ValidationErrorDetail(field="b", message="z"),
        ]
        error = ValidationError("Validation failed", details)
        assert str(error) == "Validation failed (3 errors)"
        assert {k: len(v) for k, v in error.field_errors.items()} == {"a": 2, "b": 1}
        assert error.to_dict()["error"]["error_count"] == 3
        assert error.to_app_error().metadata["error_count"] == 3


class TestExceptions:
    def test_schema_configuration_error(self):
        error = SchemaConfigurationError.from_message("bad schema", field="a")
        assert str(error) == "bad schema"
        assert error.error.code == ErrorCode.E9011_INVALID_PARAMETER
        assert error.error.metadata == {"field": "a"}

    def test_cast_error_defaults(self):
        error = CastError("a")
        assert error.message == "Error during casting"
        assert str(error) == "Error with field: a"


class TestErrorAccumulator:
    def test_interface(self):
        public = {name for name in dir(ErrorAccumulator) if not name.startswith("_")}
        assert public == {"add_error", "add_app_error", "get_errors"}

    def test_collects_in_order(self):
        errors = ErrorAccumulator()
        assert len(errors) == 0
        errors.add_error(ValidationErrorDetail(field="a", message="first"))
        errors.add_app_error(required_field("b").unwrap_err(), field="b")
        errors.add_error(ValidationErrorDetail(field="c", message="third"))
        assert len(errors) == 3
        assert [e.field for e in errors.get_errors()] == ["a", "b", "c"]

    def test_get_errors_returns_copy(self):
        errors = ErrorAccumulator()
        errors.add_error(ValidationErrorDetail(field="a", message="first"))
        errors.get_errors().clear()
        assert len(errors) == 1
