import pytest

from recordcast.validation import CastContext, ParamContext, Schema, ValidationOptions, MISSING


@pytest.fixture
def person_schema():
    return Schema({
        "name": {"type": "string", "required": True, "trim": 20},
        "surname": {"type": "string", "trim": 10},
        "age": {"type": "number", "min": 10, "max": 20},
        "level": {"type": "number", "default": 10},
    })


def make_cast_context(value, type_name, options=None, **definition):
    return CastContext(
        field_name="f",
        value=value,
        definition={"type": type_name, **definition},
        options=ValidationOptions.coerce(options),
        record={} if value is MISSING else {"f": value},
    )


def make_param_context(value, type_name, parameter_name, parameter_value, *, before_cast=None, **definition):
    definition = {"type": type_name, parameter_name: parameter_value, **definition}
    return ParamContext(
        field_name="f",
        value=value,
        record={} if value is MISSING else {"f": value},
        input_record={},
        value_before_cast=value if before_cast is None else before_cast,
        value_before_params=value,
        definition=definition,
        parameter_name=parameter_name,
        parameter_value=parameter_value,
        options=ValidationOptions(),
    )
