"""
Record Validation

Checks a populated record against the rules declared on its model.
All violations are collected into one ConfigValidationError.
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from layerconfig.core.exceptions import ConfigValidationError, Violation


def _field_values(value: Any) -> Any:
    """Current values keyed by field name, nested records included."""
    if isinstance(value, BaseModel):
        data = {
            name: _field_values(value.__dict__[name])
            for name in type(value).model_fields
            if name in value.__dict__
        }
        if value.__pydantic_extra__:
            data.update(value.__pydantic_extra__)
        return data
    if isinstance(value, (list, tuple)):
        return type(value)(_field_values(v) for v in value)
    if isinstance(value, dict):
        return {k: _field_values(v) for k, v in value.items()}
    return value


def validate_record(record: BaseModel) -> None:
    """
    Validate a record's current values against its model.

    Values are read from the record's attributes by field name, so
    aliased and excluded fields are checked like any other.
    The record itself is not modified.

    Raises:
        ConfigValidationError: With one Violation per failed rule
    """
    data = _field_values(record)
    try:
        type(record).model_validate(data, by_alias=False, by_name=True)
    except ValidationError as e:
        violations = [
            Violation(
                field=".".join(str(p) for p in err["loc"]) or "<record>",
                rule=err["type"],
                message=err["msg"],
                value=err.get("input"),
            )
            for err in e.errors()
        ]
        fields = ", ".join(dict.fromkeys(v.field for v in violations))
        raise ConfigValidationError(
            f"Invalid configuration: {len(violations)} rule(s) violated ({fields})",
            violations=violations,
            cause=e,
        ) from e
