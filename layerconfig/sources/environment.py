"""
Environment Overlay

Applies environment variables to a record that may already hold values
decoded from a file.

Precedence:
- a set variable fills a field that is still unset
- a set variable replaces an already set field only if its binding has
  `overwrite=True`
- a missing variable leaves the field alone, except that `default=` fills
  an unset field and `required=True` fails on an unset field

Nested records are walked recursively; `Env(prefix=...)` on a nested
record field is prepended to every variable below it.
"""

import os
import typing
from typing import Any, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.fields import FieldInfo

from layerconfig.core.exceptions import EnvOverlayError
from layerconfig.core.fields import (
    Env,
    assign,
    coerce,
    field_type,
    find_marker,
    is_unset,
    nested_model,
    record_fields,
)
from layerconfig.observability import get_logger

log = get_logger(__name__, stage="environment")

_SEQUENCES = (list, tuple, set, frozenset)


def overlay_environment(
    record: BaseModel,
    prefix: str = "",
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Overlay environment variables onto a record in place.

    Args:
        record: Target record
        prefix: Prepended to every variable name
        environ: Variables to read; defaults to the process environment

    Raises:
        EnvOverlayError: On a value that does not fit its field, a missing
            required variable, or a binding the field cannot carry
    """
    _overlay(record, prefix, os.environ if environ is None else environ, "")


def _overlay(record: BaseModel, prefix: str, environ: Mapping[str, str], path: str) -> bool:
    """Apply bindings below `record`; True when any field was assigned."""
    applied = False
    for name, info in record_fields(record).items():
        binding = find_marker(info, Env)
        dotted = f"{path}{name}"
        model = nested_model(info)

        if model is not None and (binding is None or not binding.name):
            nested_prefix = prefix + (binding.prefix if binding else "")
            current = getattr(record, name)
            if current is not None:
                applied |= _overlay(current, nested_prefix, environ, f"{dotted}.")
                continue
            # an absent record is only created when a variable below it is applied
            scratch = model.model_construct()
            if _overlay(scratch, nested_prefix, environ, f"{dotted}."):
                assign(record, name, scratch)
                applied = True
            continue

        if binding is None:
            continue
        if not binding.name:
            raise EnvOverlayError(
                f"Env binding on '{dotted}' has no variable name; "
                f"prefix is only valid on nested record fields",
                field=dotted,
            )

        var = prefix + binding.name
        raw = environ.get(var)
        unset = is_unset(record, name)

        if raw is None:
            if not unset:
                continue
            if binding.default is not None:
                raw = binding.default
            elif binding.required:
                raise EnvOverlayError(
                    f"Missing required environment variable {var}",
                    env_var=var,
                    field=dotted,
                )
            else:
                continue
        elif not unset and not binding.overwrite:
            log.debug("Environment variable ignored, field already set", env_var=var, field=dotted)
            continue

        try:
            assign(record, name, parse_value(info, binding, raw))
        except ValueError as e:
            detail = e.errors()[0]["msg"] if isinstance(e, ValidationError) else str(e)
            raise EnvOverlayError(
                f"Invalid value for environment variable {var}: {detail}",
                env_var=var,
                field=dotted,
                cause=e,
            ) from e
        log.debug("Applied environment variable", env_var=var, field=dotted)
        applied = True

    return applied


def parse_value(info: FieldInfo, binding: Env, raw: str) -> Any:
    """
    Convert a raw environment string to the field's type.

    Sequences are split on `binding.delimiter`; mappings on
    `binding.delimiter` then `binding.separator`. Nested records are read
    as JSON.

    Raises:
        ValueError: If the value does not fit the type, including
            pydantic.ValidationError
    """
    annotation = field_type(info)
    origin = typing.get_origin(annotation) or annotation

    if nested_model(info) is not None:
        return TypeAdapter(info.annotation).validate_json(raw)
    if origin in _SEQUENCES:
        items = [item.strip() for item in raw.split(binding.delimiter)] if raw else []
        return coerce(info, items)
    if origin is dict:
        pairs = {}
        for item in raw.split(binding.delimiter) if raw else []:
            key, sep, value = item.partition(binding.separator)
            if not sep:
                raise ValueError(
                    f"Expected key{binding.separator}value pairs, got '{item}'"
                )
            pairs[key.strip()] = value.strip()
        return coerce(info, pairs)
    return coerce(info, raw)
