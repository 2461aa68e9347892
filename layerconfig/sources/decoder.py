"""
Decoder

Decodes file contents into a record, by file suffix:
- .json: JSON object
- .yaml / .yml: YAML mapping
- anything else: left undecoded, the record is not touched

Only keys present in the payload are assigned; every other field keeps
its current value.
"""

import json
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from layerconfig.core.exceptions import DecodeError, ErrorContext
from layerconfig.core.fields import assign, coerce, decode_key, nested_model, record_fields
from layerconfig.observability import get_logger

log = get_logger(__name__, stage="decode")

JSON = "json"
YAML = "yaml"

_SUFFIXES = {
    ".json": JSON,
    ".yaml": YAML,
    ".yml": YAML,
}


def detect_format(reference: str) -> Optional[str]:
    """Format for a file reference, or None when the suffix is not recognised."""
    for suffix, fmt in _SUFFIXES.items():
        if reference.endswith(suffix):
            return fmt
    return None


def parse(data: bytes, fmt: str, reference: str = "") -> Any:
    """
    Parse raw bytes in the given format.

    Raises:
        DecodeError: If the payload is malformed
    """
    try:
        if fmt == JSON:
            return json.loads(data)
        return yaml.safe_load(data)
    except (ValueError, yaml.YAMLError) as e:
        # parser messages quote the input; only the position is reported
        position = _position(e)
        where = f" at line {position['line']}, column {position['column']}" if position else ""
        raise DecodeError(
            f"Invalid {fmt.upper()} in config file '{reference}'{where}",
            context=ErrorContext(path=reference, metadata=position),
            path=reference,
            cause=e,
        ) from e


def _position(error: Exception) -> dict[str, int]:
    if isinstance(error, json.JSONDecodeError):
        return {"line": error.lineno, "column": error.colno}
    mark = getattr(error, "problem_mark", None)
    if mark is not None:
        return {"line": mark.line + 1, "column": mark.column + 1}
    return {}


def decode_into(record: BaseModel, data: bytes, reference: str) -> bool:
    """
    Decode file contents into a record in place.

    Args:
        record: Target record
        data: Raw file contents
        reference: File reference, used for format detection and errors

    Returns:
        True if the contents were decoded, False for an unrecognised suffix

    Raises:
        DecodeError: If the payload is malformed, is not a mapping, or holds
            a value that does not fit its field's type
    """
    fmt = detect_format(reference)
    if fmt is None:
        log.debug("Unrecognised config file suffix, contents ignored", path=reference)
        return False

    payload = parse(data, fmt, reference)
    if payload is None:
        return True
    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"Config file '{reference}' must contain a {'object' if fmt == JSON else 'mapping'}, "
            f"got {type(payload).__name__}",
            path=reference,
        )

    _apply_mapping(record, payload, fmt, reference, "")
    return True


def _lookup(payload: Mapping[str, Any], key: str, fmt: str) -> tuple[bool, Any]:
    if key in payload:
        return True, payload[key]
    if fmt == JSON:
        folded = key.casefold()
        for k, v in payload.items():
            if isinstance(k, str) and k.casefold() == folded:
                return True, v
    return False, None


def _apply_mapping(
    record: BaseModel,
    payload: Mapping[str, Any],
    fmt: str,
    reference: str,
    path: str,
) -> None:
    for name, info in record_fields(record).items():
        found, value = _lookup(payload, decode_key(name, info, fmt), fmt)
        if not found:
            continue
        dotted = f"{path}{name}"

        model = nested_model(info)
        if model is not None and isinstance(value, Mapping):
            current = getattr(record, name)
            if current is None:
                current = model.model_construct()
                assign(record, name, current)
            _apply_mapping(current, value, fmt, reference, f"{dotted}.")
            continue

        try:
            assign(record, name, coerce(info, value))
        except ValidationError as e:
            raise DecodeError(
                f"Cannot decode '{dotted}' from config file '{reference}': "
                f"{e.errors()[0]['msg']}",
                path=reference,
                field=dotted,
                cause=e,
            ) from e
