"""
Field Annotations

Markers attached to record fields through `typing.Annotated`, and the
helpers that read them back from a pydantic model.

Example:
    ```python
    class Server(BaseModel):
        port: Annotated[int, Json("port"), Env("PORT"), Field(gt=0)] = 0
        host: Annotated[str, Yaml("host"), Env("HOST", overwrite=True)] = ""

    class MyConfig(BaseModel):
        server: Annotated[Server, Env(prefix="SERVER_")] = Field(default_factory=Server)
    ```
"""

import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, TypeAdapter
from pydantic.fields import FieldInfo

T = TypeVar("T")


# ============================================================================
# Markers
# ============================================================================

@dataclass(frozen=True)
class Json:
    """Key of the field in a JSON payload."""
    key: str


@dataclass(frozen=True)
class Yaml:
    """Key of the field in a YAML payload."""
    key: str


@dataclass(frozen=True)
class Env:
    """
    Environment variable binding.

    Attributes:
        name: Variable name, without any prefix
        overwrite: Replace a value already set by the file
        required: Fail when the variable is missing and the field is unset
        default: Raw value used when the variable is missing and the field is unset
        prefix: For nested records, prepended to every sub-field's variable
        delimiter: Item separator for list, set, tuple and dict fields
        separator: Key/value separator for dict fields
    """
    name: str = ""
    overwrite: bool = False
    required: bool = False
    default: Optional[str] = None
    prefix: str = ""
    delimiter: str = ","
    separator: str = ":"

    def __post_init__(self):
        if self.required and self.default is not None:
            raise ValueError(f"Env binding '{self.name}' cannot be both required and defaulted")
        if self.name and self.prefix:
            raise ValueError(f"Env binding '{self.name}' cannot have both a name and a prefix")


# ============================================================================
# Introspection
# ============================================================================

def record_fields(record: BaseModel) -> dict[str, FieldInfo]:
    """Declared fields of a record, in declaration order."""
    return type(record).model_fields


def find_marker(info: FieldInfo, kind: type[T]) -> Optional[T]:
    """Return the first `kind` marker attached to a field, if any."""
    for item in info.metadata:
        if isinstance(item, kind):
            return item
    return None


def decode_key(name: str, info: FieldInfo, fmt: str) -> str:
    """Payload key for a field in the given format ("json" or "yaml")."""
    marker = find_marker(info, Json if fmt == "json" else Yaml)
    if marker is not None:
        return marker.key
    return name


def field_type(info: FieldInfo) -> Any:
    """A field's annotation with any Optional wrapper removed."""
    annotation = info.annotation
    if typing.get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def nested_model(info: FieldInfo) -> Optional[type[BaseModel]]:
    """The record type of a nested-record field (plain or Optional), else None."""
    annotation = field_type(info)
    if inspect.isclass(annotation) and issubclass(annotation, BaseModel):
        return annotation
    return None


def is_zero(value: Any) -> bool:
    """True for the zero value of a primitive or container type."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex, str, bytes)):
        return not value
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def is_unset(record: BaseModel, name: str) -> bool:
    """A field is unset if it was never assigned or still holds a zero value."""
    if name not in record.model_fields_set:
        return True
    return is_zero(getattr(record, name))


def coerce(info: FieldInfo, value: Any) -> Any:
    """
    Convert a raw value to the field's type.

    Only the type is enforced here; constraints are left to validation.

    Raises:
        pydantic.ValidationError: If the value does not fit the type
    """
    return TypeAdapter(info.annotation).validate_python(value)


def assign(record: BaseModel, name: str, value: Any) -> None:
    """Set a field so the record marks it as explicitly set."""
    setattr(record, name, value)
