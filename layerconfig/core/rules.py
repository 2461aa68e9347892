"""
Validation Rules

Reusable rule annotations for record fields, built on pydantic's
annotated validators. Numeric bounds and patterns need nothing extra:
use `Field(gt=0)`, `Field(ge=0)` or `StringConstraints(...)` directly.

Example:
    ```python
    class MyConfig(BaseModel):
        username: Annotated[str, Env("USERNAME"), Required, AlphaNum] = ""
        host: Annotated[str, Env("HOST"), Hostname] = ""
        listen: Annotated[str, Env("LISTEN"), HostnamePort] = ":8080"
        env: Annotated[str, Env("ENV"), OneOf("prod", "staging", "dev")] = ""
    ```
"""

import ipaddress
import re
from typing import Any

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

from layerconfig.core.fields import is_zero

_ALPHANUM = re.compile(r"^[A-Za-z0-9]+$")
# RFC 952 labels start with a letter; RFC 1123 also allows a leading digit
_HOSTNAME_LABEL = re.compile(r"^[A-Za-z](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
_DNS_LABEL = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")


def _required(value: Any) -> Any:
    if is_zero(value):
        raise PydanticCustomError("required", "Field is required")
    return value


def _alphanum(value: str) -> str:
    if not _ALPHANUM.match(value):
        raise PydanticCustomError(
            "alphanum",
            "Value must contain only ASCII letters and digits",
        )
    return value


def _valid_name(name: str, label: re.Pattern) -> bool:
    return 0 < len(name) <= 253 and all(label.match(part) for part in name.split("."))


def _hostname(value: str) -> str:
    if not _valid_name(value, _HOSTNAME_LABEL):
        raise PydanticCustomError(
            "hostname",
            "Value is not a valid host name: {value}",
            {"value": value},
        )
    return value


def _valid_port(port: str) -> bool:
    return port.isascii() and port.isdigit() and 1 <= int(port) <= 65535


def _valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return _valid_name(host, _DNS_LABEL)
    return True


def _hostname_port(value: str) -> str:
    host, sep, port = value.rpartition(":")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        valid = ":" in host and _valid_host(host)
    else:
        # an empty host means every interface
        valid = ":" not in host and (not host or _valid_host(host))
    if not (sep and valid and _valid_port(port)):
        raise PydanticCustomError(
            "hostname_port",
            "Value is not a valid host:port pair: {value}",
            {"value": value},
        )
    return value


Required = AfterValidator(_required)
AlphaNum = AfterValidator(_alphanum)
Hostname = AfterValidator(_hostname)
HostnamePort = AfterValidator(_hostname_port)


def OneOf(*choices: Any) -> AfterValidator:
    """Rule accepting only the listed values."""
    allowed = tuple(choices)

    def check(value: Any) -> Any:
        if value not in allowed:
            raise PydanticCustomError(
                "oneof",
                "Value must be one of {choices}",
                {"choices": " ".join(str(c) for c in allowed)},
            )
        return value

    return AfterValidator(check)


__all__ = ["Required", "AlphaNum", "Hostname", "HostnamePort", "OneOf"]
