"""
layerconfig Core Package

Exceptions, load options, field annotations and validation rules shared
by every stage of a load.
"""

from layerconfig.core.exceptions import (
    LayerConfigError,
    ErrorContext,
    ConfigFileError,
    DecodeError,
    EnvOverlayError,
    ConfigValidationError,
    Violation,
    wrap_exception,
)
from layerconfig.core.fields import Env, Json, Yaml
from layerconfig.core.options import LoadOption, LoadOptions, with_env_prefix, with_file
from layerconfig.core.rules import AlphaNum, Hostname, HostnamePort, OneOf, Required

__all__ = [
    # Exceptions
    "LayerConfigError",
    "ErrorContext",
    "ConfigFileError",
    "DecodeError",
    "EnvOverlayError",
    "ConfigValidationError",
    "Violation",
    "wrap_exception",
    # Field annotations
    "Env",
    "Json",
    "Yaml",
    # Options
    "LoadOption",
    "LoadOptions",
    "with_file",
    "with_env_prefix",
    # Rules
    "Required",
    "AlphaNum",
    "Hostname",
    "HostnamePort",
    "OneOf",
]
