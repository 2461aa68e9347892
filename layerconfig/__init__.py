"""
layerconfig

Loads a typed configuration record from a JSON or YAML file and the
environment, then validates it.
"""

from layerconfig.core import (
    AlphaNum,
    ConfigFileError,
    ConfigValidationError,
    DecodeError,
    Env,
    EnvOverlayError,
    Hostname,
    HostnamePort,
    Json,
    LayerConfigError,
    LoadOption,
    LoadOptions,
    OneOf,
    Required,
    Violation,
    Yaml,
    with_env_prefix,
    with_file,
)
from layerconfig.loader import read, read_with_options

__version__ = "0.1.0"

__all__ = [
    "read",
    "read_with_options",
    "LoadOption",
    "LoadOptions",
    "with_file",
    "with_env_prefix",
    "Env",
    "Json",
    "Yaml",
    "Required",
    "AlphaNum",
    "Hostname",
    "HostnamePort",
    "OneOf",
    "LayerConfigError",
    "ConfigFileError",
    "DecodeError",
    "EnvOverlayError",
    "ConfigValidationError",
    "Violation",
]
