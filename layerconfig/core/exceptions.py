"""
layerconfig Exception Hierarchy

Provides typed exceptions for every stage of a configuration load.
All layerconfig-specific exceptions inherit from LayerConfigError.

Exception Hierarchy:
    LayerConfigError (base)
    ├── ConfigFileError (file could not be read, including not-found)
    ├── DecodeError (malformed JSON/YAML or a value of the wrong type)
    ├── EnvOverlayError (bad environment value or binding)
    └── ConfigValidationError (one or more validation rules violated)

Usage:
    from layerconfig import read, with_file
    from layerconfig.core.exceptions import ConfigFileError, ConfigValidationError

    try:
        read(config, with_file(".myapp.yaml"))
    except ConfigFileError as e:
        logger.warning(f"No config file: {e}")
    except ConfigValidationError as e:
        for violation in e.violations:
            print(violation.field, violation.rule)
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from typing import Any, Optional


# ============================================================================
# Base Exception
# ============================================================================

@dataclass
class ErrorContext:
    """
    Additional context for debugging errors.

    Attributes:
        stage: Pipeline stage that failed (file, decode, environment, validation)
        path: File path involved, if any
        field: Dotted record field path involved, if any
        env_var: Environment variable involved, if any
        timestamp: When the error occurred
        metadata: Additional debugging information
    """
    stage: Optional[str] = None
    path: Optional[str] = None
    field: Optional[str] = None
    env_var: Optional[str] = None
    timestamp: datetime = dataclass_field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "stage": self.stage,
            "path": self.path,
            "field": self.field,
            "env_var": self.env_var,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class LayerConfigError(Exception):
    """
    Base exception for all layerconfig errors.

    Allows catching every load failure with `except LayerConfigError`.

    Attributes:
        message: Human-readable error message
        context: Additional debugging context
        cause: Original exception that caused this error
    """

    stage: Optional[str] = None

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        if self.context.stage is None:
            self.context.stage = self.stage
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.context.path:
            parts.append(f"[path={self.context.path}]")
        if self.context.field:
            parts.append(f"[field={self.context.field}]")
        if self.context.env_var:
            parts.append(f"[env={self.context.env_var}]")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================================
# Stage Errors
# ============================================================================

class ConfigFileError(LayerConfigError):
    """
    Raised when the configuration file cannot be read.

    Covers the not-found case. When a bare relative reference falls back
    to the working directory, the fallback's failure is the one reported.

    Example:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ConfigFileError(
                f"Cannot read config file: {path}",
                path=path,
                cause=e,
            )
    """

    stage = "file"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(path=path)
        super().__init__(message, context, cause=cause)
        self.path = path

    @property
    def not_found(self) -> bool:
        """True when the underlying failure is a missing file."""
        return isinstance(self.cause, FileNotFoundError)


class DecodeError(LayerConfigError):
    """
    Raised when a JSON or YAML payload cannot be decoded into the record.

    Example:
        raise DecodeError(
            "Invalid JSON",
            path="config.json",
            cause=json_error,
        )
    """

    stage = "decode"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(path=path, field=field)
        super().__init__(message, context, cause=cause)
        self.path = path
        self.field = field


class EnvOverlayError(LayerConfigError):
    """
    Raised when an environment variable cannot be applied to the record.

    Covers values that do not parse as the field's type, required
    variables that are missing, and bindings that make no sense for the
    field they are attached to.
    """

    stage = "environment"

    def __init__(
        self,
        message: str,
        env_var: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(env_var=env_var, field=field)
        super().__init__(message, context, cause=cause)
        self.env_var = env_var
        self.field = field


@dataclass(frozen=True)
class Violation:
    """A single violated validation rule."""
    field: str
    rule: str
    message: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "rule": self.rule,
            "message": self.message,
            "value": self.value,
        }


class ConfigValidationError(LayerConfigError):
    """
    Raised when a populated record violates its declared rules.

    Every violated field is reported, not only the first one.

    Example:
        except ConfigValidationError as e:
            if "server.port" in e.fields:
                ...
    """

    stage = "validation"

    def __init__(
        self,
        message: str,
        violations: Optional[list[Violation]] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, context, cause=cause)
        self.violations = list(violations or [])

    @property
    def fields(self) -> list[str]:
        """Dotted paths of every violated field, in report order."""
        seen: list[str] = []
        for violation in self.violations:
            if violation.field not in seen:
                seen.append(violation.field)
        return seen

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["violations"] = [v.to_dict() for v in self.violations]
        return d


# ============================================================================
# Helper Functions
# ============================================================================

def wrap_exception(
    error: Exception,
    message: str,
    error_class: type[LayerConfigError] = LayerConfigError,
    context: Optional[ErrorContext] = None,
) -> LayerConfigError:
    """
    Wrap a standard exception in a layerconfig exception.

    Args:
        error: Original exception
        message: Human-readable message
        error_class: layerconfig exception class to use
        context: Additional context

    Returns:
        Wrapped layerconfig exception
    """
    return error_class(message, context=context, cause=error)


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    "LayerConfigError",
    "ErrorContext",
    "ConfigFileError",
    "DecodeError",
    "EnvOverlayError",
    "ConfigValidationError",
    "Violation",
    "wrap_exception",
]
