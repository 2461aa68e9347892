"""
Observability Module

Structured logging and stage timing for configuration loads.

Key features:
- Structured logging with key=value context
- Per-stage timing, logged at DEBUG level

The library only emits records; handlers and levels belong to the
embedding application.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# Structured Logging
# ============================================================================

@dataclass
class LogContext:
    """Context attached to log entries."""
    operation: Optional[str] = None
    stage: Optional[str] = None
    path: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "operation": self.operation,
            "stage": self.stage,
            "path": self.path,
        }
        d.update(self.extra)
        return {k: v for k, v in d.items() if v is not None}


class StructuredLogger:
    """
    Logger with structured context.

    Usage:
        log = StructuredLogger("layerconfig.loader")
        log.debug("Decoded file", path="config.yaml", fields=3)
    """

    _KNOWN = ("operation", "stage", "path")

    def __init__(self, name: str, context: Optional[LogContext] = None):
        self._logger = logging.getLogger(name)
        self._context = context or LogContext()

    @property
    def context(self) -> LogContext:
        return self._context

    def with_context(self, **kwargs) -> "StructuredLogger":
        """Create logger with additional context."""
        new_context = LogContext(
            operation=kwargs.get("operation", self._context.operation),
            stage=kwargs.get("stage", self._context.stage),
            path=kwargs.get("path", self._context.path),
            extra={**self._context.extra, **{k: v for k, v in kwargs.items()
                   if k not in self._KNOWN}},
        )
        return StructuredLogger(self._logger.name, new_context)

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with context."""
        ctx = self._context.to_dict()
        ctx.update({k: v for k, v in kwargs.items() if v is not None})

        prefix = f"[{ctx.pop('operation')}] " if ctx.get("operation") else ""
        extra_str = " | ".join(f"{k}={v}" for k, v in ctx.items())

        if extra_str:
            return f"{prefix}{message} | {extra_str}"
        return f"{prefix}{message}"

    def debug(self, message: str, **kwargs) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(self._format_message(message, **kwargs))


def get_logger(name: str, **context) -> StructuredLogger:
    """Get a structured logger with optional context."""
    known = {k: context.pop(k) for k in StructuredLogger._KNOWN if k in context}
    return StructuredLogger(name, LogContext(**known, extra=context))


# ============================================================================
# Timing
# ============================================================================

@contextmanager
def timed_stage(log: StructuredLogger, stage: str, **metadata) -> Iterator[None]:
    """
    Context manager timing one pipeline stage.

    Usage:
        with timed_stage(log, "decode", path="config.yaml"):
            decode_into(record, data, path)
    """
    start_time = time.perf_counter()
    success = True

    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        log.debug(
            f"Stage {stage} {'completed' if success else 'failed'}",
            stage=stage,
            duration_ms=f"{duration_ms:.2f}",
            **metadata,
        )
