"""Structured logging system with JSON output and rich terminal formatting."""

import logging
from typing import Any, Dict, Optional, Union, Protocol
from pathlib import Path

from .log_formatters import _log_context
from .logger_factory import IsolatedLogManager


class Logger(Protocol):
    """Protocol for logger instances to enable dependency injection."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log exception with traceback."""


class LogManager:
    """Central logging configuration and management."""

    def __init__(self) -> None:
        self._manager = IsolatedLogManager("flotilla", context=_log_context)
        self._configured = False

    def configure(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Optional[Path] = None,
        enable_json: bool = True,
        enable_console: bool = True,
        console_level: Optional[Union[int, str]] = None,
    ) -> None:
        """Configure logging system. Only the first call takes effect."""
        if self._configured:
            return

        self._manager.configure(
            level=level,
            log_file=log_file,
            enable_json=enable_json,
            enable_console=enable_console,
            console_level=console_level,
        )
        self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger instance."""
        return self._manager.create_logger(name)

    def shutdown(self) -> None:
        """Close handlers and allow the next configure() to take effect."""
        self._manager.shutdown()
        self._configured = False


# Global log manager instance
_log_manager = LogManager()


def configure_logging(**kwargs: Any) -> None:
    """Configure the global logging system."""
    _log_manager.configure(**kwargs)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return _log_manager.get_logger(name)


def log_event(
    logger: Logger, event_type: str, message: str, **kwargs: Any
) -> None:
    """Log a structured event with context."""
    logger.info(message, extra={"event_type": event_type, **kwargs})


def log_process_event(
    logger: Logger, event: str, pid: Optional[int] = None, **kwargs: Any
) -> None:
    """Log a process-related event."""
    extra: Dict[str, Any] = {"event_type": "process", "process_event": event}
    if pid is not None:
        extra["pid"] = pid
    extra.update(kwargs)
    logger.debug("Process %s", event, extra=extra)


def log_instance_event(
    logger: Logger, event: str, identity: Optional[str] = None, **kwargs: Any
) -> None:
    """Log an instance lifecycle event (created, updated, deleted...)."""
    extra: Dict[str, Any] = {"event_type": "instance", "instance_event": event}
    if identity is not None:
        extra["identity"] = identity
    extra.update(kwargs)
    logger.info("Instance %s %s", identity, event, extra=extra)


# Context management shortcuts
def set_log_context(**kwargs: Any) -> None:
    """Set logging context for current thread."""
    _log_context.set_context(**kwargs)


def get_log_context() -> Dict[str, Any]:
    """Get current logging context."""
    return _log_context.get_context()


def clear_log_context() -> None:
    """Clear current logging context."""
    _log_context.clear_context()


def log_context(**kwargs: Any) -> Any:
    """Context manager for temporary logging context."""
    return _log_context.context(**kwargs)
