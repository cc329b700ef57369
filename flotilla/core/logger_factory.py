"""Isolated logging environments."""

import logging
import threading
from typing import Any, Dict, Optional, Union
from pathlib import Path
from contextlib import contextmanager

from .log_formatters import StructuredFormatter, FlotillaRichHandler, LogContext


class IsolatedLogManager:
    """Non-singleton log manager for isolated logging environments."""

    def __init__(self, namespace: str = "", context: Optional[LogContext] = None) -> None:
        """Initialize isolated log manager.

        Args:
            namespace: Namespace prefix for logger names to ensure isolation
            context: Shared context to use instead of a private one
        """
        self._namespace = namespace
        self._configured = False
        self._log_file: Optional[Path] = None
        self._json_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None
        self._loggers: Dict[str, logging.Logger] = {}
        self._context = context if context is not None else LogContext()
        self._lock = threading.RLock()

    def configure(self,
                  level: Union[int, str] = logging.INFO,
                  log_file: Optional[Path] = None,
                  enable_json: bool = True,
                  enable_console: bool = True,
                  console_level: Optional[Union[int, str]] = None) -> None:
        """Configure this logging instance."""
        with self._lock:
            if self._configured:
                self._clear_configuration()

            if enable_json and log_file:
                self._log_file = Path(log_file)
                self._log_file.parent.mkdir(parents=True, exist_ok=True)

                self._json_handler = logging.FileHandler(self._log_file)
                self._json_handler.setFormatter(
                    StructuredFormatter(
                        include_context=True, context_getter=self._context.get_context
                    )
                )
                self._json_handler.setLevel(level)

            if enable_console:
                console_level = console_level or level
                self._console_handler = FlotillaRichHandler(
                    show_time=True,
                    show_path=False,
                    markup=False
                )
                self._console_handler.setLevel(console_level)

            # Attach to loggers handed out before configuration
            for logger in self._loggers.values():
                self._attach_handlers(logger)

            self._configured = True

    def create_logger(self, name: str) -> logging.Logger:
        """Create a logger instance with namespace isolation."""
        with self._lock:
            full_name = f"{self._namespace}.{name}" if self._namespace else name

            if full_name in self._loggers:
                return self._loggers[full_name]

            logger = logging.getLogger(full_name)

            # Do not propagate to root to avoid global interference
            logger.propagate = False
            logger.setLevel(logging.DEBUG)
            self._attach_handlers(logger)

            self._loggers[full_name] = logger
            return logger

    def get_context(self) -> Dict[str, Any]:
        """Get current logging context for this instance."""
        return self._context.get_context()

    def set_context(self, **kwargs: Any) -> None:
        """Set logging context for this instance."""
        self._context.set_context(**kwargs)

    def clear_context(self) -> None:
        """Clear logging context for this instance."""
        self._context.clear_context()

    @contextmanager
    def context(self, **kwargs: Any):
        """Context manager for temporary context variables."""
        with self._context.context(**kwargs):
            yield

    def shutdown(self) -> None:
        """Shutdown this logging instance."""
        with self._lock:
            self._clear_configuration()
            self._loggers.clear()
            self._context.clear_context()

    def _attach_handlers(self, logger: logging.Logger) -> None:
        for handler in (self._json_handler, self._console_handler):
            if handler is not None and handler not in logger.handlers:
                logger.addHandler(handler)

    def _clear_configuration(self) -> None:
        """Clear current configuration and handlers."""
        for logger in self._loggers.values():
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)

        if self._json_handler:
            try:
                self._json_handler.close()
            except (OSError, RuntimeError):
                pass  # Ignore handler close errors
            self._json_handler = None

        if self._console_handler:
            try:
                self._console_handler.close()
            except (OSError, RuntimeError):
                pass  # Ignore handler close errors
            self._console_handler = None

        self._configured = False
