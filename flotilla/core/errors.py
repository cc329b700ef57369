"""Error hierarchy for the Flotilla reconciler."""

from typing import Optional, Dict, Any


class FlotillaError(Exception):
    """Base exception for all Flotilla errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration and Validation Errors
class ConfigurationError(FlotillaError):
    """Error in reconciler configuration or a fleet specification file."""


class ValidationError(FlotillaError):
    """Fleet or instance specification is malformed or incomplete.

    Always raised before any substrate mutation.
    """


# Substrate Errors
class SubstrateError(FlotillaError):
    """Base class for orchestration substrate errors."""

    def __init__(self, message: str, kind: Optional[str] = None, name: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.kind = kind
        self.name = name


class AlreadyExistsError(SubstrateError):
    """Resource already exists on create."""


class NotFoundError(SubstrateError):
    """Resource does not exist on update or delete."""


class TransportError(SubstrateError):
    """Substrate call failed (network, auth, malformed response)."""


# Recovery Coordination Errors
class RecoveryCoordinationError(FlotillaError):
    """Recovery coordination tool exited non-zero."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: str = "",
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.exit_code = exit_code
        self.stderr = stderr


# Process Errors
class ProcessError(FlotillaError):
    """Base class for process-related errors."""


class ProcessTimeoutError(ProcessError):
    """Process operation timed out."""

    def __init__(self, message: str, timeout: float, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.timeout = timeout


# Data and Codec Errors
class CodecError(FlotillaError):
    """Data encoding/decoding error."""


class SerializationError(CodecError):
    """Data serialization error."""
