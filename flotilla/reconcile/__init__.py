"""Fleet reconciliation: validation, the driver and its reports."""

from .driver import ReconcilerDriver
from .report import ReconcileReport, InstanceOutcome
from .validation import validate_fleet, validate_identifiers

__all__ = [
    "ReconcilerDriver",
    "ReconcileReport",
    "InstanceOutcome",
    "validate_fleet",
    "validate_identifiers",
]
