"""Recovery (grace) database coordination for export gateways."""

from .membership import GraceDatabaseCoordinator, RecordingCoordinator, DEFAULT_GRACE_TOOL

__all__ = ["GraceDatabaseCoordinator", "RecordingCoordinator", "DEFAULT_GRACE_TOOL"]
