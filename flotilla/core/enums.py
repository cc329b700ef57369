"""Core enumerations for the Flotilla reconciler.

Separated from types.py to break circular dependencies. This module contains
only enum definitions with no dependencies on other core modules.
"""

from enum import Enum


class DaemonRole(Enum):
    """Role of a daemon instance within a fleet."""

    STORAGE_NODE = "StorageNode"
    EXPORT_GATEWAY = "ExportGateway"


class StoreFormat(Enum):
    """On-disk data layout family used by a storage node."""

    FILE_BASED = "filestore"
    OBJECT_BASED = "bluestore"


class MediaKind(Enum):
    """Medium backing a storage node."""

    RAW_DEVICE = "raw_device"
    DIRECTORY = "directory"
    NO_MEDIA = "no_media"


class GatewayStoreType(Enum):
    """Backing store exported by a gateway."""

    FILE = "file"
    OBJECT = "object"


class ResourceKind(Enum):
    """Declarative resource kinds understood by the substrate."""

    CONFIG_ARTIFACT = "ConfigMap"
    WORKLOAD = "Deployment"
    NETWORK_ENDPOINT = "Service"
    PROVISION_JOB = "Job"


class ReconcileState(Enum):
    """Reconciliation pass state."""

    RECONCILING = "reconciling"
    SCALING_DOWN = "scaling_down"
    CONVERGED = "converged"


class MembershipOutcome(Enum):
    """Result of a recovery membership call."""

    OK = "ok"
    WARN = "warn"
