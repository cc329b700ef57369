"""
Flotilla: Clustered Daemon Fleet Reconciler

Keeps fleets of storage nodes and NFS export gateways running on a
container-orchestration substrate converged to their declared instance
count. Provides stable instance naming, backend-aware storage provisioning
plans, deterministic resource descriptors and best-effort coordination with
the gateway recovery (grace) database.
"""

__version__ = "1.0.0"

# Core exports
from .core.enums import DaemonRole, StoreFormat, MediaKind, ResourceKind
from .core.types import (
    FlotillaConfig,
    SubstrateConfig,
    RecoveryConfig,
    TimeoutConfig,
)
from .instances.identity import identity_of

__all__ = [
    "__version__",
    "DaemonRole",
    "StoreFormat",
    "MediaKind",
    "ResourceKind",
    "FlotillaConfig",
    "SubstrateConfig",
    "RecoveryConfig",
    "TimeoutConfig",
    "identity_of",
]
