"""Instance naming, planning and resource set construction.

API:
    - identity_of / ordinal_of: stable ordinal <-> identity mapping
    - StorageBackendPlanner: media and store format resolution for storage nodes
    - ResourceSetBuilder: descriptors for one instance of either role
"""

from .identity import identity_of, ordinal_of, instance_for, instances_in_range
from .storage_planner import StorageBackendPlan, StorageBackendPlanner
from .descriptors import ResourceSet, ProvisionJob
from .resource_builder import ResourceSetBuilder

__all__ = [
    "identity_of",
    "ordinal_of",
    "instance_for",
    "instances_in_range",
    "StorageBackendPlan",
    "StorageBackendPlanner",
    "ResourceSet",
    "ProvisionJob",
    "ResourceSetBuilder",
]
