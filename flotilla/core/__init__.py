"""Core reconciler components."""

from .value_objects import FleetRef, DaemonInstance
from .protocols import MembershipResult, SubstrateClient, MembershipCoordinator

__all__ = [
    "FleetRef",
    "DaemonInstance",
    "MembershipResult",
    "SubstrateClient",
    "MembershipCoordinator",
]
