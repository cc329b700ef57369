"""Domain primitives for fleet and instance identification."""

from dataclasses import dataclass

from .enums import DaemonRole


@dataclass(frozen=True)
class FleetRef:
    """Validated reference to the parent resource owning a fleet."""

    name: str
    namespace: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("FleetRef name cannot be empty")
        if not self.namespace or not self.namespace.strip():
            raise ValueError("FleetRef namespace cannot be empty")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class DaemonInstance:
    """One member of a fleet.

    The identity is derived from the ordinal and never renumbered while the
    instance exists. Hashable for use as dictionary key.
    """

    ordinal: int
    identity: str
    role: DaemonRole

    def __post_init__(self) -> None:
        if self.ordinal < 0:
            raise ValueError(f"Instance ordinal must be non-negative: {self.ordinal}")
        if not self.identity or not (self.identity.isalpha() and self.identity.islower()):
            raise ValueError(f"Instance identity must be lowercase letters: {self.identity!r}")

    def __str__(self) -> str:
        return f"{self.identity}[{self.ordinal}]"

    def is_gateway(self) -> bool:
        return self.role == DaemonRole.EXPORT_GATEWAY

    def is_storage_node(self) -> bool:
        return self.role == DaemonRole.STORAGE_NODE
