"""Core type definitions for the Flotilla reconciler."""

from typing import Optional
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from .enums import DaemonRole, StoreFormat, MediaKind, ResourceKind


class SubstrateConfig(BaseModel):
    """How to reach the orchestration substrate."""

    kind: str = "kubectl"  # kubectl | memory
    kubectl_path: str = "kubectl"
    context: Optional[str] = None


class RecoveryConfig(BaseModel):
    """Recovery (grace) database coordination settings."""

    tool: str = "ganesha-rados-grace"


class ImageConfig(BaseModel):
    """Container images used by generated workloads."""

    daemon: str = "ceph/ceph:v13"
    gateway: str = "flotilla/flotilla:latest"
    launcher: str = "flotilla/flotilla:latest"


class TimeoutConfig(BaseModel):
    """Bounds for single external calls."""

    substrate_call: float = 30.0
    recovery_call: float = 15.0


class FlotillaConfig(BaseModel):
    """Main reconciler configuration."""

    substrate: SubstrateConfig = Field(default_factory=SubstrateConfig)
    recovery: RecoveryConfig = Field(default_factory=RecoveryConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    # Replace already-existing workloads instead of only logging them
    update_existing_workloads: bool = False
    # Restricted platforms need privileged pods even for host path mounts
    hostpath_requires_privileged: bool = False

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def validate_config(self) -> "FlotillaConfig":
        """Validate configuration - NO SIDE EFFECTS."""
        from .errors import ConfigurationError

        if self.timeouts.substrate_call <= 0:  # pylint: disable=no-member
            raise ConfigurationError("Substrate call timeout must be positive")
        if self.timeouts.recovery_call <= 0:  # pylint: disable=no-member
            raise ConfigurationError("Recovery call timeout must be positive")
        if self.substrate.kind not in ("kubectl", "memory"):  # pylint: disable=no-member
            raise ConfigurationError(
                f"Unsupported substrate kind: {self.substrate.kind}"  # pylint: disable=no-member
            )

        return self


__all__ = [
    "DaemonRole",
    "StoreFormat",
    "MediaKind",
    "ResourceKind",
    "SubstrateConfig",
    "RecoveryConfig",
    "ImageConfig",
    "TimeoutConfig",
    "FlotillaConfig",
]
