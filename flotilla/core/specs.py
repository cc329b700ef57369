"""Fleet specification models.

A fleet is a collection of same-role daemon instances sharing one parent
resource. Specifications are loaded from YAML documents whose ``kind`` field
selects the role:

    kind: ExportGateway
    meta: {name: my-nfs, namespace: storage}
    store: {name: myfs, type: file}
    client_recovery: {pool: nfs-ganesha, namespace: grace}
    exports:
      - {path: /, pseudo_path: /myfs}
    server: {active: 2}

Presence checks on identifiers are deliberately left to
flotilla.reconcile.validation so that they surface as ValidationError before
any substrate call, not as parse errors.
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .enums import DaemonRole, StoreFormat
from .errors import ConfigurationError

DEFAULT_DATA_DIR_HOST_PATH = "/var/lib/flotilla"


class FleetMeta(BaseModel):
    """Identifiers of the parent resource."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    namespace: str = ""


class StoreSettings(BaseModel):
    """Store format and optional size hints for storage nodes."""

    model_config = ConfigDict(extra="forbid")

    format: StoreFormat
    database_size_mb: int = Field(0, ge=0)
    wal_size_mb: int = Field(0, ge=0)
    journal_size_mb: int = Field(0, ge=0)


class MediaSelection(BaseModel):
    """Media selectors, honored in priority order.

    devices > device_filter > use_all_devices > directories > config_only
    """

    model_config = ConfigDict(extra="forbid")

    devices: List[str] = Field(default_factory=list)
    device_filter: Optional[str] = None
    use_all_devices: bool = False
    directories: List[str] = Field(default_factory=list)
    config_only: bool = False


class StorageFleetSpec(BaseModel):
    """Desired state of a storage node fleet."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["StorageNode"] = "StorageNode"
    meta: FleetMeta = Field(default_factory=FleetMeta)
    count: int = Field(0, ge=0)
    store: StoreSettings
    selection: MediaSelection = Field(default_factory=MediaSelection)
    metadata_device: Optional[str] = None
    data_dir_host_path: str = DEFAULT_DATA_DIR_HOST_PATH
    host_network: bool = False
    node_name: Optional[str] = None
    location: Optional[str] = None
    # identity -> partition UUID of the raw device holding its data
    partition_uuids: Dict[str, str] = Field(default_factory=dict)
    resources: Dict[str, Any] = Field(default_factory=dict)

    @property
    def role(self) -> DaemonRole:
        return DaemonRole.STORAGE_NODE

    @property
    def desired_count(self) -> int:
        return self.count


class ExportSpec(BaseModel):
    """One exported path."""

    model_config = ConfigDict(extra="forbid")

    path: str = ""
    pseudo_path: str = ""
    access_type: str = "RW"
    squash: str = "none"
    allowed_clients: List[str] = Field(default_factory=list)


class GatewayStore(BaseModel):
    """The file or object store behind a gateway's exports."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    type: str = ""


class ClientRecoverySpec(BaseModel):
    """Location of the recovery (grace) database."""

    model_config = ConfigDict(extra="forbid")

    pool: str = ""
    namespace: str = ""


class GatewayServerSpec(BaseModel):
    """Gateway server settings."""

    model_config = ConfigDict(extra="forbid")

    active: int = Field(0, ge=0)
    host_network: bool = False
    resources: Dict[str, Any] = Field(default_factory=dict)


class GatewayFleetSpec(BaseModel):
    """Desired state of an NFS export gateway fleet."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["ExportGateway"] = "ExportGateway"
    meta: FleetMeta = Field(default_factory=FleetMeta)
    store: GatewayStore = Field(default_factory=GatewayStore)
    client_recovery: ClientRecoverySpec = Field(default_factory=ClientRecoverySpec)
    exports: List[ExportSpec] = Field(default_factory=list)
    server: GatewayServerSpec = Field(default_factory=GatewayServerSpec)

    @property
    def role(self) -> DaemonRole:
        return DaemonRole.EXPORT_GATEWAY

    @property
    def desired_count(self) -> int:
        return self.server.active


FleetSpec = Annotated[
    Union[StorageFleetSpec, GatewayFleetSpec], Field(discriminator="kind")
]

_fleet_spec_adapter: TypeAdapter = TypeAdapter(FleetSpec)


def parse_fleet_spec(data: Dict[str, Any]) -> Union[StorageFleetSpec, GatewayFleetSpec]:
    """Parse a fleet specification mapping."""
    try:
        return _fleet_spec_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid fleet specification: {e}") from e


def load_fleet_spec(spec_file: Path) -> Union[StorageFleetSpec, GatewayFleetSpec]:
    """Load a fleet specification from a YAML file."""
    if spec_file.suffix.lower() not in (".yml", ".yaml"):
        raise ConfigurationError(f"Unsupported fleet spec format: {spec_file.suffix}")
    try:
        with open(spec_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load fleet spec {spec_file}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Fleet spec {spec_file} must contain a mapping")
    return parse_fleet_spec(data)


def with_desired_count(
    spec: Union[StorageFleetSpec, GatewayFleetSpec], count: int
) -> Union[StorageFleetSpec, GatewayFleetSpec]:
    """Copy of a fleet spec with a different desired instance count."""
    if isinstance(spec, GatewayFleetSpec):
        server = spec.server.model_copy(update={"active": count})
        return spec.model_copy(update={"server": server})
    return spec.model_copy(update={"count": count})
