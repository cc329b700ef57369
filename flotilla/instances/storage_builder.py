"""Resource sets and provisioning jobs for storage node instances."""

import posixpath
from typing import Dict, List, Optional, Tuple

from ..core.config import ConfigProvider
from ..core.enums import StoreFormat
from ..core.errors import ValidationError
from ..core.log import Logger
from ..core.specs import StorageFleetSpec
from ..core.value_objects import DaemonInstance, FleetRef
from .descriptors import (
    HOSTNAME_LABEL,
    ConfigArtifact,
    Container,
    EnvVar,
    PodTemplate,
    ProvisionJob,
    ResourceSet,
    Volume,
    VolumeMount,
    WorkloadDescriptor,
)
from .naming import (
    PREPARE_APP_NAME,
    STORAGE_APP_NAME,
    instance_labels,
    instance_name,
    prepare_job_name,
)
from .storage_planner import CONTAINER_DATA_DIR, StorageBackendPlan

# Launcher binaries staged for raw-device file-based daemons
STAGING_VOLUME = "flotilla-binaries"
STAGING_MOUNT_PATH = "/flotilla"
SUPERVISOR_PATH = posixpath.join(STAGING_MOUNT_PATH, "tini")
LAUNCHER_PATH = posixpath.join(STAGING_MOUNT_PATH, "flotilla")
PARTUUID_DIR = "/dev/disk/by-partuuid"

DATA_VOLUME = "flotilla-data"
CONFIG_VOLUME = "flotilla-config"
CONFIG_MOUNT_PATH = "/etc/flotilla"
DAEMON_BINARY = "flotilla-osd"

# Backend selection keys carried by the config artifact
STORE_KEY = "FLOTILLA_STORE"
DATA_DEVICES_KEY = "FLOTILLA_DATA_DEVICES"
DEVICE_FILTER_KEY = "FLOTILLA_DATA_DEVICE_FILTER"
DATA_DIRECTORIES_KEY = "FLOTILLA_DATA_DIRECTORIES"
METADATA_DEVICE_KEY = "FLOTILLA_METADATA_DEVICE"
DATABASE_SIZE_KEY = "FLOTILLA_DATABASE_SIZE"
WAL_SIZE_KEY = "FLOTILLA_WAL_SIZE"
JOURNAL_SIZE_KEY = "FLOTILLA_JOURNAL_SIZE"
NODE_NAME_KEY = "FLOTILLA_NODE_NAME"
LOCATION_KEY = "FLOTILLA_LOCATION"
INSTANCE_KEY = "FLOTILLA_INSTANCE"


def backend_settings(
    plan: StorageBackendPlan,
    node_name: Optional[str] = None,
    location: Optional[str] = None,
) -> Dict[str, str]:
    """Backend selection as key/value pairs, omitting unset values."""
    settings = {STORE_KEY: plan.store_format.value}
    if plan.devices:
        settings[DATA_DEVICES_KEY] = ",".join(plan.devices)
    if plan.device_filter:
        settings[DEVICE_FILTER_KEY] = plan.device_filter
    if plan.directories:
        settings[DATA_DIRECTORIES_KEY] = ",".join(plan.directories)
    if plan.metadata_device:
        settings[METADATA_DEVICE_KEY] = plan.metadata_device
    if plan.size_hints.database_size_mb:
        settings[DATABASE_SIZE_KEY] = str(plan.size_hints.database_size_mb)
    if plan.size_hints.wal_size_mb:
        settings[WAL_SIZE_KEY] = str(plan.size_hints.wal_size_mb)
    if plan.size_hints.journal_size_mb:
        settings[JOURNAL_SIZE_KEY] = str(plan.size_hints.journal_size_mb)
    if node_name:
        settings[NODE_NAME_KEY] = node_name
    if location:
        settings[LOCATION_KEY] = location
    return settings


class StorageResourceBuilder:
    """Builds storage node descriptors from a fleet spec and its plan."""

    def __init__(self, config_provider: ConfigProvider, logger: Logger) -> None:
        self._config_provider = config_provider
        self._logger = logger

    def build(
        self, instance: DaemonInstance, plan: StorageBackendPlan, fleet: StorageFleetSpec
    ) -> ResourceSet:
        """Build the resource set of one storage node instance."""
        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        identity = instance.identity
        name = instance_name(STORAGE_APP_NAME, fleet_ref.name, identity)
        labels = instance_labels(instance.role, fleet_ref, identity)

        data = backend_settings(plan, fleet.node_name, fleet.location)
        data[INSTANCE_KEY] = identity
        config_artifact = ConfigArtifact(
            name=name, namespace=fleet_ref.namespace, labels=labels, data=data
        )

        volumes = self._base_volumes(fleet, config_name=name)
        mounts = self._base_mounts()
        for host_mount in plan.host_mounts:
            volumes.append(Volume(name=host_mount.volume_name, host_path=host_mount.host_path))
            mounts.append(VolumeMount(name=host_mount.volume_name, mount_path=host_mount.mount_path))

        privileged = self._privileged(plan)
        config_mounts = list(mounts)
        config_env: List[EnvVar] = []
        staging: List[Container] = []
        env = [
            EnvVar(name="FLOTILLA_POD_IP", field_path="status.podIP"),
            EnvVar(name="FLOTILLA_CLUSTER", value=fleet_ref.namespace),
        ]

        command, args = self._daemon_command(instance, plan, fleet)
        if plan.needs_binary_staging:
            staging_mount = VolumeMount(name=STAGING_VOLUME, mount_path=STAGING_MOUNT_PATH)
            volumes.append(Volume(name=STAGING_VOLUME))
            mounts.append(staging_mount)
            config_mounts.append(staging_mount)
            config_env.append(EnvVar(name="FLOTILLA_PATH", value=STAGING_MOUNT_PATH))
            staging.append(self._staging_container())
            env.append(EnvVar(name="TINI_SUBREAPER", value=""))

        init_containers = [
            Container(
                name="config-init",
                image=self._config_provider.images.launcher,
                args=["storage", "init"],
                env=config_env,
                env_from_config=name,
                volume_mounts=config_mounts,
                privileged=privileged,
            )
        ] + staging

        daemon = Container(
            name="storage",
            image=self._config_provider.images.daemon,
            command=command,
            args=args,
            env=env,
            volume_mounts=mounts,
            privileged=privileged,
            resources=dict(fleet.resources),
        )

        workload = WorkloadDescriptor(
            name=name,
            namespace=fleet_ref.namespace,
            labels=labels,
            pod=PodTemplate(
                containers=[daemon],
                init_containers=init_containers,
                volumes=volumes,
                host_network=fleet.host_network,
                host_pid=True,
                node_selector=self._node_selector(fleet.node_name),
            ),
            recreate=True,
        )

        self._logger.debug(
            "Built storage resource set %s (%s on %s)",
            name,
            plan.store_format.value,
            plan.media_kind.value,
        )
        return ResourceSet(instance=instance, config_artifact=config_artifact, workload=workload)

    def build_provision_job(
        self, plan: StorageBackendPlan, fleet: StorageFleetSpec, node_name: str
    ) -> ProvisionJob:
        """Build the one-shot job that prepares a node's media."""
        if not node_name:
            raise ValidationError("Provisioning requires a node name")

        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        labels = {"app": PREPARE_APP_NAME, "cluster": fleet_ref.namespace}

        volumes = [
            Volume(name=DATA_VOLUME, host_path=fleet.data_dir_host_path),
            Volume(name=STAGING_VOLUME),
        ]
        mounts = [
            VolumeMount(name=DATA_VOLUME, mount_path=CONTAINER_DATA_DIR),
            VolumeMount(name=STAGING_VOLUME, mount_path=STAGING_MOUNT_PATH),
        ]
        for host_mount in plan.host_mounts:
            volumes.append(Volume(name=host_mount.volume_name, host_path=host_mount.host_path))
            mounts.append(VolumeMount(name=host_mount.volume_name, mount_path=host_mount.mount_path))

        env = [
            EnvVar(name=key, value=value)
            for key, value in backend_settings(plan, node_name, fleet.location).items()
        ]
        provision = Container(
            name="provision",
            image=self._config_provider.images.daemon,
            command=[SUPERVISOR_PATH],
            args=["--", LAUNCHER_PATH, "storage", "provision"],
            env=env,
            volume_mounts=mounts,
            privileged=self._privileged(plan),
            resources=dict(fleet.resources),
        )

        return ProvisionJob(
            name=prepare_job_name(node_name),
            namespace=fleet_ref.namespace,
            labels=labels,
            pod=PodTemplate(
                containers=[self._staging_container(), provision],
                volumes=volumes,
                host_network=fleet.host_network,
                node_selector=self._node_selector(node_name),
                restart_policy="OnFailure",
            ),
        )

    def _daemon_command(
        self, instance: DaemonInstance, plan: StorageBackendPlan, fleet: StorageFleetSpec
    ) -> Tuple[List[str], List[str]]:
        data_path = plan.data_path_for(instance.identity)
        common_args = [
            "--foreground",
            "--id", instance.identity,
            "--conf", posixpath.join(data_path, f"{fleet.meta.namespace}.config"),
            "--osd-data", data_path,
            "--keyring", posixpath.join(data_path, "keyring"),
            "--cluster", fleet.meta.namespace,
        ]
        if plan.store_format == StoreFormat.FILE_BASED:
            common_args.append(f"--osd-journal={posixpath.join(data_path, 'journal')}")

        if not plan.needs_binary_staging:
            return [DAEMON_BINARY], common_args

        partition_uuid = fleet.partition_uuids.get(instance.identity)
        if not partition_uuid:
            raise ValidationError(
                f"No partition UUID for file-based device instance {instance.identity}",
                details={"identity": instance.identity},
            )
        args = [
            "--", LAUNCHER_PATH,
            "storage", "filestore-device",
            "--source-path", posixpath.join(PARTUUID_DIR, partition_uuid),
            "--mount-path", data_path,
            "--",
        ] + common_args
        return [SUPERVISOR_PATH], args

    def _staging_container(self) -> Container:
        return Container(
            name="copy-bins",
            image=self._config_provider.images.launcher,
            args=["storage", "copybins"],
            env=[EnvVar(name="FLOTILLA_PATH", value=STAGING_MOUNT_PATH)],
            volume_mounts=[VolumeMount(name=STAGING_VOLUME, mount_path=STAGING_MOUNT_PATH)],
        )

    def _privileged(self, plan: StorageBackendPlan) -> bool:
        return plan.needs_device_mounts or self._config_provider.hostpath_requires_privileged

    @staticmethod
    def _base_volumes(fleet: StorageFleetSpec, config_name: str) -> List[Volume]:
        return [
            Volume(name=DATA_VOLUME, host_path=fleet.data_dir_host_path),
            Volume(name=CONFIG_VOLUME, config_artifact=config_name),
        ]

    @staticmethod
    def _base_mounts() -> List[VolumeMount]:
        return [
            VolumeMount(name=DATA_VOLUME, mount_path=CONTAINER_DATA_DIR),
            VolumeMount(name=CONFIG_VOLUME, mount_path=CONFIG_MOUNT_PATH),
        ]

    @staticmethod
    def _node_selector(node_name: Optional[str]) -> Dict[str, str]:
        return {HOSTNAME_LABEL: node_name} if node_name else {}
