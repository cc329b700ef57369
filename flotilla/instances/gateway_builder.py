"""Resource sets for NFS export gateway instances."""

from ..core.config import ConfigProvider
from ..core.log import Logger
from ..core.specs import GatewayFleetSpec
from ..core.value_objects import DaemonInstance, FleetRef
from .descriptors import (
    GATEWAY_PORT,
    GATEWAY_PORT_NAME,
    ConfigArtifact,
    Container,
    EnvVar,
    NetworkEndpoint,
    PodTemplate,
    ResourceSet,
    Volume,
    VolumeMount,
    WorkloadDescriptor,
)
from .gateway_config import (
    GATEWAY_CONFIG_DIR,
    GATEWAY_CONFIG_FILE,
    GATEWAY_CONFIG_KEY,
    render_gateway_config,
)
from .naming import GATEWAY_APP_NAME, instance_labels, instance_name

GATEWAY_DATA_VOLUME = "flotilla-data"
GATEWAY_DATA_DIR = "/var/lib/flotilla"
GATEWAY_CONFIG_VOLUME = "ganesha-config"


class GatewayResourceBuilder:
    """Builds the config, workload and endpoint of one gateway instance."""

    def __init__(self, config_provider: ConfigProvider, logger: Logger) -> None:
        self._config_provider = config_provider
        self._logger = logger

    def build(self, instance: DaemonInstance, fleet: GatewayFleetSpec) -> ResourceSet:
        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        identity = instance.identity
        name = instance_name(GATEWAY_APP_NAME, fleet_ref.name, identity)
        labels = instance_labels(instance.role, fleet_ref, identity)

        config_artifact = ConfigArtifact(
            name=name,
            namespace=fleet_ref.namespace,
            labels=labels,
            data={GATEWAY_CONFIG_KEY: render_gateway_config(fleet, identity)},
        )

        container = Container(
            name="nfs-ganesha",
            image=self._config_provider.images.gateway,
            args=["nfs", "ganesha"],
            env=[
                EnvVar(name="FLOTILLA_POD_NAME", field_path="metadata.name"),
                EnvVar(name="FLOTILLA_GANESHA_NAME", value=identity),
                EnvVar(name="FLOTILLA_CLUSTER", value=fleet_ref.namespace),
                EnvVar(name="FLOTILLA_POD_IP", field_path="status.podIP"),
            ],
            volume_mounts=[
                VolumeMount(name=GATEWAY_DATA_VOLUME, mount_path=GATEWAY_DATA_DIR),
                VolumeMount(name=GATEWAY_CONFIG_VOLUME, mount_path=GATEWAY_CONFIG_DIR),
            ],
            ports=[(GATEWAY_PORT_NAME, GATEWAY_PORT)],
            resources=dict(fleet.server.resources),
        )
        workload = WorkloadDescriptor(
            name=name,
            namespace=fleet_ref.namespace,
            labels=labels,
            pod=PodTemplate(
                containers=[container],
                volumes=[
                    Volume(name=GATEWAY_DATA_VOLUME),
                    Volume(
                        name=GATEWAY_CONFIG_VOLUME,
                        config_artifact=name,
                        items=((GATEWAY_CONFIG_KEY, GATEWAY_CONFIG_FILE),),
                    ),
                ],
                host_network=fleet.server.host_network,
            ),
        )
        endpoint = NetworkEndpoint(
            name=name,
            namespace=fleet_ref.namespace,
            labels=labels,
            host_network=fleet.server.host_network,
        )

        self._logger.debug("Built gateway resource set %s", name)
        return ResourceSet(
            instance=instance,
            config_artifact=config_artifact,
            workload=workload,
            network_endpoint=endpoint,
        )
