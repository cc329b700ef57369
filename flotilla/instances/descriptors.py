"""Declarative resource descriptors.

Descriptors are plain data built by the resource builders and rendered into
substrate manifests with to_manifest(). Rendering is a pure function of the
descriptor, so two equal descriptors always produce equal manifests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.enums import ResourceKind
from ..core.value_objects import DaemonInstance

GATEWAY_PORT = 2049
GATEWAY_PORT_NAME = "nfs"
HOSTNAME_LABEL = "kubernetes.io/hostname"


@dataclass(frozen=True)
class EnvVar:
    """Container environment variable, literal or taken from a pod field."""

    name: str
    value: str = ""
    field_path: Optional[str] = None

    def to_manifest(self) -> Dict[str, Any]:
        if self.field_path:
            return {"name": self.name, "valueFrom": {"fieldRef": {"fieldPath": self.field_path}}}
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class VolumeMount:
    name: str
    mount_path: str

    def to_manifest(self) -> Dict[str, Any]:
        return {"name": self.name, "mountPath": self.mount_path}


@dataclass(frozen=True)
class Volume:
    """Pod volume: a host path, an ephemeral directory or a config artifact."""

    name: str
    host_path: Optional[str] = None
    config_artifact: Optional[str] = None
    # (key, file name) pairs projected from the config artifact
    items: Tuple[Tuple[str, str], ...] = ()

    def to_manifest(self) -> Dict[str, Any]:
        if self.host_path:
            return {"name": self.name, "hostPath": {"path": self.host_path}}
        if self.config_artifact:
            source: Dict[str, Any] = {"name": self.config_artifact}
            if self.items:
                source["items"] = [{"key": key, "path": path} for key, path in self.items]
            return {"name": self.name, "configMap": source}
        return {"name": self.name, "emptyDir": {}}


@dataclass
class Container:
    """One container of a workload or job."""

    name: str
    image: str
    command: List[str] = field(default_factory=list)
    args: List[str] = field(default_factory=list)
    env: List[EnvVar] = field(default_factory=list)
    env_from_config: Optional[str] = None
    volume_mounts: List[VolumeMount] = field(default_factory=list)
    ports: List[Tuple[str, int]] = field(default_factory=list)
    privileged: Optional[bool] = None
    resources: Dict[str, Any] = field(default_factory=dict)

    def to_manifest(self) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {"name": self.name, "image": self.image}
        if self.command:
            manifest["command"] = list(self.command)
        if self.args:
            manifest["args"] = list(self.args)
        if self.env:
            manifest["env"] = [env.to_manifest() for env in self.env]
        if self.env_from_config:
            manifest["envFrom"] = [{"configMapRef": {"name": self.env_from_config}}]
        if self.volume_mounts:
            manifest["volumeMounts"] = [m.to_manifest() for m in self.volume_mounts]
        if self.ports:
            manifest["ports"] = [
                {"name": name, "containerPort": port, "protocol": "TCP"}
                for name, port in self.ports
            ]
        if self.privileged is not None:
            manifest["securityContext"] = {
                "privileged": self.privileged,
                "runAsUser": 0,
                "readOnlyRootFilesystem": False,
            }
        if self.resources:
            manifest["resources"] = dict(self.resources)
        return manifest


def _metadata(name: str, namespace: str, labels: Dict[str, str]) -> Dict[str, Any]:
    return {"name": name, "namespace": namespace, "labels": dict(labels)}


@dataclass
class PodTemplate:
    """Pod shape shared by workloads and provisioning jobs."""

    containers: List[Container]
    init_containers: List[Container] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)
    host_network: bool = False
    host_pid: bool = False
    node_selector: Dict[str, str] = field(default_factory=dict)
    restart_policy: str = "Always"

    def to_manifest(self, labels: Dict[str, str]) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "containers": [c.to_manifest() for c in self.containers],
            "restartPolicy": self.restart_policy,
            "hostNetwork": self.host_network,
            "dnsPolicy": "ClusterFirstWithHostNet" if self.host_network else "ClusterFirst",
        }
        if self.init_containers:
            spec["initContainers"] = [c.to_manifest() for c in self.init_containers]
        if self.volumes:
            spec["volumes"] = [v.to_manifest() for v in self.volumes]
        if self.host_pid:
            spec["hostPID"] = True
        if self.node_selector:
            spec["nodeSelector"] = dict(self.node_selector)
        return {"metadata": {"labels": dict(labels)}, "spec": spec}


@dataclass
class ConfigArtifact:
    """Key/value configuration consumed by an instance's containers."""

    name: str
    namespace: str
    labels: Dict[str, str]
    data: Dict[str, str]

    kind = ResourceKind.CONFIG_ARTIFACT

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": self.kind.value,
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "data": dict(self.data),
        }


@dataclass
class WorkloadDescriptor:
    """Single-replica workload running one daemon instance.

    Horizontal scale comes from more instances, never from raising the
    replica count of one workload.
    """

    name: str
    namespace: str
    labels: Dict[str, str]
    pod: PodTemplate
    recreate: bool = False

    kind = ResourceKind.WORKLOAD
    replicas = 1

    def to_manifest(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "replicas": self.replicas,
            "selector": {"matchLabels": dict(self.labels)},
            "template": self.pod.to_manifest(self.labels),
        }
        if self.recreate:
            spec["strategy"] = {"type": "Recreate"}
        return {
            "apiVersion": "apps/v1",
            "kind": self.kind.value,
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": spec,
        }


@dataclass
class NetworkEndpoint:
    """Cluster-internal or host-mode address of a gateway instance."""

    name: str
    namespace: str
    labels: Dict[str, str]
    host_network: bool = False
    port: int = GATEWAY_PORT
    port_name: str = GATEWAY_PORT_NAME

    kind = ResourceKind.NETWORK_ENDPOINT

    def to_manifest(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "selector": dict(self.labels),
            "ports": [
                {
                    "name": self.port_name,
                    "port": self.port,
                    "targetPort": self.port,
                    "protocol": "TCP",
                }
            ],
        }
        if self.host_network:
            spec["clusterIP"] = "None"
        return {
            "apiVersion": "v1",
            "kind": self.kind.value,
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": spec,
        }


@dataclass
class ProvisionJob:
    """One-shot job preparing a node's media for storage instances."""

    name: str
    namespace: str
    labels: Dict[str, str]
    pod: PodTemplate

    kind = ResourceKind.PROVISION_JOB

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "apiVersion": "batch/v1",
            "kind": self.kind.value,
            "metadata": _metadata(self.name, self.namespace, self.labels),
            "spec": {"template": self.pod.to_manifest(self.labels)},
        }


@dataclass
class ResourceSet:
    """Descriptors representing one daemon instance on the substrate."""

    instance: DaemonInstance
    config_artifact: ConfigArtifact
    workload: WorkloadDescriptor
    network_endpoint: Optional[NetworkEndpoint] = None

    def __post_init__(self) -> None:
        for descriptor in self.descriptors():
            if descriptor.labels.get("instance") != self.instance.identity:
                raise ValueError(
                    f"{descriptor.kind.value} {descriptor.name} does not belong to "
                    f"instance {self.instance.identity}"
                )

    @property
    def identity(self) -> str:
        return self.instance.identity

    @property
    def namespace(self) -> str:
        return self.workload.namespace

    def descriptors(self) -> List[Any]:
        """Descriptors in application order."""
        result: List[Any] = [self.config_artifact, self.workload]
        if self.network_endpoint is not None:
            result.append(self.network_endpoint)
        return result

    def to_manifests(self) -> List[Dict[str, Any]]:
        return [d.to_manifest() for d in self.descriptors()]
