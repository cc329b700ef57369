"""Role dispatch for resource set construction."""

from typing import Optional, Union

from ..core.config import ConfigProvider
from ..core.errors import ValidationError
from ..core.log import Logger
from ..core.specs import GatewayFleetSpec, StorageFleetSpec
from ..core.value_objects import DaemonInstance
from .descriptors import ProvisionJob, ResourceSet
from .gateway_builder import GatewayResourceBuilder
from .storage_builder import StorageResourceBuilder
from .storage_planner import StorageBackendPlan


class ResourceSetBuilder:
    """Turns an instance, its plan and its fleet spec into a ResourceSet.

    Building is a pure transformation: identical inputs produce identical
    descriptors, which keeps update-in-place a no-op when nothing changed.
    Nothing here talks to the substrate.
    """

    def __init__(self, config_provider: ConfigProvider, logger: Logger) -> None:
        self._storage = StorageResourceBuilder(config_provider, logger)
        self._gateway = GatewayResourceBuilder(config_provider, logger)

    def build(
        self,
        instance: DaemonInstance,
        plan: Optional[StorageBackendPlan],
        fleet: Union[StorageFleetSpec, GatewayFleetSpec],
    ) -> ResourceSet:
        """Build the resource set of one instance.

        Args:
            instance: Instance to describe
            plan: Storage plan, required for storage nodes and ignored for gateways
            fleet: Role-specific fleet specification

        Returns:
            ResourceSet keyed by the instance identity
        """
        if instance.role != fleet.role:
            raise ValidationError(
                f"Instance {instance} has role {instance.role.value}, "
                f"fleet {fleet.meta.name} has role {fleet.role.value}"
            )
        if isinstance(fleet, GatewayFleetSpec):
            return self._gateway.build(instance, fleet)
        if plan is None:
            raise ValidationError(f"Storage instance {instance} requires a backend plan")
        return self._storage.build(instance, plan, fleet)

    def build_provision_job(
        self, plan: StorageBackendPlan, fleet: StorageFleetSpec, node_name: str
    ) -> ProvisionJob:
        return self._storage.build_provision_job(plan, fleet, node_name)
