"""Desired-versus-actual reconciliation of one fleet.

A creation pass walks ordinals [0, desired) in order. For each instance it
applies the config artifact (create, update when it already exists), the
workload (create, existing ones are left alone unless workload updates are
enabled) and the network endpoint, then adds gateways to the grace database.

A deletion pass walks the surplus ordinals. Gateways leave the grace database
first, then the workload and endpoint are deleted. Config artifacts are kept
on scale-down and deleted on teardown. Missing resources count as deleted.

Passes are sequential. Substrate errors are recorded against the instance
and the pass moves on to the next one; membership failures are warnings.
Everything is safe to re-run, so the caller retries until the report is
clean. Validation failures abort before any substrate call.
"""

from typing import List, Optional, Sequence, Union

from ..core.config import ConfigProvider
from ..core.enums import DaemonRole, ReconcileState, ResourceKind
from ..core.errors import AlreadyExistsError, NotFoundError, SubstrateError, ValidationError
from ..core.log import Logger, get_logger, log_context, log_instance_event
from ..core.protocols import MembershipCoordinator, SubstrateClient
from ..core.specs import GatewayFleetSpec, StorageFleetSpec
from ..core.value_objects import DaemonInstance, FleetRef
from ..instances.descriptors import NetworkEndpoint, ProvisionJob, ResourceSet
from ..instances.identity import instances_in_range
from ..instances.naming import app_name_for, instance_name
from ..instances.resource_builder import ResourceSetBuilder
from ..instances.storage_planner import StorageBackendPlanner
from .report import InstanceOutcome, ReconcileReport
from .validation import validate_fleet, validate_identifiers, validate_storage_fleet

FleetSpecType = Union[StorageFleetSpec, GatewayFleetSpec]


class ReconcilerDriver:
    """Drives creation, scale-down and teardown passes over a fleet."""

    def __init__(
        self,
        substrate: SubstrateClient,
        membership: MembershipCoordinator,
        config_provider: ConfigProvider,
        logger: Optional[Logger] = None,
        planner: Optional[StorageBackendPlanner] = None,
        builder: Optional[ResourceSetBuilder] = None,
    ) -> None:
        self._substrate = substrate
        self._membership = membership
        self._config_provider = config_provider
        self._logger = logger or get_logger(__name__)
        self._planner = planner or StorageBackendPlanner(self._logger)
        self._builder = builder or ResourceSetBuilder(config_provider, self._logger)

    def desired_resource_sets(self, fleet: FleetSpecType) -> List[ResourceSet]:
        """Validate a fleet and build the resource sets of all desired instances.

        Pure: nothing is sent to the substrate.

        Raises:
            ValidationError: If the fleet specification is invalid
        """
        plan = validate_fleet(fleet, self._planner)
        return [
            self._builder.build(instance, plan, fleet)
            for instance in instances_in_range(0, fleet.desired_count, fleet.role)
        ]

    def reconcile(self, fleet: FleetSpecType, current_count: int = 0) -> ReconcileReport:
        """Converge a fleet to its desired instance count.

        Args:
            fleet: Fleet specification
            current_count: Number of instances currently deployed; ordinals
                at or above the desired count are scaled down

        Returns:
            ReconcileReport with per-instance outcomes

        Raises:
            ValidationError: Before any substrate call, if the fleet is invalid
        """
        if current_count < 0:
            raise ValidationError(f"current count must be non-negative: {current_count}")

        resource_sets = self.desired_resource_sets(fleet)
        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        report = ReconcileReport(
            fleet=str(fleet_ref),
            role=fleet.role,
            desired=fleet.desired_count,
            current=current_count,
        )

        with log_context(fleet=str(fleet_ref), role=fleet.role.value):
            self._logger.info(
                "Reconciling %s %s: %d desired, %d current",
                fleet.role.value,
                fleet_ref,
                fleet.desired_count,
                current_count,
            )
            for resource_set in resource_sets:
                self._apply_instance(resource_set, fleet, report.outcome_for(resource_set.identity))

            if current_count > fleet.desired_count:
                report.state = ReconcileState.SCALING_DOWN
                self._remove_instances(
                    fleet, fleet.desired_count, current_count, report, delete_config=False
                )

        report.state = ReconcileState.CONVERGED
        self._log_summary(report)
        return report

    def teardown(
        self, fleet: FleetSpecType, current_count: Optional[int] = None
    ) -> ReconcileReport:
        """Remove every instance of a fleet, config artifacts included.

        Args:
            fleet: Fleet specification
            current_count: Number of deployed instances, defaults to the
                fleet's desired count
        """
        validate_identifiers(fleet)
        count = fleet.desired_count if current_count is None else current_count
        if count < 0:
            raise ValidationError(f"current count must be non-negative: {count}")

        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        report = ReconcileReport(
            fleet=str(fleet_ref),
            role=fleet.role,
            desired=0,
            current=count,
            state=ReconcileState.SCALING_DOWN,
        )
        with log_context(fleet=str(fleet_ref), role=fleet.role.value):
            self._logger.info("Tearing down %s %s: %d instances", fleet.role.value, fleet_ref, count)
            self._remove_instances(fleet, 0, count, report, delete_config=True)

        report.state = ReconcileState.CONVERGED
        self._log_summary(report)
        return report

    def provision(self, fleet: StorageFleetSpec, node_names: Sequence[str]) -> ReconcileReport:
        """Apply the media provisioning job on each node of a storage fleet."""
        if not isinstance(fleet, StorageFleetSpec):
            raise ValidationError("Provisioning applies to storage fleets only")
        if not node_names:
            raise ValidationError("at least one node name is required")

        plan = validate_storage_fleet(fleet, self._planner)
        jobs: List[ProvisionJob] = [
            self._builder.build_provision_job(plan, fleet, node) for node in node_names
        ]

        fleet_ref = FleetRef(fleet.meta.name, fleet.meta.namespace)
        report = ReconcileReport(
            fleet=str(fleet_ref), role=fleet.role, desired=fleet.desired_count
        )
        with log_context(fleet=str(fleet_ref), role=fleet.role.value):
            for node, job in zip(node_names, jobs):
                outcome = report.outcome_for(node)
                try:
                    self._create_tolerating_existing(job, outcome)
                except SubstrateError as e:
                    self._record_error(outcome, e)

        report.state = ReconcileState.CONVERGED
        self._log_summary(report)
        return report

    def _apply_instance(
        self, resource_set: ResourceSet, fleet: FleetSpecType, outcome: InstanceOutcome
    ) -> None:
        identity = resource_set.identity
        try:
            self._apply_config(resource_set, outcome)
            self._apply_workload(resource_set, outcome)
            if resource_set.network_endpoint is not None:
                self._create_tolerating_existing(resource_set.network_endpoint, outcome)
        except SubstrateError as e:
            self._record_error(outcome, e)
            return

        log_instance_event(self._logger, "applied", identity=identity)

        if isinstance(fleet, GatewayFleetSpec):
            result = self._membership.add(
                identity, fleet.client_recovery.pool, fleet.client_recovery.namespace
            )
            if result.ok:
                outcome.actions.append(f"added {identity} to grace db")
            else:
                outcome.warnings.append(result.detail)

    def _apply_config(self, resource_set: ResourceSet, outcome: InstanceOutcome) -> None:
        config = resource_set.config_artifact
        manifest = config.to_manifest()
        try:
            self._substrate.create(config.kind, manifest)
            outcome.actions.append(f"created {config.kind.value}/{config.name}")
        except AlreadyExistsError:
            self._substrate.update(config.kind, manifest)
            outcome.actions.append(f"updated {config.kind.value}/{config.name}")

    def _apply_workload(self, resource_set: ResourceSet, outcome: InstanceOutcome) -> None:
        workload = resource_set.workload
        manifest = workload.to_manifest()
        try:
            self._substrate.create(workload.kind, manifest)
            outcome.actions.append(f"created {workload.kind.value}/{workload.name}")
        except AlreadyExistsError:
            if self._config_provider.update_existing_workloads:
                self._substrate.update(workload.kind, manifest)
                outcome.actions.append(f"updated {workload.kind.value}/{workload.name}")
            else:
                self._logger.info("%s %s already exists", workload.kind.value, workload.name)
                outcome.actions.append(f"kept {workload.kind.value}/{workload.name}")

    def _create_tolerating_existing(
        self, descriptor: Union[NetworkEndpoint, ProvisionJob], outcome: InstanceOutcome
    ) -> None:
        try:
            self._substrate.create(descriptor.kind, descriptor.to_manifest())
            outcome.actions.append(f"created {descriptor.kind.value}/{descriptor.name}")
        except AlreadyExistsError:
            self._logger.info("%s %s already exists", descriptor.kind.value, descriptor.name)
            outcome.actions.append(f"kept {descriptor.kind.value}/{descriptor.name}")

    def _remove_instances(
        self,
        fleet: FleetSpecType,
        start: int,
        stop: int,
        report: ReconcileReport,
        delete_config: bool,
    ) -> None:
        for instance in instances_in_range(start, stop, fleet.role):
            self._remove_instance(instance, fleet, report.outcome_for(instance.identity), delete_config)

    def _remove_instance(
        self,
        instance: DaemonInstance,
        fleet: FleetSpecType,
        outcome: InstanceOutcome,
        delete_config: bool,
    ) -> None:
        identity = instance.identity
        namespace = fleet.meta.namespace
        name = instance_name(app_name_for(fleet.role), fleet.meta.name, identity)

        # Leave the grace db before the daemon goes away
        if isinstance(fleet, GatewayFleetSpec):
            result = self._membership.remove(
                identity, fleet.client_recovery.pool, fleet.client_recovery.namespace
            )
            if result.ok:
                outcome.actions.append(f"removed {identity} from grace db")
            else:
                outcome.warnings.append(result.detail)

        kinds = [ResourceKind.WORKLOAD]
        if fleet.role == DaemonRole.EXPORT_GATEWAY:
            kinds.append(ResourceKind.NETWORK_ENDPOINT)
        if delete_config:
            kinds.append(ResourceKind.CONFIG_ARTIFACT)

        for kind in kinds:
            try:
                self._substrate.delete(kind, name, namespace)
                outcome.actions.append(f"deleted {kind.value}/{name}")
            except NotFoundError:
                outcome.actions.append(f"absent {kind.value}/{name}")
            except SubstrateError as e:
                self._record_error(outcome, e)
                return

        log_instance_event(self._logger, "removed", identity=identity)

    def _record_error(self, outcome: InstanceOutcome, error: SubstrateError) -> None:
        outcome.error = error.message
        self._logger.error(
            "Failed to reconcile %s: %s",
            outcome.target,
            error.message,
            extra={"event_type": "instance", "resource_kind": error.kind, "resource_name": error.name},
        )

    def _log_summary(self, report: ReconcileReport) -> None:
        if report.has_errors:
            self._logger.warning(
                "Pass over %s finished with %d failed instances; re-run to converge",
                report.fleet,
                len(report.errors),
            )
        else:
            self._logger.info("Pass over %s converged", report.fleet)
