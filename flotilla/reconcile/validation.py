"""Fleet specification validation.

Every check here runs before the driver touches the substrate. A failure
aborts the whole pass with ValidationError.
"""

from typing import Optional, Union

from ..core.enums import GatewayStoreType
from ..core.errors import ValidationError
from ..core.specs import GatewayFleetSpec, StorageFleetSpec
from ..instances.identity import identity_of
from ..instances.storage_planner import StorageBackendPlan, StorageBackendPlanner

FleetSpecType = Union[StorageFleetSpec, GatewayFleetSpec]


def validate_identifiers(fleet: FleetSpecType) -> None:
    """Check the identifiers every pass needs, including deletion passes."""
    if not fleet.meta.name.strip():
        raise ValidationError("missing name")
    if not fleet.meta.namespace.strip():
        raise ValidationError("missing namespace")
    if isinstance(fleet, GatewayFleetSpec):
        if not fleet.client_recovery.pool.strip():
            raise ValidationError("missing client_recovery.pool")
        if not fleet.client_recovery.namespace.strip():
            raise ValidationError("missing client_recovery.namespace")


def validate_gateway_fleet(fleet: GatewayFleetSpec) -> None:
    """Validate a gateway fleet for a creation pass."""
    validate_identifiers(fleet)

    if not fleet.store.name:
        raise ValidationError("missing store.name")
    valid_types = [t.value for t in GatewayStoreType]
    if fleet.store.type not in valid_types:
        raise ValidationError(
            f"unrecognized store type: {fleet.store.type}",
            details={"valid_types": valid_types},
        )

    if not fleet.exports:
        raise ValidationError("at least one export is required")
    for i, export in enumerate(fleet.exports):
        if not export.path:
            raise ValidationError(f"missing path for export {i}")
        if not export.pseudo_path:
            raise ValidationError(f"missing pseudo_path for export {i}")

    if fleet.server.active == 0:
        raise ValidationError("at least one active server required")


def validate_storage_fleet(
    fleet: StorageFleetSpec, planner: StorageBackendPlanner
) -> StorageBackendPlan:
    """Validate a storage fleet for a creation pass and return its plan."""
    validate_identifiers(fleet)

    if fleet.count == 0:
        raise ValidationError("at least one storage node required")

    plan = planner.plan(fleet.store, fleet.selection, fleet.metadata_device)

    if plan.needs_binary_staging:
        missing = [
            identity
            for identity in (identity_of(o) for o in range(fleet.count))
            if not fleet.partition_uuids.get(identity)
        ]
        if missing:
            raise ValidationError(
                f"missing partition UUID for file-based device instances: {', '.join(missing)}",
                details={"identities": missing},
            )
    return plan


def validate_fleet(
    fleet: FleetSpecType, planner: StorageBackendPlanner
) -> Optional[StorageBackendPlan]:
    """Validate a fleet for a creation pass.

    Returns:
        The storage plan for storage fleets, None for gateway fleets
    """
    if isinstance(fleet, GatewayFleetSpec):
        validate_gateway_fleet(fleet)
        return None
    return validate_storage_fleet(fleet, planner)
