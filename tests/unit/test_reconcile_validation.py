"""Tests for fleet specification validation."""

import pytest

from flotilla.core.errors import ValidationError
from flotilla.instances.storage_planner import StorageBackendPlanner
from flotilla.reconcile.validation import (
    validate_fleet,
    validate_gateway_fleet,
    validate_identifiers,
    validate_storage_fleet,
)


class TestValidateIdentifiers:
    @pytest.mark.parametrize(
        "meta,message",
        [
            ({"name": "", "namespace": "storage"}, "missing name"),
            ({"name": "my-nfs", "namespace": ""}, "missing namespace"),
            ({"name": "  ", "namespace": "storage"}, "missing name"),
            ({"name": "my-nfs", "namespace": "\t"}, "missing namespace"),
        ],
    )
    def test_missing_meta(self, make_gateway_fleet, meta, message) -> None:
        with pytest.raises(ValidationError, match=message):
            validate_identifiers(make_gateway_fleet(meta=meta))

    def test_missing_recovery_pool(self, make_gateway_fleet) -> None:
        fleet = make_gateway_fleet(client_recovery={"namespace": "grace"})

        with pytest.raises(ValidationError, match="client_recovery.pool"):
            validate_identifiers(fleet)

    def test_missing_recovery_namespace(self, make_gateway_fleet) -> None:
        fleet = make_gateway_fleet(client_recovery={"pool": "nfs-ganesha"})

        with pytest.raises(ValidationError, match="client_recovery.namespace"):
            validate_identifiers(fleet)

    def test_blank_recovery_pool(self, make_gateway_fleet) -> None:
        fleet = make_gateway_fleet(client_recovery={"pool": " ", "namespace": "grace"})

        with pytest.raises(ValidationError, match="client_recovery.pool"):
            validate_identifiers(fleet)

    def test_zero_count_passes_identifier_checks(self, make_gateway_fleet) -> None:
        validate_identifiers(make_gateway_fleet(active=0))


class TestValidateGatewayFleet:
    """Test gateway fleet checks in the order they are applied."""

    def test_valid(self, make_gateway_fleet) -> None:
        validate_gateway_fleet(make_gateway_fleet())

    def test_missing_store_name(self, make_gateway_fleet) -> None:
        with pytest.raises(ValidationError, match="missing store.name"):
            validate_gateway_fleet(make_gateway_fleet(store={"type": "file"}))

    def test_unrecognized_store_type(self, make_gateway_fleet) -> None:
        with pytest.raises(ValidationError, match="unrecognized store type: block") as exc_info:
            validate_gateway_fleet(make_gateway_fleet(store={"name": "x", "type": "block"}))
        assert exc_info.value.details["valid_types"] == ["file", "object"]

    def test_no_exports(self, make_gateway_fleet) -> None:
        with pytest.raises(ValidationError, match="at least one export"):
            validate_gateway_fleet(make_gateway_fleet(exports=[]))

    def test_export_missing_path(self, make_gateway_fleet) -> None:
        fleet = make_gateway_fleet(
            exports=[{"path": "/", "pseudo_path": "/a"}, {"pseudo_path": "/b"}]
        )

        with pytest.raises(ValidationError, match="missing path for export 1"):
            validate_gateway_fleet(fleet)

    def test_export_missing_pseudo_path(self, make_gateway_fleet) -> None:
        with pytest.raises(ValidationError, match="missing pseudo_path for export 0"):
            validate_gateway_fleet(make_gateway_fleet(exports=[{"path": "/"}]))

    def test_zero_active_servers(self, make_gateway_fleet) -> None:
        with pytest.raises(ValidationError, match="at least one active server"):
            validate_gateway_fleet(make_gateway_fleet(active=0))


class TestValidateStorageFleet:
    """Test storage fleet checks."""

    def setup_method(self) -> None:
        self.planner = StorageBackendPlanner()

    def test_valid_returns_plan(self, make_storage_fleet) -> None:
        plan = validate_storage_fleet(make_storage_fleet(count=2), self.planner)

        assert plan.directories == ("/var/lib/flotilla",)

    def test_zero_count(self, make_storage_fleet) -> None:
        with pytest.raises(ValidationError, match="at least one storage node"):
            validate_storage_fleet(make_storage_fleet(count=0), self.planner)

    def test_empty_volumes(self, make_storage_fleet) -> None:
        with pytest.raises(ValidationError, match="empty volumes"):
            validate_storage_fleet(make_storage_fleet(selection={}), self.planner)

    def test_missing_partition_uuids_listed(self, make_storage_fleet) -> None:
        fleet = make_storage_fleet(
            count=3,
            store={"format": "filestore"},
            selection={"devices": ["sdb"]},
            partition_uuids={"b": "uuid-b"},
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_storage_fleet(fleet, self.planner)
        assert exc_info.value.details["identities"] == ["a", "c"]

    def test_partition_uuids_not_needed_for_object_based(self, make_storage_fleet) -> None:
        fleet = make_storage_fleet(count=2, selection={"devices": ["sdb"]})

        assert validate_storage_fleet(fleet, self.planner).needs_device_mounts


class TestValidateFleet:
    def test_gateway_has_no_plan(self, make_gateway_fleet) -> None:
        assert validate_fleet(make_gateway_fleet(), StorageBackendPlanner()) is None

    def test_storage_has_plan(self, make_storage_fleet) -> None:
        assert validate_fleet(make_storage_fleet(), StorageBackendPlanner()) is not None
