"""Tests for fleet specification models."""

import pytest

from flotilla.core.enums import DaemonRole, StoreFormat
from flotilla.core.errors import ConfigurationError
from flotilla.core.specs import (
    GatewayFleetSpec,
    StorageFleetSpec,
    load_fleet_spec,
    parse_fleet_spec,
    with_desired_count,
)


class TestParseFleetSpec:
    """Test role selection and parsing."""

    def test_gateway(self, gateway_spec_data) -> None:
        fleet = parse_fleet_spec(gateway_spec_data(active=3))

        assert isinstance(fleet, GatewayFleetSpec)
        assert fleet.role == DaemonRole.EXPORT_GATEWAY
        assert fleet.desired_count == 3
        assert fleet.exports[0].access_type == "RW"
        assert fleet.exports[0].squash == "none"

    def test_storage(self, storage_spec_data) -> None:
        fleet = parse_fleet_spec(storage_spec_data(count=4))

        assert isinstance(fleet, StorageFleetSpec)
        assert fleet.role == DaemonRole.STORAGE_NODE
        assert fleet.desired_count == 4
        assert fleet.store.format == StoreFormat.OBJECT_BASED
        assert fleet.data_dir_host_path == "/var/lib/flotilla"

    def test_unknown_kind(self, gateway_spec_data) -> None:
        with pytest.raises(ConfigurationError, match="Invalid fleet specification"):
            parse_fleet_spec(gateway_spec_data(kind="Monitor"))

    def test_unknown_field(self, gateway_spec_data) -> None:
        with pytest.raises(ConfigurationError):
            parse_fleet_spec(gateway_spec_data(replicas=2))

    def test_negative_count(self, storage_spec_data) -> None:
        with pytest.raises(ConfigurationError):
            parse_fleet_spec(storage_spec_data(count=-1))

    def test_unknown_store_format(self, storage_spec_data) -> None:
        with pytest.raises(ConfigurationError):
            parse_fleet_spec(storage_spec_data(store={"format": "zfs"}))

    def test_empty_identifiers_parse(self, gateway_spec_data) -> None:
        fleet = parse_fleet_spec(gateway_spec_data(meta={}))

        assert fleet.meta.name == ""
        assert fleet.meta.namespace == ""


class TestLoadFleetSpec:
    def test_load_yaml(self, write_spec, gateway_spec_data) -> None:
        fleet = load_fleet_spec(write_spec(gateway_spec_data()))

        assert fleet.meta.name == "my-nfs"

    def test_rejects_other_suffixes(self, temp_dir) -> None:
        path = temp_dir / "fleet.json"
        path.write_text("{}")

        with pytest.raises(ConfigurationError, match="Unsupported fleet spec format"):
            load_fleet_spec(path)

    def test_rejects_non_mapping(self, temp_dir) -> None:
        path = temp_dir / "fleet.yaml"
        path.write_text("- kind: StorageNode\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_fleet_spec(path)

    def test_missing_file(self, temp_dir) -> None:
        with pytest.raises(ConfigurationError, match="Failed to load fleet spec"):
            load_fleet_spec(temp_dir / "absent.yaml")


class TestWithDesiredCount:
    def test_gateway_copy(self, make_gateway_fleet) -> None:
        fleet = make_gateway_fleet(active=3)

        resized = with_desired_count(fleet, 1)

        assert resized.desired_count == 1
        assert fleet.desired_count == 3
        assert resized.exports == fleet.exports

    def test_storage_copy(self, make_storage_fleet) -> None:
        fleet = make_storage_fleet(count=1)

        assert with_desired_count(fleet, 5).desired_count == 5
        assert fleet.desired_count == 1
