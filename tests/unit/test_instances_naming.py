"""Tests for derived resource names and labels."""

from flotilla.core.enums import DaemonRole
from flotilla.core.value_objects import FleetRef
from flotilla.instances.naming import (
    GATEWAY_APP_NAME,
    MAX_RESOURCE_NAME_LENGTH,
    STORAGE_APP_NAME,
    app_name_for,
    instance_labels,
    instance_name,
    path_to_volume_name,
    prepare_job_name,
    truncate_name,
)


class TestInstanceNames:
    """Test instance naming scheme."""

    def test_instance_name_embeds_app_parent_and_identity(self) -> None:
        assert instance_name("flotilla-nfs", "my-nfs", "b") == "flotilla-nfs-my-nfs-b"

    def test_app_name_per_role(self) -> None:
        assert app_name_for(DaemonRole.EXPORT_GATEWAY) == GATEWAY_APP_NAME
        assert app_name_for(DaemonRole.STORAGE_NODE) == STORAGE_APP_NAME

    def test_names_unique_across_fleets_in_namespace(self) -> None:
        assert instance_name(GATEWAY_APP_NAME, "one", "a") != instance_name(
            GATEWAY_APP_NAME, "two", "a"
        )

    def test_labels(self) -> None:
        labels = instance_labels(DaemonRole.EXPORT_GATEWAY, FleetRef("my-nfs", "storage"), "a")

        assert labels == {
            "app": GATEWAY_APP_NAME,
            "cluster": "storage",
            "flotilla_nfs": "my-nfs",
            "instance": "a",
        }


class TestTruncation:
    """Test name truncation."""

    def test_short_names_unchanged(self) -> None:
        assert truncate_name("flotilla-storage-prepare-node1") == "flotilla-storage-prepare-node1"

    def test_long_names_truncated_with_hash(self) -> None:
        long_name = "x" * 100
        result = truncate_name(long_name)

        assert len(result) <= MAX_RESOURCE_NAME_LENGTH
        assert result.startswith("xxxx")

    def test_long_names_with_common_prefix_stay_distinct(self) -> None:
        prefix = "n" * 80
        assert truncate_name(prefix + "1") != truncate_name(prefix + "2")

    def test_prepare_job_name(self) -> None:
        assert prepare_job_name("node1") == "flotilla-storage-prepare-node1"
        assert len(prepare_job_name("node-" * 30)) <= MAX_RESOURCE_NAME_LENGTH


class TestVolumeNames:
    """Test host path to volume name conversion."""

    def test_path_to_volume_name(self) -> None:
        assert path_to_volume_name("/mnt/data") == "mnt-data"

    def test_invalid_characters_replaced(self) -> None:
        assert path_to_volume_name("/Mnt/My_Data/") == "mnt-my-data"

    def test_root_path(self) -> None:
        assert path_to_volume_name("/") == "root"
