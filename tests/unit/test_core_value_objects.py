"""Tests for domain value objects."""

import pytest

from flotilla.core.enums import DaemonRole
from flotilla.core.value_objects import DaemonInstance, FleetRef


class TestFleetRef:
    def test_str(self) -> None:
        assert str(FleetRef("my-nfs", "storage")) == "storage/my-nfs"

    @pytest.mark.parametrize("name,namespace", [("", "storage"), ("my-nfs", " ")])
    def test_empty_rejected(self, name: str, namespace: str) -> None:
        with pytest.raises(ValueError):
            FleetRef(name, namespace)


class TestDaemonInstance:
    def test_role_helpers(self) -> None:
        gateway = DaemonInstance(0, "a", DaemonRole.EXPORT_GATEWAY)

        assert gateway.is_gateway()
        assert not gateway.is_storage_node()
        assert str(gateway) == "a[0]"

    def test_hashable(self) -> None:
        first = DaemonInstance(1, "b", DaemonRole.STORAGE_NODE)
        second = DaemonInstance(1, "b", DaemonRole.STORAGE_NODE)

        assert {first: 1}[second] == 1

    @pytest.mark.parametrize("ordinal,identity", [(-1, "a"), (0, ""), (0, "A"), (0, "a1")])
    def test_invalid(self, ordinal: int, identity: str) -> None:
        with pytest.raises(ValueError):
            DaemonInstance(ordinal, identity, DaemonRole.STORAGE_NODE)
