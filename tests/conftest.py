"""Test configuration and fixtures shared by unit and integration tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock, patch

import pytest
import yaml

from flotilla.core.specs import GatewayFleetSpec, StorageFleetSpec, parse_fleet_spec
from flotilla.core.types import FlotillaConfig, SubstrateConfig
from flotilla.recovery.membership import RecordingCoordinator
from flotilla.substrate.memory import InMemorySubstrate


def _gateway_spec_data(active: int = 2, **overrides: Any) -> Dict[str, Any]:
    """Mapping for a valid gateway fleet specification."""
    data: Dict[str, Any] = {
        "kind": "ExportGateway",
        "meta": {"name": "my-nfs", "namespace": "storage"},
        "store": {"name": "myfs", "type": "file"},
        "client_recovery": {"pool": "nfs-ganesha", "namespace": "grace"},
        "exports": [{"path": "/", "pseudo_path": "/myfs"}],
        "server": {"active": active},
    }
    data.update(overrides)
    return data


def _storage_spec_data(count: int = 1, **overrides: Any) -> Dict[str, Any]:
    """Mapping for a valid storage fleet specification."""
    data: Dict[str, Any] = {
        "kind": "StorageNode",
        "meta": {"name": "rack1", "namespace": "storage"},
        "count": count,
        "store": {"format": "bluestore"},
        "selection": {"directories": ["/var/lib/flotilla"]},
    }
    data.update(overrides)
    return data


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="flotilla_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config() -> FlotillaConfig:
    """Configuration using the in-memory substrate."""
    return FlotillaConfig(substrate=SubstrateConfig(kind="memory"))


@pytest.fixture
def make_gateway_fleet():
    """Factory for gateway fleet specifications."""

    def _make(active: int = 2, **overrides: Any) -> GatewayFleetSpec:
        return parse_fleet_spec(_gateway_spec_data(active, **overrides))

    return _make


@pytest.fixture
def make_storage_fleet():
    """Factory for storage fleet specifications."""

    def _make(count: int = 1, **overrides: Any) -> StorageFleetSpec:
        return parse_fleet_spec(_storage_spec_data(count, **overrides))

    return _make


@pytest.fixture
def substrate() -> InMemorySubstrate:
    return InMemorySubstrate()


@pytest.fixture
def membership() -> RecordingCoordinator:
    return RecordingCoordinator()


@pytest.fixture
def mock_process():
    """Mock subprocess.Popen for process testing."""
    mock_popen = Mock()
    mock_popen.pid = 12345
    mock_popen.returncode = 0
    mock_popen.communicate.return_value = ("stdout", "stderr")

    with patch("subprocess.Popen", return_value=mock_popen):
        yield mock_popen


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    return Mock()


@pytest.fixture
def gateway_spec_data():
    """Factory for gateway fleet specification mappings."""
    return _gateway_spec_data


@pytest.fixture
def storage_spec_data():
    """Factory for storage fleet specification mappings."""
    return _storage_spec_data


@pytest.fixture
def write_spec(temp_dir):
    """Write a fleet specification mapping to a YAML file."""

    def _write(data: Dict[str, Any], name: str = "fleet.yaml") -> Path:
        path = temp_dir / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write
