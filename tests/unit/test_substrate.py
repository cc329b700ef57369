"""Tests for substrate clients."""

import json

import pytest
from unittest.mock import Mock

from flotilla.core.enums import ResourceKind
from flotilla.core.errors import (
    AlreadyExistsError,
    NotFoundError,
    ProcessError,
    TransportError,
)
from flotilla.core.process import ProcessExecutor, ProcessResult
from flotilla.substrate.kubectl import KubectlSubstrate, classify_failure
from flotilla.substrate.memory import InMemorySubstrate, SubstrateCall


def config_map(name: str = "cm", namespace: str = "ns", **data: str):
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": name, "namespace": namespace},
        "data": dict(data),
    }


class TestInMemorySubstrate:
    """Test the dictionary-backed substrate."""

    def setup_method(self) -> None:
        self.substrate = InMemorySubstrate()

    def test_create_then_get(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map(k="v"))

        assert self.substrate.get(ResourceKind.CONFIG_ARTIFACT, "cm", "ns")["data"] == {"k": "v"}
        assert self.substrate.names(ResourceKind.CONFIG_ARTIFACT) == ["cm"]

    def test_create_existing_raises(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())

        with pytest.raises(AlreadyExistsError) as exc_info:
            self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        assert exc_info.value.name == "cm"

    def test_update_missing_raises(self) -> None:
        with pytest.raises(NotFoundError):
            self.substrate.update(ResourceKind.CONFIG_ARTIFACT, config_map())

    def test_update_replaces_body(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map(k="v"))
        self.substrate.update(ResourceKind.CONFIG_ARTIFACT, config_map(k="w"))

        assert self.substrate.get(ResourceKind.CONFIG_ARTIFACT, "cm", "ns")["data"] == {"k": "w"}

    def test_delete(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        self.substrate.delete(ResourceKind.CONFIG_ARTIFACT, "cm", "ns")

        assert self.substrate.get(ResourceKind.CONFIG_ARTIFACT, "cm", "ns") is None
        with pytest.raises(NotFoundError):
            self.substrate.delete(ResourceKind.CONFIG_ARTIFACT, "cm", "ns")

    def test_bodies_are_copied(self) -> None:
        body = config_map(k="v")
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, body)
        body["data"]["k"] = "changed"

        assert self.substrate.get(ResourceKind.CONFIG_ARTIFACT, "cm", "ns")["data"] == {"k": "v"}

    def test_names_filtered_by_namespace(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map("b", "one"))
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map("a", "two"))

        assert self.substrate.names(ResourceKind.CONFIG_ARTIFACT) == ["a", "b"]
        assert self.substrate.names(ResourceKind.CONFIG_ARTIFACT, "one") == ["b"]
        assert self.substrate.names(ResourceKind.WORKLOAD) == []

    def test_calls_recorded_in_order(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        with pytest.raises(AlreadyExistsError):
            self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        self.substrate.update(ResourceKind.CONFIG_ARTIFACT, config_map())

        assert [c.operation for c in self.substrate.calls_for("cm")] == [
            "create",
            "create",
            "update",
        ]
        assert str(self.substrate.calls[0]) == "create ConfigMap ns/cm"

    def test_injected_failure(self) -> None:
        self.substrate.fail("create", ResourceKind.CONFIG_ARTIFACT, "cm", TransportError("boom"))

        with pytest.raises(TransportError):
            self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        assert self.substrate.calls == [
            SubstrateCall("create", ResourceKind.CONFIG_ARTIFACT, "ns", "cm")
        ]
        assert self.substrate.get(ResourceKind.CONFIG_ARTIFACT, "cm", "ns") is None


class TestKubectlSubstrate:
    """Test kubectl command construction and failure mapping."""

    def setup_method(self) -> None:
        self.executor = Mock(spec=ProcessExecutor)
        self.executor.run.return_value = ProcessResult(0, "", "", 0.01)
        self.substrate = KubectlSubstrate(executor=self.executor, logger=Mock(), timeout=30.0)

    def test_create_pipes_json(self) -> None:
        self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map(k="v"))

        args, kwargs = self.executor.run.call_args
        assert args[0] == ["kubectl", "create", "-f", "-"]
        assert kwargs["timeout"] == 30.0
        assert json.loads(kwargs["input_data"])["data"] == {"k": "v"}

    def test_update_uses_replace(self) -> None:
        self.substrate.update(ResourceKind.WORKLOAD, {"metadata": {"name": "w"}})

        assert self.executor.run.call_args[0][0] == ["kubectl", "replace", "-f", "-"]

    @pytest.mark.parametrize(
        "kind,argument",
        [
            (ResourceKind.CONFIG_ARTIFACT, "configmap"),
            (ResourceKind.WORKLOAD, "deployment"),
            (ResourceKind.NETWORK_ENDPOINT, "service"),
            (ResourceKind.PROVISION_JOB, "job"),
        ],
    )
    def test_delete_command(self, kind: ResourceKind, argument: str) -> None:
        self.substrate.delete(kind, "x", "ns")

        assert self.executor.run.call_args[0][0] == [
            "kubectl", "delete", argument, "x", "-n", "ns", "--wait=false",
        ]

    def test_context_flag(self) -> None:
        substrate = KubectlSubstrate(executor=self.executor, logger=Mock(), context="prod")
        substrate.delete(ResourceKind.WORKLOAD, "x", "ns")

        assert self.executor.run.call_args[0][0][:3] == ["kubectl", "--context", "prod"]

    def test_already_exists_mapped(self) -> None:
        self.executor.run.return_value = ProcessResult(
            1, "", 'Error from server (AlreadyExists): configmaps "cm" already exists', 0.01
        )

        with pytest.raises(AlreadyExistsError):
            self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())

    def test_not_found_mapped(self) -> None:
        self.executor.run.return_value = ProcessResult(
            1, "", 'Error from server (NotFound): deployments.apps "x" not found', 0.01
        )

        with pytest.raises(NotFoundError):
            self.substrate.delete(ResourceKind.WORKLOAD, "x", "ns")

    def test_process_error_is_transport_error(self) -> None:
        self.executor.run.side_effect = ProcessError("Failed to execute command kubectl")

        with pytest.raises(TransportError) as exc_info:
            self.substrate.create(ResourceKind.CONFIG_ARTIFACT, config_map())
        assert exc_info.value.name == "cm"


class TestClassifyFailure:
    def test_unknown_error_is_transport(self) -> None:
        error = classify_failure("Unable to connect to the server", ResourceKind.WORKLOAD, "w", "create")

        assert isinstance(error, TransportError)
        assert error.details == {"verb": "create"}

    def test_empty_stderr_gets_message(self) -> None:
        error = classify_failure("", ResourceKind.WORKLOAD, "w", "replace")

        assert error.message == "kubectl replace failed"
