"""Substrate client backed by the kubectl command line.

Manifests are piped as JSON to ``kubectl create -f -`` and
``kubectl replace -f -``; deletes run ``kubectl delete <kind> <name> -n <ns>``.
Every call is one bounded subprocess invocation. Failures are classified from
kubectl's stderr: AlreadyExists and NotFound map to the matching errors,
anything else is a TransportError.
"""

from typing import Any, Dict, List, Optional

from ..core.enums import ResourceKind
from ..core.errors import (
    AlreadyExistsError,
    NotFoundError,
    ProcessError,
    SubstrateError,
    TransportError,
)
from ..core.log import Logger, get_logger
from ..core.process import ProcessExecutor, ProcessResult
from ..utils.codec import to_json_string

_KIND_ARGUMENTS = {
    ResourceKind.CONFIG_ARTIFACT: "configmap",
    ResourceKind.WORKLOAD: "deployment",
    ResourceKind.NETWORK_ENDPOINT: "service",
    ResourceKind.PROVISION_JOB: "job",
}


class KubectlSubstrate:
    """Applies manifests through kubectl."""

    def __init__(
        self,
        executor: Optional[ProcessExecutor] = None,
        logger: Optional[Logger] = None,
        kubectl_path: str = "kubectl",
        context: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._executor = executor or ProcessExecutor()
        self._logger = logger or get_logger(__name__)
        self._kubectl_path = kubectl_path
        self._context = context
        self._timeout = timeout

    def create(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        self._apply("create", kind, body)

    def update(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        self._apply("replace", kind, body)

    def delete(self, kind: ResourceKind, name: str, namespace: str) -> None:
        command = self._base_command() + [
            "delete", _KIND_ARGUMENTS[kind], name, "-n", namespace, "--wait=false",
        ]
        result = self._run(command, kind, name)
        self._check(result, kind, name, "delete")

    def _apply(self, verb: str, kind: ResourceKind, body: Dict[str, Any]) -> None:
        name = body.get("metadata", {}).get("name", "")
        command = self._base_command() + [verb, "-f", "-"]
        result = self._run(command, kind, name, input_data=to_json_string(body))
        self._check(result, kind, name, verb)

    def _base_command(self) -> List[str]:
        command = [self._kubectl_path]
        if self._context:
            command.extend(["--context", self._context])
        return command

    def _run(
        self,
        command: List[str],
        kind: ResourceKind,
        name: str,
        input_data: Optional[str] = None,
    ) -> ProcessResult:
        try:
            return self._executor.run(command, timeout=self._timeout, input_data=input_data)
        except ProcessError as e:
            raise TransportError(
                f"kubectl call for {kind.value} {name} failed: {e.message}",
                kind=kind.value,
                name=name,
            ) from e

    def _check(self, result: ProcessResult, kind: ResourceKind, name: str, verb: str) -> None:
        if result.ok:
            self._logger.debug("kubectl %s %s %s succeeded", verb, kind.value, name)
            return
        raise classify_failure(result.stderr, kind, name, verb)


def classify_failure(stderr: str, kind: ResourceKind, name: str, verb: str) -> SubstrateError:
    """Map kubectl error output to a substrate error."""
    message = stderr.strip() or f"kubectl {verb} failed"
    if "AlreadyExists" in stderr or "already exists" in stderr:
        return AlreadyExistsError(message, kind=kind.value, name=name)
    if "NotFound" in stderr or "not found" in stderr:
        return NotFoundError(message, kind=kind.value, name=name)
    return TransportError(message, kind=kind.value, name=name, details={"verb": verb})
