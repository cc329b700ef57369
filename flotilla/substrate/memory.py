"""In-memory substrate.

Used for dry runs and tests. Behaves like the orchestration substrate's
resource store keyed by (kind, namespace, name), and records every call so
callers can assert on ordering.

Features
- AlreadyExists on create of a stored resource, NotFound on update or
  delete of a missing one
- Failure injection per (operation, kind, name) to simulate transport faults
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.enums import ResourceKind
from ..core.errors import AlreadyExistsError, NotFoundError, SubstrateError

ResourceKey = Tuple[ResourceKind, str, str]


@dataclass(frozen=True)
class SubstrateCall:
    """One recorded substrate call."""

    operation: str
    kind: ResourceKind
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.operation} {self.kind.value} {self.namespace}/{self.name}"


@dataclass
class InMemorySubstrate:
    """Substrate client holding resources in a dictionary."""

    resources: Dict[ResourceKey, Dict[str, Any]] = field(default_factory=dict)
    calls: List[SubstrateCall] = field(default_factory=list)
    # (operation, kind, name) -> error raised instead of performing the call
    failures: Dict[Tuple[str, ResourceKind, str], SubstrateError] = field(default_factory=dict)

    def create(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        key = self._record("create", kind, body)
        if key in self.resources:
            raise AlreadyExistsError(
                f"{kind.value} {key[2]} already exists", kind=kind.value, name=key[2]
            )
        self.resources[key] = copy.deepcopy(body)

    def update(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        key = self._record("update", kind, body)
        if key not in self.resources:
            raise NotFoundError(f"{kind.value} {key[2]} not found", kind=kind.value, name=key[2])
        self.resources[key] = copy.deepcopy(body)

    def delete(self, kind: ResourceKind, name: str, namespace: str) -> None:
        key = (kind, namespace, name)
        self._check_and_record("delete", key)
        if key not in self.resources:
            raise NotFoundError(f"{kind.value} {name} not found", kind=kind.value, name=name)
        del self.resources[key]

    def get(self, kind: ResourceKind, name: str, namespace: str) -> Optional[Dict[str, Any]]:
        return self.resources.get((kind, namespace, name))

    def names(self, kind: ResourceKind, namespace: Optional[str] = None) -> List[str]:
        """Sorted names of stored resources of one kind."""
        return sorted(
            name
            for (k, ns, name) in self.resources
            if k == kind and (namespace is None or ns == namespace)
        )

    def fail(self, operation: str, kind: ResourceKind, name: str, error: SubstrateError) -> None:
        """Make the next and all later matching calls raise error."""
        self.failures[(operation, kind, name)] = error

    def calls_for(self, name: str) -> List[SubstrateCall]:
        return [call for call in self.calls if call.name == name]

    def _record(self, operation: str, kind: ResourceKind, body: Dict[str, Any]) -> ResourceKey:
        metadata = body.get("metadata", {})
        key = (kind, metadata.get("namespace", ""), metadata.get("name", ""))
        self._check_and_record(operation, key)
        return key

    def _check_and_record(self, operation: str, key: ResourceKey) -> None:
        kind, namespace, name = key
        self.calls.append(SubstrateCall(operation, kind, namespace, name))
        failure = self.failures.get((operation, kind, name))
        if failure is not None:
            raise failure
