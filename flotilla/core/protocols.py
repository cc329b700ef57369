"""Protocol definitions for the reconciler's external collaborators.

Protocols define the "what" (interfaces) without depending on "how" (implementations).
The reconciler only talks to the orchestration substrate and the recovery
database through these boundaries, so either side can be swapped (kubectl vs
an API client, a subprocess vs a direct database client) without touching
reconciliation logic.
"""

from dataclasses import dataclass
from typing import Any, Dict, Protocol

from .enums import MembershipOutcome, ResourceKind


@dataclass(frozen=True)
class MembershipResult:
    """Outcome of one membership call, with the reason when it is a warning."""

    outcome: MembershipOutcome
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == MembershipOutcome.OK


class SubstrateClient(Protocol):
    """Generic create/update/delete primitives of the orchestration substrate.

    Implementations raise AlreadyExistsError, NotFoundError or TransportError
    from flotilla.core.errors.
    """

    def create(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        """Create a resource. Raises AlreadyExistsError if it exists."""

    def update(self, kind: ResourceKind, body: Dict[str, Any]) -> None:
        """Replace an existing resource. Raises NotFoundError if absent."""

    def delete(self, kind: ResourceKind, name: str, namespace: str) -> None:
        """Delete a resource. Raises NotFoundError if absent."""


class MembershipCoordinator(Protocol):
    """Narrow add/remove capability over the recovery (grace) database."""

    def add(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        """Record an instance as a recovery participant."""

    def remove(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        """Remove an instance from the recovery participants."""
