"""Reconciliation reports."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.enums import DaemonRole, ReconcileState


@dataclass
class InstanceOutcome:
    """What a pass did to one instance (or one node, for provisioning)."""

    target: str
    actions: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "actions": list(self.actions),
            "warnings": list(self.warnings),
            "error": self.error,
        }


@dataclass
class ReconcileReport:
    """Per-instance results of one pass over a fleet.

    Errors never stop the pass; callers re-run reconciliation until the
    report comes back clean.
    """

    fleet: str
    role: DaemonRole
    desired: int
    current: int = 0
    state: ReconcileState = ReconcileState.RECONCILING
    outcomes: List[InstanceOutcome] = field(default_factory=list)

    def outcome_for(self, target: str) -> InstanceOutcome:
        """Outcome for a target, created on first use."""
        for outcome in self.outcomes:
            if outcome.target == target:
                return outcome
        outcome = InstanceOutcome(target=target)
        self.outcomes.append(outcome)
        return outcome

    @property
    def errors(self) -> Dict[str, str]:
        return {o.target: o.error for o in self.outcomes if o.error is not None}

    @property
    def warnings(self) -> Dict[str, List[str]]:
        return {o.target: list(o.warnings) for o in self.outcomes if o.warnings}

    @property
    def has_errors(self) -> bool:
        return any(not o.ok for o in self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fleet": self.fleet,
            "role": self.role.value,
            "desired": self.desired,
            "current": self.current,
            "state": self.state.value,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
