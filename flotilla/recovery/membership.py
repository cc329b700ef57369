"""Gateway membership in the recovery (grace) database.

Gateways that may take part in client-session failover are listed in a
shared grace database managed with the ganesha-rados-grace tool:

    ganesha-rados-grace --pool <pool> --ns <namespace> add|remove <identity>

Membership is kept converging toward the desired gateway set on a best-effort
basis. A failed call, including add on an existing member and remove of an
absent one, is logged as a warning and never interrupts reconciliation.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from ..core.enums import MembershipOutcome
from ..core.errors import ProcessError, RecoveryCoordinationError
from ..core.log import Logger, get_logger, log_event
from ..core.process import ProcessExecutor
from ..core.protocols import MembershipResult

DEFAULT_GRACE_TOOL = "ganesha-rados-grace"


class GraceDatabaseCoordinator:
    """Adds and removes gateway identities through the grace tool."""

    def __init__(
        self,
        executor: Optional[ProcessExecutor] = None,
        logger: Optional[Logger] = None,
        tool: str = DEFAULT_GRACE_TOOL,
        timeout: Optional[float] = None,
    ) -> None:
        self._executor = executor or ProcessExecutor()
        self._logger = logger or get_logger(__name__)
        self._tool = tool
        self._timeout = timeout

    def add(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        """Add a gateway to the grace database."""
        self._logger.info("Adding gateway %s to grace db", identity)
        return self._run("add", identity, pool, namespace)

    def remove(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        """Remove a gateway from the grace database."""
        self._logger.info("Removing gateway %s from grace db", identity)
        return self._run("remove", identity, pool, namespace)

    def command(self, action: str, identity: str, pool: str, namespace: str) -> List[str]:
        return [self._tool, "--pool", pool, "--ns", namespace, action, identity]

    def _run(self, action: str, identity: str, pool: str, namespace: str) -> MembershipResult:
        command = self.command(action, identity, pool, namespace)
        try:
            result = self._executor.run(command, timeout=self._timeout)
        except ProcessError as e:
            return self._warn(action, identity, RecoveryCoordinationError(e.message))

        if result.ok:
            log_event(
                self._logger,
                "membership",
                f"Grace db {action} {identity} succeeded",
                action=action,
                identity=identity,
                pool=pool,
                recovery_namespace=namespace,
            )
            return MembershipResult(MembershipOutcome.OK)

        error = RecoveryCoordinationError(
            f"{self._tool} {action} {identity} exited with {result.returncode}",
            exit_code=result.returncode,
            stderr=result.stderr.strip(),
        )
        return self._warn(action, identity, error)

    def _warn(
        self, action: str, identity: str, error: RecoveryCoordinationError
    ) -> MembershipResult:
        hint = "It may already be added." if action == "add" else "It may already be removed."
        self._logger.warning(
            "Failed to %s gateway %s in grace db. %s %s",
            action,
            identity,
            hint,
            error.message,
            extra={
                "event_type": "membership",
                "action": action,
                "identity": identity,
                "exit_code": error.exit_code,
                "stderr": error.stderr,
            },
        )
        detail = error.message
        if error.stderr:
            detail = f"{detail}: {error.stderr}"
        return MembershipResult(MembershipOutcome.WARN, detail=detail)


@dataclass
class RecordingCoordinator:
    """Membership coordinator that only records calls.

    Used for dry runs and tests. Identities listed in ``failing`` produce
    warnings instead of succeeding.
    """

    calls: List[Tuple[str, str, str, str]] = field(default_factory=list)
    members: Set[Tuple[str, str, str]] = field(default_factory=set)
    failing: Set[str] = field(default_factory=set)

    def add(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        return self._record("add", identity, pool, namespace)

    def remove(self, identity: str, pool: str, namespace: str) -> MembershipResult:
        return self._record("remove", identity, pool, namespace)

    def _record(self, action: str, identity: str, pool: str, namespace: str) -> MembershipResult:
        self.calls.append((action, identity, pool, namespace))
        if identity in self.failing:
            return MembershipResult(
                MembershipOutcome.WARN, detail=f"{action} {identity} failed"
            )
        if action == "add":
            self.members.add((identity, pool, namespace))
        else:
            self.members.discard((identity, pool, namespace))
        return MembershipResult(MembershipOutcome.OK)
