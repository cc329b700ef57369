"""Application context for explicit dependency management.

ApplicationContext is the single immutable container for the reconciler's
collaborators: configuration, logger, process executor, substrate client
and membership coordinator. Components receive it (or the pieces they need)
explicitly instead of reaching for module-level singletons.

Usage:
    config = load_config(config_file=Path("flotilla.yaml"))
    app_context = ApplicationContext.create(config)
    driver = app_context.create_driver()
    report = driver.reconcile(fleet, current_count=2)

    # For testing and dry runs (in-memory substrate)
    test_context = ApplicationContext.for_testing()
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .types import FlotillaConfig
from .log import Logger
from .process import ProcessExecutor
from .protocols import MembershipCoordinator, SubstrateClient

if TYPE_CHECKING:
    from ..reconcile.driver import ReconcilerDriver


@dataclass(frozen=True)
class ApplicationContext:
    """Immutable application-wide context containing all dependencies.

    Attributes:
        config: Reconciler configuration
        logger: Logging instance
        executor: One-shot subprocess executor
        substrate: Orchestration substrate client
        membership: Recovery (grace) database coordinator
    """

    config: FlotillaConfig
    logger: Logger
    executor: ProcessExecutor
    substrate: SubstrateClient
    membership: MembershipCoordinator

    @classmethod
    def create(
        cls,
        config: FlotillaConfig,
        *,
        logger: Optional[Logger] = None,
        executor: Optional[ProcessExecutor] = None,
        substrate: Optional[SubstrateClient] = None,
        membership: Optional[MembershipCoordinator] = None,
    ) -> "ApplicationContext":
        """Create application context with default implementations.

        Args:
            config: Reconciler configuration (required)
            logger: Optional custom logger (creates default if None)
            executor: Optional custom process executor
            substrate: Optional substrate client (chosen from config.substrate.kind if None)
            membership: Optional membership coordinator

        Returns:
            Immutable ApplicationContext with all dependencies initialized
        """
        # Import here to avoid circular dependencies at module level
        from .log import get_logger
        from ..recovery.membership import GraceDatabaseCoordinator
        from ..substrate.kubectl import KubectlSubstrate
        from ..substrate.memory import InMemorySubstrate

        if logger is None:
            logger = get_logger("flotilla")

        if executor is None:
            executor = ProcessExecutor(default_timeout=config.timeouts.substrate_call)

        if substrate is None:
            if config.substrate.kind == "memory":
                substrate = InMemorySubstrate()
            else:
                substrate = KubectlSubstrate(
                    executor=executor,
                    logger=logger,
                    kubectl_path=config.substrate.kubectl_path,
                    context=config.substrate.context,
                    timeout=config.timeouts.substrate_call,
                )

        if membership is None:
            membership = GraceDatabaseCoordinator(
                executor=executor,
                logger=logger,
                tool=config.recovery.tool,
                timeout=config.timeouts.recovery_call,
            )

        return cls(
            config=config,
            logger=logger,
            executor=executor,
            substrate=substrate,
            membership=membership,
        )

    @classmethod
    def for_testing(
        cls,
        config: Optional[FlotillaConfig] = None,
        **overrides,
    ) -> "ApplicationContext":
        """Create application context for testing.

        Uses the in-memory substrate unless one is passed in overrides.

        Example:
            >>> ctx = ApplicationContext.for_testing(membership=Mock())
        """
        from .types import SubstrateConfig

        if config is None:
            config = FlotillaConfig(substrate=SubstrateConfig(kind="memory"))

        return cls.create(config, **overrides)

    def create_driver(self) -> "ReconcilerDriver":
        """Driver wired to this context's collaborators."""
        from ..reconcile.driver import ReconcilerDriver

        return ReconcilerDriver(
            substrate=self.substrate,
            membership=self.membership,
            config_provider=self.config,
            logger=self.logger,
        )
