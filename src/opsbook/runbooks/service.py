"""Runbook service: the entry point callers use to register and run runbooks."""

from pathlib import Path
from typing import Any

from opsbook.config import EngineConfig
from opsbook.core.logging import StructuredLogger
from opsbook.runbooks.actions import SimulatedStepActions, StepActions
from opsbook.runbooks.builtin import builtin_runbooks
from opsbook.runbooks.cancel import CancelToken
from opsbook.runbooks.engine import RunbookEngine
from opsbook.runbooks.loader import RunbookLoader
from opsbook.runbooks.registry import RunbookRegistry
from opsbook.runbooks.schema import Runbook, RunbookExecution
from opsbook.runbooks.store import ExecutionStore

logger = StructuredLogger(__name__)


class RunbookService:
    """Owns one registry, one execution store and the engine over them.

    Construct once at startup and pass it to whatever needs to run
    runbooks. Authorizing ``executed_by`` is the caller's job.
    """

    def __init__(
        self,
        registry: RunbookRegistry | None = None,
        store: ExecutionStore | None = None,
        actions: StepActions | None = None,
    ):
        self.registry = registry or RunbookRegistry()
        self.store = store or ExecutionStore()
        self.engine = RunbookEngine(self.registry, self.store, actions=actions)

    def register_runbook(self, runbook: Runbook) -> None:
        """Register a runbook, replacing any runbook with the same id."""
        self.registry.register(runbook)

    async def execute_runbook(
        self,
        runbook_id: str,
        executed_by: str,
        automated: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> RunbookExecution:
        """Run a registered runbook and return its terminal execution record.

        Raises:
            RunbookNotFoundError: If the runbook is not registered
        """
        return await self.engine.execute_runbook(
            runbook_id,
            executed_by,
            automated=automated,
            cancel_token=cancel_token,
        )

    def get_runbook(self, runbook_id: str) -> Runbook | None:
        return self.registry.get(runbook_id)

    def get_all_runbooks(self) -> list[Runbook]:
        return self.registry.list_all()

    def get_execution(self, execution_id: str) -> RunbookExecution | None:
        return self.store.get(execution_id)

    def get_execution_history(self, runbook_id: str | None = None) -> list[RunbookExecution]:
        return self.store.history(runbook_id)

    def get_execution_stats(self, runbook_id: str | None = None) -> dict[str, Any]:
        return self.store.stats(runbook_id)


def create_service(
    config: EngineConfig | None = None,
    actions: StepActions | None = None,
    base_dir: Path | None = None,
) -> RunbookService:
    """Build a service with its startup runbooks already registered.

    Args:
        config: Engine settings
        actions: Step actions; simulated actions from ``config`` by default
        base_dir: Directory relative runbook paths are resolved against

    Returns:
        Ready-to-use RunbookService
    """
    config = config or EngineConfig()

    if actions is None:
        actions = SimulatedStepActions(
            command_delay=config.command_delay,
            step_delay=config.step_delay,
            validation_delay=config.validation_delay,
        )

    service = RunbookService(
        registry=RunbookRegistry(reject_duplicates=config.reject_duplicate_ids),
        actions=actions,
    )

    if config.load_builtin:
        for runbook in builtin_runbooks():
            service.register_runbook(runbook)

    loader = RunbookLoader()
    for path in config.get_runbook_paths(base_dir):
        for runbook in loader.load_path(path):
            service.register_runbook(runbook)

    logger.info("Initialized runbooks", count=len(service.registry))
    return service
