"""Runbook execution engine."""

import asyncio
import math
import threading
import time
from datetime import datetime, timezone

from opsbook.core.exceptions import (
    ExecutionCancelledError,
    PrerequisiteError,
    RunbookNotFoundError,
    StepError,
)
from opsbook.core.logging import StructuredLogger
from opsbook.core.output import format_minutes
from opsbook.runbooks.actions import SimulatedStepActions, StepActions
from opsbook.runbooks.audit import ExecutionLogger
from opsbook.runbooks.cancel import CancelToken
from opsbook.runbooks.registry import RunbookRegistry
from opsbook.runbooks.schema import (
    ExecutionLogLevel,
    ExecutionStatus,
    Runbook,
    RunbookExecution,
    RunbookStep,
)
from opsbook.runbooks.store import ExecutionStore

logger = StructuredLogger(__name__)


def recompute_success_rate(execution_count: int, success_rate: float) -> float:
    """Success rate after one more failed attempt.

    Prior successes are ``execution_count * success_rate / 100`` rounded
    half-up; the failed attempt adds one to the denominator only.
    """
    prior_successes = math.floor(execution_count * success_rate / 100 + 0.5)
    return prior_successes / (execution_count + 1) * 100


class RunbookEngine:
    """Execute registered runbooks step by step.

    Steps run strictly in declared order and never overlap. A failing
    critical step (including one whose prerequisites have not completed)
    aborts the execution; a failing non-critical step is logged and
    skipped.
    """

    def __init__(
        self,
        registry: RunbookRegistry,
        store: ExecutionStore,
        actions: StepActions | None = None,
        audit: ExecutionLogger | None = None,
    ):
        """Initialize runbook engine.

        Args:
            registry: Source of runbook definitions
            store: Where execution records are kept
            actions: Performs and validates steps
            audit: Per-execution structured logger
        """
        self._registry = registry
        self._store = store
        self._actions = actions or SimulatedStepActions()
        self._audit = audit or ExecutionLogger()
        self._stats_lock = threading.Lock()

    @property
    def actions(self) -> StepActions:
        return self._actions

    async def execute_runbook(
        self,
        runbook_id: str,
        executed_by: str,
        automated: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> RunbookExecution:
        """Execute a runbook.

        Args:
            runbook_id: Registered runbook id
            executed_by: Identity of the (already authorized) caller
            automated: If False, manual steps are skipped with a warning
            cancel_token: Checked before each step

        Returns:
            The terminal execution record

        Raises:
            RunbookNotFoundError: If the runbook is not registered
            asyncio.CancelledError: Re-raised after the record is marked cancelled
        """
        runbook = self._registry.get(runbook_id)
        if runbook is None:
            raise RunbookNotFoundError(runbook_id)

        execution = self._store.create(runbook_id, executed_by)
        logger.debug(
            "Starting runbook execution",
            runbook=runbook_id,
            execution=execution.id,
            executed_by=executed_by,
            automated=automated,
        )

        self._audit.info(execution, f"Starting runbook: {runbook.title}")
        estimate = format_minutes(runbook.total_estimated_time)
        self._audit.info(execution, f"Estimated time: {estimate} minutes")

        try:
            for step in runbook.steps:
                if cancel_token is not None and cancel_token.is_cancelled():
                    raise ExecutionCancelledError(
                        f"Execution cancelled before step {step.id}: {cancel_token.reason}"
                    )
                await self._run_step(execution, step, automated)

        except ExecutionCancelledError as e:
            self._finish_cancelled(execution, _error_message(e))

        except asyncio.CancelledError:
            self._finish_cancelled(execution, "Execution task cancelled")
            raise

        except Exception as e:
            self._finish_failed(runbook, execution, e)

        else:
            self._finish_completed(runbook, execution)

        return execution

    async def _run_step(
        self,
        execution: RunbookExecution,
        step: RunbookStep,
        automated: bool,
    ) -> None:
        """Run one step, raising only when a critical step fails."""
        if not automated and not step.automated:
            self._audit.warning(execution, f"Manual step required: {step.title}")
            return

        try:
            missing = [p for p in step.prerequisite if p not in execution.completed_steps]
            if missing:
                self._audit.error(execution, f"Prerequisites not met for: {step.title}")
                raise PrerequisiteError(step.id, missing)

            execution.current_step = step.id
            self._audit.info(execution, f"Executing: {step.title}")

            started = time.monotonic()
            await self._perform(execution, step)
            elapsed_ms = int((time.monotonic() - started) * 1000)

            self._audit.info(execution, f"Completed: {step.title} ({elapsed_ms}ms)")
            execution.completed_steps.append(step.id)

        except Exception as e:
            message = _error_message(e)
            self._audit.error(execution, f"Failed: {step.title} - {message}")

            if step.critical:
                if isinstance(e, StepError):
                    raise
                raise StepError(message, step=step.id) from e

            self._audit.warning(execution, "Non-critical step failed, continuing...")

    async def _perform(self, execution: RunbookExecution, step: RunbookStep) -> None:
        def log(level: ExecutionLogLevel, message: str) -> None:
            self._audit.log(execution, level, message)

        await self._actions.perform(step, log)
        if step.validation:
            await self._actions.validate(step, log)

    def _finish_completed(self, runbook: Runbook, execution: RunbookExecution) -> None:
        now = datetime.now(timezone.utc)
        execution.status = ExecutionStatus.COMPLETED
        execution.end_time = now

        minutes = math.ceil(execution.duration_seconds / 60)
        self._audit.info(execution, f"Runbook completed in {minutes} minutes")

        with self._stats_lock:
            runbook.execution_count += 1
            runbook.last_executed = now

    def _finish_failed(
        self,
        runbook: Runbook,
        execution: RunbookExecution,
        error: Exception,
    ) -> None:
        message = _error_message(error)
        execution.status = ExecutionStatus.FAILED
        execution.end_time = datetime.now(timezone.utc)
        execution.error = message

        self._audit.error(execution, f"Runbook failed: {message}")

        with self._stats_lock:
            runbook.success_rate = recompute_success_rate(
                runbook.execution_count, runbook.success_rate
            )

    def _finish_cancelled(self, execution: RunbookExecution, reason: str) -> None:
        execution.status = ExecutionStatus.CANCELLED
        execution.end_time = datetime.now(timezone.utc)
        execution.error = reason

        self._audit.warning(execution, f"Runbook cancelled: {execution.error}")


def _error_message(error: BaseException) -> str:
    if isinstance(error, StepError):
        return error.message
    return str(error) or error.__class__.__name__
