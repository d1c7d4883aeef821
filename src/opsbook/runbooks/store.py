"""In-memory execution store."""

import uuid
from datetime import datetime, timezone
from typing import Any

from opsbook.runbooks.schema import ExecutionStatus, RunbookExecution


def new_execution_id() -> str:
    return f"exec-{uuid.uuid4().hex}"


class ExecutionStore:
    """Map of execution id to execution record.

    Records are returned by reference so callers can watch ``logs`` and
    ``current_step`` change while an execution is running. Records are kept
    for the lifetime of the store.
    """

    def __init__(self) -> None:
        self._executions: dict[str, RunbookExecution] = {}

    def create(self, runbook_id: str, executed_by: str) -> RunbookExecution:
        """Create and insert a new ``running`` execution record."""
        execution = RunbookExecution(
            id=new_execution_id(),
            runbook_id=runbook_id,
            executed_by=executed_by,
            start_time=datetime.now(timezone.utc),
        )
        self._executions[execution.id] = execution
        return execution

    def get(self, execution_id: str) -> RunbookExecution | None:
        """Get an execution by id."""
        return self._executions.get(execution_id)

    def history(self, runbook_id: str | None = None) -> list[RunbookExecution]:
        """Get executions in insertion order, optionally for one runbook.

        Args:
            runbook_id: Only return executions of this runbook

        Returns:
            List of execution records (not sorted by start time)
        """
        executions = list(self._executions.values())
        if runbook_id:
            return [e for e in executions if e.runbook_id == runbook_id]
        return executions

    def stats(self, runbook_id: str | None = None) -> dict[str, Any]:
        """Aggregate execution counts by status.

        Args:
            runbook_id: Restrict to one runbook

        Returns:
            Totals plus a per-runbook breakdown
        """
        stats: dict[str, Any] = {
            "total_executions": 0,
            "completed": 0,
            "failed": 0,
            "cancelled": 0,
            "running": 0,
            "runbooks": {},
        }

        for execution in self.history(runbook_id):
            status = execution.status.value
            stats["total_executions"] += 1
            stats[status] += 1

            per_runbook = stats["runbooks"].setdefault(
                execution.runbook_id, {"runs": 0, "completed": 0, "failures": 0}
            )
            per_runbook["runs"] += 1
            if execution.status == ExecutionStatus.COMPLETED:
                per_runbook["completed"] += 1
            elif execution.status == ExecutionStatus.FAILED:
                per_runbook["failures"] += 1

        return stats

    def __len__(self) -> int:
        return len(self._executions)
