"""Execution audit logging."""

import logging
from datetime import datetime, timezone

from opsbook.core.logging import StructuredLogger
from opsbook.runbooks.schema import ExecutionLogEntry, ExecutionLogLevel, RunbookExecution

SINK_LEVELS = {
    ExecutionLogLevel.INFO: logging.INFO,
    ExecutionLogLevel.WARNING: logging.WARNING,
    ExecutionLogLevel.ERROR: logging.ERROR,
}


class ExecutionLogger:
    """Append leveled entries to an execution and mirror them to the log sink.

    Every call is synchronous: the entry is visible on ``execution.logs``
    before ``log`` returns.
    """

    def __init__(self, sink: StructuredLogger | None = None):
        """Initialize execution logger.

        Args:
            sink: Operational logger entries are mirrored to
        """
        self._sink = sink or StructuredLogger("runbook")

    def log(
        self,
        execution: RunbookExecution,
        level: ExecutionLogLevel | str,
        message: str,
    ) -> ExecutionLogEntry:
        """Record one log entry.

        Args:
            execution: Execution the entry belongs to
            level: info, warning or error
            message: Log message

        Returns:
            The appended entry
        """
        level = ExecutionLogLevel(level)
        entry = ExecutionLogEntry(
            timestamp=datetime.now(timezone.utc),
            level=level,
            message=message,
        )
        execution.logs.append(entry)

        self._sink.bind(execution=execution.id).log(
            SINK_LEVELS[level],
            f"[RUNBOOK:{execution.runbook_id}] {message}",
        )

        return entry

    def info(self, execution: RunbookExecution, message: str) -> ExecutionLogEntry:
        return self.log(execution, ExecutionLogLevel.INFO, message)

    def warning(self, execution: RunbookExecution, message: str) -> ExecutionLogEntry:
        return self.log(execution, ExecutionLogLevel.WARNING, message)

    def error(self, execution: RunbookExecution, message: str) -> ExecutionLogEntry:
        return self.log(execution, ExecutionLogLevel.ERROR, message)
