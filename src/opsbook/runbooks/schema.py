"""Runbook data models and schemas."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class RunbookCategory(str, Enum):
    """Operational area a runbook belongs to."""

    BACKUP = "backup"
    RESTORE = "restore"
    FAILOVER = "failover"
    SECURITY = "security"
    PERFORMANCE = "performance"


class RunbookSeverity(str, Enum):
    """Severity of the incident a runbook responds to."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ExecutionStatus(str, Enum):
    """Execution status.

    ``running`` is the only non-terminal state.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExecutionLogLevel(str, Enum):
    """Levels of execution log entries."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class RunbookStep:
    """A single step in a runbook."""

    id: str
    title: str
    description: str = ""
    command: str | None = None
    automated: bool = True
    critical: bool = True
    estimated_minutes: float = 0
    prerequisite: list[str] = field(default_factory=list)
    validation: str | None = None
    rollback: str | None = None  # Informational; never invoked by the engine

    @property
    def is_manual(self) -> bool:
        return not self.automated

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "command": self.command,
            "automated": self.automated,
            "critical": self.critical,
            "estimated_minutes": self.estimated_minutes,
            "prerequisite": list(self.prerequisite),
            "validation": self.validation,
            "rollback": self.rollback,
        }


@dataclass
class Runbook:
    """A runbook definition.

    Everything except ``execution_count``, ``success_rate`` and
    ``last_executed`` is treated as immutable once registered; those three
    fields belong to the engine.
    """

    id: str
    title: str
    category: RunbookCategory
    severity: RunbookSeverity
    description: str = ""
    steps: list[RunbookStep] = field(default_factory=list)
    total_estimated_time: float | None = None

    # Engine-owned statistics
    execution_count: int = 0
    success_rate: float = 100.0
    last_executed: datetime | None = None

    def __post_init__(self) -> None:
        self.category = RunbookCategory(self.category)
        self.severity = RunbookSeverity(self.severity)
        if self.total_estimated_time is None:
            self.total_estimated_time = sum(s.estimated_minutes for s in self.steps)

    def get_step(self, step_id: str) -> RunbookStep | None:
        """Get step by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    @property
    def step_ids(self) -> list[str]:
        return [s.id for s in self.steps]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "severity": self.severity.value,
            "description": self.description,
            "steps": [s.to_dict() for s in self.steps],
            "total_estimated_time": self.total_estimated_time,
            "execution_count": self.execution_count,
            "success_rate": self.success_rate,
            "last_executed": _iso(self.last_executed),
        }


@dataclass
class ExecutionLogEntry:
    """One line of an execution's audit log."""

    timestamp: datetime
    level: ExecutionLogLevel
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
        }


@dataclass
class RunbookExecution:
    """One attempt to run a runbook."""

    id: str
    runbook_id: str
    executed_by: str
    start_time: datetime
    status: ExecutionStatus = ExecutionStatus.RUNNING
    end_time: datetime | None = None
    completed_steps: list[str] = field(default_factory=list)
    current_step: str | None = None
    logs: list[ExecutionLogEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ExecutionStatus.RUNNING

    @property
    def duration_seconds(self) -> float:
        """Get total duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    def logs_at(self, level: ExecutionLogLevel | str) -> list[ExecutionLogEntry]:
        """Return log entries recorded at ``level``."""
        level = ExecutionLogLevel(level)
        return [entry for entry in self.logs if entry.level == level]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "runbook_id": self.runbook_id,
            "executed_by": self.executed_by,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": _iso(self.end_time),
            "duration_seconds": self.duration_seconds,
            "completed_steps": list(self.completed_steps),
            "current_step": self.current_step,
            "logs": [entry.to_dict() for entry in self.logs],
            "error": self.error,
        }
