"""Runbook orchestration engine."""

from opsbook.runbooks.schema import (
    ExecutionLogEntry,
    ExecutionLogLevel,
    ExecutionStatus,
    Runbook,
    RunbookCategory,
    RunbookExecution,
    RunbookSeverity,
    RunbookStep,
)
from opsbook.runbooks.actions import SimulatedStepActions, StepActions
from opsbook.runbooks.cancel import CancelToken
from opsbook.runbooks.engine import RunbookEngine
from opsbook.runbooks.registry import RunbookRegistry
from opsbook.runbooks.store import ExecutionStore
from opsbook.runbooks.service import RunbookService, create_service

__all__ = [
    "ExecutionLogEntry",
    "ExecutionLogLevel",
    "ExecutionStatus",
    "Runbook",
    "RunbookCategory",
    "RunbookExecution",
    "RunbookSeverity",
    "RunbookStep",
    "SimulatedStepActions",
    "StepActions",
    "CancelToken",
    "RunbookEngine",
    "RunbookRegistry",
    "ExecutionStore",
    "RunbookService",
    "create_service",
]
