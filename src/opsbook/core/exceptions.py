"""Custom exceptions for opsbook."""

from typing import Any


class OpsbookError(Exception):
    """Base exception for all opsbook errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(OpsbookError):
    """Configuration-related errors."""

    pass


class ValidationError(OpsbookError):
    """Runbook definition validation errors."""

    def __init__(
        self,
        message: str,
        issues: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.issues = issues or []


class RunbookError(OpsbookError):
    """Runbook registry and execution errors."""

    pass


class RunbookNotFoundError(RunbookError):
    """Raised when a runbook id is not registered."""

    def __init__(self, runbook_id: str):
        super().__init__(f"Runbook not found: {runbook_id}")
        self.runbook_id = runbook_id


class DuplicateRunbookError(RunbookError):
    """Raised when registering an id that already exists on a strict registry."""

    def __init__(self, runbook_id: str):
        super().__init__(f"Runbook already registered: {runbook_id}")
        self.runbook_id = runbook_id


class StepError(RunbookError):
    """A single runbook step failed."""

    def __init__(
        self,
        message: str,
        step: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.step = step


class PrerequisiteError(StepError):
    """A step was reached before its prerequisites completed."""

    def __init__(self, step: str, missing: list[str]):
        super().__init__(f"Prerequisites not met for step: {step}", step=step)
        self.missing = missing


class ExecutionCancelledError(RunbookError):
    """Execution was cancelled between steps."""

    pass
