"""Load runbook definitions from YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from opsbook.core.exceptions import RunbookError, ValidationError
from opsbook.core.logging import StructuredLogger
from opsbook.runbooks.schema import Runbook, RunbookStep

logger = StructuredLogger(__name__)

RUNBOOK_SUFFIXES = (".yaml", ".yml")


class RunbookStepSchema(BaseModel):
    """Schema for a runbook step.

    Keys may be written in snake_case or camelCase.
    """

    model_config = {"populate_by_name": True}

    id: str
    title: str
    description: str = ""
    command: str | None = None
    automated: bool = True
    critical: bool = True
    estimated_minutes: float = Field(default=0, ge=0, alias="estimatedMinutes")
    prerequisite: list[str] = Field(default_factory=list)
    validation: str | None = None
    rollback: str | None = None

    @field_validator("prerequisite", mode="before")
    @classmethod
    def coerce_prerequisite(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    def to_step(self) -> RunbookStep:
        return RunbookStep(
            id=self.id,
            title=self.title,
            description=self.description,
            command=self.command,
            automated=self.automated,
            critical=self.critical,
            estimated_minutes=self.estimated_minutes,
            prerequisite=list(self.prerequisite),
            validation=self.validation,
            rollback=self.rollback,
        )


class RunbookSchema(BaseModel):
    """Schema for a runbook definition file."""

    model_config = {"populate_by_name": True}

    id: str
    title: str
    category: Literal["backup", "restore", "failover", "security", "performance"]
    severity: Literal["low", "medium", "high", "critical"]
    description: str = ""
    steps: list[RunbookStepSchema] = Field(default_factory=list)
    total_estimated_time: float | None = Field(default=None, ge=0, alias="totalEstimatedTime")

    def to_runbook(self) -> Runbook:
        return Runbook(
            id=self.id,
            title=self.title,
            category=self.category,
            severity=self.severity,
            description=self.description,
            steps=[s.to_step() for s in self.steps],
            total_estimated_time=self.total_estimated_time,
        )


def parse_runbook(data: dict[str, Any], source: str = "<dict>") -> Runbook:
    """Validate a runbook dictionary and build a Runbook.

    Raises:
        ValidationError: If the dictionary does not match the schema
    """
    try:
        return RunbookSchema(**data).to_runbook()
    except PydanticValidationError as e:
        issues = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ValidationError(f"Invalid runbook definition in {source}", issues=issues)


class RunbookLoader:
    """Read runbook definitions from disk and check them for problems."""

    def load(self, file_path: str | Path) -> Runbook:
        """Load a runbook from file.

        Args:
            file_path: Path to a .yaml or .yml runbook file

        Returns:
            Loaded Runbook
        """
        path = Path(file_path)

        if not path.exists():
            raise RunbookError(f"Runbook file not found: {path}")

        if path.suffix not in RUNBOOK_SUFFIXES:
            raise RunbookError(f"Unsupported runbook format: {path.suffix}")

        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise RunbookError(f"Invalid YAML in {path}: {e}")

        if not data:
            raise RunbookError(f"Empty runbook file: {path}")
        if not isinstance(data, dict):
            raise RunbookError(f"Runbook file must contain a mapping: {path}")

        return parse_runbook(data, source=str(path))

    def load_directory(self, directory: str | Path) -> list[Runbook]:
        """Load every runbook file in a directory, sorted by file name."""
        directory = Path(directory)
        if not directory.is_dir():
            raise RunbookError(f"Runbook directory not found: {directory}")

        paths = sorted(p for p in directory.iterdir() if p.suffix in RUNBOOK_SUFFIXES)
        runbooks = [self.load(p) for p in paths]
        logger.debug("Loaded runbook directory", directory=str(directory), count=len(runbooks))
        return runbooks

    def load_path(self, path: str | Path) -> list[Runbook]:
        """Load a single file or a whole directory."""
        path = Path(path)
        if path.is_dir():
            return self.load_directory(path)
        return [self.load(path)]

    def validate(self, runbook: Runbook) -> list[str]:
        """Validate a runbook and return list of issues."""
        issues: list[str] = []

        if not runbook.id:
            issues.append("Runbook must have an id")

        if not runbook.title:
            issues.append("Runbook must have a title")

        if not runbook.steps:
            issues.append("Runbook must have at least one step")

        all_ids = set(runbook.step_ids)
        seen: set[str] = set()
        for step in runbook.steps:
            if step.id in seen:
                issues.append(f"Duplicate step ID: {step.id}")

            if not step.title:
                issues.append(f"Step {step.id} must have a title")

            for prereq in step.prerequisite:
                if prereq not in all_ids:
                    issues.append(f"Step {step.id} requires unknown step: {prereq}")
                elif prereq not in seen:
                    # Steps run in declared order, so this can never be satisfied
                    issues.append(f"Step {step.id} requires later step: {prereq}")

            seen.add(step.id)

        return issues
