"""Pytest fixtures for opsbook tests."""

import os
from typing import Generator

import pytest
from click.testing import CliRunner

from opsbook.config import EngineConfig
from opsbook.runbooks import (
    ExecutionStore,
    Runbook,
    RunbookEngine,
    RunbookRegistry,
    RunbookService,
    RunbookStep,
    create_service,
)
from opsbook.runbooks.schema import ExecutionLogLevel


class ScriptedStepActions:
    """Step actions that record calls and fail on request."""

    def __init__(
        self,
        fail_on: tuple[str, ...] = (),
        fail_validation_on: tuple[str, ...] = (),
        on_perform=None,
    ):
        self.fail_on = set(fail_on)
        self.fail_validation_on = set(fail_validation_on)
        self.on_perform = on_perform
        self.performed: list[str] = []
        self.validated: list[str] = []

    async def perform(self, step, log) -> None:
        self.performed.append(step.id)
        log(ExecutionLogLevel.INFO, f"performing {step.id}")
        if self.on_perform:
            self.on_perform(step)
        if step.id in self.fail_on:
            raise RuntimeError(f"{step.id} exploded")

    async def validate(self, step, log) -> None:
        self.validated.append(step.id)
        if step.id in self.fail_validation_on:
            raise RuntimeError(f"validation failed: {step.validation}")


def make_step(step_id: str, **kwargs) -> RunbookStep:
    kwargs.setdefault("title", f"Step {step_id}")
    return RunbookStep(id=step_id, **kwargs)


def make_runbook(runbook_id: str = "test-runbook", steps=None, **kwargs) -> Runbook:
    kwargs.setdefault("title", "Test Runbook")
    kwargs.setdefault("category", "restore")
    kwargs.setdefault("severity", "high")
    return Runbook(id=runbook_id, steps=list(steps or []), **kwargs)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def registry() -> RunbookRegistry:
    return RunbookRegistry()


@pytest.fixture
def store() -> ExecutionStore:
    return ExecutionStore()


@pytest.fixture
def actions() -> ScriptedStepActions:
    return ScriptedStepActions()


@pytest.fixture
def engine(registry, store, actions) -> RunbookEngine:
    return RunbookEngine(registry, store, actions=actions)


@pytest.fixture
def fast_config() -> EngineConfig:
    """Engine settings with simulated delays disabled."""
    return EngineConfig(command_delay=0, step_delay=0, validation_delay=0)


@pytest.fixture
def service(fast_config) -> RunbookService:
    """Service with built-in runbooks and no simulated delays."""
    return create_service(fast_config)


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "OPSBOOK_CONFIG",
        "OPSBOOK_ENGINE_COMMAND_DELAY",
        "OPSBOOK_ENGINE_STEP_DELAY",
        "OPSBOOK_ENGINE_VALIDATION_DELAY",
        "OPSBOOK_ENGINE_LOAD_BUILTIN",
        "OPSBOOK_ENGINE_REJECT_DUPLICATE_IDS",
        "OPSBOOK_ENGINE_RUNBOOK_PATHS",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


RUNBOOK_YAML = """
id: cache-failover
title: Cache Failover
category: failover
severity: medium
description: Promote the standby cache node
steps:
  - id: check-standby
    title: Check Standby Health
    estimatedMinutes: 1
    validation: Standby replication lag below threshold
  - id: promote-standby
    title: Promote Standby
    command: redis-cli failover
    estimated_minutes: 2
    prerequisite: [check-standby]
    rollback: Demote node and repoint clients
  - id: notify-team
    title: Notify Team
    automated: false
    critical: false
    estimatedMinutes: 1
"""


@pytest.fixture
def runbook_file(tmp_path):
    """Write a valid runbook definition to disk."""
    path = tmp_path / "cache-failover.yaml"
    path.write_text(RUNBOOK_YAML)
    return path


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file with simulated delays disabled."""
    config_content = """
version: "1"
global:
  output_format: table
engine:
  command_delay: 0
  step_delay: 0
  validation_delay: 0
"""
    config_file = tmp_path / "opsbook.yaml"
    config_file.write_text(config_content)
    return str(config_file)
