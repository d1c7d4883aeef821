"""Step action capability used by the engine."""

import asyncio
from collections.abc import Callable
from typing import Protocol

from opsbook.runbooks.schema import ExecutionLogLevel, RunbookStep

StepLog = Callable[[ExecutionLogLevel, str], object]


class StepActions(Protocol):
    """What the engine calls to run and check a step.

    Both methods signal failure by raising. ``log`` appends to the running
    execution's log.
    """

    async def perform(self, step: RunbookStep, log: StepLog) -> None: ...

    async def validate(self, step: RunbookStep, log: StepLog) -> None: ...


class SimulatedStepActions:
    """Timing placeholders standing in for real infrastructure commands."""

    def __init__(
        self,
        command_delay: float = 1.0,
        step_delay: float = 0.5,
        validation_delay: float = 0.5,
    ):
        """Initialize simulated actions.

        Args:
            command_delay: Seconds spent on a step that declares a command
            step_delay: Seconds spent on a step without a command
            validation_delay: Seconds spent on a validation check
        """
        self.command_delay = command_delay
        self.step_delay = step_delay
        self.validation_delay = validation_delay

    async def perform(self, step: RunbookStep, log: StepLog) -> None:
        if step.command:
            log(ExecutionLogLevel.INFO, f"Running command: {step.command}")
            await asyncio.sleep(self.command_delay)
        else:
            await asyncio.sleep(self.step_delay)

    async def validate(self, step: RunbookStep, log: StepLog) -> None:
        log(ExecutionLogLevel.INFO, f"Validating: {step.validation}")
        await asyncio.sleep(self.validation_delay)
