"""In-memory runbook registry."""

from collections.abc import Iterator

from opsbook.core.exceptions import DuplicateRunbookError
from opsbook.core.logging import StructuredLogger
from opsbook.runbooks.schema import Runbook

logger = StructuredLogger(__name__)


class RunbookRegistry:
    """Holds runbook definitions keyed by id, in registration order.

    Registering an id that already exists replaces the previous definition
    in place (its position in ``list_all`` is kept). Pass
    ``reject_duplicates=True`` to raise ``DuplicateRunbookError`` instead.
    """

    def __init__(self, reject_duplicates: bool = False):
        self._runbooks: dict[str, Runbook] = {}
        self._reject_duplicates = reject_duplicates

    def register(self, runbook: Runbook) -> None:
        """Store a runbook, overwriting any previous one with the same id."""
        if runbook.id in self._runbooks:
            if self._reject_duplicates:
                raise DuplicateRunbookError(runbook.id)
            logger.warning("Replacing registered runbook", runbook=runbook.id)

        self._runbooks[runbook.id] = runbook
        logger.debug("Registered runbook", runbook=runbook.id, steps=len(runbook.steps))

    def get(self, runbook_id: str) -> Runbook | None:
        """Get a runbook by id, or None if it is not registered."""
        return self._runbooks.get(runbook_id)

    def list_all(self) -> list[Runbook]:
        """All registered runbooks in registration order."""
        return list(self._runbooks.values())

    def __contains__(self, runbook_id: object) -> bool:
        return runbook_id in self._runbooks

    def __len__(self) -> int:
        return len(self._runbooks)

    def __iter__(self) -> Iterator[Runbook]:
        return iter(self.list_all())
