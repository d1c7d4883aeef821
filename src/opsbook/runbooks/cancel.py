"""Cooperative cancellation for running executions."""

import threading


class CancelToken:
    """Flag checked by the engine between steps.

    Cancelling never interrupts a step that is already in flight.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason or "cancelled"
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason
