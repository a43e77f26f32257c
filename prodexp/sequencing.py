"""Stale-response guard for overlapping analysis requests."""

from __future__ import annotations

import threading


class ResponseSequencer:
    """Hands out increasing request numbers and keeps only the newest reply.

    A caller that fires several analysis requests for a changing product
    calls :meth:`issue` before each one and :meth:`accept` when a reply
    arrives; replies for anything but the latest request are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def issue(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    @property
    def latest(self) -> int:
        with self._lock:
            return self._latest

    def is_current(self, number: int) -> bool:
        with self._lock:
            return number == self._latest

    def accept(self, number: int, response, apply) -> bool:
        """Call ``apply(response)`` only if ``number`` is the latest issued.

        Returns:
            True if the response was applied.
        """
        with self._lock:
            if number != self._latest:
                return False
            apply(response)
            return True
