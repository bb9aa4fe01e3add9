"""
Thread-safe store of disappointments, keyed by the test that filed them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from ..errors import StoreFrozenError
from .models import Disappointment


class GrievanceStore:
    """
    Append-only collection of disappointments shared by all running tests.

    A single lock guards the whole mapping as well as in-place edits of the
    records it hands out. Writes are rare compared to test runtime, so one
    lock for everything is enough.

    Example:
        store = GrievanceStore()
        store.record("test_upload", "You're slow!", "speed").set_error("timeout exceeded")
        store.freeze()
        grievances = store.snapshot()
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._grievances: dict[str, list[Disappointment]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @contextmanager
    def mutation(self) -> Iterator[None]:
        """Hold the store lock for one structural change."""
        with self._lock:
            if self._frozen:
                raise StoreFrozenError()
            yield

    def record(self, test_name: str, message: str, *tags: str) -> Disappointment:
        """
        File a new disappointment under a test.

        Args:
            test_name: Identity of the test recording the disappointment
            message: What went wrong
            *tags: Labels used to group disappointments; repeats are dropped

        Returns:
            The stored record, which can still be edited until the store is frozen
        """
        with self.mutation():
            grievance = Disappointment(
                test_name=test_name,
                message=message,
                tags=list(tags),
                _store=self,
            )
            self._grievances.setdefault(test_name, []).append(grievance)
        return grievance

    def get(self, test_name: str) -> list[Disappointment]:
        """Get a copy of the records filed under one test."""
        with self._lock:
            return list(self._grievances.get(test_name, ()))

    def snapshot(self) -> dict[str, list[Disappointment]]:
        """Copy the whole mapping; the lists are copies, the records are shared."""
        with self._lock:
            return {name: list(records) for name, records in self._grievances.items()}

    def freeze(self) -> None:
        """Reject any further writes. Called once the suite has finished."""
        with self._lock:
            self._frozen = True

    def __len__(self) -> int:
        with self._lock:
            return sum(len(records) for records in self._grievances.values())
