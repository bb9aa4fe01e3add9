"""
Grievance data models.

This module defines the recorded disappointment and the aggregate
summary computed from all of them at the end of a run.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .store import GrievanceStore


@dataclass
class Disappointment:
    """
    A single non-fatal observation recorded by a test.

    Setters mutate in place and return the same instance so calls can be
    chained:

        grievance("You're slow!", "speed").set_error(TimeoutError("timeout exceeded"))

    While the record belongs to a store, every mutation goes through the
    store's lock and fails once the store is frozen.
    """
    test_name: str
    message: str
    tags: list[str] = field(default_factory=list)
    error: str | None = None

    _store: GrievanceStore | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.tags = merge_tags([], self.tags)

    def __str__(self) -> str:
        if not self.tags:
            return self.message
        return f"{self.message} ({', '.join(self.tags)})"

    def set_message(self, message: str) -> Disappointment:
        """Replace the message."""
        with self._guard():
            self.message = message
        return self

    def set_error(self, error: BaseException | str | None) -> Disappointment:
        """
        Attach an error to the disappointment.

        Exceptions are stored as their text, so that equal messages are
        counted together in the summary. Passing None clears the error.
        """
        with self._guard():
            self.error = None if error is None else str(error)
        return self

    def add_tags(self, *tags: str) -> Disappointment:
        """Append tags, skipping any already present."""
        with self._guard():
            self.tags = merge_tags(self.tags, tags)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "message": self.message,
            "tags": list(self.tags),
            "error": self.error,
            "testName": self.test_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], test_name: str | None = None) -> Disappointment:
        """Rebuild a detached record from its persisted form."""
        return cls(
            test_name=data.get("testName") or test_name or "",
            message=data.get("message", ""),
            tags=list(data.get("tags") or []),
            error=data.get("error"),
        )

    def _guard(self):
        if self._store is None:
            return nullcontext()
        return self._store.mutation()


@dataclass(frozen=True)
class ReportRow:
    """One line of a summary section: a key and how often it was seen."""
    id: str
    count: int


@dataclass(frozen=True)
class Summary:
    """
    Aggregation of all disappointments of a run.

    The ``*_rows`` tuples are ordered by count descending; equal counts keep
    the order in which their keys were first seen.
    """
    total: int = 0
    by_tag: dict[str, int] = field(default_factory=dict)
    by_name: dict[str, int] = field(default_factory=dict)
    by_error: dict[str, int] = field(default_factory=dict)

    tag_rows: tuple[ReportRow, ...] = ()
    name_rows: tuple[ReportRow, ...] = ()
    error_rows: tuple[ReportRow, ...] = ()

    @property
    def is_clean(self) -> bool:
        return self.total == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict; ``byError`` only when non-empty."""
        result: dict[str, Any] = {
            "total": self.total,
            "byTag": dict(self.by_tag),
            "byName": dict(self.by_name),
        }
        if self.by_error:
            result["byError"] = dict(self.by_error)
        return result


def merge_tags(existing: list[str], tags) -> list[str]:
    """Return ``existing`` extended with ``tags``, dropping repeats."""
    merged = list(existing)
    for tag in tags:
        if tag not in merged:
            merged.append(tag)
    return merged
