"""
Error types for the disappointment collector.

Two families exist: programming errors (the collector used out of order by
its caller) and sink write errors (the report could not be persisted).
"""

from __future__ import annotations

from pathlib import Path


class GrievanceError(Exception):
    """Base class for all collector errors."""


class ProgrammingError(GrievanceError):
    """The collector was used incorrectly by the calling code."""


class StoreNotInitializedError(ProgrammingError):
    """A disappointment was recorded before the session started."""

    def __init__(self, message: str = "grievance store used before the session was started"):
        super().__init__(message)


class StoreFrozenError(ProgrammingError):
    """The store was mutated after it was frozen for summarization."""

    def __init__(self, message: str = "grievance store is frozen; the run is already being summarized"):
        super().__init__(message)


class SinkWriteError(GrievanceError):
    """
    The structured report could not be written to its sink.

    Attributes:
        path: The sink destination, when it is a file
        reason: Human-readable description of the failure
    """

    def __init__(self, path: str | Path | None, reason: str):
        self.path = str(path) if path is not None else None
        self.reason = reason
        where = f" to {self.path}" if self.path else ""
        super().__init__(f"could not save report{where}: {reason}")
