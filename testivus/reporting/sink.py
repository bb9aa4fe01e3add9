"""
Persistence sinks for the structured disappointment report.

This module defines the sink interface and the JSON file sink used when
an output file is configured.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import suppress
from enum import Enum
from pathlib import Path
from typing import Any

from ..errors import SinkWriteError

logger = logging.getLogger(__name__)


class AccumulateMode(str, Enum):
    """How repeated sessions share one output file."""
    ARRAY = "array"    # one JSON array, one element per session
    APPEND = "append"  # one JSON document per line, appended


class ReportSink(ABC):
    """
    Abstract destination for the structured report.

    Implementations raise SinkWriteError for any failure; the session
    relies on that to decide the final exit status.
    """

    @abstractmethod
    def write(self, document: dict[str, Any]) -> None:
        """
        Persist one report document.

        Args:
            document: The JSON-serializable report
        """
        pass


class JSONFileSink(ReportSink):
    """
    Writes report documents to a JSON file.

    Example:
        sink = JSONFileSink("reports/grievances.json")
        sink.write(reporter.to_dict())
    """

    def __init__(self, path: str | Path, mode: AccumulateMode = AccumulateMode.ARRAY):
        self.path = Path(path)
        self.mode = AccumulateMode(mode)

    def write(self, document: dict[str, Any]) -> None:
        try:
            serialized = json.dumps(document, indent=None if self.mode == AccumulateMode.APPEND else 2)
        except (TypeError, ValueError) as e:
            raise SinkWriteError(self.path, f"report is not serializable: {e}") from e

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.mode == AccumulateMode.APPEND:
                self._append(serialized)
            else:
                self._accumulate(document)
        except OSError as e:
            raise SinkWriteError(self.path, e.strerror or str(e)) from e

        logger.debug(f"Report written to {self.path} ({self.mode.value})")

    def _append(self, serialized: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(serialized + "\n")

    def _accumulate(self, document: dict[str, Any]) -> None:
        documents: list[Any] = []
        if self.path.exists():
            try:
                documents = _parse_documents(self.path.read_text(encoding="utf-8"))
            except ValueError as e:
                raise SinkWriteError(
                    self.path,
                    f"existing file is not a report ({e}); refusing to overwrite it",
                ) from e

        documents.append(document)
        self._replace(json.dumps(documents, indent=2) + "\n")

    def _replace(self, text: str) -> None:
        # Earlier runs stay on disk until the new array is fully written
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp)
            raise


def load_documents(path: str | Path) -> list[dict[str, Any]]:
    """
    Read every report document stored in a file.

    Accepts both layouts written by JSONFileSink, as well as a single
    document on its own.

    Args:
        path: Path to the report file

    Returns:
        The documents, oldest first

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not JSON report documents
    """
    return _parse_documents(Path(path).read_text(encoding="utf-8"))


def _parse_documents(text: str) -> list[Any]:
    """Parse an array, a single object, or concatenated objects."""
    decoder = json.JSONDecoder()
    documents: list[Any] = []
    position = 0
    length = len(text)

    while True:
        while position < length and text[position].isspace():
            position += 1
        if position >= length:
            break
        value, position = decoder.raw_decode(text, position)
        if isinstance(value, list):
            documents.extend(value)
        else:
            documents.append(value)

    for document in documents:
        if not isinstance(document, dict):
            raise ValueError(f"expected a JSON object, got {type(document).__name__}")
    return documents
