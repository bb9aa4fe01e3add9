"""
Reporter for airing the grievances of a run.

This module provides the Reporter class which renders the summary as
text and builds the structured document handed to a sink.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ..grievances import Disappointment, ReportRow, Summary, summarize

if TYPE_CHECKING:
    from ..grievances import GrievanceStore
    from .sink import ReportSink

CLEAN_RUN = "No disappointments, you are truly master of your domain."
HEADER = "=== The airing of grievances:"


class Reporter:
    """
    Renders and persists the disappointments of one run.

    Example:
        store.freeze()
        reporter = Reporter.from_store(store, verbose=True)

        print(reporter.render())
        reporter.save(JSONFileSink("grievances.json"))
    """

    def __init__(
        self,
        grievances: Mapping[str, Sequence[Disappointment]],
        summary: Summary,
        verbose: bool = False,
        marker: str = "|",
    ):
        """
        Initialize with already collected grievances and their summary.

        Use Reporter.from_store() for the typical case.
        """
        self.grievances = grievances
        self.summary = summary
        self.verbose = verbose
        self.marker = marker

    @classmethod
    def from_store(
        cls,
        store: GrievanceStore,
        verbose: bool = False,
        marker: str = "|",
    ) -> Reporter:
        """
        Snapshot a store and summarize it.

        The store should be frozen first; records edited after the
        snapshot would make the summary disagree with the document.
        """
        grievances = store.snapshot()
        return cls(grievances, summarize(grievances), verbose=verbose, marker=marker)

    def render(self) -> str:
        """Render the summary as human-readable text."""
        if self.summary.is_clean:
            return CLEAN_RUN

        headline = f"I got a lot of problems with you people! ({_plural(self.summary.total)})"
        if not self.verbose:
            return headline

        lines = [HEADER, headline]
        for title, rows in (
            ("By Tag:", self.summary.tag_rows),
            ("By Error:", self.summary.error_rows),
            ("By Test:", self.summary.name_rows),
        ):
            if rows:
                lines.append("")
                lines.append(title)
                lines.extend(_section(rows, self.marker))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted report document."""
        return {
            "grievances": {
                name: [grievance.to_dict() for grievance in records]
                for name, records in self.grievances.items()
            },
            "summary": self.summary.to_dict(),
        }

    def save(self, sink: ReportSink) -> None:
        """
        Write the report document to a sink.

        Raises:
            SinkWriteError: If the sink could not persist the document
        """
        sink.write(self.to_dict())


def _plural(total: int) -> str:
    return f"{total} disappointment" if total == 1 else f"{total} disappointments"


def _section(rows: Sequence[ReportRow], marker: str) -> list[str]:
    """Format rows as aligned ``key  count  bar`` columns."""
    key_width = max(len(row.id) for row in rows)
    count_width = max(len(str(row.count)) for row in rows)
    return [
        f"  {row.id:<{key_width}}  {row.count:<{count_width}}  {marker * row.count}"
        for row in rows
    ]
