"""
Aggregation of recorded disappointments into a Summary.
"""

from __future__ import annotations

from collections import Counter
from typing import Mapping, Sequence

from .models import Disappointment, ReportRow, Summary


def summarize(grievances: Mapping[str, Sequence[Disappointment]]) -> Summary:
    """
    Count disappointments by tag, by test and by error.

    Counters remember the order in which keys were first seen and
    ``most_common`` sorts stably, so rows with equal counts come out in
    discovery order rather than alphabetically.

    Args:
        grievances: Records keyed by test name, usually a frozen store snapshot

    Returns:
        The Summary of the run
    """
    by_tag: Counter[str] = Counter()
    by_name: Counter[str] = Counter()
    by_error: Counter[str] = Counter()
    total = 0

    for test_name, records in grievances.items():
        for grievance in records:
            total += 1
            by_name[test_name] += 1
            by_tag.update(grievance.tags)
            if grievance.error is not None:
                by_error[grievance.error] += 1

    return Summary(
        total=total,
        by_tag=dict(by_tag),
        by_name=dict(by_name),
        by_error=dict(by_error),
        tag_rows=_rows(by_tag),
        name_rows=_rows(by_name),
        error_rows=_rows(by_error),
    )


def _rows(counts: Counter[str]) -> tuple[ReportRow, ...]:
    return tuple(ReportRow(id=key, count=count) for key, count in counts.most_common())
