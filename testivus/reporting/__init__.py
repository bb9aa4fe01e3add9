"""
Reporting for Disappointment Runs

This package turns the collected grievances into a text report and a
structured JSON document.

Features:
    - One-line or sectioned (verbose) text rendering
    - Aligned per-tag, per-error and per-test counts
    - JSON persistence, accumulated across sessions
    - Loading persisted reports back

Usage:
    from testivus.reporting import Reporter, JSONFileSink

    store.freeze()
    reporter = Reporter.from_store(store, verbose=True)
    print(reporter.render())

    reporter.save(JSONFileSink("reports/grievances.json"))
"""

# Reporter
from .reporter import CLEAN_RUN, Reporter

# Sinks
from .sink import (
    AccumulateMode,
    JSONFileSink,
    ReportSink,
    load_documents,
)

__all__ = [
    # Reporter
    "CLEAN_RUN",
    "Reporter",
    # Sinks
    "AccumulateMode",
    "JSONFileSink",
    "ReportSink",
    "load_documents",
]
