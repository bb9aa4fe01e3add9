"""
Grievance Collection

This package holds the in-memory side of the collector: the records tests
file, the store they are filed into, and the aggregation run at the end.

Usage:
    from testivus.grievances import GrievanceStore, summarize

    store = GrievanceStore()
    store.record("test_a", "You're slow!", "speed")
    store.record("test_a", "You're sending too much data!", "speed", "download")

    store.freeze()
    summary = summarize(store.snapshot())
    summary.by_tag   # {"speed": 2, "download": 1}
"""

# Models
from .models import Disappointment, ReportRow, Summary

# Store
from .store import GrievanceStore

# Aggregation
from .summarizer import summarize

__all__ = [
    # Models
    "Disappointment",
    "ReportRow",
    "Summary",
    # Store
    "GrievanceStore",
    # Aggregation
    "summarize",
]
