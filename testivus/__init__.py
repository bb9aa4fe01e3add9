"""
Testivus - Airing of Grievances for pytest

This package lets tests record disappointments: tagged, optionally
error-bearing observations that do not fail the test. At the end of the
run the grievances are counted by tag, by error and by test, aired in the
terminal and optionally saved as JSON.

Subpackages:
    - grievances: Records, the thread-safe store and the summarizer
    - reporting: Text rendering and JSON persistence

Usage (pytest, through the bundled plugin):
    def test_download(grievance):
        grievance("You're slow!", "speed").set_error(TimeoutError("timeout exceeded"))

Usage (any other runner):
    from testivus import Session, Settings

    session = Session(Settings(output_file="grievances.json"), emit=print)
    exit_code = session.run(my_suite, verbose=True)
"""

__version__ = "0.1.0"

# Errors
from .errors import (
    GrievanceError,
    ProgrammingError,
    SinkWriteError,
    StoreFrozenError,
    StoreNotInitializedError,
)

# Re-export grievances for convenience
from .grievances import (
    Disappointment,
    GrievanceStore,
    ReportRow,
    Summary,
    summarize,
)

# Re-export reporting for convenience
from .reporting import (
    AccumulateMode,
    JSONFileSink,
    Reporter,
    ReportSink,
    load_documents,
)

# Settings
from .settings import Settings, SettingsCheck, load_settings, validate_settings_yaml

# Session
from .session import CaseContext, Session, SessionState

__all__ = [
    # Package info
    "__version__",
    # Errors
    "GrievanceError",
    "ProgrammingError",
    "SinkWriteError",
    "StoreFrozenError",
    "StoreNotInitializedError",
    # Grievances
    "Disappointment",
    "GrievanceStore",
    "ReportRow",
    "Summary",
    "summarize",
    # Reporting
    "AccumulateMode",
    "JSONFileSink",
    "Reporter",
    "ReportSink",
    "load_documents",
    # Settings
    "Settings",
    "SettingsCheck",
    "load_settings",
    "validate_settings_yaml",
    # Session
    "CaseContext",
    "Session",
    "SessionState",
]
