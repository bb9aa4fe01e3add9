"""
Session lifecycle for one test run.

A Session owns the grievance store for the duration of a suite and, once
the suite is done, summarizes it, airs the grievances and persists the
report. Its final exit code combines the suite's own status with the
outcome of persistence.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from .errors import ProgrammingError, SinkWriteError, StoreNotInitializedError
from .grievances import Disappointment, GrievanceStore, Summary
from .reporting import Reporter, ReportSink
from .settings import Settings

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of a session."""
    IDLE = "idle"
    RUNNING = "running"
    SUMMARIZING = "summarizing"
    REPORTED = "reported"
    DONE = "done"
    ERROR = "error"


class CaseContext(Protocol):
    """The running test, as seen by the collector."""

    @property
    def name(self) -> str:
        ...

    def fail(self, reason: str) -> None:
        """Mark the surrounding test as failed."""
        ...


class Session:
    """
    Collects disappointments while a suite runs, then reports them.

    Example:
        session = Session(Settings(output_file="grievances.json"))

        def suite(session):
            session.grievance(case, "You're slow!", "speed")
            return 0

        exit_code = session.run(suite, verbose=True)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        sink: ReportSink | None = None,
        emit: Callable[[str], None] | None = None,
    ):
        """
        Initialize an idle session.

        Args:
            settings: Collector settings (defaults when omitted)
            sink: Where to persist the report; built from settings when omitted
            emit: Called with the rendered report and any diagnostic
        """
        self.settings = settings or Settings()
        self.sink = sink if sink is not None else self.settings.create_sink()
        self.emit = emit

        self.state = SessionState.IDLE
        self.summary: Summary | None = None
        self.report_text: str | None = None
        self.sink_error: SinkWriteError | None = None
        self.exit_code: int | None = None

        self._store: GrievanceStore | None = None

    @property
    def store(self) -> GrievanceStore:
        """The store of the running session."""
        if self._store is None:
            raise StoreNotInitializedError()
        return self._store

    def start(self) -> GrievanceStore:
        """Allocate the store and begin accepting disappointments."""
        self._expect(SessionState.IDLE, "start")
        self._store = GrievanceStore()
        self._transition(SessionState.RUNNING)
        return self._store

    def grievance(self, case: CaseContext, message: str, *tags: str) -> Disappointment:
        """
        Record a disappointment for the running test.

        Args:
            case: The test filing the grievance
            message: What went wrong
            *tags: Labels used to group disappointments

        Returns:
            The record, which accepts chained set_message/set_error/add_tags
        """
        grievance = self.store.record(case.name, message, *tags)
        logger.info(f"DISAPPOINTMENT: {grievance}")
        return grievance

    def finish(self, suite_status: int, verbose: bool = False) -> int:
        """
        Summarize, report and persist once the suite has returned.

        Args:
            suite_status: Exit status of the suite itself (0 means passed)
            verbose: Render sectioned counts; overridden by settings.verbose

        Returns:
            The final exit code
        """
        self._expect(SessionState.RUNNING, "finish")
        self._transition(SessionState.SUMMARIZING)

        store = self.store
        store.freeze()
        if self.settings.verbose is not None:
            verbose = self.settings.verbose
        reporter = Reporter.from_store(store, verbose=verbose, marker=self.settings.marker)
        self.summary = reporter.summary
        self.report_text = reporter.render()
        if self.emit:
            self.emit(self.report_text)
        self._transition(SessionState.REPORTED)

        if self.sink is not None:
            try:
                reporter.save(self.sink)
            except SinkWriteError as e:
                self.sink_error = e
                logger.error(str(e))
                if self.emit:
                    self.emit(str(e))
                self.exit_code = suite_status or 1
                self._transition(SessionState.ERROR)
                return self.exit_code

        self.exit_code = suite_status
        self._transition(SessionState.DONE)
        return self.exit_code

    def run(self, suite: Callable[[Session], int], verbose: bool = False) -> int:
        """
        Run a whole session around a suite.

        Args:
            suite: Called with this session; returns the suite's exit status
            verbose: Render sectioned counts

        Returns:
            The final exit code
        """
        self.start()
        suite_status = suite(self)
        return self.finish(suite_status, verbose=verbose)

    def _expect(self, state: SessionState, action: str) -> None:
        if self.state != state:
            raise ProgrammingError(
                f"cannot {action} a session in state '{self.state.value}' "
                f"(expected '{state.value}')"
            )

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Session {self.state.value} -> {state.value}")
        self.state = state
