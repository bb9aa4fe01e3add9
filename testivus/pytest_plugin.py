"""
pytest integration for the disappointment collector.

Registered through the ``pytest11`` entry point. A session is started when
pytest is configured, tests file grievances through the ``grievance``
fixture, and the report is aired in the terminal summary.

Usage:
    def test_download(grievance):
        started = time.monotonic()
        payload = client.download()
        if time.monotonic() - started > 1.0:
            grievance("You're slow!", "speed")
        if len(payload) > LIMIT:
            grievance("You're sending too much data!", "speed", "download")

    $ pytest -v --testivus-outputfile reports/grievances.json
"""

from __future__ import annotations

import logging

import pytest

from .grievances import Disappointment
from .reporting import AccumulateMode
from .session import Session
from .settings import Settings, load_settings

SESSION_KEY = pytest.StashKey[Session]()
FIXTURE_USED_KEY = pytest.StashKey[bool]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("testivus", "disappointment reporting")
    group.addoption(
        "--testivus-outputfile",
        dest="testivus_outputfile",
        default=None,
        metavar="PATH",
        help="write a detailed disappointment report to a file",
    )
    group.addoption(
        "--testivus-accumulate",
        dest="testivus_accumulate",
        default=None,
        choices=[m.value for m in AccumulateMode],
        help="how repeated runs share the report file (default: array)",
    )
    group.addoption(
        "--testivus-config",
        dest="testivus_config",
        default=None,
        metavar="PATH",
        help="YAML file with collector settings",
    )
    parser.addini(
        "testivus_config",
        help="YAML file with collector settings",
        default=None,
    )


def pytest_configure(config: pytest.Config) -> None:
    settings = _load_settings(config).merged(
        output_file=config.getoption("testivus_outputfile"),
        accumulate=config.getoption("testivus_accumulate"),
    )
    logging.getLogger("testivus").setLevel(settings.log_level)
    session = Session(settings)
    session.start()
    config.stash[SESSION_KEY] = session


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    collector = session.config.stash.get(SESSION_KEY, None)
    if collector is None:
        return
    verbose = session.config.getoption("verbose") > 0
    code = collector.finish(int(exitstatus), verbose=verbose)
    if code != exitstatus:
        session.exitstatus = code


def pytest_terminal_summary(terminalreporter, exitstatus: int, config: pytest.Config) -> None:
    collector = config.stash.get(SESSION_KEY, None)
    if collector is None or collector.report_text is None:
        return
    # Quiet for runs that never asked for the fixture and save nothing
    if not config.stash.get(FIXTURE_USED_KEY, False) and collector.sink is None:
        return
    terminalreporter.write_line("")
    for line in collector.report_text.splitlines():
        terminalreporter.write_line(line)
    if collector.sink_error is not None:
        terminalreporter.write_line(str(collector.sink_error), red=True, bold=True)


class PytestCase:
    """Adapts a pytest item to the collector's view of a running test."""

    def __init__(self, node: pytest.Item):
        self.node = node

    @property
    def name(self) -> str:
        return self.node.nodeid

    def fail(self, reason: str) -> None:
        pytest.fail(reason, pytrace=False)


class GrievanceRecorder:
    """
    Files grievances for the current test.

    Call it like a function to record a disappointment; the returned record
    accepts chained ``set_message``, ``set_error`` and ``add_tags``.
    """

    def __init__(self, session: Session, case: PytestCase):
        self.session = session
        self.case = case

    def __call__(self, message: str, *tags: str) -> Disappointment:
        return self.session.grievance(self.case, message, *tags)

    @property
    def records(self) -> list[Disappointment]:
        """Disappointments filed so far by this test."""
        return self.session.store.get(self.case.name)

    def fail(self, reason: str) -> None:
        """Give up on being merely disappointed and fail the test."""
        self.case.fail(reason)


@pytest.fixture
def grievance(request: pytest.FixtureRequest) -> GrievanceRecorder:
    """Record non-fatal disappointments for the current test."""
    request.config.stash[FIXTURE_USED_KEY] = True
    return GrievanceRecorder(request.config.stash[SESSION_KEY], PytestCase(request.node))


def _load_settings(config: pytest.Config) -> Settings:
    path = config.getoption("testivus_config") or config.getini("testivus_config")
    if not path:
        return Settings()
    settings, result = load_settings(path)
    if not result.ok:
        raise pytest.UsageError(str(result))
    return settings
