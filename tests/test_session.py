"""Tests for the session lifecycle and exit codes."""

import json
import logging

import pytest

from testivus import (
    ProgrammingError,
    ReportSink,
    Session,
    SessionState,
    Settings,
    SinkWriteError,
    StoreFrozenError,
    StoreNotInitializedError,
)


class BrokenSink(ReportSink):
    def __init__(self):
        self.calls = 0

    def write(self, document):
        self.calls += 1
        raise SinkWriteError("broken.json", "disk full")


def test_store_before_start_fails_fast(make_case):
    session = Session()
    with pytest.raises(StoreNotInitializedError):
        session.store
    with pytest.raises(ProgrammingError):
        session.grievance(make_case("A"), "too early")


def test_happy_path_states(make_case):
    session = Session()
    assert session.state == SessionState.IDLE
    session.start()
    assert session.state == SessionState.RUNNING
    session.grievance(make_case("A"), "You're slow!", "speed")
    assert session.finish(0) == 0
    assert session.state == SessionState.DONE
    assert session.summary.total == 1
    assert session.report_text == "I got a lot of problems with you people! (1 disappointment)"


def test_suite_failure_status_is_kept():
    session = Session()
    session.start()
    assert session.finish(1) == 1
    assert session.state == SessionState.DONE


def test_run_passes_session_to_suite(make_case):
    seen = []

    def suite(session):
        seen.append(session)
        session.grievance(make_case("A"), "My son tells me your company stinks!")
        return 0

    session = Session()
    assert session.run(suite) == 0
    assert seen == [session]
    assert session.summary.by_name == {"A": 1}


def test_emit_receives_rendered_report():
    emitted = []
    session = Session(emit=emitted.append)
    session.run(lambda s: 0)
    assert emitted == ["No disappointments, you are truly master of your domain."]


def test_verbose_setting_overrides_host(make_case):
    session = Session(Settings(verbose=False))
    session.start()
    session.grievance(make_case("A"), "m", "speed")
    session.finish(0, verbose=True)
    assert "By Tag:" not in session.report_text


def test_host_verbosity_used_when_setting_is_auto(make_case):
    session = Session(Settings(verbose=None))
    session.start()
    session.grievance(make_case("A"), "m", "speed")
    session.finish(0, verbose=True)
    assert "By Tag:" in session.report_text


def test_sink_failure_forces_error_even_when_suite_passed(make_case):
    sink = BrokenSink()
    emitted = []
    session = Session(sink=sink, emit=emitted.append)
    session.start()
    session.grievance(make_case("A"), "m")

    assert session.finish(0) == 1
    assert session.state == SessionState.ERROR
    assert isinstance(session.sink_error, SinkWriteError)
    assert sink.calls == 1
    # The text report is still produced, then the diagnostic
    assert emitted[0] == session.report_text
    assert "could not save report to broken.json: disk full" in emitted[1]


def test_sink_failure_keeps_failing_suite_status():
    session = Session(sink=BrokenSink())
    session.start()
    assert session.finish(3) == 3
    assert session.state == SessionState.ERROR


def test_report_persisted_to_output_file(tmp_path, make_case):
    path = tmp_path / "grievances.json"
    session = Session(Settings(output_file=str(path)))
    session.start()
    session.grievance(make_case("A"), "You're slow!", "speed").set_error("timeout exceeded")
    assert session.finish(0) == 0

    documents = json.loads(path.read_text())
    assert documents[0]["summary"] == {
        "total": 1,
        "byTag": {"speed": 1},
        "byName": {"A": 1},
        "byError": {"timeout exceeded": 1},
    }


def test_no_sink_without_output_file():
    assert Session().sink is None


def test_store_frozen_after_finish(make_case):
    session = Session()
    session.start()
    handle = session.grievance(make_case("A"), "m")
    session.finish(0)
    with pytest.raises(StoreFrozenError):
        session.grievance(make_case("A"), "late")
    with pytest.raises(StoreFrozenError):
        handle.add_tags("late")


def test_out_of_order_transitions():
    session = Session()
    with pytest.raises(ProgrammingError, match="expected 'running'"):
        session.finish(0)
    session.start()
    with pytest.raises(ProgrammingError, match="expected 'idle'"):
        session.start()
    session.finish(0)
    with pytest.raises(ProgrammingError):
        session.finish(0)


def test_grievances_are_logged(caplog, make_case):
    caplog.set_level(logging.INFO, logger="testivus")
    session = Session()
    session.start()
    session.grievance(make_case("A"), "You're slow!", "speed")
    assert "DISAPPOINTMENT: You're slow! (speed)" in caplog.text
