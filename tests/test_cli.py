"""Tests for the testivus command line."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from testivus import GrievanceStore, JSONFileSink, Reporter, __version__
from testivus.cli import app

runner = CliRunner()


@pytest.fixture
def report_file(tmp_path, scenario_b):
    """A report file holding a clean run followed by scenario B."""
    path = tmp_path / "grievances.json"
    JSONFileSink(path).write(Reporter.from_store(GrievanceStore()).to_dict())
    JSONFileSink(path).write(Reporter.from_store(scenario_b).to_dict())
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_info():
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "grievance" in result.output


def test_show_latest_run(report_file):
    result = runner.invoke(app, ["show", str(report_file)])
    assert result.exit_code == 0
    assert "Run 2 of 2" in result.output
    assert "I got a lot of problems with you people! (4 disappointments)" in result.output
    assert "By Tag" in result.output
    assert "timeout exceeded" in result.output


def test_show_earlier_run(report_file):
    result = runner.invoke(app, ["show", str(report_file), "--index", "0"])
    assert result.exit_code == 0
    assert "Run 1 of 2" in result.output
    assert "truly master of your domain" in result.output
    assert "By Tag" not in result.output


def test_show_uses_marker(report_file):
    result = runner.invoke(app, ["show", str(report_file), "--marker", "#"])
    assert result.exit_code == 0
    assert "###" in result.output
    assert "|||" not in result.output


def test_show_rejects_wide_marker(report_file):
    result = runner.invoke(app, ["show", str(report_file), "--marker", "##"])
    assert result.exit_code == 2
    assert "single visible character" in result.output


def test_show_json(report_file):
    result = runner.invoke(app, ["show", str(report_file), "--json"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "total": 4,
        "byTag": {"speed": 3, "download": 1},
        "byName": {"A": 3, "B": 1},
        "byError": {"timeout exceeded": 1},
    }


def test_show_index_out_of_range(report_file):
    result = runner.invoke(app, ["show", str(report_file), "--index", "5"])
    assert result.exit_code == 1
    assert "No run at index 5" in result.output


def test_show_rejects_foreign_file(tmp_path):
    path = tmp_path / "notes.json"
    path.write_text('"just a string"')
    result = runner.invoke(app, ["show", str(path)])
    assert result.exit_code == 1
    assert "Not a disappointment report" in result.output


def test_validate_ok(tmp_path):
    path = tmp_path / "testivus.yaml"
    path.write_text("output_file: reports/g.json\naccumulate: append\n")
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0
    assert "Valid settings" in result.output
    assert "append" in result.output


def test_validate_errors(tmp_path):
    path = tmp_path / "testivus.yaml"
    path.write_text("accumulate: merge\n")
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1
    assert "Invalid accumulate mode" in result.output


def test_init_with_defaults(tmp_path):
    path = tmp_path / "conf" / "testivus.yaml"
    result = runner.invoke(app, ["init", str(path), "--yes"])
    assert result.exit_code == 0
    assert yaml.safe_load(path.read_text()) == {
        "accumulate": "array",
        "marker": "|",
        "log_level": "WARNING",
    }


def test_init_refuses_to_overwrite(tmp_path):
    path = tmp_path / "testivus.yaml"
    path.write_text("marker: '#'\n")
    result = runner.invoke(app, ["init", str(path), "--yes"])
    assert result.exit_code == 1
    assert path.read_text() == "marker: '#'\n"


def test_init_interactive(tmp_path):
    path = tmp_path / "testivus.yaml"
    answers = "\n".join([
        "y",              # save a JSON report
        "out/g.jsonl",    # report file
        "2",              # append mode
        "always",         # sectioned report
        "INFO",           # log level
        "#",              # marker
        "y",              # save
    ]) + "\n"
    result = runner.invoke(app, ["init", str(path)], input=answers)
    assert result.exit_code == 0
    assert yaml.safe_load(path.read_text()) == {
        "output_file": "out/g.jsonl",
        "accumulate": "append",
        "verbose": True,
        "marker": "#",
        "log_level": "INFO",
    }


def test_run_passes_options_to_pytest(monkeypatch, tmp_path):
    calls = []

    def fake_main(args):
        calls.append(args)
        return 3

    monkeypatch.setattr(pytest, "main", fake_main)
    result = runner.invoke(
        app,
        ["run", "tests/", "-k", "slow", "-o", str(tmp_path / "g.json"), "--accumulate", "append"],
    )
    assert result.exit_code == 3
    assert calls == [[
        "tests/", "-k", "slow",
        "--testivus-outputfile", str(tmp_path / "g.json"),
        "--testivus-accumulate", "append",
    ]]


def test_invalid_log_level():
    result = runner.invoke(app, ["--log-level", "LOUD", "info"])
    assert result.exit_code == 2
