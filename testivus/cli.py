#!/usr/bin/env python3
"""
Testivus CLI - Airing of Grievances for pytest

Usage:
    testivus run [PYTEST ARGS...] [OPTIONS]
    testivus show <report.json> [OPTIONS]
    testivus validate <testivus.yaml>
    testivus init [testivus.yaml]
    testivus --version
"""

import logging
from pathlib import Path
from typing import Optional

import pytest
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from . import __version__
from .grievances import Disappointment, ReportRow, Summary, summarize
from .interactive import build_settings_interactive
from .reporting import AccumulateMode, Reporter, load_documents
from .settings import LOG_LEVELS, load_settings

app = typer.Typer(
    name="testivus",
    help="Testivus - Airing of Grievances for pytest",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"Testivus v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level",
        help=f"Log level: {', '.join(LOG_LEVELS)}"
    ),
):
    """
    Testivus - Airing of Grievances for pytest

    Record disappointments from your tests without failing them,
    and get a report of everything that let you down.
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        console.print(f"[red]❌ Invalid log level:[/red] {log_level}")
        raise typer.Exit(code=2)
    logger = logging.getLogger("testivus")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the JSON disappointment report to this file"
    ),
    accumulate: Optional[AccumulateMode] = typer.Option(
        None, "--accumulate",
        help="How repeated runs share the report file"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="YAML settings file",
        exists=True,
        readable=True,
    ),
):
    """
    Run pytest with disappointment reporting.

    Any extra arguments are passed to pytest unchanged. The exit code is
    pytest's, and non-zero if the report could not be saved.
    """
    args = list(ctx.args)
    if output is not None:
        args += ["--testivus-outputfile", str(output)]
    if accumulate is not None:
        args += ["--testivus-accumulate", accumulate.value]
    if config is not None:
        args += ["--testivus-config", str(config)]

    code = pytest.main(args)
    raise typer.Exit(code=int(code))


@app.command()
def show(
    report_file: Path = typer.Argument(
        ...,
        help="Path to a JSON disappointment report",
        exists=True,
        readable=True,
    ),
    index: int = typer.Option(
        -1, "--index", "-i",
        help="Which run to show when the file holds several (default: latest)"
    ),
    as_json: bool = typer.Option(
        False, "--json",
        help="Print the summary as JSON"
    ),
    verbose: bool = typer.Option(
        True, "--verbose/--no-verbose", "-V",
        help="Show per-tag, per-error and per-test tables"
    ),
    marker: str = typer.Option(
        "|", "--marker", "-m",
        help="Character repeated once per occurrence in the tables"
    ),
):
    """
    Show the summary of a saved report.

    The summary is recomputed from the saved grievances.
    """
    if len(marker) != 1 or marker.isspace():
        console.print(f"[red]❌ Marker must be a single visible character:[/red] {marker!r}")
        raise typer.Exit(code=2)

    try:
        documents = load_documents(report_file)
    except ValueError as e:
        console.print(f"[red]❌ Not a disappointment report:[/red] {e}")
        raise typer.Exit(code=1)

    if not documents:
        console.print(f"[yellow]No runs recorded in {report_file}[/yellow]")
        raise typer.Exit(code=1)

    try:
        document = documents[index]
    except IndexError:
        console.print(f"[red]❌ No run at index {index}[/red] ({len(documents)} recorded)")
        raise typer.Exit(code=1)

    grievances = {
        name: [Disappointment.from_dict(entry, test_name=name) for entry in entries]
        for name, entries in (document.get("grievances") or {}).items()
    }
    summary = summarize(grievances)

    if as_json:
        console.print_json(data=summary.to_dict())
        raise typer.Exit(code=0)

    reporter = Reporter(grievances, summary, verbose=False, marker=marker)
    console.print(f"\n📄 Run {index % len(documents) + 1} of {len(documents)} in {report_file}")
    console.print(reporter.render(), markup=False, highlight=False)

    if verbose and not summary.is_clean:
        for title, rows in _sections(summary):
            console.print()
            console.print(_table(title, rows, reporter.marker))


@app.command()
def validate(
    settings_file: Path = typer.Argument(
        ...,
        help="Path to the settings YAML file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a settings YAML file.
    """
    console.print(f"\n📄 Validating: {settings_file}")

    settings, validation = load_settings(settings_file)

    if not validation.ok:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation), markup=False)
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid settings[/green]")
    table = Table(title="Settings")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_dict().items():
        table.add_row(key, "auto" if value is None and key == "verbose" else str(value))
    console.print()
    console.print(table)


@app.command()
def init(
    output_file: Path = typer.Argument(
        Path("testivus.yaml"),
        help="Where to write the settings file",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y",
        help="Take every default without asking"
    ),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Overwrite an existing file"
    ),
):
    """
    Create a settings file with an interactive wizard.
    """
    if output_file.exists() and not force:
        console.print(f"[red]❌ {output_file} already exists[/red] (use --force to overwrite)")
        raise typer.Exit(code=1)

    settings = build_settings_interactive(output_file, interactive=not yes)
    if settings is None:
        raise typer.Exit(code=1)


@app.command()
def info():
    """
    Show information about Testivus.
    """
    console.print(f"""
[bold]Testivus[/bold] v{__version__}

Airing of Grievances for pytest

[bold]Features:[/bold]
  • Record non-fatal disappointments with the [cyan]grievance[/cyan] fixture
  • Tag them, attach errors, chain edits
  • Counts by tag, by error and by test at the end of the run
  • JSON reports accumulated across runs

[bold]Quick Start:[/bold]
  def test_upload(grievance):
      grievance("You're slow!", "speed")

  pytest -v --testivus-outputfile reports/grievances.json
  testivus show reports/grievances.json
""")


def _sections(summary: Summary) -> list[tuple[str, tuple[ReportRow, ...]]]:
    sections = [
        ("By Tag", summary.tag_rows),
        ("By Error", summary.error_rows),
        ("By Test", summary.name_rows),
    ]
    return [(title, rows) for title, rows in sections if rows]


def _table(title: str, rows: tuple[ReportRow, ...], marker: str) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Key", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("", style="magenta")
    for row in rows:
        table.add_row(Text(row.id), str(row.count), Text(marker * row.count))
    return table


if __name__ == "__main__":
    app()
