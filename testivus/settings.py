"""
Collector settings and their YAML loader.

Settings come from an optional YAML file; command-line options override
individual fields. The validator reports every problem at once, with the
offending value and a hint on how to fix it.

Example file:

    output_file: reports/grievances.json
    accumulate: array
    verbose: true
    marker: "|"
    log_level: INFO
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .reporting.sink import AccumulateMode, JSONFileSink, ReportSink

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Settings:
    """
    Configuration of one collector session.

    Attributes:
        output_file: Where to persist the JSON report; None disables persistence
        accumulate: How repeated sessions share the output file
        verbose: Sectioned report when True; None follows the test runner's verbosity
        marker: Character repeated once per occurrence in verbose sections
        log_level: Level for the collector's own log messages
    """
    output_file: str | None = None
    accumulate: AccumulateMode = AccumulateMode.ARRAY
    verbose: bool | None = None
    marker: str = "|"
    log_level: str = "WARNING"

    def merged(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "accumulate" in changes:
            changes["accumulate"] = AccumulateMode(changes["accumulate"])
        return dataclasses.replace(self, **changes)

    def create_sink(self) -> ReportSink | None:
        """Build the configured sink, or None when no output file is set."""
        if not self.output_file:
            return None
        return JSONFileSink(self.output_file, self.accumulate)

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_file": self.output_file,
            "accumulate": self.accumulate.value,
            "verbose": self.verbose,
            "marker": self.marker,
            "log_level": self.log_level,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Problems found while checking a settings file
# ─────────────────────────────────────────────────────────────────────────────

_MISSING = object()


@dataclass(frozen=True)
class SettingsIssue:
    """One thing wrong with a settings file, e.g. an unknown accumulate mode."""
    field: str
    message: str
    value: Any = _MISSING
    hint: str | None = None

    def __str__(self) -> str:
        text = f"{self.field}: {self.message}"
        if self.value is not _MISSING:
            text += f" (got {self.value!r})"
        if self.hint:
            text += f"\n    hint: {self.hint}"
        return text


@dataclass
class SettingsCheck:
    """Every issue found in one settings source; empty means usable."""
    issues: list[SettingsIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def flag(self, field_name: str, message: str, **details: Any) -> None:
        self.issues.append(SettingsIssue(field_name, message, **details))

    def __str__(self) -> str:
        if self.ok:
            return "settings OK"
        noun = "issue" if len(self.issues) == 1 else "issues"
        return "\n".join(
            [f"{len(self.issues)} {noun} in settings:"]
            + [f"  - {issue}" for issue in self.issues]
        )


# ─────────────────────────────────────────────────────────────────────────────
# Settings Validator
# ─────────────────────────────────────────────────────────────────────────────

class SettingsValidator:
    """Validates raw parsed YAML against the settings schema."""

    KNOWN_FIELDS = {f.name for f in dataclasses.fields(Settings)}
    VALID_MODES = {m.value for m in AccumulateMode}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = SettingsCheck()

    def validate(self) -> SettingsCheck:
        """Run all validation checks and return result."""
        self._validate_fields()
        self._validate_output_file()
        self._validate_accumulate()
        self._validate_verbose()
        self._validate_marker()
        self._validate_log_level()
        return self.result

    def _validate_fields(self) -> None:
        for key in self.data.keys() - self.KNOWN_FIELDS:
            self.result.flag(
                str(key),
                f"Unknown field '{key}'",
                hint=f"Valid fields are: {', '.join(sorted(self.KNOWN_FIELDS))}"
            )

    def _validate_output_file(self) -> None:
        output_file = self.data.get("output_file")
        if output_file is None:
            return
        if not isinstance(output_file, str):
            self.result.flag(
                "output_file",
                "Must be a string path",
                value=output_file
            )
        elif not output_file.strip():
            self.result.flag(
                "output_file",
                "Cannot be empty",
                hint="Remove the field to disable the JSON report"
            )

    def _validate_accumulate(self) -> None:
        accumulate = self.data.get("accumulate")
        if accumulate is None:
            return
        if accumulate not in self.VALID_MODES:
            self.result.flag(
                "accumulate",
                "Invalid accumulate mode",
                value=accumulate,
                hint=f"Valid modes: {', '.join(sorted(self.VALID_MODES))}"
            )

    def _validate_verbose(self) -> None:
        verbose = self.data.get("verbose")
        if verbose is not None and not isinstance(verbose, bool):
            self.result.flag(
                "verbose",
                "Must be true or false",
                value=verbose,
                hint="Omit it to follow the test runner's verbosity"
            )

    def _validate_marker(self) -> None:
        if "marker" not in self.data:
            return
        marker = self.data.get("marker")
        if not isinstance(marker, str) or len(marker) != 1 or marker.isspace():
            self.result.flag(
                "marker",
                "Must be a single visible character",
                value=marker,
                hint="Quote it in YAML, e.g. marker: \"|\""
            )

    def _validate_log_level(self) -> None:
        level = self.data.get("log_level")
        if level is None:
            return
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            self.result.flag(
                "log_level",
                "Invalid log level",
                value=level,
                hint=f"Valid levels: {', '.join(LOG_LEVELS)}"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Loader
# ─────────────────────────────────────────────────────────────────────────────

def load_settings(path: str | Path) -> tuple[Settings | None, SettingsCheck]:
    """
    Load and validate settings from a YAML file.

    Args:
        path: Path to the YAML settings file

    Returns:
        Tuple of (Settings or None, SettingsCheck)
        If validation fails, Settings will be None.

    Example:
        settings, result = load_settings("testivus.yaml")
        if not result.ok:
            print(result)
            sys.exit(1)
    """
    path = Path(path)

    if not path.exists():
        result = SettingsCheck()
        result.flag(
            str(path),
            "File not found",
            hint="Check the file path is correct"
        )
        return None, result

    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        result = SettingsCheck()
        result.flag(str(path), f"Cannot read file: {e}")
        return None, result

    return _parse(text, str(path))


def validate_settings_yaml(yaml_string: str) -> tuple[Settings | None, SettingsCheck]:
    """
    Validate settings from a YAML string (useful for testing).

    Args:
        yaml_string: YAML content as a string

    Returns:
        Tuple of (Settings or None, SettingsCheck)
    """
    return _parse(yaml_string, "yaml")


def _parse(text: str, source: str) -> tuple[Settings | None, SettingsCheck]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        result = SettingsCheck()
        result.flag(
            source,
            f"Invalid YAML syntax: {e}",
            hint="Check YAML formatting (indentation, colons, etc.)"
        )
        return None, result

    # An empty file means "all defaults"
    if data is None:
        return Settings(), SettingsCheck()

    if not isinstance(data, dict):
        result = SettingsCheck()
        result.flag(
            source,
            "File must contain a YAML object (not a list or scalar)",
            value=type(data).__name__
        )
        return None, result

    result = SettingsValidator(data).validate()
    if not result.ok:
        return None, result

    settings = Settings(
        output_file=data.get("output_file"),
        accumulate=AccumulateMode(data.get("accumulate", AccumulateMode.ARRAY.value)),
        verbose=data.get("verbose"),
        marker=data.get("marker", "|"),
        log_level=str(data.get("log_level", "WARNING")).upper(),
    )
    return settings, result
