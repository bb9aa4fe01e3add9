"""
Interactive settings builder for testivus.

This module provides a wizard-style interface for creating a settings
file, so users don't have to remember the field names.
"""

from pathlib import Path
from typing import Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from .reporting import AccumulateMode
from .settings import LOG_LEVELS, Settings, validate_settings_yaml

console = Console()


class SettingsBuilder:
    """Interactive builder for testivus settings files."""

    def __init__(self, interactive: bool = True):
        self.interactive = interactive
        self.settings = Settings()

    def run(self) -> str:
        """Run the wizard (or take every default) and return YAML content."""
        if self.interactive:
            self._welcome()
            self._ask_output()
            self._ask_verbosity()
            self._ask_marker()
        return self._generate_yaml()

    def _welcome(self):
        console.print()
        console.print(Panel.fit(
            "[bold cyan]Testivus Settings Builder[/bold cyan]\n\n"
            "Answer a few questions and we'll write the settings file for you.\n"
            "Every answer can be overridden later from the pytest command line.",
            border_style="cyan"
        ))
        console.print()

    def _ask_output(self):
        """Ask whether and where to persist the JSON report."""
        if not Confirm.ask("[bold]Save a JSON report of every run?[/bold]", default=True):
            console.print("✓ No JSON report\n")
            return

        self.settings.output_file = Prompt.ask(
            "Report file",
            default="reports/grievances.json"
        )

        console.print("\n[bold]How should repeated runs share the file?[/bold]")
        console.print("  1. [cyan]array[/cyan]  - one JSON array, one entry per run")
        console.print("  2. [cyan]append[/cyan] - one JSON document per line\n")
        choice = Prompt.ask("Choose accumulate mode", choices=["1", "2"], default="1")
        self.settings.accumulate = AccumulateMode.ARRAY if choice == "1" else AccumulateMode.APPEND

        console.print(
            f"✓ Report: [green]{self.settings.output_file}[/green] "
            f"({self.settings.accumulate.value})\n"
        )

    def _ask_verbosity(self):
        """Ask whether the sectioned report should always be shown."""
        choice = Prompt.ask(
            "[bold]Sectioned report[/bold] (auto follows pytest -v)",
            choices=["auto", "always", "never"],
            default="auto"
        )
        self.settings.verbose = {"auto": None, "always": True, "never": False}[choice]

        self.settings.log_level = Prompt.ask(
            "Log level",
            choices=list(LOG_LEVELS),
            default=self.settings.log_level
        )
        console.print()

    def _ask_marker(self):
        """Ask for the bar character."""
        marker = Prompt.ask("Bar marker character", default=self.settings.marker)
        while len(marker) != 1 or marker.isspace():
            console.print("[yellow]Use exactly one visible character[/yellow]")
            marker = Prompt.ask("Bar marker character", default=self.settings.marker)
        self.settings.marker = marker
        console.print()

    def _generate_yaml(self) -> str:
        """Generate YAML content from the collected settings."""
        data = {key: value for key, value in self.settings.to_dict().items() if value is not None}
        header = [
            "# Testivus Settings",
            "# Generated by: testivus init",
            "# Pass with: pytest --testivus-config <this file>",
            "",
        ]
        return "\n".join(header) + yaml.safe_dump(data, sort_keys=False)


def build_settings_interactive(output_file: Path, interactive: bool = True) -> Optional[Settings]:
    """
    Run the settings builder and save the result.

    Args:
        output_file: Path where the YAML should be saved
        interactive: Ask questions; when False every default is taken and
            the file is written without confirmation

    Returns:
        The saved Settings, or None if the user declined to save
    """
    builder = SettingsBuilder(interactive=interactive)
    yaml_content = builder.run()

    # The generated file must load back cleanly
    settings, result = validate_settings_yaml(yaml_content)
    if not result.ok:
        console.print(str(result))
        return None

    if interactive:
        console.print("[bold]📄 Generated Settings:[/bold]\n")
        console.print(Panel(yaml_content, border_style="green", expand=False))
        console.print()

        if not Confirm.ask(f"Save to [cyan]{output_file}[/cyan]?", default=True):
            console.print("\n[yellow]Settings not saved[/yellow]")
            return None

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(yaml_content, encoding="utf-8")

    console.print(f"\n✅ Settings saved to [green]{output_file}[/green]")
    console.print("\n[bold cyan]Next steps:[/bold cyan]")
    console.print(f"  1. Run [cyan]pytest --testivus-config {output_file}[/cyan]")
    console.print(f"  2. Or [cyan]testivus run --config {output_file}[/cyan]")
    console.print()

    return settings
