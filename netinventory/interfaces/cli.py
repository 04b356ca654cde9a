"""
netinventory CLI - Command Line Interface

Inspect how the inventory sees this host's network adapters.

Usage:
    netinventory list --policy naming
    netinventory report --physical-only
    netinventory watch --interval 1
"""

import time
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..classifier import classify, get_classifier, is_eligible_type
from ..config import ClassifierPolicy, MonitorConfig, configure_logging
from ..errors import NetworkInventoryError
from ..group import NetworkGroup
from ..platforms import get_platform
from ..registry import TrackedAdapter


class InventoryCLI:
    """
    Command-line interface for the adapter inventory.

    Provides:
    - Classification audit of every OS interface
    - One-shot report of the tracked adapters
    - Live add/remove feed
    """

    def __init__(self, config: Optional[MonitorConfig] = None, console: Optional[Console] = None):
        self.config = config or MonitorConfig.from_env()
        self.console = console or Console()
        self.platform = get_platform()

    def print(self, message: str, style: str = "") -> None:
        self.console.print(message, style=style)

    def print_panel(self, content: str, title: str = "") -> None:
        self.console.print(Panel(content, title=title))

    def show_adapters(self, physical_only: bool = False) -> None:
        """Print every OS interface with its eligibility and physical verdict"""
        classifier = get_classifier(self.config.classifier_policy)
        adapters = sorted(self.platform.list_adapters(), key=lambda a: a.name)

        table = Table(title=f"Network adapters ({self.platform.os_name}, {classifier.name} policy)")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("IPv4")
        table.add_column("Eligible")
        table.add_column("Physical")
        table.add_column("Description")

        for adapter in adapters:
            eligible = is_eligible_type(adapter)
            physical = classify(adapter, classifier)
            if physical_only and not (eligible and physical):
                continue
            table.add_row(
                adapter.identifier,
                escape(adapter.name),
                adapter.interface_type.value,
                str(adapter.status),
                "-" if adapter.ipv4_index is None else str(adapter.ipv4_index),
                "[green]yes[/green]" if eligible else "[red]no[/red]",
                "[green]yes[/green]" if physical else "[red]no[/red]",
                escape(adapter.description or ""),
            )

        self.console.print(table)

    def show_report(self, physical_only: bool = False) -> None:
        """Print the tracked-adapter report"""
        with self._group(physical_only, watch=False) as group:
            report = group.get_report()
        self.print_panel(escape(report.rstrip()) or "(no adapters)", "Network Report")

    def watch(self, physical_only: bool = False) -> None:
        """Print adapter changes until interrupted"""
        group = self._group(
            physical_only,
            watch=True,
            on_adapter_added=lambda a: self._print_change("+", a, "green"),
            on_adapter_removed=lambda a: self._print_change("-", a, "red"),
        )
        self.print(
            f"Watching {len(group.adapters)} adapter(s) every {self.config.poll_interval}s. Ctrl+C to stop.",
            style="dim",
        )
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            group.close()

    def _group(self, physical_only: bool, watch: bool, **callbacks) -> NetworkGroup:
        return NetworkGroup(
            physical_only=physical_only,
            config=self.config,
            platform=self.platform,
            watch=watch,
            **callbacks,
        )

    def _print_change(self, sign: str, adapter: TrackedAdapter, color: str) -> None:
        self.print(f"[{color}]{sign}[/{color}] {escape(adapter.name)} ({escape(adapter.descriptor.display_name)})")


def create_app() -> typer.Typer:
    """Build the Typer application"""
    app = typer.Typer(
        name="netinventory",
        help="netinventory - Live network adapter inventory",
        no_args_is_help=True,
    )

    def make_cli(policy: Optional[str], interval: Optional[float] = None) -> InventoryCLI:
        config = MonitorConfig.from_env()
        if policy:
            config.classifier_policy = ClassifierPolicy.parse(policy)
        if interval:
            config.poll_interval = interval
        configure_logging(config)
        return InventoryCLI(config)

    def run(action) -> None:
        try:
            action()
        except NetworkInventoryError as e:
            Console(stderr=True).print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    @app.command("list")
    def list_adapters(
        physical_only: bool = typer.Option(False, "--physical-only", "-p", help="Only show physical adapters"),
        policy: Optional[str] = typer.Option(None, "--policy", help="Classifier: binding, naming or combined"),
    ):
        """Show every interface and how it is classified"""
        run(lambda: make_cli(policy).show_adapters(physical_only=physical_only))

    @app.command()
    def report(
        physical_only: bool = typer.Option(False, "--physical-only", "-p", help="Only track physical adapters"),
        policy: Optional[str] = typer.Option(None, "--policy", help="Classifier: binding, naming or combined"),
    ):
        """Print the tracked-adapter report"""
        run(lambda: make_cli(policy).show_report(physical_only=physical_only))

    @app.command()
    def watch(
        physical_only: bool = typer.Option(False, "--physical-only", "-p", help="Only track physical adapters"),
        policy: Optional[str] = typer.Option(None, "--policy", help="Classifier: binding, naming or combined"),
        interval: Optional[float] = typer.Option(None, "--interval", "-i", min=0.1, help="Poll interval in seconds"),
    ):
        """Follow adapter additions and removals"""
        run(lambda: make_cli(policy, interval).watch(physical_only=physical_only))

    return app


def run_cli():
    """Entry point for CLI"""
    create_app()()


if __name__ == "__main__":
    run_cli()
