"""Console output for the copm CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

if TYPE_CHECKING:
    from copm.install import BatchResult
    from copm.registry import LockedPackage
    from copm.targets import ListedGroup
    from copm.types import InstallReport


def _short_integrity(package: LockedPackage) -> str:
    fingerprint = package.fingerprint
    if fingerprint is None:
        return ""
    return f"{fingerprint.scheme.value}:{fingerprint.value[:12]}"


TOOL_CHOICES = {
    "copilot": ["copilot"],
    "claude": ["claude"],
    "both": ["copilot", "claude"],
}


class ConsoleUI:
    """Text output for copm commands (non-interactive apart from init)."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize output.

        Args:
            console: Rich console to print to. Defaults to stdout.
        """
        self.console = console or Console()

    def show_success(self, message: str) -> None:
        """Show success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        """Show error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def show_warning(self, message: str) -> None:
        """Show warning message."""
        self.console.print(f"[yellow]![/yellow] {message}")

    def show_info(self, message: str) -> None:
        """Show info message."""
        self.console.print(f"[blue]i[/blue] {message}")

    def show_install_report(self, report: InstallReport) -> None:
        """Show what an install detected and wrote.

        Args:
            report: Result of the install.
        """
        targets = report.manifest.targets
        self.console.print(f"Detected: {report.name} ({len(targets)} target(s))")
        for target in targets:
            self.console.print(f"  \\[{target.type.value}] path={target.path}", highlight=False)
        for path in report.installed_paths:
            self.console.print(f"  → {path}", highlight=False)
        if not report.installed_paths:
            self.show_warning("Nothing to install for this scope")
        self.show_success(f"Installed {report.name}")
        if report.ledger_updated:
            self.show_info("Updated copm.json and copm.lock")

    def show_batch_result(self, result: BatchResult) -> None:
        """Show one entry of a batch install."""
        if result.report is not None:
            self.show_install_report(result.report)
        else:
            self.show_error(f"Failed to install {result.name}: {result.error}")

    def show_installed(self, groups: list[ListedGroup], scope_label: str) -> None:
        """Show installed artifacts grouped by destination.

        Args:
            groups: Listing from TargetInstaller.list_installed.
            scope_label: "local" or "global", for the empty message.
        """
        if not groups:
            self.console.print(f"[yellow]No {scope_label} packages installed[/yellow]")
            return

        for group in groups:
            title = f"{escape(f'[{group.label}]')}  {group.location}"
            table = Table(title=title, title_justify="left")
            table.add_column("Name", style="cyan")
            table.add_column("Description")
            for entry in group.entries:
                table.add_row(entry.name, entry.description)
            self.console.print(table)

    def show_locked(self, packages: list[LockedPackage]) -> None:
        """Show packages recorded in copm.lock."""
        if not packages:
            return

        table = Table(title="copm.lock")
        table.add_column("Name", style="cyan")
        table.add_column("Source")
        table.add_column("Targets")
        table.add_column("Integrity")
        for package in packages:
            source = package.source.repo
            if package.source.sub_path:
                source = f"{source}:{package.source.sub_path}"
            table.add_row(
                package.name,
                source,
                ", ".join(package.targets),
                _short_integrity(package),
            )
        self.console.print(table)

    def prompt_tools(self) -> list[str]:
        """Ask which tools the project uses.

        Returns:
            Selected tool names.
        """
        choice = Prompt.ask(
            "Which tools do you use?",
            choices=list(TOOL_CHOICES),
            default="copilot",
            console=self.console,
        )
        return TOOL_CHOICES[choice]
