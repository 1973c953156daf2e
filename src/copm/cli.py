"""CLI commands using Typer."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from copm.context import AppContext

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from copm import __version__
from copm.console import TOOL_CHOICES, ConsoleUI
from copm.context import create_context
from copm.errors import ConfigAlreadyExists, CopmError
from copm.registry import ProjectConfig
from copm.types import Scope

app = typer.Typer(
    name="copm",
    help="Package manager for AI coding assistants",
    no_args_is_help=True,
)

ui = ConsoleUI()

# Failures that end a command with a one-line message and exit status 1
HANDLED_ERRORS = (CopmError, OSError, ValidationError)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        ui.console.print(f"copm v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Package manager for AI coding assistants."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=ui.console, show_path=False)],
        )


def _fail(error: Exception) -> typer.Exit:
    ui.show_error(str(error))
    return typer.Exit(1)


# ============================================================================
# Install Commands
# ============================================================================


def _install_all(ctx: AppContext) -> None:
    """Install every dependency from copm.json, reporting each outcome."""
    config = ctx.registry.load_config()
    if not config.dependencies:
        ui.show_info("No dependencies in copm.json.")
        return

    ui.console.print(f"Installing {len(config.dependencies)} package(s) from copm.json...")
    failures = 0
    for result in ctx.installer.iter_install_all():
        ui.console.print()
        ui.console.print(f"Fetching {result.spec}...", highlight=False)
        ui.show_batch_result(result)
        if not result.success:
            failures += 1

    ui.console.print()
    if failures:
        ui.show_warning(f"Done with {failures} failure(s).")
    else:
        ui.show_success("Done.")


@app.command()
def install(
    package: Annotated[
        str | None,
        typer.Argument(
            help="Package specifier (owner/repo or owner/repo:subpath). "
            "Omit to install all dependencies from copm.json."
        ),
    ] = None,
    global_: Annotated[
        bool,
        typer.Option("--global", "-g", help="Install to ~/.copilot/ or ~/.claude/"),
    ] = False,
    _context=None,
) -> None:
    """Install a package from GitHub (or all dependencies from copm.json)."""
    ctx = _context or create_context()

    try:
        if package is None:
            _install_all(ctx)
            return
        ui.console.print(f"Fetching {package}...", highlight=False)
        report = ctx.installer.install_package(package, Scope.from_flag(global_))
    except HANDLED_ERRORS as e:
        raise _fail(e) from e

    ui.show_install_report(report)


@app.command()
def uninstall(
    package: Annotated[str, typer.Argument(help="Package name to uninstall")],
    global_: Annotated[
        bool, typer.Option("--global", "-g", help="Uninstall from the global location")
    ] = False,
    _context=None,
) -> None:
    """Uninstall a package."""
    ctx = _context or create_context()

    try:
        report = ctx.installer.uninstall_package(package, Scope.from_flag(global_))
    except HANDLED_ERRORS as e:
        raise _fail(e) from e

    for path in report.removed_paths:
        ui.console.print(f"  - {path}", highlight=False)
    ui.show_success(f"Uninstalled {package}")
    if report.ledger_updated:
        ui.show_info("Updated copm.json and copm.lock")


@app.command("list")
def list_packages(
    global_: Annotated[
        bool, typer.Option("--global", "-g", help="List globally installed packages")
    ] = False,
    _context=None,
) -> None:
    """List installed packages."""
    ctx = _context or create_context()
    scope = Scope.from_flag(global_)

    try:
        groups = ctx.targets.list_installed(scope)
        locked = [] if global_ else ctx.registry.load_lock().packages
    except HANDLED_ERRORS as e:
        raise _fail(e) from e

    ui.show_installed(groups, scope.value)
    ui.show_locked(locked)


# ============================================================================
# Config Commands
# ============================================================================


@app.command()
def init(
    tools: Annotated[
        str | None,
        typer.Option("--tools", "-t", help="Tools to install for: copilot, claude or both"),
    ] = None,
    _context=None,
) -> None:
    """Initialize copm.json in the current directory."""
    ctx = _context or create_context()

    try:
        if ctx.registry.config_exists():
            raise ConfigAlreadyExists(ctx.registry.project_root / "copm.json")
        if tools is None:
            selected = ui.prompt_tools()
        elif tools in TOOL_CHOICES:
            selected = TOOL_CHOICES[tools]
        else:
            ui.show_error(f"Unknown tools choice: {tools}. Use one of: {', '.join(TOOL_CHOICES)}")
            raise typer.Exit(1)
        ctx.registry.save_config(ProjectConfig(tools=selected))
    except HANDLED_ERRORS as e:
        raise _fail(e) from e

    ui.show_success("Created copm.json")
    ui.show_info(f"Tools: {', '.join(selected)}")


if __name__ == "__main__":
    app()
