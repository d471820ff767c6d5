"""Typer-based CLI for RepoBee Desk settings and operations."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from .commands import ExternalOperationFailure, LocalBackend, require_success
from .location import CONFIG_DIR_ENV
from .logs import configure_logging
from .models import OperationResult
from .session import SettingsSession
from .settings import SettingsError
from .store import SettingsStore

app = typer.Typer(help="Manage RepoBee Desk settings, profiles and course operations.")
profile_app = typer.Typer(help="Save, load and delete named settings profiles.")
app.add_typer(profile_app, name="profile")

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def _log_sink(message) -> None:
    err_console.print(escape(str(message).rstrip("\n")))


def _configure_logging(backend: LocalBackend, verbose: bool) -> None:
    logger.remove()
    logger.add(_log_sink, level="WARNING", format="{message}")
    result = backend.load_with_diagnostics()
    configure_logging(result.settings.common, sink=_log_sink, level="DEBUG" if verbose else "WARNING")


def _backend(ctx: typer.Context) -> LocalBackend:
    return ctx.obj


def _fail(exc: SettingsError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    for detail in getattr(exc, "errors", []):
        console.print(f"  - {escape(detail)}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", envvar=CONFIG_DIR_ENV, help="Directory holding the location and profile files"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug and info log messages"),
) -> None:
    """Entry point shared by all commands."""

    backend = LocalBackend(SettingsStore(config_dir))
    _configure_logging(backend, verbose)
    ctx.obj = backend


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the location of the active settings file."""

    try:
        typer.echo(str(_backend(ctx).locate_path()))
    except SettingsError as exc:
        _fail(exc)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the active settings document as JSON.

    Fields that fail validation are shown with their defaults; the problems
    are logged as warnings.
    """

    settings = _backend(ctx).load()
    typer.echo(json.dumps(settings.to_document(), indent=2, ensure_ascii=False))


@app.command("set")
def set_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Settings field name"),
    value: str = typer.Argument(..., help="New value; booleans and numbers are parsed"),
) -> None:
    """Change one field of the active settings document and save it."""

    backend = _backend(ctx)
    try:
        settings = backend.load().replace(**{key: value})
        backend.save(settings)
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Set {escape(key)}.[/green]")


@app.command()
def reset(ctx: typer.Context) -> None:
    """Overwrite the active settings file with defaults."""

    backend = _backend(ctx)
    try:
        backend.reset_settings()
        location = backend.locate_path()
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Settings reset to defaults at {escape(str(location))}[/green]")


@app.command("reset-location")
def reset_location(ctx: typer.Context) -> None:
    """Point the active settings file back at the default location."""

    try:
        location = _backend(ctx).reset_settings_location()
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Settings location reset to {escape(str(location))}[/green]")


@app.command()
def schema(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", help="Write the schema to a file instead of stdout"),
) -> None:
    """Print the JSON Schema of the settings document."""

    text = json.dumps(_backend(ctx).get_schema(), indent=2)
    if out is None:
        typer.echo(text)
        return
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Error:[/red] Cannot write {escape(str(out))}: {escape(str(exc))}")
        raise typer.Exit(code=1)
    console.print(f"[green]Wrote schema to {escape(str(out))}[/green]")


@app.command("import")
def import_command(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Settings JSON file to import"),
) -> None:
    """Validate SOURCE and make it the active settings."""

    backend = _backend(ctx)
    try:
        settings = backend.import_settings(source)
        backend.save(settings)
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Settings imported from {escape(str(source))}[/green]")


@app.command("export")
def export_command(
    ctx: typer.Context,
    target: Path = typer.Argument(..., help="Destination JSON file"),
) -> None:
    """Write the active settings to TARGET."""

    backend = _backend(ctx)
    try:
        backend.export_settings(backend.load(), target)
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Settings exported to {escape(str(target))}[/green]")


@profile_app.command("list")
def profile_list(ctx: typer.Context) -> None:
    """List saved profiles; the active one is marked with '*'."""

    backend = _backend(ctx)
    try:
        names = backend.list_profiles()
        active = backend.get_active_profile()
    except SettingsError as exc:
        _fail(exc)
    if not names:
        console.print("[yellow]No profiles saved.[/yellow]")
        return
    for name in names:
        typer.echo(f"{'*' if name == active else ' '} {name}")


@profile_app.command("save")
def profile_save(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    """Save the active settings under NAME."""

    backend = _backend(ctx)
    try:
        backend.save_profile(name, backend.load())
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Saved profile {escape(name.strip())}[/green]")


@profile_app.command("load")
def profile_load(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    """Activate profile NAME and copy it into the active settings file."""

    backend = _backend(ctx)
    try:
        settings = backend.load_profile(name)
        backend.save(settings)
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Loaded profile {escape(name)}[/green]")


@profile_app.command("delete")
def profile_delete(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    """Delete profile NAME."""

    try:
        _backend(ctx).delete_profile(name)
    except SettingsError as exc:
        _fail(exc)
    console.print(f"[green]Deleted profile {escape(name)}[/green]")


@profile_app.command("active")
def profile_active(ctx: typer.Context) -> None:
    """Print the active profile name, if any."""

    try:
        active = _backend(ctx).get_active_profile()
    except SettingsError as exc:
        _fail(exc)
    if active is None:
        console.print("[yellow]No active profile.[/yellow]")
        return
    typer.echo(active)


def _run(ctx: typer.Context, action: Callable[[SettingsSession], OperationResult]) -> None:
    session = SettingsSession(_backend(ctx))
    result = action(session)
    lines: List[str] = session.transcript.lines
    for line in lines:
        style = "green" if line.startswith("✓") else "red" if line.startswith("✗") else None
        console.print(escape(line), style=style)
    try:
        require_success(result)
    except ExternalOperationFailure:
        raise typer.Exit(code=2)


@app.command("verify-course")
def verify_course(ctx: typer.Context) -> None:
    """Check the configured LMS course."""

    _run(ctx, SettingsSession.verify_lms_course)


@app.command()
def generate(ctx: typer.Context) -> None:
    """Generate roster and student info files from the LMS course."""

    _run(ctx, SettingsSession.generate_lms_files)


@app.command("verify-host")
def verify_host(ctx: typer.Context) -> None:
    """Check the Git hosting configuration."""

    _run(ctx, SettingsSession.verify_host_config)


@app.command()
def setup(ctx: typer.Context) -> None:
    """Create student repositories from the assignment templates."""

    _run(ctx, SettingsSession.setup_repos)


@app.command("clone")
def clone(ctx: typer.Context) -> None:
    """Clone student repositories into the target folder."""

    _run(ctx, SettingsSession.clone_repos)


if __name__ == "__main__":
    app()
