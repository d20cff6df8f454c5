"""
Backup Manager CLI - Command-line interface.

Create database dumps, apply retention and inspect the backup directory.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from backup_manager.backup import BackupOrchestrator, MysqldumpRunner
from backup_manager.config import LOG_LEVELS, BackupSettings
from backup_manager.core.exceptions import BackupManagerError, format_exception
from backup_manager.retention import PolicyFactory, scan_artifacts

app = typer.Typer(
    name="backup-manager",
    help="Backup Manager - MySQL dumps with bounded retention",
    no_args_is_help=True,
)
console = Console()


def _fail(error: Exception) -> None:
    console.print(f"[red]{escape(format_exception(error))}[/red]")
    raise typer.Exit(1)


def _load_settings() -> BackupSettings:
    try:
        return BackupSettings.from_env()
    except BackupManagerError as e:
        _fail(e)


def _format_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size_bytes} B"


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Logging level (default: BM_LOG_LEVEL or WARNING)"
    ),
):
    """Configure logging for every command."""
    level = (log_level or os.getenv("BM_LOG_LEVEL") or "WARNING").upper()
    if level not in LOG_LEVELS:
        console.print(f"[red]Invalid log level: {level}[/red]")
        raise typer.Exit(1)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@app.command()
def backup(
    database: str = typer.Argument(..., help="Database to dump"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Database user"),
    password: Optional[str] = typer.Option(
        None, "--password", "-p", help="Database password (prompted if omitted)"
    ),
    storage: Optional[Path] = typer.Option(None, "--storage", "-s", help="Backup directory"),
    policy: Optional[str] = typer.Option(
        None, "--policy", help="Retention policy: count_limit, age_limit or size_limit"
    ),
    keep: Optional[int] = typer.Option(
        None, "--keep", "-k", help="Retention threshold (files, days or MB)"
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Database host"),
    port: Optional[int] = typer.Option(None, "--port", help="Database port"),
    option: Optional[List[str]] = typer.Option(
        None, "--option", "-o", help="Extra mysqldump flag (repeatable)"
    ),
):
    """Dump a database and apply the retention policy."""
    settings = _load_settings()

    username = user or settings.db_user
    if not username:
        console.print("[red]A database user is required (--user or BM_DB_USER)[/red]")
        raise typer.Exit(1)

    if password is None:
        if settings.db_password is not None:
            password = settings.db_password.get_secret_value()
        else:
            password = typer.prompt("Password", hide_input=True, default="", show_default=False)

    storage_path = storage or settings.storage_path
    policy_kind = policy if policy is not None else settings.retention_kind
    policy_value = keep if keep is not None else settings.retention_value

    try:
        orchestrator = BackupOrchestrator(
            storage_path,
            policy_kind,
            policy_value,
            host=host or settings.db_host,
            port=port or settings.db_port,
            dump_runner=MysqldumpRunner(settings.mysqldump_path),
        )
        artifact = orchestrator.run_backup(username, password, database, option or [])
    except BackupManagerError as e:
        _fail(e)

    console.print(f"[green]Backup written:[/green] {artifact}")


@app.command()
def cleanup(
    policy: Optional[str] = typer.Option(
        None, "--policy", help="Retention policy: count_limit, age_limit or size_limit"
    ),
    keep: Optional[int] = typer.Option(
        None, "--keep", "-k", help="Retention threshold (files, days or MB)"
    ),
    storage: Optional[Path] = typer.Option(None, "--storage", "-s", help="Backup directory"),
):
    """Apply a retention policy without taking a new backup."""
    settings = _load_settings()
    storage_path = storage or settings.storage_path
    policy_kind = policy if policy is not None else settings.retention_kind
    policy_value = keep if keep is not None else settings.retention_value

    try:
        retention = PolicyFactory.create(policy_kind, policy_value)
    except BackupManagerError as e:
        _fail(e)

    if retention is None:
        console.print("[yellow]No retention policy configured; nothing to do[/yellow]")
        return

    result = retention.cleanup(storage_path)

    table = Table(title=f"Cleanup ({result.policy.value}, threshold {retention.threshold})")
    table.add_column("Scanned", justify="right")
    table.add_column("Deleted", justify="right", style="red")
    table.add_column("Retained", justify="right", style="green")
    table.add_column("Freed", justify="right")
    table.add_row(
        str(result.scanned_count),
        str(result.deleted_count),
        str(result.retained_count),
        _format_size(result.freed_bytes),
    )
    console.print(table)

    for error in result.errors:
        console.print(f"[red]{escape(error)}[/red]")
    if not result.success:
        raise typer.Exit(1)


@app.command("list")
def list_cmd(
    storage: Optional[Path] = typer.Option(None, "--storage", "-s", help="Backup directory"),
):
    """List backup artifacts, newest first."""
    settings = _load_settings()
    storage_path = storage or settings.storage_path

    if not storage_path.is_dir():
        console.print(f"[red]Path does not exist: {storage_path}[/red]")
        raise typer.Exit(1)

    artifacts = scan_artifacts(storage_path)
    if not artifacts:
        console.print("[yellow]No backups found[/yellow]")
        return

    table = Table(title=f"Backups ({len(artifacts)})")
    table.add_column("File", style="cyan")
    table.add_column("Database")
    table.add_column("Modified")
    table.add_column("Size", justify="right")

    total = 0
    for artifact in artifacts:
        total += artifact.size_bytes
        table.add_row(
            artifact.name,
            artifact.database or "-",
            datetime.fromtimestamp(artifact.modified_at).strftime("%Y-%m-%d %H:%M:%S"),
            _format_size(artifact.size_bytes),
        )

    console.print(table)
    console.print(f"\nTotal size: {total:,} bytes")


@app.command()
def version():
    """Show Backup Manager version."""
    from backup_manager import __version__

    console.print(
        Panel.fit(f"[bold blue]Backup Manager[/bold blue] v{__version__}")
    )


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
