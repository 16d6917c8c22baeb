"""
Backup management CLI commands.

projects_db.json is backed up automatically on every save; these commands
list, prune and restore those backups.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from folio.config.commands import get_setting
from folio.core.backup import cleanup_old_backups, list_backups, rollback_database
from folio.core.config import get_paths

console = Console()

DB_NAME = "projects_db"


def _format_age(days: float) -> str:
    if days < 1:
        hours = days * 24
        if hours < 1:
            return f"{int(hours * 60)}m ago"
        return f"{int(hours)}h ago"
    elif days < 7:
        return f"{int(days)}d ago"
    elif days < 30:
        return f"{int(days / 7)}w ago"
    else:
        return f"{int(days / 30)}mo ago"


@click.group()
def backup():
    """Manage projects database backups."""
    pass


@backup.command(name="list")
@click.option("-n", "--limit", type=int, default=10, help="Maximum number of backups to show")
@click.option("--all", "show_all", is_flag=True, help="Show all backups (no limit)")
def list_cmd(limit: int, show_all: bool):
    """List available backups, newest first."""
    backups = list_backups(get_paths().projects_backups, DB_NAME)
    if not backups:
        console.print(f"[dim]No backups found for {DB_NAME}[/dim]")
        return

    shown = backups if show_all else backups[:limit]

    table = Table(title=f"[bold]{DB_NAME}[/bold] ({len(backups)} backups)", header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Date", style="green")
    table.add_column("Age", style="yellow", justify="right")
    table.add_column("Size", style="blue", justify="right")
    table.add_column("Filename", style="dim")

    for i, info in enumerate(shown):
        table.add_row(
            str(i),
            info.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            _format_age(info.age_days),
            info.size_human,
            info.path.name,
        )

    console.print(table)
    if len(backups) > len(shown):
        console.print(f"  [dim]... and {len(backups) - len(shown)} older backups (use --all to see all)[/dim]")


@backup.command(name="clean")
@click.option("--days", type=int, default=None, help="Remove backups older than this many days")
@click.option("--keep", type=int, default=None, help="Always keep at least this many backups")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
def clean_cmd(days: int | None, keep: int | None, force: bool):
    """Remove old backups, keeping the newest --keep regardless of age."""
    if days is None:
        days = int(get_setting("backup.keep_days"))
    if keep is None:
        keep = int(get_setting("backup.keep_count"))

    backup_dir = get_paths().projects_backups
    candidates = [b for i, b in enumerate(list_backups(backup_dir, DB_NAME)) if i >= keep and b.age_days > days]
    if not candidates:
        console.print("[green]No old backups to clean up.[/green]")
        return

    console.print(f"[bold]Found {len(candidates)} backup(s) to delete[/bold]")
    if not force and not click.confirm("Proceed with deletion?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    removed = cleanup_old_backups(backup_dir, DB_NAME, keep_last=keep, keep_days=days)
    console.print(f"[green]Deleted {len(removed)} backup(s)[/green]")


@backup.command(name="rollback")
@click.option("-i", "--index", type=int, default=0, help="Backup to restore (0 = most recent)")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def rollback_cmd(ctx, index: int, force: bool):
    """Restore projects_db.json from a backup.

    The current file is backed up first, so a rollback can be undone.
    """
    paths = get_paths()
    backups = list_backups(paths.projects_backups, DB_NAME)
    if not backups:
        console.print(f"[red]No backups found for {DB_NAME}[/red]")
        return
    if index >= len(backups):
        console.print(f"[red]Backup index {index} out of range (only {len(backups)} backups)[/red]")
        return

    chosen = backups[index]
    console.print(Panel(
        f"[bold]Restore from:[/bold] {chosen.path.name}\n"
        f"[bold]Backup date:[/bold] {chosen.timestamp.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"[bold]Backup age:[/bold] {_format_age(chosen.age_days)}",
        title="Rollback Preview",
    ))

    if ctx is not None and getattr(ctx, "dry_run", False):
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
        return
    if not force and not click.confirm("Proceed with rollback?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    try:
        rollback_database(paths.projects_db, paths.projects_backups, index)
    except (FileNotFoundError, OSError) as e:
        console.print(f"[red]Rollback failed: {e}[/red]")
        raise click.Abort() from e
    console.print(f"[green]Restored {DB_NAME} from {chosen.path.name}[/green]")
