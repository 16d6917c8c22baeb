"""
Main CLI dispatcher for folio.

Usage:
    folio init                        # Initialize .folio/ directory
    folio auth [login|logout|status]
    folio projects [list|add|set|delete|clear|...]
    folio config [show|get|set|reset]
    folio backup [list|clean|rollback]
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from folio import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="folio")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without making changes")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Portfolio site project manager.

    Keep the project grid's data, filter it by category, and edit it as admin.
    """
    setup_logging(verbose)
    ctx.obj = Context(verbose=verbose, dry_run=dry_run)

    if dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")


@main.command()
@click.option("--force", "-f", is_flag=True, help="Reinitialize an existing .folio/ directory")
@click.option("--seed", help="Seed projects.json path or URL to record in config")
@click.pass_obj
def init(ctx, force: bool, seed: str | None) -> None:
    """Initialize the .folio/ directory in the current site."""
    from pathlib import Path

    from folio.core.config import DATA_DIR_NAME, get_paths

    dry_run = ctx.dry_run if ctx else False
    site_root = Path.cwd()
    paths = get_paths(site_root)

    if paths.data_dir.exists() and not force:
        console.print(f"[yellow]{DATA_DIR_NAME}/ directory already exists at {paths.data_dir}[/yellow]")
        console.print("[dim]Use --force to reinitialize.[/dim]")
        return

    console.print(f"[cyan]Initializing {DATA_DIR_NAME}/ directory at {site_root}[/cyan]")

    for dir_path in (paths.data_dir, paths.projects_backups):
        if not dry_run:
            dir_path.mkdir(parents=True, exist_ok=True)
        console.print(f"  [green]Created[/green] {dir_path.relative_to(site_root)}")

    if seed and not dry_run:
        import yaml

        paths.config_file.write_text(yaml.dump({"projects": {"seed": seed}}, default_flow_style=False))
        console.print(f"  [green]Set[/green] projects.seed = {seed}")

    gitignore_path = site_root / ".gitignore"
    gitignore_entry = f"{DATA_DIR_NAME}/session.json"
    if gitignore_path.exists() and gitignore_entry not in gitignore_path.read_text():
        if not dry_run:
            with open(gitignore_path, "a") as f:
                f.write(f"\n# folio admin session\n{gitignore_entry}\n")
        console.print(f"  [green]Updated[/green] .gitignore with {gitignore_entry}")

    console.print()
    if dry_run:
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
    else:
        console.print(f"[green]Done![/green] {DATA_DIR_NAME}/ directory initialized.")


# Command groups register after main is defined
from folio.auth.commands import auth  # noqa: E402
from folio.backup.commands import backup  # noqa: E402
from folio.config.commands import config  # noqa: E402
from folio.projects.commands import projects  # noqa: E402

main.add_command(projects)
main.add_command(auth)
main.add_command(config)
main.add_command(backup)


if __name__ == "__main__":
    main()
