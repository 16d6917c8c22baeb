"""CLI commands for the portfolio project grid."""

from __future__ import annotations

import json
import sys
from typing import Any

import click
from rich.console import Console

from folio.core.errors import Outcome
from folio.projects.records import RecordId, parse_project_form

console = Console()


def _get_dry_run(ctx: Any) -> bool:
    return ctx.dry_run if ctx else False


def parse_record_id(value: str) -> RecordId:
    """Numeric ids are local store ids; anything else is a document key."""
    return int(value) if value.isdigit() else value


def _open(renderer: Any = None) -> Any:
    from folio.app import build_app
    from folio.projects.render import NullRenderer

    app = build_app(renderer or NullRenderer())
    outcome = app.start()
    if not outcome.ok:
        console.print(f"[yellow]WARNING: {outcome.message}[/yellow]")
    return app


def _report(outcome: Outcome) -> None:
    """Print an outcome; exit with status 1 if it failed."""
    if outcome.ok:
        console.print(f"[green]{outcome.message or 'Done'}[/green]")
        return
    console.print(f"[red]ERROR ({outcome.reason}): {outcome.message}[/red]")
    if outcome.reason == "permission_denied":
        console.print("[dim]Run 'folio auth login' first.[/dim]")
    sys.exit(1)


@click.group(name="projects")
def projects() -> None:
    """Manage the project grid.

    List and filter projects; add, edit and delete them after 'folio auth login'.
    """
    pass


@projects.command(name="list")
@click.option("-f", "--filter", "filter_tag", default="all", help="Category tag to show (default: all)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_projects(filter_tag: str, as_json: bool) -> None:
    """List projects, optionally filtered by category."""
    from folio.projects.render import TableRenderer

    if as_json:
        app = _open()
        app.select_filter(filter_tag)
        view = app.view()
        click.echo(json.dumps([r.to_dict() for r in view.visible], indent=2, ensure_ascii=False))
        return

    renderer = TableRenderer(console)
    app = _open()
    app.renderer = renderer
    app.select_filter(filter_tag)


@projects.command()
@click.argument("record_id")
def show(record_id: str) -> None:
    """Show one project."""
    from rich.panel import Panel
    from rich.syntax import Syntax

    app = _open()
    outcome = app.get_project(parse_record_id(record_id))
    if not outcome.ok:
        _report(outcome)
        return

    syntax = Syntax(json.dumps(outcome.value.to_dict(), indent=2, ensure_ascii=False), "json", theme="monokai")
    console.print(Panel(syntax, title=f"Project #{record_id}"))


@projects.command()
def categories() -> None:
    """List the category tags usable with --filter."""
    app = _open()
    tags = app.store.list_categories()
    if not tags:
        console.print("[yellow]No categories yet[/yellow]")
        return
    console.print("all")
    for tag in tags:
        console.print(tag)


@projects.command()
def stats() -> None:
    """Show project statistics."""
    from rich.panel import Panel

    app = _open()
    s = app.store.stats()
    per_category = ", ".join(f"{tag} ({n})" for tag, n in s["categories"].items()) or "none"
    content = f"""[cyan]Total projects:[/cyan] {s['total']}
[cyan]Categories:[/cyan] {per_category}
[cyan]Uncategorized:[/cyan] {s['uncategorized']}"""
    console.print(Panel(content, title="Project Stats"))


@projects.command()
def seed() -> None:
    """Load projects, seeding an empty store from projects.seed."""
    app = _open()
    console.print(f"[green]{len(app.store)} projects loaded[/green]")


@projects.command()
def fields() -> None:
    """List editable project fields."""
    from rich.table import Table

    from folio.projects.field_ops import FIELD_SCHEMA

    table = Table(title="Project fields")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Description")
    for name, field_def in FIELD_SCHEMA.items():
        table.add_row(name, field_def.field_type.value, field_def.description)
    console.print(table)


@projects.command()
@click.option("--title", required=True, help="Project title")
@click.option("--headline", default="", help="One-line summary")
@click.option("--overview", default="", help="Longer description")
@click.option("--image", "image_src", default="", help="Image path or URL")
@click.option("--tech", default="", help="Comma-separated tech stack")
@click.option("--category", default="", help="Comma-separated category tags")
@click.option("--github", default="", help="Repository URL")
@click.option("--site", default="", help="Live site URL")
@click.pass_obj
def add(
    ctx,
    title: str,
    headline: str,
    overview: str,
    image_src: str,
    tech: str,
    category: str,
    github: str,
    site: str,
) -> None:
    """Add a project."""
    data = parse_project_form(
        {
            "title": title,
            "headline": headline,
            "overview": overview,
            "imageSrc": image_src,
            "techStack": tech,
            "category": category,
            "github": github,
            "site": site,
        }
    )

    if _get_dry_run(ctx):
        console.print(f"[yellow]Would add:[/yellow] {json.dumps(data, ensure_ascii=False)}")
        return

    outcome = _open().submit_project(data)
    _report(outcome)
    if outcome.ok:
        console.print(f"  id: [cyan]{outcome.value.id}[/cyan]")


@projects.command(name="set")
@click.argument("record_id")
@click.argument("field")
@click.argument("value")
@click.pass_obj
def set_field(ctx, record_id: str, field: str, value: str) -> None:
    """Set one field of a project.

    \b
    Examples:
        folio projects set 3 title "New title"
        folio projects set 3 category "web, mobile"
        folio projects set 3 links.site https://example.com
    """
    from folio.projects.field_ops import build_patch, print_change

    app = _open()
    rid = parse_record_id(record_id)
    record = app.store.get_by_id(rid)
    if record is None:
        console.print(f"[yellow]No project with id {record_id}; nothing changed[/yellow]")
        return

    try:
        patch, change = build_patch(record, field, value)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    print_change(change, console)
    if _get_dry_run(ctx):
        console.print("[yellow]Dry run - no changes saved.[/yellow]")
        return
    _report(app.submit_project(patch, rid))


@projects.command()
@click.argument("record_id")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def delete(ctx, record_id: str, yes: bool) -> None:
    """Delete a project."""
    from folio.core.prompts import confirm

    if _get_dry_run(ctx):
        console.print(f"[yellow]Would delete project {record_id}[/yellow]")
        return
    if not confirm(f"Delete project {record_id}?", auto_yes=yes):
        console.print("[yellow]Cancelled[/yellow]")
        return
    _report(_open().delete_project(parse_record_id(record_id)))


@projects.command()
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def clear(ctx, yes: bool) -> None:
    """Delete every project."""
    from folio.core.prompts import confirm

    if _get_dry_run(ctx):
        console.print("[yellow]Would delete all projects[/yellow]")
        return
    if not confirm("Delete ALL projects?", auto_yes=yes):
        console.print("[yellow]Cancelled[/yellow]")
        return
    _report(_open().clear_projects())
