"""Terminal rendering of the project grid."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from folio.projects.records import ProjectRecord

EMPTY_MESSAGE = "No projects to display."


def _truncate(text: str, max_len: int) -> str:
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


class TableRenderer:
    """Draws visible projects as a rich table.

    When admin controls are shown, an extra column lists the edit and delete
    commands for each row.
    """

    def __init__(self, console: Console, title: str = "Projects"):
        self.console = console
        self.title = title
        self.renders = 0

    def render(self, visible: tuple[ProjectRecord, ...], show_admin_controls: bool) -> None:
        self.renders += 1
        if not visible:
            self.console.print(f"[yellow]{EMPTY_MESSAGE}[/yellow]")
            return

        table = Table(title=f"{self.title} ({len(visible)})")
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("Headline", style="dim")
        table.add_column("Tags", style="green")
        table.add_column("Site", style="blue")
        if show_admin_controls:
            table.add_column("Admin", style="magenta")

        for record in visible:
            row = [
                str(record.id),
                _truncate(record.title, 40),
                _truncate(record.headline, 50),
                " ".join(f"#{tag}" for tag in record.category),
                record.links.site,
            ]
            if show_admin_controls:
                row.append(f"set {record.id} | delete {record.id}")
            table.add_row(*row)

        self.console.print(table)


class NullRenderer:
    """Discards renders; used by commands that print their own output."""

    def render(self, visible: tuple[ProjectRecord, ...], show_admin_controls: bool) -> None:
        pass
