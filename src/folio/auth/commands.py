"""CLI commands for admin login."""

from __future__ import annotations

import sys

import click
from rich.console import Console

console = Console()


@click.group(name="auth")
def auth() -> None:
    """Admin login.

    Adding, editing and deleting projects requires an admin session.
    """
    pass


@auth.command()
@click.option("--user", help="Admin username (defaults to auth.username)")
@click.option("--password", help="Admin password (prompted if omitted)")
def login(user: str | None, password: str | None) -> None:
    """Log in as the site admin."""
    from folio.app import build_app
    from folio.config.commands import get_setting
    from folio.core.prompts import prompt_user

    app = build_app()
    current = app.authenticator.current_session()
    if current:
        console.print(f"[dim]Already logged in as {current}[/dim]")
        return

    if user is None:
        user = prompt_user("Username", default=get_setting("auth.username"))
    if password is None:
        password = prompt_user("Password", secret=True)

    outcome = app.login(user, password)
    if not outcome.ok:
        console.print(f"[red]Login failed: {outcome.message}[/red]")
        sys.exit(1)

    console.print(f"[green]Logged in as {outcome.value}[/green]")
    if not get_setting("auth.persist_session"):
        console.print("[dim]auth.persist_session is off; the session ends with this command.[/dim]")


@auth.command()
def logout() -> None:
    """End the admin session."""
    from folio.app import build_app

    app = build_app()
    if not app.authenticator.current_session():
        console.print("[dim]Not logged in[/dim]")
        return
    app.logout()
    console.print("[green]Logged out[/green]")


@auth.command()
def status() -> None:
    """Show whether an admin session is active."""
    from folio.app import build_app

    app = build_app()
    user = app.authenticator.current_session()
    if user:
        console.print(f"[green]Logged in as {user}[/green]")
    else:
        console.print("[yellow]Logged out[/yellow]")


@auth.command(name="hash-password")
@click.option("--password", help="Password to hash (prompted if omitted)")
@click.option("--save", is_flag=True, help="Store the hash as auth.password_hash")
def hash_password_cmd(password: str | None, save: bool) -> None:
    """Hash an admin password for the auth.password_hash setting."""
    from folio.auth.authenticator import hash_password
    from folio.config.commands import set_config_value
    from folio.core.prompts import prompt_user

    if password is None:
        password = prompt_user("New password", secret=True)
    if not password:
        console.print("[red]Password must not be empty[/red]")
        sys.exit(1)

    hashed = hash_password(password)
    if save:
        set_config_value("auth.password_hash", hashed)
        console.print("[green]Saved auth.password_hash[/green]")
    else:
        click.echo(hashed)
