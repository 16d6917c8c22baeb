"""
Interactive CLI prompts.
"""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, Prompt

console = Console()


def prompt_user(message: str, default: str | None = None, secret: bool = False) -> str:
    """Prompt for text input.

    Args:
        message: Prompt message
        default: Value used when the user just presses Enter
        secret: Hide typed characters (passwords)
    """
    result = Prompt.ask(message, default=default, password=secret)
    return result if result is not None else ""


def confirm(message: str, default: bool = False, auto_yes: bool = False) -> bool:
    """Ask for yes/no confirmation.

    Args:
        message: Question to ask
        default: Default value if user presses Enter
        auto_yes: If True, return True without prompting
    """
    if auto_yes:
        console.print(f"{message} [auto-yes]")
        return True

    return bool(Confirm.ask(message, default=default))
