"""
FILE: later/cli/main.py
PURPOSE: Typer-based CLI for one-shot commands
EXPORTS:
  - app (Typer application)
  - main() (entry point)
  - Sub-apps: space, note, todo (todo lists), task (todo items),
    list (custom lists), item (list items)
  - Top-level: version, repl, search, compact
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - later.core.service (business logic)
  - later.core.config, later.logging_setup
  - later.repl (interactive mode)
NOTES:
  - All listing and mutating commands support --json
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - IDs may be shortened to any unique prefix
  - Running `later` with no command launches the REPL
"""

import sys

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console

from ..core import service
from ..core.config import load_settings
from ..core.exceptions import LaterError
from ..logging_setup import configure_logging

# Typer app setup
app = typer.Typer(
    name="later",
    help="Spaces, notes, todo lists and custom lists in your terminal",
    add_completion=False,
)

space_app = typer.Typer(name="space", help="Space management commands")
note_app = typer.Typer(name="note", help="Note commands")
todo_app = typer.Typer(name="todo", help="Todo list commands")
task_app = typer.Typer(name="task", help="Todo item commands")
list_app = typer.Typer(name="list", help="Custom list commands")
item_app = typer.Typer(name="item", help="List item commands")

app.add_typer(space_app, name="space")
app.add_typer(note_app, name="note")
app.add_typer(todo_app, name="todo")
app.add_typer(task_app, name="task")
app.add_typer(list_app, name="list")
app.add_typer(item_app, name="item")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


@app.callback(invoke_without_command=True)
def default_command(ctx: typer.Context):
    """
    Load settings, set up logging and first-run data.

    If no command is given (just 'later'), launch the REPL.
    """
    try:
        settings = load_settings()
    except SettingsValidationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    configure_logging(settings.log_level)

    if ctx.invoked_subcommand == "version":
        return

    try:
        service.seed_if_first_run()
    except LaterError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        repl_main()


# Import command modules to register commands with the apps
from .commands import (  # noqa: E402
    spaces,
    notes,
    todos,
    lists,
    system,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
