"""
FILE: later/repl/commands/spaces.py
PURPOSE: Space command handlers for REPL (spaces, use)
"""

from ..display import show_space
from ..main import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.controllers import SpacesController
from ...core.exceptions import LaterError
from ...core.models import Space
from ...formatting import ContentFormatter


def print_error(error: LaterError) -> None:
    console.print(f"[red]Error:[/red] {error}")


def handle_spaces_command(result: ParseResult) -> None:
    """
    Handle 'spaces' command - list spaces (current marked with *).

    Usage:
        spaces
        spaces --all
    """
    controller = SpacesController(include_archived=bool(result.flags.get("all")))
    try:
        if controller.state.has_error:
            print_error(controller.state.error)
            return
        spaces = controller.items
        if not spaces:
            console.print("[dim]No spaces found[/dim]")
            return
        current_id = repl_context.space.id if repl_context.space else None
        console.print(ContentFormatter.spaces_table(spaces, current_id))
    finally:
        controller.dispose()


def handle_use_command(result: ParseResult) -> None:
    """
    Handle 'use' command - switch the current space.

    Usage:
        use 2            (position in 'spaces')
        use 3f2a         (ID prefix)
    """
    if not result.args:
        console.print("[red]Error:[/red] Space required")
        console.print("[dim]Usage: use <# or id>[/dim]")
        return

    ref = result.args[0]
    try:
        spaces = service.list_spaces()
        if ref.isdigit() and 1 <= int(ref) <= len(spaces):
            space = spaces[int(ref) - 1]
        else:
            space = service.get_space(service.resolve_id(Space, ref))

        space = service.set_current_space(space.id)
        repl_context.enter_space(space)
        console.print(f"[green]✓[/green] Now using [cyan]{space.name}[/cyan]")
        show_space(repl_context, console)
    except LaterError as e:
        print_error(e)
