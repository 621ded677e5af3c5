"""
FILE: later/repl/display.py
PURPOSE: Rendering helpers for REPL views
EXPORTS:
  - show_space(context, console, kind) - Tables for the space's sections
  - show_items(context, console) - Table for the open container
  - report_state(controller, console) -> bool
DEPENDENCIES:
  - rich (formatted output)
  - later.formatting (tables)
NOTES:
  - Views always render the controller's cached value; a stale value is
    shown with a dim marker rather than hidden
"""

from typing import Optional

from rich.console import Console

from ..core.controllers import PartitionController
from ..core.models import ListModel
from ..formatting import ContentFormatter


def report_state(controller: PartitionController, console: Console) -> bool:
    """
    Print the controller's error, if any.

    Returns:
        True if the last call succeeded
    """
    state = controller.state
    if state.has_error:
        console.print(f"[red]Error:[/red] {state.error}")
        if state.is_stale:
            console.print("[dim](showing last loaded data; 'refresh' to reload)[/dim]")
        return False
    return True


def show_space(context, console: Console, kind: Optional[str] = None) -> None:
    """
    Render the current space: every section, or one ("notes", "todos", "lists").
    """
    sections = [
        ("notes", context.notes, ContentFormatter.notes_table, "No notes"),
        ("todos", context.todo_lists, ContentFormatter.todo_lists_table, "No todo lists"),
        ("lists", context.lists, ContentFormatter.lists_table, "No lists"),
    ]

    for name, controller, make_table, empty in sections:
        if kind and name != kind:
            continue
        report_state(controller, console)
        items = controller.items
        if items:
            console.print(make_table(items))
        else:
            console.print(f"[dim]{empty}[/dim]")


def show_items(context, console: Console) -> None:
    """Render the open todo list or list."""
    container = context.container
    controller = context.items
    report_state(controller, console)

    items = controller.items
    if not items:
        console.print(f"[dim]{container.name} is empty[/dim]")
        return

    if isinstance(container, ListModel):
        console.print(ContentFormatter.list_items_table(items, container.style, title=container.name))
    else:
        console.print(ContentFormatter.todo_items_table(items, title=container.name))
