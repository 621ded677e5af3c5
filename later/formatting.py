"""
FILE: later/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - ContentFormatter: Rich tables and JSON for every content type
  - parse_id_list: Parse comma-separated IDs
  - short_id: Abbreviated ID for display
  - item_marker: Prefix for a list item in its list's style
  - print_json: Print JSON without wrapping or markup
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - later.core.models
NOTES:
  - Centralized formatting logic for consistency
  - Used by both CLI and REPL
  - Tables show short IDs; any unique prefix is accepted as input
"""

import json
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .core.constants import LIST_STYLE_CHECKBOXES, LIST_STYLE_NUMBERED, LIST_STYLE_SIMPLE
from .core.models import ListItem, ListModel, Note, SearchResult, Space, TodoItem, TodoList

SHORT_ID_LENGTH = 8

PRIORITY_STYLES = {
    "high": "red",
    "medium": "yellow",
    "low": "dim",
}


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LENGTH]


def parse_id_list(text: str) -> List[str]:
    """
    Parse comma-separated IDs.

    Args:
        text: e.g. "a1b2, c3d4,e5f6"

    Returns:
        IDs in the given order, whitespace trimmed, empties dropped
    """
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def print_json(console: Console, text: str) -> None:
    """Print JSON verbatim (no wrapping, markup or highlighting)."""
    console.print(text, soft_wrap=True, markup=False, highlight=False)


def item_marker(item, style: str, position: int) -> str:
    """Prefix for an item shown in a list of the given style."""
    if style == LIST_STYLE_NUMBERED:
        return f"{position}."
    if style == LIST_STYLE_CHECKBOXES:
        return "[x]" if getattr(item, "is_checked", False) else "[ ]"
    if style == LIST_STYLE_SIMPLE:
        return ""
    return "•"


def _date(value: Optional[str]) -> str:
    return value.split("T")[0] if value else ""


def _progress(done: int, total: int) -> str:
    return f"{done}/{total}" if total else "-"


class ContentFormatter:
    """Centralized display formatting for spaces and their content."""

    @staticmethod
    def spaces_table(spaces: Sequence[Space], current_id: Optional[str] = None) -> Table:
        table = Table(title="Spaces", show_header=True, header_style="bold cyan")
        table.add_column("", width=1)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Items", justify="right")
        table.add_column("Created", style="dim")

        for space in spaces:
            marker = "[green]*[/green]" if space.id == current_id else ""
            name = f"{space.icon} {space.name}" if space.icon else space.name
            if space.is_archived:
                name = f"[dim]{name} (archived)[/dim]"
            table.add_row(
                marker, short_id(space.id), name, str(space.item_count), _date(space.created_at)
            )
        return table

    @staticmethod
    def notes_table(notes: Sequence[Note], title: str = "Notes") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Tags", style="magenta")
        table.add_column("Updated", style="dim")

        for position, note in enumerate(notes, start=1):
            table.add_row(
                str(position),
                short_id(note.id),
                note.title,
                ", ".join(note.tags),
                _date(note.updated_at),
            )
        return table

    @staticmethod
    def todo_lists_table(todo_lists: Sequence[TodoList], title: str = "Todo lists") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Done", justify="right")

        for position, todo_list in enumerate(todo_lists, start=1):
            table.add_row(
                str(position),
                short_id(todo_list.id),
                todo_list.name,
                _progress(todo_list.completed_item_count, todo_list.total_item_count),
            )
        return table

    @staticmethod
    def lists_table(lists: Sequence[ListModel], title: str = "Lists") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Style", style="blue")
        table.add_column("Items", justify="right")

        for position, list_model in enumerate(lists, start=1):
            name = f"{list_model.icon} {list_model.name}" if list_model.icon else list_model.name
            table.add_row(
                str(position),
                short_id(list_model.id),
                name,
                list_model.style,
                str(list_model.total_item_count),
            )
        return table

    @staticmethod
    def todo_items_table(items: Sequence[TodoItem], title: str = "Tasks") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("", width=3)
        table.add_column("Title", style="white")
        table.add_column("Priority")
        table.add_column("Due", style="dim")

        for position, item in enumerate(items, start=1):
            check = "[green]✓[/green]" if item.is_completed else "[dim]○[/dim]"
            title_text = f"[dim strike]{item.title}[/dim strike]" if item.is_completed else item.title
            priority = ""
            if item.priority:
                style = PRIORITY_STYLES.get(item.priority, "white")
                priority = f"[{style}]{item.priority}[/{style}]"
            table.add_row(
                str(position), short_id(item.id), check, title_text, priority, item.due_date or ""
            )
        return table

    @staticmethod
    def list_items_table(items: Sequence[ListItem], style: str, title: str = "Items") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("", width=3)
        table.add_column("Title", style="white")
        table.add_column("Notes", style="dim")

        for position, item in enumerate(items, start=1):
            # Escape the checkbox brackets so rich doesn't read them as markup
            marker = item_marker(item, style, position).replace("[", "\\[")
            table.add_row(str(position), short_id(item.id), marker, item.title, item.notes or "")
        return table

    @staticmethod
    def search_table(results: Sequence[SearchResult], query: str) -> Table:
        table = Table(title=f"Results for '{query}'", show_header=True, header_style="bold cyan")
        table.add_column("Type", style="magenta")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("In", style="yellow")
        table.add_column("Updated", style="dim")

        for result in results:
            table.add_row(
                result.type.replace("_", " "),
                short_id(result.id),
                result.title,
                result.parent_name or "",
                _date(result.updated_at),
            )
        return table

    @staticmethod
    def to_json_array(entities: Sequence) -> str:
        """
        Convert a list of models (or search results) to a JSON array string.
        """
        return json.dumps([entity.to_dict() for entity in entities], indent=2, ensure_ascii=False)
