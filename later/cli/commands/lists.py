"""
FILE: later/cli/commands/lists.py
PURPOSE: Custom list commands (list ...) and list item commands (item ...)
"""

from typing import Optional

import typer

from ..main import console, item_app, list_app
from .common import delete_each, fail, move_to, resolve_many, resolve_space, show_collection, show_entity
from ...core import service
from ...core.constants import DEFAULT_LIST_STYLE, LIST_STYLES
from ...core.exceptions import LaterError
from ...core.models import ListItem, ListModel
from ...formatting import ContentFormatter, print_json

STYLE_HELP = f"One of: {', '.join(LIST_STYLES)}"


def _items_table(list_model: ListModel, items):
    return ContentFormatter.list_items_table(items, list_model.style, title=list_model.name)


# --- Lists ---


@list_app.command("add")
def list_add(
    name: str = typer.Argument(..., help="List name"),
    icon: Optional[str] = typer.Option(None, "--icon", help="Emoji or short icon"),
    style: str = typer.Option(DEFAULT_LIST_STYLE, "--style", help=STYLE_HELP),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a custom list at the end of the space.

    Example:
        later list add "Books to read" --style numbered
    """
    try:
        space = resolve_space(space_ref)
        list_model = service.create_list(space.id, name, icon=icon, style=style)
        show_entity(
            list_model,
            json_output,
            f"[green]✓[/green] Created list {list_model.id[:8]}: {list_model.name}",
        )
    except LaterError as e:
        fail(e)


@list_app.command("ls")
def list_ls(
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List custom lists in their saved order."""
    try:
        space = resolve_space(space_ref)
        lists = service.list_lists(space.id)
        show_collection(
            lists,
            json_output,
            ContentFormatter.lists_table(lists, title=f"Lists in {space.name}"),
            "No lists found",
        )
    except LaterError as e:
        fail(e)


@list_app.command("show")
def list_show(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show a list and its items."""
    try:
        list_model = service.get_list(service.resolve_id(ListModel, list_ref))
        items = service.list_list_items(list_model.id)
        if json_output:
            print_json(console, ContentFormatter.to_json_array(items))
            return
        show_collection(items, False, _items_table(list_model, items), f"{list_model.name} is empty")
    except LaterError as e:
        fail(e)


@list_app.command("edit")
def list_edit(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    icon: Optional[str] = typer.Option(None, "--icon", help="New icon (\"\" clears)"),
    style: Optional[str] = typer.Option(None, "--style", help=STYLE_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Rename a list or change its icon or style."""
    try:
        list_model = service.update_list(
            service.resolve_id(ListModel, list_ref), name=name, icon=icon, style=style
        )
        show_entity(list_model, json_output, f"[green]✓[/green] Updated list {list_model.name}")
    except LaterError as e:
        fail(e)


@list_app.command("rm")
def list_rm(
    list_ids: str = typer.Argument(..., help="List ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete lists (and their items)."""
    delete_each(ListModel, list_ids, service.delete_list, json_output)


@list_app.command("reorder")
def list_reorder(
    list_ids: str = typer.Argument(..., help="Every list ID in the new order, comma-separated"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Put the space's lists in the given order."""
    try:
        space = resolve_space(space_ref)
        service.reorder_lists(space.id, resolve_many(ListModel, list_ids, space.id))
        lists = service.list_lists(space.id)
        show_collection(lists, json_output, ContentFormatter.lists_table(lists), "No lists found")
    except LaterError as e:
        fail(e)


@list_app.command("mv")
def list_mv(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    position: int = typer.Argument(..., help="New 1-based position"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Move a list to a position."""
    try:
        lists = move_to(
            ListModel,
            service.resolve_id(ListModel, list_ref),
            position,
            service.list_lists,
            service.reorder_lists,
        )
        show_collection(lists, json_output, ContentFormatter.lists_table(lists), "No lists found")
    except LaterError as e:
        fail(e)


# --- List items ---


@item_app.command("add")
def item_add(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    title: str = typer.Argument(..., help="Item text"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Extra notes"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Add an item to the end of a list.

    Example:
        later item add 9c1e "Dune"
    """
    try:
        item = service.create_list_item(service.resolve_id(ListModel, list_ref), title, notes=notes)
        show_entity(item, json_output, f"[green]✓[/green] Added item {item.id[:8]}: {item.title}")
    except LaterError as e:
        fail(e)


@item_app.command("ls")
def item_ls(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List a list's items in order."""
    try:
        list_model = service.get_list(service.resolve_id(ListModel, list_ref))
        items = service.list_list_items(list_model.id)
        show_collection(items, json_output, _items_table(list_model, items), "No items found")
    except LaterError as e:
        fail(e)


@item_app.command("edit")
def item_edit(
    item_ref: str = typer.Argument(..., help="Item ID (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", help="New text"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="New notes (\"\" clears)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Update a list item."""
    try:
        item = service.update_list_item(
            service.resolve_id(ListItem, item_ref), title=title, notes=notes
        )
        show_entity(item, json_output, f"[green]✓[/green] Updated item {item.id[:8]}: {item.title}")
    except LaterError as e:
        fail(e)


@item_app.command("toggle")
def item_toggle(
    item_ids: str = typer.Argument(..., help="Item ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Check or uncheck list items."""
    try:
        items = [service.toggle_list_item(item_id) for item_id in resolve_many(ListItem, item_ids)]
        if json_output:
            print_json(console, ContentFormatter.to_json_array(items))
            return
        for item in items:
            state = "[green]checked[/green]" if item.is_checked else "[yellow]unchecked[/yellow]"
            console.print(f"[green]✓[/green] {item.title}: {state}")
    except LaterError as e:
        fail(e)


@item_app.command("rm")
def item_rm(
    item_ids: str = typer.Argument(..., help="Item ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete one or more list items."""
    delete_each(ListItem, item_ids, service.delete_list_item, json_output)


@item_app.command("reorder")
def item_reorder(
    list_ref: str = typer.Argument(..., help="List ID (or unique prefix)"),
    item_ids: str = typer.Argument(..., help="Every item ID in the new order, comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Put a list's items in the given order."""
    try:
        list_model = service.get_list(service.resolve_id(ListModel, list_ref))
        service.reorder_list_items(list_model.id, resolve_many(ListItem, item_ids, list_model.id))
        items = service.list_list_items(list_model.id)
        show_collection(items, json_output, _items_table(list_model, items), "No items found")
    except LaterError as e:
        fail(e)


@item_app.command("mv")
def item_mv(
    item_ref: str = typer.Argument(..., help="Item ID (or unique prefix)"),
    position: int = typer.Argument(..., help="New 1-based position"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Move a list item to a position within its list."""
    try:
        item_id = service.resolve_id(ListItem, item_ref)
        items = move_to(
            ListItem, item_id, position, service.list_list_items, service.reorder_list_items
        )
        list_model = service.get_list(service.get_list_item(item_id).list_id)
        show_collection(items, json_output, _items_table(list_model, items), "No items found")
    except LaterError as e:
        fail(e)
