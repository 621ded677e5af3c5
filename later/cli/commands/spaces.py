"""
FILE: later/cli/commands/spaces.py
PURPOSE: Space management commands (add, ls, rename, archive, unarchive, rm, use)
"""

from typing import Optional

import typer

from ..main import console, space_app
from .common import fail, show_collection, show_entity
from ...core import preferences, service
from ...core.exceptions import LaterError
from ...core.models import Space
from ...formatting import ContentFormatter


@space_app.command("add")
def space_add(
    name: str = typer.Argument(..., help="Space name"),
    icon: Optional[str] = typer.Option(None, "--icon", help="Emoji or short icon"),
    color: Optional[str] = typer.Option(None, "--color", help="Display color"),
    use: bool = typer.Option(False, "--use", help="Make it the current space"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a new space.

    Example:
        later space add "Work"
        later space add "Home" --icon 🏡 --use
    """
    try:
        space = service.create_space(name, icon=icon, color=color)
        if use:
            service.set_current_space(space.id)
        show_entity(space, json_output, f"[green]✓[/green] Created space {space.id[:8]}: {space.name}")
    except LaterError as e:
        fail(e)


@space_app.command("ls")
def space_ls(
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived spaces"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List spaces (current space marked with *).

    Example:
        later space ls
        later space ls --all --json
    """
    try:
        spaces = service.list_spaces(include_archived=include_archived)
        current_id = preferences.get_current_space_id()
        show_collection(
            spaces,
            json_output,
            ContentFormatter.spaces_table(spaces, current_id),
            "No spaces found",
        )
    except LaterError as e:
        fail(e)


@space_app.command("rename")
def space_rename(
    space_ref: str = typer.Argument(..., help="Space ID (or unique prefix)"),
    name: str = typer.Argument(..., help="New name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Rename a space."""
    try:
        space = service.rename_space(service.resolve_id(Space, space_ref), name)
        show_entity(space, json_output, f"[green]✓[/green] Renamed space to {space.name}")
    except LaterError as e:
        fail(e)


@space_app.command("archive")
def space_archive(
    space_ref: str = typer.Argument(..., help="Space ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Hide a space from listings without deleting it."""
    try:
        space = service.archive_space(service.resolve_id(Space, space_ref))
        show_entity(space, json_output, f"[green]✓[/green] Archived space {space.name}")
    except LaterError as e:
        fail(e)


@space_app.command("unarchive")
def space_unarchive(
    space_ref: str = typer.Argument(..., help="Space ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Restore an archived space."""
    try:
        space = service.unarchive_space(service.resolve_id(Space, space_ref))
        show_entity(space, json_output, f"[green]✓[/green] Restored space {space.name}")
    except LaterError as e:
        fail(e)


@space_app.command("rm")
def space_rm(
    space_ref: str = typer.Argument(..., help="Space ID (or unique prefix)"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Delete a space and everything in it.

    The current space can't be deleted; switch with `later space use` first.

    Example:
        later space rm 3f2a --yes
    """
    try:
        space = service.get_space(service.resolve_id(Space, space_ref))

        if not yes:
            console.print(
                f"[yellow]About to delete '{space.name}' and its {space.item_count} item(s)[/yellow]"
            )
            if not typer.confirm("Continue?", default=False):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        service.delete_space(space.id)
        show_entity(space, json_output, f"[green]✓[/green] Deleted space {space.name}")
    except LaterError as e:
        fail(e)


@space_app.command("use")
def space_use(
    space_ref: str = typer.Argument(..., help="Space ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Make a space the current one."""
    try:
        space = service.set_current_space(service.resolve_id(Space, space_ref))
        show_entity(space, json_output, f"[green]✓[/green] Now using space {space.name}")
    except LaterError as e:
        fail(e)
