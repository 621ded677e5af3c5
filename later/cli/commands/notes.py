"""
FILE: later/cli/commands/notes.py
PURPOSE: Note commands (add, ls, show, edit, rm, reorder, mv)
"""

from typing import List, Optional

import typer

from ..main import console, note_app
from .common import delete_each, fail, move_to, resolve_many, resolve_space, show_collection, show_entity
from ...core import service
from ...core.exceptions import LaterError
from ...core.models import Note
from ...formatting import ContentFormatter, print_json


@note_app.command("add")
def note_add(
    title: str = typer.Argument(..., help="Note title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Note body"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a note at the end of the space.

    Example:
        later note add "Ideas" -c "Write more" -t writing
    """
    try:
        space = resolve_space(space_ref)
        note = service.create_note(space.id, title, content=content, tags=tags)
        show_entity(note, json_output, f"[green]✓[/green] Created note {note.id[:8]}: {note.title}")
    except LaterError as e:
        fail(e)


@note_app.command("ls")
def note_ls(
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List notes in their saved order."""
    try:
        space = resolve_space(space_ref)
        notes = service.list_notes(space.id)
        show_collection(
            notes,
            json_output,
            ContentFormatter.notes_table(notes, title=f"Notes in {space.name}"),
            "No notes found",
        )
    except LaterError as e:
        fail(e)


@note_app.command("show")
def note_show(
    note_ref: str = typer.Argument(..., help="Note ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """View a note's full content."""
    try:
        note = service.get_note(service.resolve_id(Note, note_ref))
        if json_output:
            print_json(console, note.to_json())
            return

        console.print(f"[bold]{note.title}[/bold]  [dim]{note.id}[/dim]")
        if note.tags:
            console.print(f"[magenta]{', '.join(note.tags)}[/magenta]")
        if note.content:
            console.print()
            console.print(note.content, markup=False)
    except LaterError as e:
        fail(e)


@note_app.command("edit")
def note_edit(
    note_ref: str = typer.Argument(..., help="Note ID (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New body (\"\" clears)"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
    clear_tags: bool = typer.Option(False, "--clear-tags", help="Remove all tags"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Update a note's title, content or tags."""
    try:
        note_id = service.resolve_id(Note, note_ref)
        note = service.update_note(
            note_id,
            title=title,
            content=content,
            tags=[] if clear_tags else tags,
        )
        show_entity(note, json_output, f"[green]✓[/green] Updated note {note.id[:8]}: {note.title}")
    except LaterError as e:
        fail(e)


@note_app.command("rm")
def note_rm(
    note_ids: str = typer.Argument(..., help="Note ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete one or more notes."""
    delete_each(Note, note_ids, service.delete_note, json_output)


@note_app.command("reorder")
def note_reorder(
    note_ids: str = typer.Argument(..., help="Every note ID in the new order, comma-separated"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Put the space's notes in the given order.

    Example:
        later note reorder c3d4,a1b2,e5f6
    """
    try:
        space = resolve_space(space_ref)
        service.reorder_notes(space.id, resolve_many(Note, note_ids, space.id))
        notes = service.list_notes(space.id)
        show_collection(notes, json_output, ContentFormatter.notes_table(notes), "No notes found")
    except LaterError as e:
        fail(e)


@note_app.command("mv")
def note_mv(
    note_ref: str = typer.Argument(..., help="Note ID (or unique prefix)"),
    position: int = typer.Argument(..., help="New 1-based position"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Move a note to a position, keeping the others in order."""
    try:
        notes = move_to(
            Note,
            service.resolve_id(Note, note_ref),
            position,
            service.list_notes,
            service.reorder_notes,
        )
        show_collection(notes, json_output, ContentFormatter.notes_table(notes), "No notes found")
    except LaterError as e:
        fail(e)
