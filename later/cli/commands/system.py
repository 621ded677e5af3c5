"""
FILE: later/cli/commands/system.py
PURPOSE: System commands (version, repl, search, compact)
"""

import json
from typing import List, Optional

import typer

from ..main import app, console
from .common import fail, resolve_space
from ... import __version__
from ...core import service
from ...core.constants import CONTENT_TYPES, DEFAULT_SEARCH_LIMIT
from ...core.exceptions import LaterError
from ...formatting import ContentFormatter, print_json


@app.command()
def version():
    """Show Later version."""
    console.print(f"Later v{__version__}")


@app.command()
def repl():
    """Launch the interactive REPL."""
    from ...repl import main as repl_main

    repl_main()


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for"),
    types: Optional[List[str]] = typer.Option(
        None, "--type", help=f"Restrict to a content type (repeatable): {', '.join(CONTENT_TYPES)}"
    ),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Require tag (repeatable)"),
    limit: int = typer.Option(DEFAULT_SEARCH_LIMIT, "--limit", help="Max results per type"),
    offset: int = typer.Option(0, "--offset", help="Results to skip per type"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Search notes, lists and tasks in a space.

    Example:
        later search milk
        later search plan --type note --tag work
    """
    try:
        space = resolve_space(space_ref)
        results = service.search(
            query,
            space.id,
            content_types=types,
            tags=tags,
            limit=limit,
            offset=offset,
        )
        if json_output:
            print_json(console, ContentFormatter.to_json_array(results))
        elif not results:
            console.print(f"[dim]No results for '{query}'[/dim]")
        else:
            console.print(ContentFormatter.search_table(results, query))
    except LaterError as e:
        fail(e)


@app.command()
def compact(
    all_spaces: bool = typer.Option(False, "--all", help="Compact every space"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Renumber item order in a space to close gaps left by deletes.

    Order is unchanged; only stored positions are rewritten.
    """
    try:
        if all_spaces:
            spaces = service.list_spaces(include_archived=True)
        else:
            spaces = [resolve_space(space_ref)]

        report = {space.id: service.compact_space(space.id) for space in spaces}
    except LaterError as e:
        fail(e)

    if json_output:
        print_json(console, json.dumps(report, indent=2))
        return

    total = sum(report.values())
    if total:
        console.print(f"[green]✓[/green] Rewrote {total} position(s) in {len(report)} space(s)")
    else:
        console.print("[dim]Already compact[/dim]")
