"""
FILE: later/cli/commands/common.py
PURPOSE: Helpers shared by the CLI command modules
"""

import json
from typing import Callable, List, NoReturn, Optional, Sequence

import typer

from ..main import console, error_console
from ...core import repository, sequence, service
from ...core.exceptions import LaterError, LimitReachedError, ValidationError
from ...core.models import Space
from ...formatting import ContentFormatter, parse_id_list, print_json


def fail(error: LaterError) -> NoReturn:
    """Print error to stderr and exit 1."""
    if isinstance(error, LimitReachedError):
        error_console.print(f"[yellow]Limit reached:[/yellow] {error}")
    else:
        error_console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def resolve_space(space_ref: Optional[str]) -> Space:
    """
    The space named by --space, or the current space.

    Raises:
        LaterError: If the reference doesn't match or no space exists
    """
    if space_ref:
        return service.get_space(service.resolve_id(Space, space_ref))

    space = service.get_current_space()
    if space is None:
        raise ValidationError.required_field("Space")
    return space


def resolve_many(model, ids_text: str, parent_id: Optional[str] = None) -> List[str]:
    """Expand every comma-separated prefix to a full ID (within parent_id when given)."""
    refs = parse_id_list(ids_text)
    if not refs:
        raise ValidationError.required_field(f"{model.LABEL} id")
    return [service.resolve_id(model, ref, parent_id) for ref in refs]


def show_entity(entity, json_output: bool, message: str) -> None:
    if json_output:
        print_json(console, entity.to_json())
    else:
        console.print(message)


def show_collection(entities: Sequence, json_output: bool, table, empty_message: str) -> None:
    if json_output:
        print_json(console, ContentFormatter.to_json_array(entities))
    elif not entities:
        console.print(f"[dim]{empty_message}[/dim]")
    else:
        console.print(table)


def delete_each(model, ids_text: str, deleter: Callable[[str], None], json_output: bool) -> None:
    """
    Delete every listed ID, reporting failures without stopping.

    Exits 1 if any ID failed.
    """
    deleted = []
    errors = []
    for ref in parse_id_list(ids_text):
        try:
            entity_id = service.resolve_id(model, ref)
            deleter(entity_id)
            deleted.append(entity_id)
        except LaterError as e:
            errors.append(f"{ref}: {e}")

    if json_output:
        print_json(console, json.dumps(deleted, indent=2))
    elif deleted:
        console.print(f"[green]✓[/green] Deleted {len(deleted)} {model.LABEL.lower()}(s)")

    for error in errors:
        error_console.print(f"[red]Error:[/red] {error}")
    if errors or not deleted:
        raise typer.Exit(1)


def move_to(
    model,
    entity_id: str,
    position: int,
    lister: Callable[[str], list],
    reorderer: Callable[[str, Sequence[str]], None],
) -> list:
    """
    Move one entity to a 1-based position within its partition.

    Returns:
        The partition in its new order
    """
    entity = repository.get(model, entity_id)
    if entity is None:
        raise repository.not_found(model, entity_id)
    current = [e.id for e in lister(entity.parent_id)]
    reorderer(entity.parent_id, sequence.move(current, entity_id, position))
    return lister(entity.parent_id)
