"""
FILE: later/repl/commands/content.py
PURPOSE: Content command handlers for REPL
  (ls, new, open, back, items, add, check, rm, rename, mv, order, refresh, find)
NOTES:
  - rm/rename/mv/order act on the open container's items, or on a space
    section when the first argument names one (note, todo, list)
  - Entities are referenced by their # in the last table or an ID prefix
"""

from typing import List, Optional, Tuple

from rich.markup import escape

from ..display import report_state, show_items, show_space
from ..main import KIND_ALIASES, console, repl_context
from ..parser import ParseResult
from .spaces import print_error
from ...core import service
from ...core.controllers import PartitionController
from ...core.exceptions import LaterError, LimitReachedError
from ...core.models import ListModel, Note, TodoList
from ...formatting import ContentFormatter, parse_id_list, short_id


def _require_space() -> bool:
    if repl_context.space is None:
        console.print("[red]Error:[/red] No space selected")
        console.print("[dim]Use 'spaces' then 'use <#>'[/dim]")
        return False
    return True


def _require_container() -> bool:
    if repl_context.items is None:
        console.print("[red]Error:[/red] Nothing open")
        console.print("[dim]Use 'open todo <#>' or 'open list <#>' first[/dim]")
        return False
    return True


def _usage(text: str) -> None:
    console.print(f"[dim]Usage: {escape(text)}[/dim]")


def _kind(word: str) -> Optional[str]:
    return KIND_ALIASES.get(word.lower())


def _target(result: ParseResult) -> Tuple[Optional[PartitionController], List[str]]:
    """Controller a command acts on, and the arguments left after the section name."""
    if result.args and _kind(result.args[0]):
        return repl_context.section(result.args[0]), result.args[1:]
    return repl_context.items, result.args


def _flag(result: ParseResult, name: str) -> Optional[str]:
    value = result.flags.get(name)
    return value if isinstance(value, str) else None


def _tags(result: ParseResult) -> Optional[List[str]]:
    tag = _flag(result, "tag")
    return parse_id_list(tag) if tag else None


def _label(entity) -> str:
    return f"[cyan]{short_id(entity.id)}[/cyan]: {entity.display_name}"


def handle_ls_command(result: ParseResult) -> None:
    """
    Handle 'ls' command - show the current space.

    Usage:
        ls
        ls notes | todos | lists
    """
    if not _require_space():
        return
    kind = _kind(result.args[0]) if result.args else None
    if result.args and kind is None:
        console.print(f"[red]Error:[/red] Unknown section '{result.args[0]}'")
        return
    show_space(repl_context, console, kind)


def handle_new_command(result: ParseResult) -> None:
    """
    Handle 'new' command - create a space, note, todo list or list.

    Usage:
        new note Trip ideas --tag travel --content "Lisbon?"
        new todo Groceries
        new list Books --style numbered
        new space Work
    """
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Kind and name required")
        _usage("new <note|todo|list|space> <name>")
        return

    kind_word, name = result.args[0].lower(), result.text(1)
    try:
        if kind_word == "space":
            space = service.create_space(name, icon=_flag(result, "icon"))
            console.print(f"[green]✓ Created space:[/green] {_label(space)}")
            console.print("[dim]Switch with 'use <#>'[/dim]")
            return

        kind = _kind(kind_word)
        if kind is None:
            console.print(f"[red]Error:[/red] Unknown kind '{kind_word}'")
            return
        if not _require_space():
            return

        controller = repl_context.section(kind)
        if kind == "notes":
            entity = controller.create(name, content=_flag(result, "content"), tags=_tags(result))
        elif kind == "todos":
            entity = controller.create(name, description=_flag(result, "description"))
        else:
            entity = controller.create(name, icon=_flag(result, "icon"), style=_flag(result, "style"))

        if entity is None:
            report_state(controller, console)
            return
        console.print(f"[green]✓ Created:[/green] {_label(entity)}")

    except LimitReachedError as e:
        console.print(f"[yellow]Limit reached:[/yellow] {e}")
    except LaterError as e:
        print_error(e)


def handle_open_command(result: ParseResult) -> None:
    """
    Handle 'open' command - open a todo list or list, or read a note.

    Usage:
        open todo 1
        open list 3f2a
        open note 2
    """
    if not _require_space():
        return
    if len(result.args) < 2 or _kind(result.args[0]) is None:
        console.print("[red]Error:[/red] Kind and reference required")
        _usage("open <todo|list|note> <# or id>")
        return

    try:
        controller = repl_context.section(result.args[0])
        entity = controller.find(result.args[1])

        if isinstance(entity, Note):
            console.print(f"[bold]{entity.title}[/bold]")
            if entity.tags:
                console.print(f"[magenta]{', '.join(entity.tags)}[/magenta]")
            if entity.content:
                console.print(entity.content, markup=False)
            return

        repl_context.open(entity)
        show_items(repl_context, console)
    except LaterError as e:
        print_error(e)


def handle_back_command(result: ParseResult) -> None:
    """Handle 'back' command - close the open container."""
    if repl_context.container is None:
        console.print("[dim]Nothing open[/dim]")
        return
    name = repl_context.container.name
    repl_context.close()
    console.print(f"[dim]Closed {name}[/dim]")


def handle_items_command(result: ParseResult) -> None:
    """Handle 'items' command - show the open container's items."""
    if _require_container():
        show_items(repl_context, console)


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - add an item to the open container.

    Usage:
        add Buy milk --priority high --due 2025-01-31
        add Dune --notes "Frank Herbert"
    """
    if not _require_container():
        return
    if not result.args:
        console.print("[red]Error:[/red] Title required")
        _usage("add <title>")
        return

    controller = repl_context.items
    title = result.text()
    try:
        if isinstance(repl_context.container, TodoList):
            entity = controller.create(
                title,
                description=_flag(result, "notes"),
                due_date=_flag(result, "due"),
                priority=_flag(result, "priority"),
                tags=_tags(result),
            )
        else:
            entity = controller.create(title, notes=_flag(result, "notes"))
    except LaterError as e:
        print_error(e)
        return

    if entity is None:
        report_state(controller, console)
        return
    console.print(f"[green]✓ Added:[/green] {_label(entity)}")


def handle_check_command(result: ParseResult) -> None:
    """
    Handle 'check' command - toggle items in the open container.

    Usage:
        check 2
        check 1,3
    """
    if not _require_container():
        return
    refs = parse_id_list(result.text())
    if not refs:
        console.print("[red]Error:[/red] Item required")
        _usage("check <#>")
        return

    controller = repl_context.items
    try:
        targets = [controller.find(ref) for ref in refs]
    except LaterError as e:
        print_error(e)
        return

    for target in targets:
        entity = controller.toggle(target.id)
        if entity is None:
            report_state(controller, console)
            return
        done = getattr(entity, "is_completed", None)
        if done is None:
            done = entity.is_checked
        mark = "[green]✓[/green]" if done else "[dim]○[/dim]"
        console.print(f"{mark} {entity.display_name}")


def handle_rm_command(result: ParseResult) -> None:
    """
    Handle 'rm' command - delete an item, or a note, todo list or list.

    Usage:
        rm 2              (item in the open container)
        rm note 3f2a
        rm todo 1
    """
    controller, args = _target(result)
    if controller is None or not args:
        console.print("[red]Error:[/red] Reference required")
        _usage("rm [note|todo|list] <#>")
        return

    try:
        entity = controller.find(args[0])
    except LaterError as e:
        print_error(e)
        return

    if repl_context.container is not None and entity.id == repl_context.container.id:
        repl_context.close()

    if controller.delete(entity.id):
        console.print(f"[green]✓ Deleted:[/green] {entity.display_name}")
    else:
        report_state(controller, console)


def handle_rename_command(result: ParseResult) -> None:
    """
    Handle 'rename' command.

    Usage:
        rename 2 Oat milk           (item in the open container)
        rename list 1 Reading
    """
    controller, args = _target(result)
    if controller is None or len(args) < 2:
        console.print("[red]Error:[/red] Reference and new name required")
        _usage("rename [note|todo|list] <#> <new name>")
        return

    try:
        entity = controller.find(args[0])
    except LaterError as e:
        print_error(e)
        return

    field = "name" if isinstance(entity, (TodoList, ListModel)) else "title"
    updated = controller.update(entity.id, **{field: " ".join(args[1:])})
    if updated is None:
        report_state(controller, console)
        return
    if repl_context.container is not None and updated.id == repl_context.container.id:
        repl_context.container = updated
    console.print(f"[green]✓ Renamed:[/green] {_label(updated)}")


def handle_mv_command(result: ParseResult) -> None:
    """
    Handle 'mv' command - move one entry to a 1-based position.

    Usage:
        mv 3 1              (item 3 to the top of the open container)
        mv note 1 4
    """
    controller, args = _target(result)
    if controller is None or len(args) < 2 or not args[1].lstrip("-").isdigit():
        console.print("[red]Error:[/red] Reference and position required")
        _usage("mv [note|todo|list] <#> <position>")
        return

    try:
        entity = controller.find(args[0])
        moved = controller.move(entity.id, int(args[1]))
    except LaterError as e:
        print_error(e)
        return

    if moved:
        _show_after_reorder(controller)
    else:
        report_state(controller, console)


def handle_order_command(result: ParseResult) -> None:
    """
    Handle 'order' command - set the full order at once.

    Every entry must be listed exactly once.

    Usage:
        order 3,1,2             (items of the open container)
        order todo 2,1
    """
    controller, args = _target(result)
    refs = parse_id_list(",".join(args))
    if controller is None or not refs:
        console.print("[red]Error:[/red] New order required")
        _usage("order [note|todo|list] <#,#,...>")
        return

    try:
        ordered_ids = [controller.find(ref).id for ref in refs]
    except LaterError as e:
        print_error(e)
        return

    if controller.reorder(ordered_ids):
        _show_after_reorder(controller)
    else:
        report_state(controller, console)


def _show_after_reorder(controller: PartitionController) -> None:
    if controller is repl_context.items:
        show_items(repl_context, console)
        return
    for kind in ("notes", "todos", "lists"):
        if repl_context.section(kind) is controller:
            show_space(repl_context, console, kind)
            return


def handle_refresh_command(result: ParseResult) -> None:
    """Handle 'refresh' command - reload every view from the store."""
    if not _require_space():
        return
    ok = True
    for controller in repl_context.controllers():
        controller.refresh()
        ok = report_state(controller, console) and ok
    if ok:
        console.print("[green]✓[/green] Refreshed")


def handle_find_command(result: ParseResult) -> None:
    """
    Handle 'find' command - search the current space.

    Usage:
        find milk
        find plan --type note --tag work
    """
    if not _require_space():
        return
    query = result.text()
    if not query:
        console.print("[red]Error:[/red] Search text required")
        _usage("find <text>")
        return

    content_type = _flag(result, "type")
    try:
        results = service.search(
            query,
            repl_context.space.id,
            content_types=[content_type] if content_type else None,
            tags=_tags(result),
        )
    except LaterError as e:
        print_error(e)
        return

    if not results:
        console.print(f"[dim]No results for '{query}'[/dim]")
        return
    console.print(ContentFormatter.search_table(results, query))
