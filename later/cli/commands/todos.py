"""
FILE: later/cli/commands/todos.py
PURPOSE: Todo list commands (todo ...) and todo item commands (task ...)
"""

from typing import List, Optional

import typer

from ..main import console, task_app, todo_app
from .common import delete_each, fail, move_to, resolve_many, resolve_space, show_collection, show_entity
from ...core import service
from ...core.exceptions import LaterError
from ...core.models import TodoItem, TodoList
from ...formatting import ContentFormatter, print_json


# --- Todo lists ---


@todo_app.command("add")
def todo_add(
    name: str = typer.Argument(..., help="Todo list name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a todo list at the end of the space.

    Example:
        later todo add "Groceries"
    """
    try:
        space = resolve_space(space_ref)
        todo_list = service.create_todo_list(space.id, name, description=description)
        show_entity(
            todo_list,
            json_output,
            f"[green]✓[/green] Created todo list {todo_list.id[:8]}: {todo_list.name}",
        )
    except LaterError as e:
        fail(e)


@todo_app.command("ls")
def todo_ls(
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List todo lists with completion counts."""
    try:
        space = resolve_space(space_ref)
        todo_lists = service.list_todo_lists(space.id)
        show_collection(
            todo_lists,
            json_output,
            ContentFormatter.todo_lists_table(todo_lists, title=f"Todo lists in {space.name}"),
            "No todo lists found",
        )
    except LaterError as e:
        fail(e)


@todo_app.command("show")
def todo_show(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show a todo list and its tasks."""
    try:
        todo_list = service.get_todo_list(service.resolve_id(TodoList, todo_ref))
        items = service.list_todo_items(todo_list.id)
        if json_output:
            print_json(console, ContentFormatter.to_json_array(items))
            return

        if todo_list.description:
            console.print(f"[dim]{todo_list.description}[/dim]")
        show_collection(
            items,
            False,
            ContentFormatter.todo_items_table(items, title=todo_list.name),
            f"{todo_list.name} has no tasks",
        )
    except LaterError as e:
        fail(e)


@todo_app.command("edit")
def todo_edit(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Rename a todo list or change its description."""
    try:
        todo_list = service.update_todo_list(
            service.resolve_id(TodoList, todo_ref), name=name, description=description
        )
        show_entity(todo_list, json_output, f"[green]✓[/green] Updated todo list {todo_list.name}")
    except LaterError as e:
        fail(e)


@todo_app.command("rm")
def todo_rm(
    todo_ids: str = typer.Argument(..., help="Todo list ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete todo lists (and their tasks)."""
    delete_each(TodoList, todo_ids, service.delete_todo_list, json_output)


@todo_app.command("reorder")
def todo_reorder(
    todo_ids: str = typer.Argument(..., help="Every todo list ID in the new order, comma-separated"),
    space_ref: Optional[str] = typer.Option(None, "--space", "-s", help="Space (default: current)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Put the space's todo lists in the given order."""
    try:
        space = resolve_space(space_ref)
        service.reorder_todo_lists(space.id, resolve_many(TodoList, todo_ids, space.id))
        todo_lists = service.list_todo_lists(space.id)
        show_collection(
            todo_lists, json_output, ContentFormatter.todo_lists_table(todo_lists), "No todo lists found"
        )
    except LaterError as e:
        fail(e)


@todo_app.command("mv")
def todo_mv(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    position: int = typer.Argument(..., help="New 1-based position"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Move a todo list to a position."""
    try:
        todo_lists = move_to(
            TodoList,
            service.resolve_id(TodoList, todo_ref),
            position,
            service.list_todo_lists,
            service.reorder_todo_lists,
        )
        show_collection(
            todo_lists, json_output, ContentFormatter.todo_lists_table(todo_lists), "No todo lists found"
        )
    except LaterError as e:
        fail(e)


# --- Tasks (todo items) ---


@task_app.command("add")
def task_add(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    title: str = typer.Argument(..., help="Task title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Details"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date (YYYY-MM-DD)"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="low, medium or high"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Add a task to the end of a todo list.

    Example:
        later task add 3f2a "Buy milk" --due 2025-01-31 -p high
    """
    try:
        item = service.create_todo_item(
            service.resolve_id(TodoList, todo_ref),
            title,
            description=description,
            due_date=due,
            priority=priority,
            tags=tags,
        )
        show_entity(item, json_output, f"[green]✓[/green] Added task {item.id[:8]}: {item.title}")
    except LaterError as e:
        fail(e)


@task_app.command("ls")
def task_ls(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List a todo list's tasks in order."""
    try:
        todo_list = service.get_todo_list(service.resolve_id(TodoList, todo_ref))
        items = service.list_todo_items(todo_list.id)
        show_collection(
            items,
            json_output,
            ContentFormatter.todo_items_table(items, title=todo_list.name),
            "No tasks found",
        )
    except LaterError as e:
        fail(e)


@task_app.command("edit")
def task_edit(
    task_ref: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New details (\"\" clears)"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date (\"\" clears)"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="Priority (\"\" clears)"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Update a task."""
    try:
        item = service.update_todo_item(
            service.resolve_id(TodoItem, task_ref),
            title=title,
            description=description,
            due_date=due,
            priority=priority,
            tags=tags,
        )
        show_entity(item, json_output, f"[green]✓[/green] Updated task {item.id[:8]}: {item.title}")
    except LaterError as e:
        fail(e)


@task_app.command("toggle")
def task_toggle(
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Mark tasks done (or not done again)."""
    try:
        items = [service.toggle_todo_item(item_id) for item_id in resolve_many(TodoItem, task_ids)]
        if json_output:
            print_json(console, ContentFormatter.to_json_array(items))
            return
        for item in items:
            state = "[green]done[/green]" if item.is_completed else "[yellow]open[/yellow]"
            console.print(f"[green]✓[/green] {item.title}: {state}")
    except LaterError as e:
        fail(e)


@task_app.command("rm")
def task_rm(
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete one or more tasks."""
    delete_each(TodoItem, task_ids, service.delete_todo_item, json_output)


@task_app.command("reorder")
def task_reorder(
    todo_ref: str = typer.Argument(..., help="Todo list ID (or unique prefix)"),
    task_ids: str = typer.Argument(..., help="Every task ID in the new order, comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Put a todo list's tasks in the given order."""
    try:
        todo_list_id = service.resolve_id(TodoList, todo_ref)
        service.reorder_todo_items(todo_list_id, resolve_many(TodoItem, task_ids, todo_list_id))
        items = service.list_todo_items(todo_list_id)
        show_collection(items, json_output, ContentFormatter.todo_items_table(items), "No tasks found")
    except LaterError as e:
        fail(e)


@task_app.command("mv")
def task_mv(
    task_ref: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    position: int = typer.Argument(..., help="New 1-based position"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Move a task to a position within its todo list."""
    try:
        items = move_to(
            TodoItem,
            service.resolve_id(TodoItem, task_ref),
            position,
            service.list_todo_items,
            service.reorder_todo_items,
        )
        show_collection(items, json_output, ContentFormatter.todo_items_table(items), "No tasks found")
    except LaterError as e:
        fail(e)
