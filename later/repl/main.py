"""
FILE: later/repl/main.py
PURPOSE: Interactive REPL for spaces and their content with prompt-toolkit
EXPORTS:
  - REPLContext (session state: current space, open container, controllers)
  - repl_context (module-level session state)
  - execute_command(result) -> bool
  - run_repl() - Main REPL loop
  - main() - Entry point for REPL mode
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - later.core.controllers (cached, observable collections)
  - later.repl.parser, later.repl.completer
NOTES:
  - The REPL works through controllers: each view is a cached snapshot
    that stays on screen (marked stale) when a call fails
  - Opening a todo list or list switches add/check/rm/rename/mv/order
    to that container's items; `back` returns to the space
  - Bottom toolbar shows counts for the current space
  - Ctrl+D or "exit"/"quit" to exit
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional, Union

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from ..core import service
from ..core.controllers import (
    ListItemsController,
    ListsController,
    NotesController,
    PartitionController,
    TodoItemsController,
    TodoListsController,
)
from ..core.exceptions import LaterError
from ..core.models import ListModel, Space, TodoList
from .completer import create_completer
from .parser import ParseResult, parse_command

logger = logging.getLogger(__name__)

# Rich console for formatted output
console = Console()

# Section names accepted where a content kind is expected
KIND_ALIASES = {
    "note": "notes",
    "notes": "notes",
    "todo": "todos",
    "todos": "todos",
    "list": "lists",
    "lists": "lists",
}


# --- REPL Context (Persistent State) ---


@dataclass
class REPLContext:
    """
    Persistent context for the REPL session.

    Attributes:
        space: Current space (None until one is selected)
        notes / todo_lists / lists: Controllers for the space's sections
        container: Open todo list or list (None at space level)
        items: Controller for the open container's items
    """
    space: Optional[Space] = None
    notes: Optional[NotesController] = None
    todo_lists: Optional[TodoListsController] = None
    lists: Optional[ListsController] = None
    container: Optional[Union[TodoList, ListModel]] = None
    items: Optional[PartitionController] = None

    def enter_space(self, space: Space) -> None:
        """Switch to a space, replacing every controller."""
        self.dispose()
        self.space = space
        self.notes = NotesController(space.id)
        self.todo_lists = TodoListsController(space.id)
        self.lists = ListsController(space.id)

    def open(self, container: Union[TodoList, ListModel]) -> None:
        self.close()
        self.container = container
        if isinstance(container, TodoList):
            self.items = TodoItemsController(container.id)
        else:
            self.items = ListItemsController(container.id)

    def close(self) -> None:
        if self.items is not None:
            self.items.dispose()
        self.container = None
        self.items = None

    def section(self, kind: str) -> PartitionController:
        """
        Controller for a section name ("note", "todos", "list", ...).

        Raises:
            KeyError: If kind isn't a known section
        """
        return {
            "notes": self.notes,
            "todos": self.todo_lists,
            "lists": self.lists,
        }[KIND_ALIASES[kind.lower()]]

    def controllers(self):
        return [c for c in (self.notes, self.todo_lists, self.lists, self.items) if c is not None]

    def dispose(self) -> None:
        self.close()
        for controller in self.controllers():
            controller.dispose()
        self.space = None
        self.notes = None
        self.todo_lists = None
        self.lists = None

    def get_prompt(self) -> str:
        """
        Returns:
            "later> ", "later:[Personal]> " or "later:[Personal | Groceries]> "
        """
        parts = []
        if self.space:
            parts.append(self.space.name)
        if self.container:
            parts.append(self.container.name)
        if parts:
            return f"later:[{' | '.join(parts)}]> "
        return "later> "


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()


def format_prompt() -> HTML:
    """Prompt with cyan space name and magenta container name."""
    parts = []
    if repl_context.space:
        parts.append(f"<cyan>{_escape(repl_context.space.name)}</cyan>")
    if repl_context.container:
        parts.append(f"<magenta>{_escape(repl_context.container.name)}</magenta>")
    if parts:
        return HTML(f"<b>later:[{' | '.join(parts)}]&gt; </b>")
    return HTML("<b>later&gt; </b>")


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


_TOOLBAR_TIPS = [
    "Tip: 'open todo 1' then 'add Buy milk'",
    "Tip: 'mv 3 1' moves the third item to the top",
    "Tip: 'find <text>' searches the whole space",
    "Tip: IDs can be shortened, or use the # from the table",
    "Tip: Press Ctrl+D or type 'exit' to quit",
]
_tip_index = 0


def get_bottom_toolbar() -> HTML:
    """Counts for the current space from the cached controllers, plus a tip."""
    tip = _TOOLBAR_TIPS[_tip_index % len(_TOOLBAR_TIPS)]
    ctx = repl_context
    if ctx.space is None:
        return HTML(f"<style bg='#444444' fg='#ffffff'> {tip} </style>")

    stats = (
        f"{len(ctx.notes.items)} notes | {len(ctx.todo_lists.items)} todo lists "
        f"| {len(ctx.lists.items)} lists"
    )
    if any(c.state.is_stale for c in ctx.controllers()):
        stats += " | stale"
    return HTML(f"<style bg='#444444' fg='#ffffff'> {stats} | {tip} </style>")


# Import command handlers from command modules
from .commands import (  # noqa: E402
    handle_add_command,
    handle_back_command,
    handle_check_command,
    handle_clear_command,
    handle_find_command,
    handle_help_command,
    handle_items_command,
    handle_ls_command,
    handle_mv_command,
    handle_new_command,
    handle_open_command,
    handle_order_command,
    handle_refresh_command,
    handle_rename_command,
    handle_rm_command,
    handle_spaces_command,
    handle_use_command,
)


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    if not command:
        return True

    handlers = {
        "spaces": handle_spaces_command,
        "use": handle_use_command,
        "ls": handle_ls_command,
        "new": handle_new_command,
        "open": handle_open_command,
        "back": handle_back_command,
        "items": handle_items_command,
        "add": handle_add_command,
        "check": handle_check_command,
        "rm": handle_rm_command,
        "rename": handle_rename_command,
        "mv": handle_mv_command,
        "order": handle_order_command,
        "refresh": handle_refresh_command,
        "find": handle_find_command,
        "help": handle_help_command,
        "clear": handle_clear_command,
    }

    handler = handlers.get(command)
    if handler:
        handler(result)
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


def start_session() -> None:
    """Enter the current space (first-run data is created if needed)."""
    service.seed_if_first_run()
    space = service.get_current_space()
    if space is not None:
        repl_context.enter_space(space)


def run_repl() -> None:
    """
    Main REPL loop.

    Exits on:
    - Ctrl+D (EOFError)
    - "exit" or "quit" commands
    """
    global _tip_index

    has_tty = sys.stdin.isatty() and sys.stdout.isatty()
    session = None
    if has_tty:
        session = PromptSession(
            history=InMemoryHistory(),
            completer=create_completer(),
            complete_while_typing=True,
            bottom_toolbar=get_bottom_toolbar,
        )

    start_session()

    console.print("[bold cyan]Later REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if session is None:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    while True:
        try:
            if session is None:
                user_input = input(repl_context.get_prompt())
            else:
                user_input = session.prompt(format_prompt())

            if not execute_command(parse_command(user_input)):
                break
            _tip_index += 1

        except KeyboardInterrupt:
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
            continue
        except EOFError:
            console.print()
            console.print("[dim]Goodbye![/dim]")
            break
        except LaterError as e:
            console.print(f"[red]Error:[/red] {e}")

    repl_context.dispose()


def main() -> None:
    """
    Entry point for REPL mode.

    Called when user runs: later repl (or just later)
    """
    try:
        run_repl()
    except LaterError as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
