"""
FILE: later/repl/commands/system.py
PURPOSE: System command handlers for REPL (help, clear)
"""

from rich.markup import escape

from ..main import console
from ..parser import ParseResult

HELP_SECTIONS = [
    ("Spaces", [
        ("spaces [--all]", "List spaces"),
        ("use <#|id>", "Switch space"),
        ("new space <name>", "Create a space"),
    ]),
    ("Space content", [
        ("ls [notes|todos|lists]", "Show the current space"),
        ("new note <title> [--tag t] [--content c]", "Create a note"),
        ("new todo <name>", "Create a todo list"),
        ("new list <name> [--style s]", "Create a list (bullets, numbered, checkboxes, simple)"),
        ("open <todo|list|note> <#|id>", "Open a container (or read a note)"),
        ("rm <note|todo|list> <#>", "Delete"),
        ("rename <note|todo|list> <#> <name>", "Rename"),
        ("mv <note|todo|list> <#> <pos>", "Move to a position"),
        ("order <note|todo|list> <#,#,...>", "Set the full order"),
    ]),
    ("Open container", [
        ("items", "Show items"),
        ("add <title>", "Add an item (--priority, --due, --notes)"),
        ("check <#[,#...]>", "Toggle done / checked"),
        ("rm <#>", "Delete an item"),
        ("rename <#> <title>", "Rename an item"),
        ("mv <#> <pos>", "Move an item"),
        ("order <#,#,...>", "Set the full item order"),
        ("back", "Close the container"),
    ]),
    ("Other", [
        ("find <text> [--type t] [--tag t]", "Search the space"),
        ("refresh", "Reload from the database"),
        ("clear", "Clear the screen"),
        ("help", "Show this help"),
        ("exit, quit", "Leave (or Ctrl+D)"),
    ]),
]


def handle_help_command(result: ParseResult) -> None:
    """Handle 'help' command - show available commands."""
    console.print("\n[bold cyan]Later[/bold cyan] - commands\n")
    for title, commands in HELP_SECTIONS:
        console.print(f"[bold]{title}:[/bold]")
        for usage, description in commands:
            console.print(f"  [green]{escape(usage)}[/green]", highlight=False)
            console.print(f"      [dim]{description}[/dim]")
        console.print()
    console.print("[dim]Refer to entries by the # shown in tables or by an ID prefix.[/dim]")


def handle_clear_command(result: ParseResult) -> None:
    """Handle 'clear' command - clear the screen."""
    console.clear()
