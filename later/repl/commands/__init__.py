"""
FILE: later/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .spaces import (
    handle_spaces_command,
    handle_use_command,
)
from .content import (
    handle_ls_command,
    handle_new_command,
    handle_open_command,
    handle_back_command,
    handle_items_command,
    handle_add_command,
    handle_check_command,
    handle_rm_command,
    handle_rename_command,
    handle_mv_command,
    handle_order_command,
    handle_refresh_command,
    handle_find_command,
)
from .system import (
    handle_help_command,
    handle_clear_command,
)

__all__ = [
    "handle_spaces_command",
    "handle_use_command",
    "handle_ls_command",
    "handle_new_command",
    "handle_open_command",
    "handle_back_command",
    "handle_items_command",
    "handle_add_command",
    "handle_check_command",
    "handle_rm_command",
    "handle_rename_command",
    "handle_mv_command",
    "handle_order_command",
    "handle_refresh_command",
    "handle_find_command",
    "handle_help_command",
    "handle_clear_command",
]
