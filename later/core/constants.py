"""
FILE: later/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - LIST_STYLES / DEFAULT_LIST_STYLE: Display styles for custom lists
  - TODO_PRIORITIES: Valid todo item priorities
  - ROLE_ANONYMOUS / ROLE_AUTHENTICATED / VALID_ROLES: User roles
  - ANONYMOUS_LIMITS: Creation limits for anonymous users
  - MAX_SEARCH_QUERY_LENGTH, DEFAULT_SEARCH_LIMIT
  - CONTENT_TYPES: Searchable content type names
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
"""

# Custom list styles
LIST_STYLE_BULLETS = "bullets"
LIST_STYLE_NUMBERED = "numbered"
LIST_STYLE_CHECKBOXES = "checkboxes"
LIST_STYLE_SIMPLE = "simple"
LIST_STYLES = (
    LIST_STYLE_BULLETS,
    LIST_STYLE_NUMBERED,
    LIST_STYLE_CHECKBOXES,
    LIST_STYLE_SIMPLE,
)
DEFAULT_LIST_STYLE = LIST_STYLE_BULLETS

# Todo item priorities
TODO_PRIORITIES = ("low", "medium", "high")

# User roles
ROLE_ANONYMOUS = "anonymous"
ROLE_AUTHENTICATED = "authenticated"
VALID_ROLES = (ROLE_ANONYMOUS, ROLE_AUTHENTICATED)
DEFAULT_ROLE = ROLE_AUTHENTICATED

# Owner of rows when no account is configured
LOCAL_USER_ID = "local"

# Per-role limits (keyed by table name, per space except "spaces")
ANONYMOUS_LIMITS = {
    "spaces": 1,
    "notes": 20,
    "todo_lists": 10,
    "lists": 5,
}

# Search
MAX_SEARCH_QUERY_LENGTH = 500
DEFAULT_SEARCH_LIMIT = 50

CONTENT_NOTE = "note"
CONTENT_TODO_LIST = "todo_list"
CONTENT_LIST = "list"
CONTENT_TODO_ITEM = "todo_item"
CONTENT_LIST_ITEM = "list_item"
CONTENT_TYPES = (
    CONTENT_NOTE,
    CONTENT_TODO_LIST,
    CONTENT_LIST,
    CONTENT_TODO_ITEM,
    CONTENT_LIST_ITEM,
)

# Seed data
DEFAULT_SPACE_NAME = "Personal"
DEFAULT_SPACE_ICON = "🏠"
WELCOME_NOTE_TITLE = "Welcome to Later"
WELCOME_NOTE_CONTENT = (
    "Capture notes, todo lists and lists in spaces.\n"
    "Try 'later note add', 'later todo add' or just run 'later' for the REPL."
)
