"""
FILE: later/core/service.py
PURPOSE: Business logic layer for spaces and their content
EXPORTS:
  Spaces:
  - create_space(name, icon, color) -> Space
  - list_spaces(include_archived) -> List[Space]
  - get_space(space_id) -> Space
  - update_space(space_id, name, icon, color) -> Space
  - rename_space(space_id, name) -> Space
  - archive_space(space_id) / unarchive_space(space_id) -> Space
  - delete_space(space_id, current_space_id) -> None
  - get_space_item_count(space_id) -> int
  Notes:
  - create_note, list_notes, get_note, update_note, delete_note, reorder_notes
  Todo lists and items:
  - create_todo_list, list_todo_lists, get_todo_list, update_todo_list,
    delete_todo_list, reorder_todo_lists
  - create_todo_item, list_todo_items, get_todo_item, update_todo_item,
    delete_todo_item, toggle_todo_item, reorder_todo_items
  Lists and items:
  - create_list, list_lists, get_list, update_list, delete_list, reorder_lists
  - create_list_item, list_list_items, get_list_item, update_list_item,
    delete_list_item, toggle_list_item, reorder_list_items
  Cross-cutting:
  - search(query, space_id, content_types, tags, limit, offset) -> List[SearchResult]
  - compact_space(space_id) -> int
  - resolve_id(model, prefix, parent_id) -> str
  - seed_if_first_run() -> Optional[Space]
  - get_current_space() -> Optional[Space]
  - set_current_space(space_id) -> Space
DEPENDENCIES:
  - later.core.repository (all CRUD functions, PartitionStore)
  - later.core.sequence (reorder, compact)
  - later.core.permissions, later.core.preferences, later.core.config
  - later.core.exceptions (ValidationError, NotFoundError, LimitReachedError)
NOTES:
  - All functions validate input and raise descriptive errors
  - No direct database access (use repository layer)
  - Returns domain objects, never dicts or raw SQL results
  - get_* raise NotFoundError instead of returning None
  - Every reorder_* goes through the one generic sequence.reorder
  - Ordinary updates never touch sort_order
"""

import dataclasses
import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from . import permissions, preferences, repository, sequence
from .config import load_settings
from .constants import (
    CONTENT_TYPES,
    DEFAULT_LIST_STYLE,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SPACE_ICON,
    DEFAULT_SPACE_NAME,
    LIST_STYLES,
    MAX_SEARCH_QUERY_LENGTH,
    TODO_PRIORITIES,
    WELCOME_NOTE_CONTENT,
    WELCOME_NOTE_TITLE,
)
from .errors import ErrorCode
from .exceptions import ValidationError
from .models import ListItem, ListModel, Note, SearchResult, Space, TodoItem, TodoList

logger = logging.getLogger(__name__)

# Partition key -> the model it points at
_PARENT_MODELS = {
    Note: Space,
    TodoList: Space,
    ListModel: Space,
    TodoItem: TodoList,
    ListItem: ListModel,
}


# --- Validation helpers ---


def _require_text(value: Optional[str], field: str) -> str:
    """Trimmed text, raising VALIDATION_REQUIRED when empty."""
    value = (value or "").strip()
    if not value:
        raise ValidationError.required_field(field)
    return value


def _optional_text(value: Optional[str]) -> Optional[str]:
    """Trimmed text, None when empty."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Trim, drop empties and duplicates, keep first-seen order."""
    cleaned: List[str] = []
    for tag in tags or ():
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _validate_style(style: str) -> str:
    style = (style or "").strip().lower()
    if style not in LIST_STYLES:
        raise ValidationError.invalid_format(
            "List style", f"'{style}' must be one of: {', '.join(LIST_STYLES)}"
        )
    return style


def _validate_priority(priority: Optional[str]) -> Optional[str]:
    priority = _optional_text(priority)
    if priority is None:
        return None
    priority = priority.lower()
    if priority not in TODO_PRIORITIES:
        raise ValidationError.invalid_format(
            "Priority", f"'{priority}' must be one of: {', '.join(TODO_PRIORITIES)}"
        )
    return priority


def _validate_due_date(due_date: Optional[str]) -> Optional[str]:
    due_date = _optional_text(due_date)
    if due_date is None:
        return None
    try:
        return date.fromisoformat(due_date).isoformat()
    except ValueError:
        raise ValidationError.invalid_format("Due date", f"'{due_date}' is not YYYY-MM-DD")


def _get_or_raise(model, entity_id: str):
    entity = repository.get(model, entity_id)
    if entity is None:
        raise repository.not_found(model, entity_id)
    return entity


def _check_limit(model, parent_id: Optional[str] = None) -> None:
    role = load_settings().role
    if permissions.limit_for(role, model) is None:
        return
    permissions.check_limit(role, model, repository.count(model, parent_id))


def _partition(model, parent_id: str) -> list:
    """
    Entities of one partition, in order.

    Raises:
        NotFoundError: If the parent doesn't exist or isn't visible to this user
    """
    _get_or_raise(_PARENT_MODELS[model], parent_id)
    return repository.fetch_partition(model, parent_id)


def _reorder(model, parent_id: str, ordered_ids: Sequence[str]) -> None:
    _get_or_raise(_PARENT_MODELS[model], parent_id)
    sequence.reorder(repository.PartitionStore(model), parent_id, ordered_ids)


# --- Spaces ---


def create_space(name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Space:
    """
    Create a new space.

    Raises:
        ValidationError: If name is empty or whitespace-only
        LimitReachedError: If the role's space limit is reached
    """
    name = _require_text(name, "Space name")
    _check_limit(Space)

    space = repository.create(
        Space(
            id=repository.new_id(),
            name=name,
            icon=_optional_text(icon),
            color=_optional_text(color),
        )
    )
    logger.info("created space %s", space.id)
    return space


def list_spaces(include_archived: bool = False) -> List[Space]:
    """Spaces ordered by creation date, archived ones only if requested."""
    return repository.list_spaces(include_archived=include_archived)


def get_space(space_id: str) -> Space:
    """
    Raises:
        SpaceNotFoundError: If space_id doesn't exist
    """
    return _get_or_raise(Space, space_id)


def update_space(
    space_id: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> Space:
    """
    Update space fields. None leaves a field unchanged, "" clears icon/color.

    Raises:
        SpaceNotFoundError: If space_id doesn't exist
        ValidationError: If the new name is empty
    """
    space = get_space(space_id)
    changes = {}
    if name is not None:
        changes["name"] = _require_text(name, "Space name")
    if icon is not None:
        changes["icon"] = _optional_text(icon)
    if color is not None:
        changes["color"] = _optional_text(color)
    return repository.update(dataclasses.replace(space, **changes))


def rename_space(space_id: str, name: str) -> Space:
    return update_space(space_id, name=name)


def archive_space(space_id: str) -> Space:
    """Hide a space from the default listing without deleting its content."""
    space = get_space(space_id)
    return repository.update(dataclasses.replace(space, is_archived=True))


def unarchive_space(space_id: str) -> Space:
    space = get_space(space_id)
    return repository.update(dataclasses.replace(space, is_archived=False))


def delete_space(space_id: str, current_space_id: Optional[str] = None) -> None:
    """
    Delete a space and everything in it.

    Args:
        space_id: Space to delete
        current_space_id: The space the user is working in; defaults to the
            remembered current space

    Raises:
        SpaceNotFoundError: If space_id doesn't exist
        ValidationError: OPERATION_NOT_ALLOWED when deleting the current space
    """
    if current_space_id is None:
        current_space_id = preferences.get_current_space_id()
    if space_id == current_space_id:
        raise ValidationError(
            "Cannot delete the current space. Switch to another space first.",
            ErrorCode.OPERATION_NOT_ALLOWED,
            "Space",
        )

    repository.delete(Space, space_id)
    logger.info("deleted space %s", space_id)


def get_space_item_count(space_id: str) -> int:
    """Notes + todo lists + lists in the space."""
    return get_space(space_id).item_count


# --- Notes ---


def create_note(
    space_id: str,
    title: str,
    content: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> Note:
    """
    Create a note at the end of the space's note order.

    Raises:
        ValidationError: If title is empty
        SpaceNotFoundError: If space_id doesn't exist
        LimitReachedError: If the role's note limit is reached
    """
    title = _require_text(title, "Note title")
    get_space(space_id)
    _check_limit(Note, space_id)

    return repository.create(
        Note(
            id=repository.new_id(),
            space_id=space_id,
            title=title,
            content=_optional_text(content),
            tags=_clean_tags(tags),
        )
    )


def list_notes(space_id: str) -> List[Note]:
    return _partition(Note, space_id)


def get_note(note_id: str) -> Note:
    return _get_or_raise(Note, note_id)


def update_note(
    note_id: str,
    title: Optional[str] = None,
    content: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> Note:
    """
    Update note fields. None leaves a field unchanged.

    Raises:
        NoteNotFoundError: If note_id doesn't exist
        ValidationError: If the new title is empty
    """
    note = get_note(note_id)
    changes = {}
    if title is not None:
        changes["title"] = _require_text(title, "Note title")
    if content is not None:
        changes["content"] = _optional_text(content)
    if tags is not None:
        changes["tags"] = _clean_tags(tags)
    return repository.update(dataclasses.replace(note, **changes))


def delete_note(note_id: str) -> None:
    repository.delete(Note, note_id)


def reorder_notes(space_id: str, ordered_ids: Sequence[str]) -> None:
    """
    Resequence the space's notes to match ordered_ids.

    Raises:
        ValidationError: If ordered_ids isn't a permutation of the notes
        StoreError: If a write fails (earlier writes are kept)
    """
    _reorder(Note, space_id, ordered_ids)


# --- Todo Lists ---


def create_todo_list(space_id: str, name: str, description: Optional[str] = None) -> TodoList:
    """
    Raises:
        ValidationError: If name is empty
        SpaceNotFoundError: If space_id doesn't exist
        LimitReachedError: If the role's todo list limit is reached
    """
    name = _require_text(name, "Todo list name")
    get_space(space_id)
    _check_limit(TodoList, space_id)

    return repository.create(
        TodoList(
            id=repository.new_id(),
            space_id=space_id,
            name=name,
            description=_optional_text(description),
        )
    )


def list_todo_lists(space_id: str) -> List[TodoList]:
    return _partition(TodoList, space_id)


def get_todo_list(todo_list_id: str) -> TodoList:
    return _get_or_raise(TodoList, todo_list_id)


def update_todo_list(
    todo_list_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> TodoList:
    todo_list = get_todo_list(todo_list_id)
    changes = {}
    if name is not None:
        changes["name"] = _require_text(name, "Todo list name")
    if description is not None:
        changes["description"] = _optional_text(description)
    return repository.update(dataclasses.replace(todo_list, **changes))


def delete_todo_list(todo_list_id: str) -> None:
    """Delete a todo list and (by cascade) its items."""
    repository.delete(TodoList, todo_list_id)


def reorder_todo_lists(space_id: str, ordered_ids: Sequence[str]) -> None:
    _reorder(TodoList, space_id, ordered_ids)


# --- Todo Items ---


def create_todo_item(
    todo_list_id: str,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[str] = None,
    priority: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> TodoItem:
    """
    Append a task to a todo list.

    Args:
        todo_list_id: Parent todo list
        title: Task title (required)
        description: Optional details
        due_date: Optional ISO date (YYYY-MM-DD)
        priority: Optional low / medium / high
        tags: Optional tags

    Raises:
        ValidationError: On empty title, bad due date or unknown priority
        NotFoundError: If the todo list doesn't exist
    """
    title = _require_text(title, "Todo item title")
    due_date = _validate_due_date(due_date)
    priority = _validate_priority(priority)
    get_todo_list(todo_list_id)

    return repository.create(
        TodoItem(
            id=repository.new_id(),
            todo_list_id=todo_list_id,
            title=title,
            description=_optional_text(description),
            due_date=due_date,
            priority=priority,
            tags=_clean_tags(tags),
        )
    )


def list_todo_items(todo_list_id: str) -> List[TodoItem]:
    return _partition(TodoItem, todo_list_id)


def get_todo_item(item_id: str) -> TodoItem:
    return _get_or_raise(TodoItem, item_id)


def update_todo_item(
    item_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    due_date: Optional[str] = None,
    priority: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    is_completed: Optional[bool] = None,
) -> TodoItem:
    """
    Update task fields. None leaves a field unchanged, "" clears
    description, due date and priority.
    """
    item = get_todo_item(item_id)
    changes = {}
    if title is not None:
        changes["title"] = _require_text(title, "Todo item title")
    if description is not None:
        changes["description"] = _optional_text(description)
    if due_date is not None:
        changes["due_date"] = _validate_due_date(due_date)
    if priority is not None:
        changes["priority"] = _validate_priority(priority)
    if tags is not None:
        changes["tags"] = _clean_tags(tags)
    if is_completed is not None:
        changes["is_completed"] = bool(is_completed)
    return repository.update(dataclasses.replace(item, **changes))


def delete_todo_item(item_id: str) -> None:
    repository.delete(TodoItem, item_id)


def toggle_todo_item(item_id: str) -> TodoItem:
    """Flip is_completed."""
    item = get_todo_item(item_id)
    return repository.update(dataclasses.replace(item, is_completed=not item.is_completed))


def reorder_todo_items(todo_list_id: str, ordered_ids: Sequence[str]) -> None:
    _reorder(TodoItem, todo_list_id, ordered_ids)


# --- Lists ---


def create_list(
    space_id: str,
    name: str,
    icon: Optional[str] = None,
    style: str = DEFAULT_LIST_STYLE,
) -> ListModel:
    """
    Raises:
        ValidationError: If name is empty or style is unknown
        SpaceNotFoundError: If space_id doesn't exist
        LimitReachedError: If the role's list limit is reached
    """
    name = _require_text(name, "List name")
    style = _validate_style(style)
    get_space(space_id)
    _check_limit(ListModel, space_id)

    return repository.create(
        ListModel(
            id=repository.new_id(),
            space_id=space_id,
            name=name,
            icon=_optional_text(icon),
            style=style,
        )
    )


def list_lists(space_id: str) -> List[ListModel]:
    return _partition(ListModel, space_id)


def get_list(list_id: str) -> ListModel:
    return _get_or_raise(ListModel, list_id)


def update_list(
    list_id: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    style: Optional[str] = None,
) -> ListModel:
    list_model = get_list(list_id)
    changes = {}
    if name is not None:
        changes["name"] = _require_text(name, "List name")
    if icon is not None:
        changes["icon"] = _optional_text(icon)
    if style is not None:
        changes["style"] = _validate_style(style)
    return repository.update(dataclasses.replace(list_model, **changes))


def delete_list(list_id: str) -> None:
    repository.delete(ListModel, list_id)


def reorder_lists(space_id: str, ordered_ids: Sequence[str]) -> None:
    _reorder(ListModel, space_id, ordered_ids)


# --- List Items ---


def create_list_item(list_id: str, title: str, notes: Optional[str] = None) -> ListItem:
    title = _require_text(title, "List item title")
    get_list(list_id)

    return repository.create(
        ListItem(
            id=repository.new_id(),
            list_id=list_id,
            title=title,
            notes=_optional_text(notes),
        )
    )


def list_list_items(list_id: str) -> List[ListItem]:
    return _partition(ListItem, list_id)


def get_list_item(item_id: str) -> ListItem:
    return _get_or_raise(ListItem, item_id)


def update_list_item(
    item_id: str,
    title: Optional[str] = None,
    notes: Optional[str] = None,
    is_checked: Optional[bool] = None,
) -> ListItem:
    item = get_list_item(item_id)
    changes = {}
    if title is not None:
        changes["title"] = _require_text(title, "List item title")
    if notes is not None:
        changes["notes"] = _optional_text(notes)
    if is_checked is not None:
        changes["is_checked"] = bool(is_checked)
    return repository.update(dataclasses.replace(item, **changes))


def delete_list_item(item_id: str) -> None:
    repository.delete(ListItem, item_id)


def toggle_list_item(item_id: str) -> ListItem:
    """Flip is_checked."""
    item = get_list_item(item_id)
    return repository.update(dataclasses.replace(item, is_checked=not item.is_checked))


def reorder_list_items(list_id: str, ordered_ids: Sequence[str]) -> None:
    _reorder(ListItem, list_id, ordered_ids)


# --- Search ---


def search(
    query: str,
    space_id: str,
    content_types: Optional[Sequence[str]] = None,
    tags: Optional[Iterable[str]] = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
    offset: int = 0,
) -> List[SearchResult]:
    """
    Search content in a space.

    Args:
        query: Text to look for (case-insensitive substring)
        space_id: Space to search in
        content_types: Types to include (default: all); empty means none
        tags: Tags that notes and todo items must all carry
        limit: Max results per content type
        offset: Results to skip per content type

    Returns:
        Results sorted by updated_at, newest first. Empty for a blank query.

    Raises:
        ValidationError: On an over-long query, missing space, unknown
            content type or bad paging values
    """
    query = (query or "").strip()
    if not query:
        return []
    if len(query) > MAX_SEARCH_QUERY_LENGTH:
        raise ValidationError.out_of_range("Search query length", 1, MAX_SEARCH_QUERY_LENGTH)
    if not space_id:
        raise ValidationError.required_field("Space")

    types = tuple(CONTENT_TYPES if content_types is None else content_types)
    if not types:
        return []
    unknown = [t for t in types if t not in CONTENT_TYPES]
    if unknown:
        raise ValidationError.invalid_format(
            "Content type", f"{', '.join(unknown)} (expected {', '.join(CONTENT_TYPES)})"
        )
    if limit < 1:
        raise ValidationError("Limit must be at least 1", ErrorCode.VALIDATION_OUT_OF_RANGE, "limit")
    if offset < 0:
        raise ValidationError("Offset cannot be negative", ErrorCode.VALIDATION_OUT_OF_RANGE, "offset")

    return repository.search(
        query,
        space_id,
        types,
        tags=_clean_tags(tags),
        limit=limit,
        offset=offset,
    )


# --- Maintenance ---


def compact_space(space_id: str) -> int:
    """
    Close sort_order gaps in every partition of a space.

    Covers the space's notes, todo lists and lists, and the items of each
    todo list and list. Existing order is kept.

    Returns:
        Number of entities rewritten
    """
    get_space(space_id)

    rewritten = 0
    for model in (Note, TodoList, ListModel):
        rewritten += sequence.compact(repository.PartitionStore(model), space_id)
    for todo_list in list_todo_lists(space_id):
        rewritten += sequence.compact(repository.PartitionStore(TodoItem), todo_list.id)
    for list_model in list_lists(space_id):
        rewritten += sequence.compact(repository.PartitionStore(ListItem), list_model.id)

    logger.info("compacted space %s: %d rewritten", space_id, rewritten)
    return rewritten


def resolve_id(model, prefix: str, parent_id: Optional[str] = None) -> str:
    """
    Expand a (possibly shortened) id typed by the user.

    An exact match wins; otherwise the prefix must match exactly one id.
    With parent_id, only that partition is searched.

    Raises:
        ValidationError: If prefix is empty or ambiguous
        NotFoundError: If nothing matches
    """
    prefix = _require_text(prefix, f"{model.LABEL} id")
    matches = repository.find_ids_by_prefix(model, prefix, parent_id)
    if prefix in matches:
        return prefix
    if not matches:
        raise repository.not_found(model, prefix)
    if len(matches) > 1:
        raise ValidationError.invalid_format(
            f"{model.LABEL} id", f"'{prefix}' is ambiguous ({len(matches)} matches)"
        )
    return matches[0]


# --- First Run & Current Space ---


def seed_if_first_run() -> Optional[Space]:
    """
    Create the default space and a welcome note when no space exists.

    Returns:
        The new space, or None if spaces already existed
    """
    if repository.count(Space) > 0:
        return None

    space = create_space(DEFAULT_SPACE_NAME, icon=DEFAULT_SPACE_ICON)
    create_note(space.id, WELCOME_NOTE_TITLE, content=WELCOME_NOTE_CONTENT)
    preferences.set_current_space_id(space.id)
    logger.info("seeded first-run space %s", space.id)
    return get_space(space.id)


def get_current_space() -> Optional[Space]:
    """
    The remembered space, falling back to the oldest unarchived one.

    The fallback is remembered. Returns None when there are no spaces.
    """
    space_id = preferences.get_current_space_id()
    if space_id:
        space = repository.get(Space, space_id)
        if space is not None and not space.is_archived:
            return space

    spaces = list_spaces()
    if not spaces:
        return None
    preferences.set_current_space_id(spaces[0].id)
    return spaces[0]


def set_current_space(space_id: str) -> Space:
    """
    Raises:
        SpaceNotFoundError: If space_id doesn't exist
    """
    space = get_space(space_id)
    preferences.set_current_space_id(space.id)
    return space
