"""
FILE: later/core/controllers.py
PURPOSE: Stateful views over one partition, kept in sync with the store
EXPORTS:
  - PartitionController (base for orderable collections)
  - NotesController, TodoListsController, ListsController (per space)
  - TodoItemsController, ListItemsController (per container)
  - SpacesController
DEPENDENCIES:
  - later.core.service (all remote calls)
  - later.core.sequence (move)
  - later.core.cache (Snapshot)
NOTES:
  - Every call publishes Loading (keeping the cached value), then Data on
    success or Error (still keeping the last good value) on failure
  - create/update/delete/toggle patch the cached list in place when it
    holds current data, and refetch when it is stale;
    reorder refetches so the cache holds what was actually written
  - LimitReachedError is re-raised to the caller and the previous state is
    restored, so the UI can prompt instead of showing an error
  - Only LaterError is turned into Error state; anything else propagates
  - After dispose() nothing is published
"""

import logging
from typing import Callable, List, Optional, Sequence

from . import repository, sequence, service
from .cache import DATA, Snapshot
from .exceptions import LaterError, LimitReachedError, ValidationError
from .models import ListItem, ListModel, Note, Space, TodoItem, TodoList

logger = logging.getLogger(__name__)

Listener = Callable[[Snapshot], None]


class _CachedCollection:
    """Snapshot publishing shared by all controllers."""

    model = None

    def __init__(self):
        self._listeners: List[Listener] = []
        self._disposed = False
        self.state: Snapshot = Snapshot.loading()

    # --- Hooks ---

    def _fetch(self) -> list:
        raise NotImplementedError

    # --- Observation ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener on every state change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispose(self) -> None:
        """Stop publishing; calls already running still complete."""
        self._disposed = True
        self._listeners.clear()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def items(self) -> list:
        """Cached value (possibly stale), empty before the first load."""
        return list(self.state.value or [])

    def _publish(self, snapshot: Snapshot) -> None:
        if self._disposed:
            return
        self.state = snapshot
        for listener in list(self._listeners):
            listener(snapshot)

    # --- Calls ---

    def refresh(self) -> None:
        """Refetch the whole collection."""
        previous = self.state.value
        self._publish(Snapshot.loading(previous))
        try:
            items = self._fetch()
        except LaterError as e:
            logger.warning("%s refresh failed: %s", type(self).__name__, e)
            self._publish(Snapshot.failure(e, previous))
            return
        self._publish(Snapshot.data(items))

    def _call(self, action: Callable, apply: Callable[[list, object], list]):
        """
        Run a remote call and patch the cache with its result.

        The cache is patched only when it held current data; a stale cache
        (failed load, partial reorder) is refetched instead.

        Returns:
            The call's result, or None if it failed (state holds the error)
        """
        before = self.state
        previous = before.value
        self._publish(Snapshot.loading(previous))
        try:
            result = action()
        except LimitReachedError:
            self._publish(before)
            raise
        except LaterError as e:
            logger.warning("%s call failed: %s", type(self).__name__, e)
            self._publish(Snapshot.failure(e, previous))
            return None

        if before.status == DATA:
            self._publish(Snapshot.data(apply(list(previous or []), result)))
            return result

        try:
            items = self._fetch()
        except LaterError as e:
            logger.warning("%s refetch after call failed: %s", type(self).__name__, e)
            self._publish(Snapshot.failure(e, previous))
            return result
        self._publish(Snapshot.data(items))
        return result

    def find(self, ref: str):
        """
        Look up a cached entity by 1-based position or id prefix.

        Raises:
            ValidationError: If the prefix matches more than one entity
            NotFoundError: If nothing matches
        """
        items = self.items
        ref = (ref or "").strip()
        if ref.isdigit() and 1 <= int(ref) <= len(items):
            return items[int(ref) - 1]

        matches = [entity for entity in items if entity.id.startswith(ref)] if ref else []
        exact = [entity for entity in matches if entity.id == ref]
        if exact:
            return exact[0]
        if len(matches) > 1:
            raise ValidationError.invalid_format(
                f"{self.model.LABEL} id", f"'{ref}' is ambiguous ({len(matches)} matches)"
            )
        if not matches:
            raise repository.not_found(self.model, ref)
        return matches[0]


def _inserted(items: list, entity) -> list:
    """Insert keeping sort_order order (after any equal values)."""
    position = len(items)
    for index, existing in enumerate(items):
        if existing.sort_order > entity.sort_order:
            position = index
            break
    items.insert(position, entity)
    return items


def _replaced(items: list, entity) -> list:
    return [entity if existing.id == entity.id else existing for existing in items]


def _without(entity_id: str) -> Callable[[list, object], list]:
    def apply(items: list, _result) -> list:
        return [existing for existing in items if existing.id != entity_id]

    return apply


class PartitionController(_CachedCollection):
    """
    Cached, observable view of one partition of an orderable type.

    Subclasses bind the service functions for their type.

    Example:
        notes = NotesController(space_id)
        notes.create("Groceries")
        notes.reorder([n.id for n in reversed(notes.items)])
    """

    def __init__(self, parent_id: str):
        super().__init__()
        self.parent_id = parent_id
        self.refresh()

    # --- Hooks ---

    def _create_remote(self, *args, **kwargs):
        raise NotImplementedError

    def _update_remote(self, entity_id: str, **changes):
        raise NotImplementedError

    def _delete_remote(self, entity_id: str) -> None:
        raise NotImplementedError

    def _reorder_remote(self, ordered_ids: Sequence[str]) -> None:
        raise NotImplementedError

    # --- Operations ---

    def create(self, *args, **kwargs):
        return self._call(lambda: self._create_remote(*args, **kwargs), _inserted)

    def update(self, entity_id: str, **changes):
        return self._call(lambda: self._update_remote(entity_id, **changes), _replaced)

    def delete(self, entity_id: str) -> bool:
        """Returns: True if the delete reached the store."""
        result = self._call(
            lambda: self._delete_remote(entity_id) or True, _without(entity_id)
        )
        return bool(result)

    def reorder(self, ordered_ids: Sequence[str]) -> bool:
        """
        Resequence the partition, then refetch.

        Returns:
            True on success; on failure the state holds the error and the
            last good value (which may no longer match the store)
        """
        previous = self.state.value
        self._publish(Snapshot.loading(previous))
        try:
            self._reorder_remote(list(ordered_ids))
            items = self._fetch()
        except LaterError as e:
            logger.warning("%s reorder failed: %s", type(self).__name__, e)
            self._publish(Snapshot.failure(e, previous))
            return False

        self._publish(Snapshot.data(items))
        return True

    def move(self, entity_id: str, position: int) -> bool:
        """Move one entity to a 1-based position (clamped), keeping the rest in order."""
        ordered = sequence.move([entity.id for entity in self.items], entity_id, position)
        return self.reorder(ordered)


class _TogglingController(PartitionController):
    def _toggle_remote(self, entity_id: str):
        raise NotImplementedError

    def toggle(self, entity_id: str):
        return self._call(lambda: self._toggle_remote(entity_id), _replaced)


class NotesController(PartitionController):
    model = Note

    def _fetch(self):
        return service.list_notes(self.parent_id)

    def _create_remote(self, title, content=None, tags=None):
        return service.create_note(self.parent_id, title, content=content, tags=tags)

    def _update_remote(self, entity_id, **changes):
        return service.update_note(entity_id, **changes)

    def _delete_remote(self, entity_id):
        service.delete_note(entity_id)

    def _reorder_remote(self, ordered_ids):
        service.reorder_notes(self.parent_id, ordered_ids)


class TodoListsController(PartitionController):
    model = TodoList

    def _fetch(self):
        return service.list_todo_lists(self.parent_id)

    def _create_remote(self, name, description=None):
        return service.create_todo_list(self.parent_id, name, description=description)

    def _update_remote(self, entity_id, **changes):
        return service.update_todo_list(entity_id, **changes)

    def _delete_remote(self, entity_id):
        service.delete_todo_list(entity_id)

    def _reorder_remote(self, ordered_ids):
        service.reorder_todo_lists(self.parent_id, ordered_ids)


class ListsController(PartitionController):
    model = ListModel

    def _fetch(self):
        return service.list_lists(self.parent_id)

    def _create_remote(self, name, icon=None, style=None):
        if style is None:
            return service.create_list(self.parent_id, name, icon=icon)
        return service.create_list(self.parent_id, name, icon=icon, style=style)

    def _update_remote(self, entity_id, **changes):
        return service.update_list(entity_id, **changes)

    def _delete_remote(self, entity_id):
        service.delete_list(entity_id)

    def _reorder_remote(self, ordered_ids):
        service.reorder_lists(self.parent_id, ordered_ids)


class TodoItemsController(_TogglingController):
    model = TodoItem

    def _fetch(self):
        return service.list_todo_items(self.parent_id)

    def _create_remote(self, title, **fields):
        return service.create_todo_item(self.parent_id, title, **fields)

    def _update_remote(self, entity_id, **changes):
        return service.update_todo_item(entity_id, **changes)

    def _delete_remote(self, entity_id):
        service.delete_todo_item(entity_id)

    def _toggle_remote(self, entity_id):
        return service.toggle_todo_item(entity_id)

    def _reorder_remote(self, ordered_ids):
        service.reorder_todo_items(self.parent_id, ordered_ids)


class ListItemsController(_TogglingController):
    model = ListItem

    def _fetch(self):
        return service.list_list_items(self.parent_id)

    def _create_remote(self, title, notes=None):
        return service.create_list_item(self.parent_id, title, notes=notes)

    def _update_remote(self, entity_id, **changes):
        return service.update_list_item(entity_id, **changes)

    def _delete_remote(self, entity_id):
        service.delete_list_item(entity_id)

    def _toggle_remote(self, entity_id):
        return service.toggle_list_item(entity_id)

    def _reorder_remote(self, ordered_ids):
        service.reorder_list_items(self.parent_id, ordered_ids)


class SpacesController(_CachedCollection):
    """Spaces are not orderable: listed by creation date, no reorder."""

    model = Space

    def __init__(self, include_archived: bool = False):
        super().__init__()
        self.include_archived = include_archived
        self.refresh()

    def _fetch(self):
        return service.list_spaces(include_archived=self.include_archived)

    def create(self, name: str, icon: Optional[str] = None, color: Optional[str] = None):
        return self._call(
            lambda: service.create_space(name, icon=icon, color=color),
            lambda items, space: items + [space],
        )

    def rename(self, space_id: str, name: str):
        return self._call(lambda: service.rename_space(space_id, name), _replaced)

    def archive(self, space_id: str):
        if self.include_archived:
            return self._call(lambda: service.archive_space(space_id), _replaced)
        return self._call(lambda: service.archive_space(space_id), _without(space_id))

    def delete(self, space_id: str, current_space_id: Optional[str] = None) -> bool:
        result = self._call(
            lambda: service.delete_space(space_id, current_space_id) or True,
            _without(space_id),
        )
        return bool(result)
