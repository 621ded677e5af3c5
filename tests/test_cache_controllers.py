"""
Test snapshots and the controllers that keep cached collections in sync
with the store.
"""

import pytest

from later.core import repository, service
from later.core.cache import DATA, ERROR, LOADING, Snapshot
from later.core.controllers import (
    ListItemsController,
    ListsController,
    NotesController,
    SpacesController,
    TodoItemsController,
    TodoListsController,
)
from later.core.errors import ErrorCode
from later.core.exceptions import (
    LimitReachedError,
    NotFoundError,
    NoteNotFoundError,
    StoreError,
    ValidationError,
)


class Recorder:
    def __init__(self):
        self.states = []

    def __call__(self, snapshot):
        self.states.append(snapshot)

    @property
    def statuses(self):
        return [s.status for s in self.states]


# --- Snapshot ---


def test_snapshot_states():
    loading = Snapshot.loading(["a"])
    assert loading.is_loading and loading.is_stale
    assert loading.require() == ["a"]

    data = Snapshot.data(["b"])
    assert data.status == DATA and not data.is_stale

    error = StoreError("down")
    failed = Snapshot.failure(error, ["b"])
    assert failed.has_error and failed.is_stale
    assert failed.require() == ["b"]


def test_snapshot_require_without_value():
    with pytest.raises(StoreError):
        Snapshot.failure(StoreError("down")).require()
    with pytest.raises(RuntimeError):
        Snapshot.loading().require()


# --- Loading ---


def test_controller_loads_on_creation(space):
    service.create_note(space.id, "a")

    notes = NotesController(space.id)

    assert notes.state.status == DATA
    assert [n.title for n in notes.items] == ["a"]


def test_refresh_publishes_loading_then_data(space):
    notes = NotesController(space.id)
    recorder = Recorder()
    notes.subscribe(recorder)

    notes.refresh()

    assert recorder.statuses == [LOADING, DATA]


def test_refresh_failure_keeps_last_value(space, monkeypatch):
    service.create_note(space.id, "a")
    notes = NotesController(space.id)

    def broken(space_id):
        raise StoreError("offline", code=ErrorCode.DATABASE_UNAVAILABLE)

    monkeypatch.setattr(service, "list_notes", broken)
    notes.refresh()

    assert notes.state.status == ERROR
    assert notes.state.error.code == ErrorCode.DATABASE_UNAVAILABLE
    assert [n.title for n in notes.items] == ["a"]


# --- Mutations ---


def test_create_patches_cache_in_order(space):
    notes = NotesController(space.id)
    recorder = Recorder()
    notes.subscribe(recorder)

    first = notes.create("first")
    second = notes.create("second", content="body", tags=["x"])

    assert [n.id for n in notes.items] == [first.id, second.id]
    assert second.tags == ["x"]
    assert recorder.statuses == [LOADING, DATA, LOADING, DATA]


def test_failed_create_keeps_value_and_returns_none(space):
    notes = NotesController(space.id)
    notes.create("kept")

    result = notes.create("   ")

    assert result is None
    assert notes.state.status == ERROR
    assert isinstance(notes.state.error, ValidationError)
    assert [n.title for n in notes.items] == ["kept"]


def test_update_of_deleted_entity_keeps_last_good_value(space):
    notes = NotesController(space.id)
    note = notes.create("a")
    service.delete_note(note.id)

    assert notes.update(note.id, title="b") is None
    assert isinstance(notes.state.error, NoteNotFoundError)
    assert [n.title for n in notes.items] == ["a"]


def test_update_replaces_in_place(space):
    notes = NotesController(space.id)
    a = notes.create("a")
    notes.create("b")

    notes.update(a.id, title="a2")

    assert [n.title for n in notes.items] == ["a2", "b"]


def test_delete(space):
    notes = NotesController(space.id)
    a = notes.create("a")

    assert notes.delete(a.id) is True
    assert notes.items == []
    assert notes.delete(a.id) is False
    assert notes.state.status == ERROR


def test_limit_reached_is_raised_and_state_restored(space, anonymous, monkeypatch):
    monkeypatch.setattr("later.core.permissions.ANONYMOUS_LIMITS", {"lists": 1})
    lists = ListsController(space.id)
    lists.create("only")
    before = lists.state

    with pytest.raises(LimitReachedError):
        lists.create("second")

    assert lists.state is before
    assert [l.name for l in lists.items] == ["only"]


# --- Reorder ---


def test_reorder_refetches(space):
    notes = NotesController(space.id)
    a, b, c = (notes.create(t) for t in "abc")

    assert notes.reorder([c.id, a.id, b.id]) is True

    assert [n.title for n in notes.items] == ["c", "a", "b"]
    assert [n.sort_order for n in notes.items] == [0, 1, 2]
    assert notes.state.status == DATA


def test_reorder_with_unknown_id_fails_without_writes(space):
    notes = NotesController(space.id)
    a, b = (notes.create(t) for t in "ab")

    assert notes.reorder([b.id, "ghost"]) is False

    assert notes.state.status == ERROR
    assert isinstance(notes.state.error, ValidationError)
    assert [n.sort_order for n in service.list_notes(space.id)] == [0, 1]
    assert [n.title for n in notes.items] == ["a", "b"]


def test_reorder_partial_failure_surfaces_store_error(space, monkeypatch):
    notes = NotesController(space.id)
    a, b, c = (notes.create(t) for t in "abc")

    real_save = repository.save
    calls = []

    def flaky_save(entity):
        calls.append(entity.id)
        if len(calls) == 2:
            raise StoreError("lost connection", code=ErrorCode.DATABASE_UNAVAILABLE)
        return real_save(entity)

    monkeypatch.setattr(repository, "save", flaky_save)

    assert notes.reorder([c.id, b.id, a.id]) is False
    assert notes.state.error.code == ErrorCode.DATABASE_UNAVAILABLE
    # c moved to 0; b and a were never written
    stored = {n.title: n.sort_order for n in service.list_notes(space.id)}
    assert stored == {"a": 0, "b": 1, "c": 0}


def test_create_after_partial_reorder_refetches(space, monkeypatch):
    notes = NotesController(space.id)
    a, b, c = (notes.create(t) for t in "abc")
    real_save = repository.save
    calls = []

    def flaky_save(entity):
        calls.append(entity.id)
        if len(calls) == 2:
            raise StoreError("lost connection", code=ErrorCode.DATABASE_UNAVAILABLE)
        return real_save(entity)

    monkeypatch.setattr(repository, "save", flaky_save)
    notes.reorder([c.id, b.id, a.id])
    assert notes.state.is_stale

    notes.create("d")

    assert notes.state.status == DATA
    assert [n.title for n in notes.items] == [n.title for n in service.list_notes(space.id)]
    assert [n.title for n in notes.items] == ["a", "c", "b", "d"]


def test_create_after_failed_load_refetches(space, monkeypatch):
    service.create_note(space.id, "a")
    service.create_note(space.id, "b")
    real_list = service.list_notes

    def broken(space_id):
        raise StoreError("offline", code=ErrorCode.DATABASE_UNAVAILABLE)

    monkeypatch.setattr(service, "list_notes", broken)
    notes = NotesController(space.id)
    assert notes.state.status == ERROR
    assert notes.items == []

    monkeypatch.setattr(service, "list_notes", real_list)
    notes.create("new")

    assert notes.state.status == DATA
    assert [n.title for n in notes.items] == ["a", "b", "new"]


def test_move(space):
    notes = NotesController(space.id)
    a, b, c = (notes.create(t) for t in "abc")

    assert notes.move(c.id, 1)
    assert [n.title for n in notes.items] == ["c", "a", "b"]

    assert notes.move(c.id, 99)
    assert [n.title for n in notes.items] == ["a", "b", "c"]


# --- Lookup ---


def test_find_by_position_and_prefix(space):
    notes = NotesController(space.id)
    a = notes.create("a")
    b = notes.create("b")

    assert notes.find("2").id == b.id
    assert notes.find(a.id[:8]).id == a.id
    with pytest.raises(NotFoundError):
        notes.find("zzzz")


# --- Disposal ---


def test_dispose_stops_publishing(space):
    notes = NotesController(space.id)
    recorder = Recorder()
    notes.subscribe(recorder)
    notes.dispose()

    created = notes.create("after dispose")

    assert created is not None
    assert recorder.states == []
    assert notes.disposed
    assert [n.title for n in service.list_notes(space.id)] == ["after dispose"]


def test_unsubscribe(space):
    notes = NotesController(space.id)
    recorder = Recorder()
    unsubscribe = notes.subscribe(recorder)
    unsubscribe()

    notes.refresh()

    assert recorder.states == []


# --- Other controllers ---


def test_todo_items_controller_toggle(space):
    todo_list = service.create_todo_list(space.id, "Groceries")
    items = TodoItemsController(todo_list.id)
    milk = items.create("Milk", priority="high")

    toggled = items.toggle(milk.id)

    assert toggled.is_completed
    assert items.items[0].is_completed
    assert items.items[0].priority == "high"


def test_list_items_controller(space):
    list_model = service.create_list(space.id, "Books")
    items = ListItemsController(list_model.id)
    dune = items.create("Dune", notes="Herbert")
    emma = items.create("Emma")

    assert items.reorder([emma.id, dune.id])
    assert items.toggle(dune.id).is_checked
    assert [i.title for i in items.items] == ["Emma", "Dune"]


def test_todo_lists_and_lists_controllers(space):
    todo_lists = TodoListsController(space.id)
    lists = ListsController(space.id)

    todo_lists.create("Groceries", description="weekly")
    lists.create("Books", style="numbered")
    lists.create("Films")

    assert todo_lists.items[0].description == "weekly"
    assert [l.style for l in lists.items] == ["numbered", "bullets"]


def test_spaces_controller(space):
    spaces = SpacesController()
    other = spaces.create("Other")

    spaces.rename(other.id, "Renamed")
    assert [s.name for s in spaces.items] == ["Test space", "Renamed"]

    spaces.archive(other.id)
    assert [s.id for s in spaces.items] == [space.id]

    assert spaces.delete(space.id) is False
    assert spaces.state.error.code == ErrorCode.OPERATION_NOT_ALLOWED
    assert spaces.delete(other.id) is True
