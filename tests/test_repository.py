"""
Test the SQLite repository: append position, sort_order protection on
ordinary updates, cascades, owner scoping, prefix lookup and search.
"""

import dataclasses

import pytest

from later.core import repository, sequence
from later.core.errors import ErrorCode
from later.core.exceptions import NoteNotFoundError, SpaceNotFoundError, StoreError
from later.core.models import ListItem, ListModel, Note, Space, TodoItem, TodoList


def _space(name="Home"):
    return repository.create(Space(id=repository.new_id(), name=name))


def _note(space_id, title, **fields):
    return repository.create(
        Note(id=repository.new_id(), space_id=space_id, title=title, **fields)
    )


def test_schema_created_on_first_connection(later_home):
    conn = repository.get_connection()
    try:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    finally:
        conn.close()

    assert {"spaces", "notes", "todo_lists", "todo_items", "lists", "list_items"} <= tables
    assert (later_home / "later.db").exists()


def test_create_stamps_owner_and_timestamps():
    space = _space()

    assert space.user_id == "local"
    assert space.created_at
    assert space.updated_at
    assert space.item_count == 0


def test_create_appends_to_end_of_partition():
    space = _space()
    notes = [_note(space.id, title) for title in ("a", "b", "c")]

    assert [n.sort_order for n in notes] == [0, 1, 2]


def test_append_after_delete_uses_max_plus_one():
    """Deleting leaves a gap; the next create goes after the current max."""
    space = _space()
    first = _note(space.id, "a")
    second = _note(space.id, "b")
    _note(space.id, "c")

    repository.delete(Note, second.id)
    fourth = _note(space.id, "d")

    assert fourth.sort_order == 3
    orders = [n.sort_order for n in repository.fetch_partition(Note, space.id)]
    assert orders == [0, 2, 3]
    assert repository.get(Note, first.id).sort_order == 0


def test_partitions_number_independently():
    one = _space("one")
    two = _space("two")
    _note(one.id, "a")
    _note(one.id, "b")

    assert _note(two.id, "c").sort_order == 0


def test_fetch_partition_sorted_by_sort_order():
    space = _space()
    notes = [_note(space.id, title) for title in ("a", "b", "c")]
    sequence.reorder(repository.PartitionStore(Note), space.id, [notes[2].id, notes[0].id, notes[1].id])

    titles = [n.title for n in repository.fetch_partition(Note, space.id)]

    assert titles == ["c", "a", "b"]


def test_update_from_stale_copy_keeps_reordered_position():
    """An edit made from a copy read before a reorder must not undo it."""
    space = _space()
    a = _note(space.id, "a")
    b = _note(space.id, "b")
    stale_a = repository.get(Note, a.id)

    sequence.reorder(repository.PartitionStore(Note), space.id, [b.id, a.id])
    updated = repository.update(dataclasses.replace(stale_a, title="a (edited)"))

    assert updated.title == "a (edited)"
    assert updated.sort_order == 1, "update must not write sort_order"
    assert [n.id for n in repository.fetch_partition(Note, space.id)] == [b.id, a.id]


def test_update_never_moves_entity_between_partitions():
    one = _space("one")
    two = _space("two")
    note = _note(one.id, "a")

    repository.update(dataclasses.replace(note, space_id=two.id))

    assert repository.get(Note, note.id).space_id == one.id


def test_save_writes_sort_order():
    space = _space()
    note = _note(space.id, "a")

    saved = repository.save(dataclasses.replace(note, sort_order=7))

    assert saved.sort_order == 7


def test_update_and_delete_missing_raise_typed_not_found():
    space = _space()
    ghost = Note(id="missing", space_id=space.id, title="x")

    with pytest.raises(NoteNotFoundError) as exc_info:
        repository.update(ghost)
    assert exc_info.value.code == ErrorCode.NOTE_NOT_FOUND

    with pytest.raises(SpaceNotFoundError):
        repository.delete(Space, "missing")


def test_get_missing_returns_none():
    assert repository.get(Space, "missing") is None


def test_deleting_space_cascades_to_content_and_items():
    space = _space()
    note = _note(space.id, "a")
    todo_list = repository.create(
        TodoList(id=repository.new_id(), space_id=space.id, name="Groceries")
    )
    item = repository.create(
        TodoItem(id=repository.new_id(), todo_list_id=todo_list.id, title="Milk")
    )

    repository.delete(Space, space.id)

    assert repository.get(Note, note.id) is None
    assert repository.get(TodoList, todo_list.id) is None
    assert repository.get(TodoItem, item.id) is None


def test_foreign_key_violation_maps_to_store_error():
    with pytest.raises(StoreError) as exc_info:
        _note("no-such-space", "orphan")

    assert exc_info.value.code == ErrorCode.DATABASE_FOREIGN_KEY_VIOLATION


def test_computed_counts():
    space = _space()
    _note(space.id, "a")
    todo_list = repository.create(
        TodoList(id=repository.new_id(), space_id=space.id, name="Tasks")
    )
    list_model = repository.create(
        ListModel(id=repository.new_id(), space_id=space.id, name="Books")
    )
    for title, done in (("one", True), ("two", False), ("three", True)):
        repository.create(
            TodoItem(id=repository.new_id(), todo_list_id=todo_list.id, title=title, is_completed=done)
        )
    repository.create(ListItem(id=repository.new_id(), list_id=list_model.id, title="Dune"))

    assert repository.get(Space, space.id).item_count == 3
    fetched = repository.get(TodoList, todo_list.id)
    assert (fetched.total_item_count, fetched.completed_item_count) == (3, 2)
    assert fetched.progress == pytest.approx(2 / 3)
    fetched_list = repository.get(ListModel, list_model.id)
    assert (fetched_list.total_item_count, fetched_list.checked_item_count) == (1, 0)


def test_owned_rows_are_scoped_to_user(monkeypatch):
    space = _space()
    note = _note(space.id, "private")

    monkeypatch.setenv("LATER_USER_ID", "someone-else")

    assert repository.get(Space, space.id) is None
    assert repository.get(Note, note.id) is None
    assert repository.fetch_partition(Note, space.id) == []
    assert repository.list_spaces() == []
    with pytest.raises(SpaceNotFoundError):
        repository.delete(Space, space.id)


def test_list_spaces_hides_archived():
    active = _space("active")
    archived = _space("archived")
    repository.update(dataclasses.replace(archived, is_archived=True))

    assert [s.id for s in repository.list_spaces()] == [active.id]
    assert [s.id for s in repository.list_spaces(include_archived=True)] == [active.id, archived.id]


def test_find_ids_by_prefix():
    space = _space()
    note = _note(space.id, "a")

    assert repository.find_ids_by_prefix(Note, note.id[:6]) == [note.id]
    assert repository.find_ids_by_prefix(Note, "%") == []
    assert repository.find_ids_by_prefix(Note, "_") == []


def test_count():
    space = _space()
    _note(space.id, "a")
    _note(space.id, "b")

    assert repository.count(Note, space.id) == 2
    assert repository.count(Space) == 1


def test_partition_store_rejects_unorderable_model():
    with pytest.raises(TypeError):
        repository.PartitionStore(Space)


def test_partition_store_persist_writes_sort_order():
    space = _space()
    note = _note(space.id, "a")
    store = repository.PartitionStore(Note)

    store.persist(dataclasses.replace(note, sort_order=5))

    assert store.fetch_partition(space.id)[0].sort_order == 5


class TestSearch:
    def _content(self):
        space = _space()
        note = _note(space.id, "Trip ideas", content="Visit LISBON in May", tags=["travel", "2025"])
        _note(space.id, "Work plan", tags=["work"])
        todo_list = repository.create(
            TodoList(id=repository.new_id(), space_id=space.id, name="Packing")
        )
        item = repository.create(
            TodoItem(
                id=repository.new_id(),
                todo_list_id=todo_list.id,
                title="Buy Lisbon guide",
                tags=["travel"],
            )
        )
        return space, note, todo_list, item

    def test_matches_title_and_content_case_insensitively(self):
        space, note, _, item = self._content()

        results = repository.search("lisbon", space.id, ("note", "todo_item"))

        assert {r.id for r in results} == {note.id, item.id}

    def test_item_results_carry_parent(self):
        space, _, todo_list, item = self._content()

        results = repository.search("guide", space.id, ("todo_item",))

        assert len(results) == 1
        assert results[0].parent_id == todo_list.id
        assert results[0].parent_name == "Packing"

    def test_tags_are_and_filtered(self):
        space, note, _, _ = self._content()

        assert [r.id for r in repository.search("i", space.id, ("note",), tags=["travel", "2025"])] == [note.id]
        assert repository.search("i", space.id, ("note",), tags=["travel", "work"]) == []

    def test_other_space_not_searched(self):
        _, _, _, _ = self._content()
        other = _space("other")

        assert repository.search("lisbon", other.id, ("note", "todo_item")) == []

    def test_wildcards_are_literal(self):
        space, _, _, _ = self._content()

        assert repository.search("%", space.id, ("note",)) == []

    def test_limit_applies_per_type(self):
        space, _, _, _ = self._content()

        results = repository.search("p", space.id, ("note", "todo_list"), limit=1)

        assert sorted(r.type for r in results) == ["note", "todo_list"]
