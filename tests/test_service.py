"""
Test the service layer: validation, role limits, current space handling,
first-run seeding, id resolution, reordering and compaction.
"""

import pytest

from later.core import preferences, repository, service
from later.core.constants import ANONYMOUS_LIMITS, WELCOME_NOTE_TITLE
from later.core.errors import ErrorCode
from later.core.exceptions import (
    LimitReachedError,
    NotFoundError,
    NoteNotFoundError,
    SpaceNotFoundError,
    ValidationError,
)
from later.core.models import Note, TodoItem


# --- Spaces ---


def test_create_space_trims_name():
    space = service.create_space("  Work  ", icon=" 💼 ", color="")

    assert space.name == "Work"
    assert space.icon == "💼"
    assert space.color is None


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_space_requires_name(name):
    with pytest.raises(ValidationError) as exc_info:
        service.create_space(name)

    assert exc_info.value.code == ErrorCode.VALIDATION_REQUIRED


def test_get_space_missing_raises():
    with pytest.raises(SpaceNotFoundError) as exc_info:
        service.get_space("nope")

    assert exc_info.value.code == ErrorCode.SPACE_NOT_FOUND


def test_update_space_none_keeps_and_empty_clears():
    space = service.create_space("Work", icon="💼", color="blue")

    updated = service.update_space(space.id, color="")

    assert updated.name == "Work"
    assert updated.icon == "💼"
    assert updated.color is None


def test_archive_and_unarchive():
    space = service.create_space("Old")

    service.archive_space(space.id)
    assert service.list_spaces() == []
    assert service.list_spaces(include_archived=True)[0].is_archived

    assert service.unarchive_space(space.id).is_archived is False


def test_cannot_delete_current_space(space):
    with pytest.raises(ValidationError) as exc_info:
        service.delete_space(space.id)

    assert exc_info.value.code == ErrorCode.OPERATION_NOT_ALLOWED
    assert service.get_space(space.id)


def test_delete_other_space(space):
    other = service.create_space("Other")

    service.delete_space(other.id)

    with pytest.raises(SpaceNotFoundError):
        service.get_space(other.id)


def test_delete_space_with_explicit_current():
    one = service.create_space("one")
    two = service.create_space("two")

    with pytest.raises(ValidationError):
        service.delete_space(two.id, current_space_id=two.id)
    service.delete_space(two.id, current_space_id=one.id)


def test_space_item_count(space):
    service.create_note(space.id, "a")
    service.create_todo_list(space.id, "b")
    service.create_list(space.id, "c")

    assert service.get_space_item_count(space.id) == 3


# --- Notes ---


def test_create_note_cleans_tags(space):
    note = service.create_note(space.id, " Plan ", content="  ", tags=[" a ", "b", "a", ""])

    assert note.title == "Plan"
    assert note.content is None
    assert note.tags == ["a", "b"]


def test_create_note_in_missing_space():
    with pytest.raises(SpaceNotFoundError):
        service.create_note("nope", "title")


def test_create_note_validates_before_lookup():
    with pytest.raises(ValidationError):
        service.create_note("nope", "   ")


def test_update_note_partial(space):
    note = service.create_note(space.id, "Plan", content="body", tags=["x"])

    updated = service.update_note(note.id, title="Plan B")

    assert updated.title == "Plan B"
    assert updated.content == "body"
    assert updated.tags == ["x"]
    assert service.update_note(note.id, tags=[]).tags == []


def test_get_note_missing():
    with pytest.raises(NoteNotFoundError):
        service.get_note("nope")


def test_delete_note_missing():
    with pytest.raises(NoteNotFoundError):
        service.delete_note("nope")


def test_reorder_notes(space):
    a, b, c = (service.create_note(space.id, t) for t in "abc")

    service.reorder_notes(space.id, [c.id, a.id, b.id])

    assert [n.title for n in service.list_notes(space.id)] == ["c", "a", "b"]
    assert [n.sort_order for n in service.list_notes(space.id)] == [0, 1, 2]


def test_reorder_with_id_from_other_space_rejected(space):
    other = service.create_space("Other")
    a = service.create_note(space.id, "a")
    stranger = service.create_note(other.id, "stranger")

    with pytest.raises(ValidationError):
        service.reorder_notes(space.id, [a.id, stranger.id])

    assert service.get_note(stranger.id).space_id == other.id


# --- Todo lists and items ---


def test_todo_item_validation(space):
    todo_list = service.create_todo_list(space.id, "Groceries")

    with pytest.raises(ValidationError) as exc_info:
        service.create_todo_item(todo_list.id, "Milk", due_date="tomorrow")
    assert exc_info.value.field == "Due date"

    with pytest.raises(ValidationError):
        service.create_todo_item(todo_list.id, "Milk", priority="urgent")


def test_todo_item_fields_normalised(space):
    todo_list = service.create_todo_list(space.id, "Groceries")

    item = service.create_todo_item(
        todo_list.id, "Milk", due_date=" 2025-01-31 ", priority="HIGH", tags=["shop"]
    )

    assert item.due_date == "2025-01-31"
    assert item.priority == "high"
    assert item.tags == ["shop"]


def test_update_todo_item_clears_with_empty_string(space):
    todo_list = service.create_todo_list(space.id, "Groceries")
    item = service.create_todo_item(todo_list.id, "Milk", due_date="2025-01-31", priority="low")

    updated = service.update_todo_item(item.id, due_date="", priority="")

    assert updated.due_date is None
    assert updated.priority is None
    assert updated.title == "Milk"


def test_toggle_todo_item(space):
    todo_list = service.create_todo_list(space.id, "Groceries")
    item = service.create_todo_item(todo_list.id, "Milk")

    assert service.toggle_todo_item(item.id).is_completed is True
    assert service.toggle_todo_item(item.id).is_completed is False


def test_create_item_in_missing_todo_list():
    with pytest.raises(NotFoundError) as exc_info:
        service.create_todo_item("nope", "Milk")

    assert exc_info.value.code == ErrorCode.CONTENT_NOT_FOUND


def test_reorder_todo_items(space):
    todo_list = service.create_todo_list(space.id, "Groceries")
    items = [service.create_todo_item(todo_list.id, t) for t in ("eggs", "milk", "bread")]

    service.reorder_todo_items(todo_list.id, [i.id for i in reversed(items)])

    assert [i.title for i in service.list_todo_items(todo_list.id)] == ["bread", "milk", "eggs"]


def test_delete_todo_list_removes_items(space):
    todo_list = service.create_todo_list(space.id, "Groceries")
    item = service.create_todo_item(todo_list.id, "Milk")

    service.delete_todo_list(todo_list.id)

    assert repository.get(TodoItem, item.id) is None


# --- Lists and items ---


def test_list_style_validation(space):
    assert service.create_list(space.id, "Books").style == "bullets"
    assert service.create_list(space.id, "Steps", style="Numbered").style == "numbered"

    with pytest.raises(ValidationError):
        service.create_list(space.id, "Bad", style="stars")


def test_list_items(space):
    list_model = service.create_list(space.id, "Books", style="checkboxes")
    dune = service.create_list_item(list_model.id, "Dune", notes="Herbert")
    service.create_list_item(list_model.id, "Emma")

    assert service.toggle_list_item(dune.id).is_checked is True
    assert service.update_list_item(dune.id, notes="").notes is None
    assert service.get_list(list_model.id).checked_item_count == 1
    assert [i.title for i in service.list_list_items(list_model.id)] == ["Dune", "Emma"]


# --- Limits ---


def test_anonymous_space_limit(anonymous):
    for n in range(ANONYMOUS_LIMITS["spaces"]):
        service.create_space(f"space {n}")

    with pytest.raises(LimitReachedError) as exc_info:
        service.create_space("one too many")

    assert exc_info.value.limit == ANONYMOUS_LIMITS["spaces"]
    assert exc_info.value.code == ErrorCode.INSUFFICIENT_PERMISSIONS


def test_anonymous_note_limit_is_per_space(space, anonymous):
    for n in range(ANONYMOUS_LIMITS["notes"]):
        service.create_note(space.id, f"note {n}")

    with pytest.raises(LimitReachedError, match="notes"):
        service.create_note(space.id, "one too many")
    assert len(service.list_notes(space.id)) == ANONYMOUS_LIMITS["notes"]


def test_authenticated_has_no_limit(space):
    for n in range(ANONYMOUS_LIMITS["lists"] + 1):
        service.create_list(space.id, f"list {n}")


# --- Search ---


def test_search_blank_query_returns_nothing(space):
    service.create_note(space.id, "anything")

    assert service.search("   ", space.id) == []


def test_search_rejects_long_query(space):
    with pytest.raises(ValidationError) as exc_info:
        service.search("x" * 501, space.id)

    assert exc_info.value.code == ErrorCode.VALIDATION_OUT_OF_RANGE


def test_search_requires_space():
    with pytest.raises(ValidationError) as exc_info:
        service.search("milk", "")

    assert exc_info.value.code == ErrorCode.VALIDATION_REQUIRED


def test_search_content_types(space):
    service.create_note(space.id, "Milk run")
    todo_list = service.create_todo_list(space.id, "Groceries")
    service.create_todo_item(todo_list.id, "Milk")

    assert {r.type for r in service.search("milk", space.id)} == {"note", "todo_item"}
    assert [r.type for r in service.search("milk", space.id, content_types=["todo_item"])] == ["todo_item"]
    assert service.search("milk", space.id, content_types=[]) == []

    with pytest.raises(ValidationError):
        service.search("milk", space.id, content_types=["photo"])


def test_search_newest_first(space):
    older = service.create_note(space.id, "plan one")
    newer = service.create_note(space.id, "plan two")
    service.update_note(older.id, content="touched")

    assert [r.id for r in service.search("plan", space.id)] == [older.id, newer.id]


@pytest.mark.parametrize("limit, offset", [(0, 0), (10, -1)])
def test_search_paging_validation(space, limit, offset):
    with pytest.raises(ValidationError) as exc_info:
        service.search("x", space.id, limit=limit, offset=offset)

    assert exc_info.value.code == ErrorCode.VALIDATION_OUT_OF_RANGE


# --- Maintenance and ids ---


def test_compact_space_closes_gaps(space):
    notes = [service.create_note(space.id, t) for t in "abc"]
    todo_list = service.create_todo_list(space.id, "T")
    items = [service.create_todo_item(todo_list.id, t) for t in "xyz"]
    service.delete_note(notes[0].id)
    service.delete_todo_item(items[1].id)

    rewritten = service.compact_space(space.id)

    assert rewritten == 3
    assert [n.sort_order for n in service.list_notes(space.id)] == [0, 1]
    assert [i.title for i in service.list_todo_items(todo_list.id)] == ["x", "z"]
    assert [i.sort_order for i in service.list_todo_items(todo_list.id)] == [0, 1]
    assert service.compact_space(space.id) == 0


def test_resolve_id(space):
    note = service.create_note(space.id, "a")

    assert service.resolve_id(Note, note.id) == note.id
    assert service.resolve_id(Note, note.id[:8]) == note.id

    with pytest.raises(NoteNotFoundError):
        service.resolve_id(Note, "zzzz")
    with pytest.raises(ValidationError):
        service.resolve_id(Note, "  ")


def test_resolve_id_ambiguous(space, monkeypatch):
    ids = iter(["abc-1", "abc-2"])
    monkeypatch.setattr(repository, "new_id", lambda: next(ids))
    service.create_note(space.id, "one")
    service.create_note(space.id, "two")

    with pytest.raises(ValidationError, match="ambiguous"):
        service.resolve_id(Note, "abc")
    assert service.resolve_id(Note, "abc-2") == "abc-2"


def test_resolve_id_within_partition(space, monkeypatch):
    groceries = service.create_todo_list(space.id, "Groceries")
    chores = service.create_todo_list(space.id, "Chores")
    ids = iter(["task-1", "task-2"])
    monkeypatch.setattr(repository, "new_id", lambda: next(ids))
    service.create_todo_item(groceries.id, "Milk")
    service.create_todo_item(chores.id, "Sweep")

    with pytest.raises(ValidationError, match="ambiguous"):
        service.resolve_id(TodoItem, "task")
    assert service.resolve_id(TodoItem, "task", groceries.id) == "task-1"
    assert service.resolve_id(TodoItem, "task", chores.id) == "task-2"


# --- First run and current space ---


def test_seed_if_first_run():
    space = service.seed_if_first_run()

    assert space is not None
    assert space.name == "Personal"
    assert space.item_count == 1
    assert service.list_notes(space.id)[0].title == WELCOME_NOTE_TITLE
    assert preferences.get_current_space_id() == space.id


def test_seed_runs_only_once():
    service.seed_if_first_run()

    assert service.seed_if_first_run() is None
    assert len(service.list_spaces()) == 1


def test_current_space_falls_back_to_oldest():
    first = service.create_space("first")
    service.create_space("second")

    assert service.get_current_space().id == first.id
    assert preferences.get_current_space_id() == first.id


def test_current_space_skips_archived(space):
    other = service.create_space("other")
    service.archive_space(space.id)

    assert service.get_current_space().id == other.id


def test_current_space_none_without_spaces():
    assert service.get_current_space() is None


def test_set_current_space_missing():
    with pytest.raises(SpaceNotFoundError):
        service.set_current_space("nope")


# --- Parents and ownership ---


def test_missing_parent_raises_for_list_and_reorder():
    with pytest.raises(SpaceNotFoundError):
        service.list_notes("no-such-space")
    with pytest.raises(SpaceNotFoundError):
        service.reorder_notes("no-such-space", [])
    with pytest.raises(NotFoundError):
        service.list_todo_items("no-such-list")
    with pytest.raises(NotFoundError):
        service.reorder_list_items("no-such-list", [])


def test_items_are_private_to_the_container_owner(space, monkeypatch):
    todo_list = service.create_todo_list(space.id, "Secrets")
    first = service.create_todo_item(todo_list.id, "secret 1")
    second = service.create_todo_item(todo_list.id, "secret 2")
    list_model = service.create_list(space.id, "Books")
    book = service.create_list_item(list_model.id, "Dune")

    monkeypatch.setenv("LATER_USER_ID", "bob")

    assert repository.get(TodoItem, first.id) is None
    assert repository.fetch_partition(TodoItem, todo_list.id) == []
    assert repository.find_ids_by_prefix(TodoItem, first.id[:8]) == []
    with pytest.raises(NotFoundError):
        service.list_todo_items(todo_list.id)
    with pytest.raises(NotFoundError):
        service.toggle_todo_item(first.id)
    with pytest.raises(NotFoundError):
        service.reorder_todo_items(todo_list.id, [second.id, first.id])
    with pytest.raises(NotFoundError):
        repository.save(second)
    with pytest.raises(NotFoundError):
        service.delete_list_item(book.id)
    with pytest.raises(NotFoundError):
        repository.create(TodoItem(id="planted", todo_list_id=todo_list.id, title="x"))

    monkeypatch.delenv("LATER_USER_ID")

    items = service.list_todo_items(todo_list.id)
    assert [i.title for i in items] == ["secret 1", "secret 2"]
    assert [i.is_completed for i in items] == [False, False]
    assert [i.title for i in service.list_list_items(list_model.id)] == ["Dune"]
