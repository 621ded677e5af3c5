"""Test resequencing against an in-memory store (no database)."""

import itertools
from dataclasses import dataclass
from typing import Dict, List

import pytest

from later.core import sequence
from later.core.errors import ErrorCode
from later.core.exceptions import StoreError, ValidationError


@dataclass
class Row:
    id: str
    parent: str
    sort_order: int
    created_at: str = ""


class MemoryStore:
    """SequenceStore keeping rows in a dict; records every persist."""

    def __init__(self, rows: List[Row]):
        self.rows: Dict[str, Row] = {row.id: row for row in rows}
        self.persisted: List[str] = []

    def fetch_partition(self, parent_id: str) -> List[Row]:
        # Deliberately not sorted: callers must not trust store order
        return [row for row in reversed(list(self.rows.values())) if row.parent == parent_id]

    def persist(self, entity: Row) -> Row:
        self.persisted.append(entity.id)
        self.rows[entity.id] = entity
        return entity

    def ordered(self, parent_id: str) -> List[str]:
        rows = sorted(self.fetch_partition(parent_id), key=lambda r: r.sort_order)
        return [row.id for row in rows]

    def orders(self) -> Dict[str, int]:
        return {row_id: row.sort_order for row_id, row in self.rows.items()}


class FlakyStore(MemoryStore):
    """Fails on the k-th persist call (1-indexed)."""

    def __init__(self, rows: List[Row], fail_on: int):
        super().__init__(rows)
        self.fail_on = fail_on
        self.calls = 0

    def persist(self, entity: Row) -> Row:
        self.calls += 1
        if self.calls == self.fail_on:
            raise StoreError("connection lost", code=ErrorCode.DATABASE_UNAVAILABLE)
        return super().persist(entity)


def make_store(ids="abc", parent="P", store_cls=MemoryStore, **kwargs):
    rows = [Row(id=i, parent=parent, sort_order=n) for n, i in enumerate(ids)]
    return store_cls(rows, **kwargs)


@pytest.mark.parametrize("permutation", list(itertools.permutations("abcd")))
def test_permutation_fidelity(permutation):
    """After reorder, sorting by sort_order yields exactly the requested order."""
    store = make_store("abcd")

    sequence.reorder(store, "P", list(permutation))

    assert store.ordered("P") == list(permutation)


def test_idempotence():
    """Reordering twice with the same order gives the same assignment as once."""
    store = make_store("abcde")

    sequence.reorder(store, "P", ["e", "c", "a", "d", "b"])
    once = store.orders()
    sequence.reorder(store, "P", ["e", "c", "a", "d", "b"])

    assert store.orders() == once


def test_density_after_gaps():
    """Sparse, duplicated sort_order values become exactly 0..N-1."""
    store = MemoryStore([
        Row("a", "P", 7),
        Row("b", "P", 7),
        Row("c", "P", 30),
        Row("d", "P", 2),
    ])

    sequence.reorder(store, "P", ["d", "b", "a", "c"])

    values = [row.sort_order for row in store.fetch_partition("P")]
    assert sorted(values) == [0, 1, 2, 3]


def test_partition_isolation():
    """Reordering P leaves other partitions untouched."""
    store = MemoryStore([
        Row("a", "P", 0),
        Row("b", "P", 1),
        Row("x", "Q", 5),
        Row("y", "Q", 9),
    ])

    sequence.reorder(store, "P", ["b", "a"])

    assert store.rows["x"].sort_order == 5
    assert store.rows["y"].sort_order == 9
    assert "x" not in store.persisted and "y" not in store.persisted


@pytest.mark.parametrize("fail_on", [1, 2, 3, 4])
def test_partial_failure_is_not_atomic(fail_on):
    """A failed k-th persist keeps 1..k-1 resequenced and k..N unchanged."""
    store = make_store("abcd", store_cls=FlakyStore, fail_on=fail_on)
    before = store.orders()
    new_order = ["d", "c", "b", "a"]

    with pytest.raises(StoreError) as exc_info:
        sequence.reorder(store, "P", new_order)

    assert exc_info.value.code == ErrorCode.DATABASE_UNAVAILABLE
    for index, entity_id in enumerate(new_order):
        if index < fail_on - 1:
            assert store.rows[entity_id].sort_order == index
        else:
            assert store.rows[entity_id].sort_order == before[entity_id]


def test_round_trip_example():
    """a,b,c reordered to c,a,b gives a=1, b=2, c=0."""
    store = make_store("abc")

    sequence.reorder(store, "P", ["c", "a", "b"])

    assert store.rows["a"].sort_order == 1
    assert store.rows["b"].sort_order == 2
    assert store.rows["c"].sort_order == 0
    assert store.ordered("P") == ["c", "a", "b"]


def test_persists_follow_new_order():
    store = make_store("abc")

    sequence.reorder(store, "P", ["b", "c", "a"])

    assert store.persisted == ["b", "c", "a"]


@pytest.mark.parametrize(
    "ordered_ids, code",
    [
        (["a", "b", "x"], ErrorCode.VALIDATION_INVALID_FORMAT),
        (["a", "b"], ErrorCode.VALIDATION_INVALID_FORMAT),
        (["a", "a", "b", "c"], ErrorCode.VALIDATION_DUPLICATE),
        ([], ErrorCode.VALIDATION_INVALID_FORMAT),
    ],
)
def test_invalid_orders_rejected_without_persist(ordered_ids, code):
    """Unknown, missing and duplicate ids fail before any write."""
    store = make_store("abc")
    before = store.orders()

    with pytest.raises(ValidationError) as exc_info:
        sequence.reorder(store, "P", ordered_ids)

    assert exc_info.value.code == code
    assert store.persisted == []
    assert store.orders() == before


def test_unknown_id_message_names_the_id():
    store = make_store("abc")

    with pytest.raises(ValidationError, match="x"):
        sequence.reorder(store, "P", ["a", "b", "x"])


def test_empty_partition_accepts_empty_order():
    store = MemoryStore([])

    sequence.reorder(store, "P", [])

    assert store.persisted == []


@pytest.mark.parametrize(
    "position, expected",
    [
        (1, ["c", "a", "b", "d"]),
        (3, ["a", "b", "c", "d"]),
        (4, ["a", "b", "d", "c"]),
        (0, ["c", "a", "b", "d"]),
        (99, ["a", "b", "d", "c"]),
    ],
)
def test_move_clamps_position(position, expected):
    assert sequence.move(["a", "b", "c", "d"], "c", position) == expected


def test_move_unknown_id():
    with pytest.raises(ValidationError):
        sequence.move(["a", "b"], "z", 1)


def test_compact_closes_gaps_and_keeps_order():
    store = MemoryStore([
        Row("a", "P", 0, "2024-01-01"),
        Row("b", "P", 4, "2024-01-02"),
        Row("c", "P", 4, "2024-01-01"),
        Row("d", "P", 9, "2024-01-03"),
    ])

    rewritten = sequence.compact(store, "P")

    # c ties with b on sort_order but was created first
    assert store.ordered("P") == ["a", "c", "b", "d"]
    assert sorted(store.orders().values()) == [0, 1, 2, 3]
    assert rewritten == 3
    assert "a" not in store.persisted


def test_compact_dense_partition_writes_nothing():
    store = make_store("abc")

    assert sequence.compact(store, "P") == 0
    assert store.persisted == []


def test_reorder_keeps_other_fields():
    store = MemoryStore([Row("a", "P", 0, "t1"), Row("b", "P", 1, "t2")])

    sequence.reorder(store, "P", ["b", "a"])

    assert store.rows["a"] == Row("a", "P", 1, "t1")
    assert store.rows["b"].created_at == "t2"
