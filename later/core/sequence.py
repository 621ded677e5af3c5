"""
FILE: later/core/sequence.py
PURPOSE: Resequencing of orderable entities within a partition
EXPORTS:
  - Orderable (protocol: id + sort_order)
  - SequenceStore (protocol: fetch_partition + persist)
  - validate_permutation(current_ids, ordered_ids) -> None
  - reorder(store, parent_id, ordered_ids) -> None
  - move(ordered_ids, entity_id, position) -> List[str]
  - compact(store, parent_id) -> int
DEPENDENCIES:
  - dataclasses, logging, typing (stdlib)
  - later.core.exceptions (ValidationError, StoreError)
NOTES:
  - One implementation shared by notes, lists, todo lists and both item kinds
  - sort_order values written by reorder are dense and zero-based
  - Persists run one entity at a time in the new order, with no rollback:
    a failure on the k-th write leaves entities 1..k-1 resequenced and
    k..N untouched, and the StoreError propagates to the caller
"""

import dataclasses
import logging
from collections import Counter
from typing import Iterable, List, Optional, Protocol, Sequence, TypeVar

from .exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)


class Orderable(Protocol):
    id: str
    sort_order: int


T = TypeVar("T", bound=Orderable)


class SequenceStore(Protocol[T]):
    """Keyed store holding one ordered collection per parent id."""

    def fetch_partition(self, parent_id: str) -> List[T]:
        """All entities of the partition, in no particular order."""
        ...

    def persist(self, entity: T) -> T:
        """Write the entity's full state; return the confirmed copy."""
        ...


def validate_permutation(current_ids: Iterable[str], ordered_ids: Sequence[str]) -> None:
    """
    Check that ordered_ids is a permutation of current_ids.

    Raises:
        ValidationError: On duplicate, unknown, or missing ids
    """
    duplicates = sorted(i for i, n in Counter(ordered_ids).items() if n > 1)
    if duplicates:
        raise ValidationError.duplicate("Ordered ids", ", ".join(duplicates))

    known = set(current_ids)
    requested = set(ordered_ids)

    unknown = sorted(requested - known)
    if unknown:
        raise ValidationError.invalid_format(
            "Ordered ids", f"unknown ids {', '.join(unknown)}"
        )

    missing = sorted(known - requested)
    if missing:
        raise ValidationError.invalid_format(
            "Ordered ids", f"missing ids {', '.join(missing)}"
        )


def reorder(store: SequenceStore, parent_id: str, ordered_ids: Sequence[str]) -> None:
    """
    Persist a dense, zero-based sort_order matching ordered_ids.

    Args:
        store: Store holding the partition
        parent_id: Partition to resequence
        ordered_ids: Every id of the partition, in the desired order

    Raises:
        ValidationError: If ordered_ids is not a permutation of the partition
            (nothing is written)
        StoreError: If any fetch or write fails (earlier writes are kept)
    """
    ordered_ids = list(ordered_ids)
    by_id = {entity.id: entity for entity in store.fetch_partition(parent_id)}
    validate_permutation(by_id.keys(), ordered_ids)

    for index, entity_id in enumerate(ordered_ids):
        entity = dataclasses.replace(by_id[entity_id], sort_order=index)
        try:
            store.persist(entity)
        except StoreError:
            logger.error(
                "reorder partition=%s failed at position %d of %d; "
                "partition left partially resequenced",
                parent_id,
                index + 1,
                len(ordered_ids),
            )
            raise

    logger.info("reorder partition=%s count=%d", parent_id, len(ordered_ids))


def move(ordered_ids: Sequence[str], entity_id: str, position: int) -> List[str]:
    """
    Return ordered_ids with entity_id relocated to a 1-based position.

    The position is clamped into [1, N]. Used to turn a single move
    (drag-and-drop style) into the full permutation reorder() expects.

    Raises:
        ValidationError: If entity_id is not in ordered_ids
    """
    ids = list(ordered_ids)
    if entity_id not in ids:
        raise ValidationError.invalid_format("Id", f"{entity_id} is not in this collection")

    ids.remove(entity_id)
    insert_at = min(max(int(position), 1), len(ids) + 1) - 1
    ids.insert(insert_at, entity_id)
    return ids


def compact(store: SequenceStore, parent_id: str) -> int:
    """
    Close gaps left by deletes, keeping the current order.

    Entities are ordered by (sort_order, created_at, id) and renumbered from
    zero. Only entities whose value changes are written.

    Returns:
        Number of entities rewritten
    """
    entities = sorted(
        store.fetch_partition(parent_id),
        key=lambda e: (e.sort_order, _created_at(e), e.id),
    )

    rewritten = 0
    for index, entity in enumerate(entities):
        if entity.sort_order == index:
            continue
        store.persist(dataclasses.replace(entity, sort_order=index))
        rewritten += 1

    if rewritten:
        logger.info("compact partition=%s rewritten=%d", parent_id, rewritten)
    return rewritten


def _created_at(entity) -> str:
    value: Optional[str] = getattr(entity, "created_at", None)
    return value or ""
