"""
FILE: later/core/repository.py
PURPOSE: Database operations and SQLite connection management
EXPORTS:
  - get_connection() -> Connection
  - init_database(conn) -> None
  - session() -> context manager yielding a Connection
  - new_id() -> str
  - create(entity) -> entity
  - get(model, entity_id) -> entity | None
  - fetch_partition(model, parent_id) -> List[entity]
  - update(entity) -> entity        (ordinary edit, sort_order untouched)
  - save(entity) -> entity          (full state, sort_order included)
  - delete(model, entity_id) -> None
  - count(model, parent_id) -> int
  - list_spaces(include_archived) -> List[Space]
  - find_ids_by_prefix(model, prefix, parent_id) -> List[str]
  - search(...) -> List[SearchResult]
  - not_found(model, entity_id) -> NotFoundError
  - PartitionStore (SequenceStore over one table)
DEPENDENCIES:
  - sqlite3, dataclasses, datetime, pathlib, uuid (stdlib)
  - later.core.config (database location, user id)
  - later.core.models, later.core.exceptions
NOTES:
  - Database stored at ~/.later/later.db unless configured otherwise
  - Auto-creates directory and initializes schema on first connection
  - Each call opens and closes its own connection; sqlite3 errors are
    mapped to StoreError through the error-code tables
  - Returns domain objects, never raw rows
  - Owned tables (spaces, notes, lists, todo lists) are filtered by the
    configured user_id on every read and write; item tables are filtered
    through the owner of their container
"""

import dataclasses
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .config import load_settings
from .constants import (
    CONTENT_LIST,
    CONTENT_LIST_ITEM,
    CONTENT_NOTE,
    CONTENT_TODO_ITEM,
    CONTENT_TODO_LIST,
)
from .exceptions import NotFoundError, NoteNotFoundError, SpaceNotFoundError, StoreError
from .models import ListItem, ListModel, Note, SearchResult, Space, TodoItem, TodoList

logger = logging.getLogger(__name__)

# Schema file location (relative to this file)
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Reads that carry computed counts
_SELECT = {
    "spaces": (
        "SELECT t.*, "
        "(SELECT COUNT(*) FROM notes n WHERE n.space_id = t.id) "
        "+ (SELECT COUNT(*) FROM todo_lists tl WHERE tl.space_id = t.id) "
        "+ (SELECT COUNT(*) FROM lists l WHERE l.space_id = t.id) AS item_count "
        "FROM spaces t"
    ),
    "todo_lists": (
        "SELECT t.*, "
        "(SELECT COUNT(*) FROM todo_items i WHERE i.todo_list_id = t.id) AS total_item_count, "
        "(SELECT COUNT(*) FROM todo_items i WHERE i.todo_list_id = t.id AND i.is_completed = 1) "
        "AS completed_item_count "
        "FROM todo_lists t"
    ),
    "lists": (
        "SELECT t.*, "
        "(SELECT COUNT(*) FROM list_items i WHERE i.list_id = t.id) AS total_item_count, "
        "(SELECT COUNT(*) FROM list_items i WHERE i.list_id = t.id AND i.is_checked = 1) "
        "AS checked_item_count "
        "FROM lists t"
    ),
}

_OWNER_LABELS = {"todo_lists": TodoList.LABEL, "lists": ListModel.LABEL}

# Columns never rewritten by update/save
_IMMUTABLE_COLUMNS = ("id", "user_id", "created_at")


def get_connection() -> sqlite3.Connection:
    """
    Get SQLite connection to the Later database.

    Creates the database directory if it doesn't exist.
    Enables row_factory for dict-like row access.
    Enables foreign key constraints (ON DELETE CASCADE).
    Initializes database schema on first connection.
    """
    db_path = load_settings().db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    init_database(conn)

    return conn


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='spaces'"
    )
    if cursor.fetchone() is not None:
        return

    logger.info("Initializing database schema")
    conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.commit()


@contextmanager
def session() -> Iterator[sqlite3.Connection]:
    """
    Yield a connection; commit on success, close always.

    Raises:
        StoreError: For any sqlite3 failure (mapped to an ErrorCode)
    """
    try:
        conn = get_connection()
    except sqlite3.Error as e:
        raise StoreError.from_sqlite(e) from e

    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise StoreError.from_sqlite(e) from e
    finally:
        conn.close()


def new_id() -> str:
    """Opaque, never reused identifier."""
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now().isoformat()


def _select(model) -> str:
    return _SELECT.get(model.TABLE, f"SELECT t.* FROM {model.TABLE} t")


def _scoped(model, sql: str, params: Dict, alias: str = "t.") -> Tuple[str, Dict]:
    """
    Append the owner filter.

    Owned tables match on their own user_id; item tables match when their
    container belongs to the configured user.
    """
    if model.OWNED:
        sql += f" AND {alias}user_id = :user_id"
        params["user_id"] = load_settings().user_id
    elif model.OWNER_VIA:
        sql += (
            f" AND {alias}{model.PARENT_FIELD} IN "
            f"(SELECT id FROM {model.OWNER_VIA} WHERE user_id = :user_id)"
        )
        params["user_id"] = load_settings().user_id
    return sql, params


def not_found(model, entity_id: str) -> NotFoundError:
    if model is Space:
        return SpaceNotFoundError(entity_id)
    if model is Note:
        return NoteNotFoundError(entity_id)
    return NotFoundError(entity_id, model.LABEL)


# --- Generic Operations ---


def create(entity):
    """
    Insert a new entity.

    Orderable entities are appended to the end of their partition:
    sort_order = max(existing) + 1, or 0 for an empty partition.
    Owned entities are stamped with the configured user_id.
    Sets created_at and updated_at automatically.

    Returns:
        The stored entity (re-read, computed counts included)

    Raises:
        StoreError: On constraint violations (e.g. unknown parent)
    """
    model = type(entity)
    now = _now()
    entity = dataclasses.replace(
        entity, created_at=entity.created_at or now, updated_at=now
    )
    if model.OWNED:
        entity = dataclasses.replace(entity, user_id=load_settings().user_id)

    with session() as conn:
        if model.OWNER_VIA:
            owner = conn.execute(
                f"SELECT 1 FROM {model.OWNER_VIA} WHERE id = ? AND user_id = ?",
                (entity.parent_id, load_settings().user_id),
            ).fetchone()
            if owner is None:
                raise NotFoundError(entity.parent_id, _OWNER_LABELS[model.OWNER_VIA])

        if model.PARENT_FIELD:
            row = conn.execute(
                f"SELECT COALESCE(MAX(sort_order), -1) + 1 FROM {model.TABLE} "
                f"WHERE {model.PARENT_FIELD} = ?",
                (entity.parent_id,),
            ).fetchone()
            entity = dataclasses.replace(entity, sort_order=int(row[0]))

        data = entity.to_row()
        columns = ", ".join(data)
        placeholders = ", ".join(f":{column}" for column in data)
        conn.execute(
            f"INSERT INTO {model.TABLE} ({columns}) VALUES ({placeholders})",
            data,
        )

    created = get(model, entity.id)
    if created is None:
        # Insert committed but the row isn't visible to this user
        raise not_found(model, entity.id)
    return created


def get(model, entity_id: str):
    """
    Fetch single entity by ID.

    Returns:
        Entity if found (and owned by the configured user), None otherwise
    """
    sql, params = _scoped(model, f"{_select(model)} WHERE t.id = :id", {"id": entity_id})
    with session() as conn:
        row = conn.execute(sql, params).fetchone()

    return model.from_row(row) if row else None


def fetch_partition(model, parent_id: str) -> List:
    """
    All entities of one partition, ordered by sort_order ascending.

    Ties (possible only after a partial reorder) fall back to created_at.
    """
    sql, params = _scoped(
        model,
        f"{_select(model)} WHERE t.{model.PARENT_FIELD} = :parent_id",
        {"parent_id": parent_id},
    )
    sql += " ORDER BY t.sort_order ASC, t.created_at ASC"
    with session() as conn:
        rows = conn.execute(sql, params).fetchall()

    return [model.from_row(row) for row in rows]


def _write(entity, include_sort_order: bool):
    model = type(entity)
    data = entity.to_row()
    data["updated_at"] = _now()

    skip = set(_IMMUTABLE_COLUMNS)
    if model.PARENT_FIELD:
        skip.add(model.PARENT_FIELD)
    if not include_sort_order:
        skip.add("sort_order")

    params = {column: value for column, value in data.items() if column not in skip}
    assignments = ", ".join(f"{column} = :{column}" for column in params)
    params["id"] = entity.id

    sql, params = _scoped(
        model, f"UPDATE {model.TABLE} SET {assignments} WHERE id = :id", params, alias=""
    )

    with session() as conn:
        cursor = conn.execute(sql, params)
        if cursor.rowcount == 0:
            raise not_found(model, entity.id)

    written = get(model, entity.id)
    if written is None:
        raise not_found(model, entity.id)
    return written


def update(entity):
    """
    Update an entity's editable fields.

    Leaves sort_order and the parent column untouched so that an edit made
    from a stale copy never undoes a reorder. Updates updated_at.

    Raises:
        NotFoundError: If the entity doesn't exist
    """
    return _write(entity, include_sort_order=False)


def save(entity):
    """
    Write an entity's full state, sort_order included.

    This is the persist step of resequencing.

    Raises:
        NotFoundError: If the entity doesn't exist
    """
    return _write(entity, include_sort_order=True)


def delete(model, entity_id: str) -> None:
    """
    Delete entity by ID.

    Children are removed by ON DELETE CASCADE. The sort_order gap left in the
    partition stays until the next reorder or compaction.

    Raises:
        NotFoundError: If the entity doesn't exist
    """
    sql, params = _scoped(
        model, f"DELETE FROM {model.TABLE} WHERE id = :id", {"id": entity_id}, alias=""
    )
    with session() as conn:
        cursor = conn.execute(sql, params)
        if cursor.rowcount == 0:
            raise not_found(model, entity_id)


def count(model, parent_id: Optional[str] = None) -> int:
    """Number of entities in a partition (or all owned rows when parent_id is None)."""
    if parent_id is None:
        sql, params = _scoped(model, f"SELECT COUNT(*) FROM {model.TABLE} t WHERE 1 = 1", {})
    else:
        sql, params = _scoped(
            model,
            f"SELECT COUNT(*) FROM {model.TABLE} t WHERE t.{model.PARENT_FIELD} = :parent_id",
            {"parent_id": parent_id},
        )
    with session() as conn:
        row = conn.execute(sql, params).fetchone()
    return int(row[0])


def find_ids_by_prefix(model, prefix: str, parent_id: Optional[str] = None) -> List[str]:
    """IDs starting with prefix, optionally within one partition (used to accept short IDs)."""
    escaped = _escape_like(prefix)
    sql = f"SELECT t.id FROM {model.TABLE} t WHERE t.id LIKE :pattern ESCAPE '\\'"
    params = {"pattern": f"{escaped}%"}
    if parent_id is not None:
        sql += f" AND t.{model.PARENT_FIELD} = :parent_id"
        params["parent_id"] = parent_id
    sql, params = _scoped(model, sql, params)
    with session() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [row[0] for row in rows]


# --- Space Operations ---


def list_spaces(include_archived: bool = False) -> List[Space]:
    """
    List spaces for the configured user.

    Returns:
        Spaces ordered by creation date (oldest first), with item counts
    """
    sql, params = _scoped(Space, f"{_select(Space)} WHERE 1 = 1", {})
    if not include_archived:
        sql += " AND t.is_archived = 0"
    sql += " ORDER BY t.created_at ASC"
    with session() as conn:
        rows = conn.execute(sql, params).fetchall()

    return [Space.from_row(row) for row in rows]


# --- Search ---


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _tag_clause(alias: str, tags: Optional[Sequence[str]], params: Dict) -> str:
    """AND semantics: every tag must be present in the JSON tags column."""
    clause = ""
    for index, tag in enumerate(tags or ()):
        key = f"tag{index}"
        params[key] = tag
        clause += (
            f" AND EXISTS (SELECT 1 FROM json_each({alias}.tags) "
            f"WHERE json_each.value = :{key})"
        )
    return clause


def search(
    query: str,
    space_id: str,
    content_types: Sequence[str],
    tags: Optional[Sequence[str]] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[SearchResult]:
    """
    Case-insensitive substring search within one space.

    Args:
        query: Already trimmed, non-empty search text
        space_id: Space to search in
        content_types: Content type names to include
        tags: Optional tags (AND); applies to notes and todo items only
        limit: Max results per content type
        offset: Results to skip per content type

    Returns:
        Results across all requested types, newest updated_at first
    """
    base = {
        "pattern": f"%{_escape_like(query)}%",
        "space_id": space_id,
        "user_id": load_settings().user_id,
        "limit": limit,
        "offset": offset,
    }
    like = "LIKE :pattern ESCAPE '\\'"
    page = " LIMIT :limit OFFSET :offset"
    results: List[SearchResult] = []

    with session() as conn:
        if CONTENT_NOTE in content_types:
            params = dict(base)
            sql = (
                "SELECT t.* FROM notes t "
                "WHERE t.user_id = :user_id AND t.space_id = :space_id "
                f"AND (t.title {like} OR COALESCE(t.content, '') {like})"
                + _tag_clause("t", tags, params)
                + " ORDER BY t.updated_at DESC" + page
            )
            for row in conn.execute(sql, params).fetchall():
                note = Note.from_row(row)
                results.append(SearchResult(
                    id=note.id, type=CONTENT_NOTE, title=note.title,
                    updated_at=note.updated_at, preview=note.content, tags=note.tags,
                ))

        if CONTENT_TODO_LIST in content_types:
            sql = (
                "SELECT t.* FROM todo_lists t "
                "WHERE t.user_id = :user_id AND t.space_id = :space_id "
                f"AND (t.name {like} OR COALESCE(t.description, '') {like})"
                " ORDER BY t.updated_at DESC" + page
            )
            for row in conn.execute(sql, base).fetchall():
                todo_list = TodoList.from_row(row)
                results.append(SearchResult(
                    id=todo_list.id, type=CONTENT_TODO_LIST, title=todo_list.name,
                    updated_at=todo_list.updated_at, preview=todo_list.description,
                ))

        if CONTENT_LIST in content_types:
            sql = (
                "SELECT t.* FROM lists t "
                "WHERE t.user_id = :user_id AND t.space_id = :space_id "
                f"AND t.name {like}"
                " ORDER BY t.updated_at DESC" + page
            )
            for row in conn.execute(sql, base).fetchall():
                list_model = ListModel.from_row(row)
                results.append(SearchResult(
                    id=list_model.id, type=CONTENT_LIST, title=list_model.name,
                    updated_at=list_model.updated_at,
                ))

        if CONTENT_TODO_ITEM in content_types:
            params = dict(base)
            sql = (
                "SELECT i.*, p.name AS parent_name FROM todo_items i "
                "JOIN todo_lists p ON p.id = i.todo_list_id "
                "WHERE p.user_id = :user_id AND p.space_id = :space_id "
                f"AND (i.title {like} OR COALESCE(i.description, '') {like})"
                + _tag_clause("i", tags, params)
                + " ORDER BY i.updated_at DESC" + page
            )
            for row in conn.execute(sql, params).fetchall():
                item = TodoItem.from_row(row)
                results.append(SearchResult(
                    id=item.id, type=CONTENT_TODO_ITEM, title=item.title,
                    updated_at=item.updated_at, preview=item.description, tags=item.tags,
                    parent_id=item.todo_list_id, parent_name=row["parent_name"],
                ))

        if CONTENT_LIST_ITEM in content_types:
            sql = (
                "SELECT i.*, p.name AS parent_name FROM list_items i "
                "JOIN lists p ON p.id = i.list_id "
                "WHERE p.user_id = :user_id AND p.space_id = :space_id "
                f"AND (i.title {like} OR COALESCE(i.notes, '') {like})"
                " ORDER BY i.updated_at DESC" + page
            )
            for row in conn.execute(sql, base).fetchall():
                item = ListItem.from_row(row)
                results.append(SearchResult(
                    id=item.id, type=CONTENT_LIST_ITEM, title=item.title,
                    updated_at=item.updated_at, preview=item.notes,
                    parent_id=item.list_id, parent_name=row["parent_name"],
                ))

    results.sort(key=lambda r: r.updated_at or "", reverse=True)
    return results


# --- Sequence Store ---


class PartitionStore:
    """
    SequenceStore over one table, partitioned by the model's parent column.

    Example:
        store = PartitionStore(ListModel)
        sequence.reorder(store, space_id, ["b", "a", "c"])
    """

    def __init__(self, model):
        if not model.PARENT_FIELD:
            raise TypeError(f"{model.__name__} is not an orderable model")
        self.model = model

    def fetch_partition(self, parent_id: str) -> List:
        return fetch_partition(self.model, parent_id)

    def persist(self, entity):
        return save(entity)

    def __repr__(self) -> str:
        return f"PartitionStore({self.model.__name__})"
