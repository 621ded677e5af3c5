"""
FILE: later/core/models.py
PURPOSE: Domain models for spaces and the content they hold
EXPORTS:
  - Space (dataclass)
  - Note, TodoList, TodoItem, ListModel, ListItem (orderable dataclasses)
  - SearchResult (dataclass)
  - ORDERABLE_MODELS
DEPENDENCIES:
  - dataclasses, json, typing (stdlib)
NOTES:
  - All models have from_row() for SQLite row conversion
  - All models have to_row() (columns written to the store) and to_json()
  - Computed fields (item counts) are read but never written
  - Orderable models expose parent_id, the partition key for sort_order
  - Timestamps stored as ISO-8601 strings
"""

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from .constants import DEFAULT_LIST_STYLE, LOCAL_USER_ID


class _Model:
    """Row conversion shared by every table-backed model."""

    TABLE: ClassVar[str] = ""
    LABEL: ClassVar[str] = ""
    PARENT_FIELD: ClassVar[Optional[str]] = None
    OWNED: ClassVar[bool] = False
    # Owner of the parent row owns this row (items inherit from their container)
    OWNER_VIA: ClassVar[Optional[str]] = None
    COMPUTED: ClassVar[Tuple[str, ...]] = ()
    BOOL_FIELDS: ClassVar[Tuple[str, ...]] = ()
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_row(cls, row):
        """Convert SQLite row to model object. Missing columns keep defaults."""
        keys = set(row.keys())
        values = {}
        for f in fields(cls):
            if f.name not in keys:
                continue
            value = row[f.name]
            if f.name in cls.BOOL_FIELDS:
                value = bool(value)
            elif f.name in cls.JSON_FIELDS:
                value = json.loads(value) if value else []
            values[f.name] = value
        return cls(**values)

    def to_row(self) -> Dict[str, Any]:
        """Columns to write, with booleans and lists encoded for SQLite."""
        row = {}
        for f in fields(self):
            if f.name in self.COMPUTED:
                continue
            value = getattr(self, f.name)
            if f.name in self.BOOL_FIELDS:
                value = int(bool(value))
            elif f.name in self.JSON_FIELDS:
                value = json.dumps(list(value or []))
            row[f.name] = value
        return row

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @property
    def parent_id(self) -> Optional[str]:
        """Partition key value, None for unpartitioned models."""
        if self.PARENT_FIELD is None:
            return None
        return getattr(self, self.PARENT_FIELD)

    @property
    def display_name(self) -> str:
        return getattr(self, "name", None) or getattr(self, "title", "")


@dataclass
class Space(_Model):
    """A workspace grouping notes, todo lists and lists."""

    TABLE: ClassVar[str] = "spaces"
    LABEL: ClassVar[str] = "Space"
    OWNED: ClassVar[bool] = True
    COMPUTED: ClassVar[Tuple[str, ...]] = ("item_count",)
    BOOL_FIELDS: ClassVar[Tuple[str, ...]] = ("is_archived",)

    id: str
    name: str
    user_id: str = LOCAL_USER_ID
    icon: Optional[str] = None
    color: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    item_count: int = 0


@dataclass
class Note(_Model):
    """Free-form note with optional body and tags."""

    TABLE: ClassVar[str] = "notes"
    LABEL: ClassVar[str] = "Note"
    PARENT_FIELD: ClassVar[Optional[str]] = "space_id"
    OWNED: ClassVar[bool] = True
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("tags",)

    id: str
    space_id: str
    title: str
    user_id: str = LOCAL_USER_ID
    content: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class TodoList(_Model):
    """Collection of todo items with completion counts."""

    TABLE: ClassVar[str] = "todo_lists"
    LABEL: ClassVar[str] = "Todo list"
    PARENT_FIELD: ClassVar[Optional[str]] = "space_id"
    OWNED: ClassVar[bool] = True
    COMPUTED: ClassVar[Tuple[str, ...]] = ("total_item_count", "completed_item_count")

    id: str
    space_id: str
    name: str
    user_id: str = LOCAL_USER_ID
    description: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    total_item_count: int = 0
    completed_item_count: int = 0

    @property
    def progress(self) -> float:
        """Completed fraction between 0.0 and 1.0 (0.0 when empty)."""
        if not self.total_item_count:
            return 0.0
        return self.completed_item_count / self.total_item_count


@dataclass
class TodoItem(_Model):
    """Individual task within a todo list."""

    TABLE: ClassVar[str] = "todo_items"
    LABEL: ClassVar[str] = "Todo item"
    PARENT_FIELD: ClassVar[Optional[str]] = "todo_list_id"
    OWNER_VIA: ClassVar[Optional[str]] = "todo_lists"
    BOOL_FIELDS: ClassVar[Tuple[str, ...]] = ("is_completed",)
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("tags",)

    id: str
    todo_list_id: str
    title: str
    description: Optional[str] = None
    is_completed: bool = False
    due_date: Optional[str] = None
    priority: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ListModel(_Model):
    """Custom list (bullets, numbered, checkboxes or simple)."""

    TABLE: ClassVar[str] = "lists"
    LABEL: ClassVar[str] = "List"
    PARENT_FIELD: ClassVar[Optional[str]] = "space_id"
    OWNED: ClassVar[bool] = True
    COMPUTED: ClassVar[Tuple[str, ...]] = ("total_item_count", "checked_item_count")

    id: str
    space_id: str
    name: str
    user_id: str = LOCAL_USER_ID
    icon: Optional[str] = None
    style: str = DEFAULT_LIST_STYLE
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    total_item_count: int = 0
    checked_item_count: int = 0

    @property
    def progress(self) -> float:
        """Checked fraction between 0.0 and 1.0 (0.0 when empty)."""
        if not self.total_item_count:
            return 0.0
        return self.checked_item_count / self.total_item_count


@dataclass
class ListItem(_Model):
    """Individual entry within a custom list."""

    TABLE: ClassVar[str] = "list_items"
    LABEL: ClassVar[str] = "List item"
    PARENT_FIELD: ClassVar[Optional[str]] = "list_id"
    OWNER_VIA: ClassVar[Optional[str]] = "lists"
    BOOL_FIELDS: ClassVar[Tuple[str, ...]] = ("is_checked",)

    id: str
    list_id: str
    title: str
    notes: Optional[str] = None
    is_checked: bool = False
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


ORDERABLE_MODELS = (Note, TodoList, TodoItem, ListModel, ListItem)


@dataclass
class SearchResult:
    """A search hit normalised across content types."""

    id: str
    type: str
    title: str
    updated_at: Optional[str] = None
    preview: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    parent_id: Optional[str] = None
    parent_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
