"""
FILE: later/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - LaterError (base exception)
  - StoreError (store read/write failed)
  - NotFoundError, SpaceNotFoundError, NoteNotFoundError
  - ValidationError (invalid input, raised before any write)
  - LimitReachedError (role-based creation limit)
DEPENDENCIES:
  - sqlite3 (stdlib)
  - later.core.errors (ErrorCode, map_sqlite_error)
NOTES:
  - All exceptions inherit from LaterError for easy catching
  - Every exception carries an ErrorCode
  - Service layer raises these, UI layers catch and display
"""

import sqlite3
from typing import Optional

from .errors import ErrorCode, map_sqlite_error


class LaterError(Exception):
    """Base exception for all Later errors."""

    code = ErrorCode.UNKNOWN_ERROR


class StoreError(LaterError):
    """The store could not complete a read or write."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DATABASE_GENERIC,
        technical_details: Optional[str] = None,
    ):
        self.code = code
        self.technical_details = technical_details
        super().__init__(message)

    @classmethod
    def from_sqlite(cls, exc: sqlite3.Error) -> "StoreError":
        """Build a StoreError from a sqlite3 exception via the code tables."""
        return cls(
            f"Database operation failed: {exc}",
            code=map_sqlite_error(exc),
            technical_details=f"{type(exc).__name__}({exc})",
        )


class NotFoundError(StoreError):
    """Entity with given ID doesn't exist (or isn't visible to this user)."""

    kind = "Content"
    not_found_code = ErrorCode.CONTENT_NOT_FOUND

    def __init__(self, entity_id: str, kind: Optional[str] = None):
        self.entity_id = entity_id
        if kind:
            self.kind = kind
        super().__init__(f"{self.kind} {entity_id} not found", code=self.not_found_code)


class SpaceNotFoundError(NotFoundError):
    kind = "Space"
    not_found_code = ErrorCode.SPACE_NOT_FOUND


class NoteNotFoundError(NotFoundError):
    kind = "Note"
    not_found_code = ErrorCode.NOTE_NOT_FOUND


class ValidationError(LaterError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_INVALID_FORMAT,
        field: Optional[str] = None,
    ):
        self.code = code
        self.field = field
        super().__init__(message)

    @classmethod
    def required_field(cls, field: str) -> "ValidationError":
        return cls(f"{field} cannot be empty", ErrorCode.VALIDATION_REQUIRED, field)

    @classmethod
    def invalid_format(cls, field: str, detail: str = "") -> "ValidationError":
        message = f"{field} has an invalid format"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, ErrorCode.VALIDATION_INVALID_FORMAT, field)

    @classmethod
    def out_of_range(cls, field: str, minimum, maximum) -> "ValidationError":
        return cls(
            f"{field} must be between {minimum} and {maximum}",
            ErrorCode.VALIDATION_OUT_OF_RANGE,
            field,
        )

    @classmethod
    def duplicate(cls, field: str, detail: str = "") -> "ValidationError":
        message = f"{field} contains duplicates"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, ErrorCode.VALIDATION_DUPLICATE, field)


class LimitReachedError(LaterError):
    """Creation limit for the current role has been reached."""

    code = ErrorCode.INSUFFICIENT_PERMISSIONS

    def __init__(self, kind: str, limit: int):
        self.kind = kind
        self.limit = limit
        super().__init__(
            f"Anonymous users are limited to {limit} {kind}. Sign in to create more."
        )
