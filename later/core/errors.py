"""
FILE: later/core/errors.py
PURPOSE: Error code registry and store error-code mapping
EXPORTS:
  - ErrorCode (enum of every categorised error)
  - ErrorSeverity (enum)
  - is_retryable(code) -> bool
  - severity(code) -> ErrorSeverity
  - localization_key(code) -> str
  - map_postgres_code(code) -> ErrorCode
  - map_sqlite_error(exc) -> ErrorCode
DEPENDENCIES:
  - enum, logging, sqlite3 (stdlib)
NOTES:
  - Lookup tables are plain module-level dicts; no instances needed
  - Postgres SQLSTATE codes are kept for rows synced from a hosted store
  - Unmapped codes are logged at WARNING and fall back to DATABASE_GENERIC
"""

import logging
import sqlite3
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Categorised error codes for every failure the app can surface."""

    # Database errors
    DATABASE_UNIQUE_CONSTRAINT = "database_unique_constraint"
    DATABASE_FOREIGN_KEY_VIOLATION = "database_foreign_key_violation"
    DATABASE_NOT_NULL_VIOLATION = "database_not_null_violation"
    DATABASE_CHECK_VIOLATION = "database_check_violation"
    DATABASE_PERMISSION_DENIED = "database_permission_denied"
    DATABASE_TIMEOUT = "database_timeout"
    DATABASE_UNAVAILABLE = "database_unavailable"
    DATABASE_GENERIC = "database_generic"

    # Validation errors
    VALIDATION_REQUIRED = "validation_required"
    VALIDATION_INVALID_FORMAT = "validation_invalid_format"
    VALIDATION_OUT_OF_RANGE = "validation_out_of_range"
    VALIDATION_DUPLICATE = "validation_duplicate"

    # Business logic errors
    SPACE_NOT_FOUND = "space_not_found"
    NOTE_NOT_FOUND = "note_not_found"
    CONTENT_NOT_FOUND = "content_not_found"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    OPERATION_NOT_ALLOWED = "operation_not_allowed"

    UNKNOWN_ERROR = "unknown_error"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


RETRYABLE_CODES = frozenset({
    ErrorCode.DATABASE_TIMEOUT,
    ErrorCode.DATABASE_UNAVAILABLE,
})

SEVERITY_BY_CODE = {
    ErrorCode.DATABASE_FOREIGN_KEY_VIOLATION: ErrorSeverity.CRITICAL,
    ErrorCode.DATABASE_NOT_NULL_VIOLATION: ErrorSeverity.CRITICAL,
    ErrorCode.DATABASE_UNIQUE_CONSTRAINT: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_CHECK_VIOLATION: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_PERMISSION_DENIED: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_TIMEOUT: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_GENERIC: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_UNAVAILABLE: ErrorSeverity.MEDIUM,
    ErrorCode.INSUFFICIENT_PERMISSIONS: ErrorSeverity.HIGH,
    ErrorCode.SPACE_NOT_FOUND: ErrorSeverity.MEDIUM,
    ErrorCode.NOTE_NOT_FOUND: ErrorSeverity.MEDIUM,
    ErrorCode.CONTENT_NOT_FOUND: ErrorSeverity.MEDIUM,
    ErrorCode.OPERATION_NOT_ALLOWED: ErrorSeverity.MEDIUM,
    ErrorCode.VALIDATION_REQUIRED: ErrorSeverity.LOW,
    ErrorCode.VALIDATION_INVALID_FORMAT: ErrorSeverity.LOW,
    ErrorCode.VALIDATION_OUT_OF_RANGE: ErrorSeverity.LOW,
    ErrorCode.VALIDATION_DUPLICATE: ErrorSeverity.LOW,
    ErrorCode.UNKNOWN_ERROR: ErrorSeverity.HIGH,
}

# PostgreSQL SQLSTATE -> ErrorCode
POSTGRES_CODES = {
    "23505": ErrorCode.DATABASE_UNIQUE_CONSTRAINT,
    "23503": ErrorCode.DATABASE_FOREIGN_KEY_VIOLATION,
    "23502": ErrorCode.DATABASE_NOT_NULL_VIOLATION,
    "23514": ErrorCode.DATABASE_CHECK_VIOLATION,
    "42501": ErrorCode.DATABASE_PERMISSION_DENIED,
    "57014": ErrorCode.DATABASE_TIMEOUT,
}

# sqlite3 extended result code names -> ErrorCode
SQLITE_ERROR_NAMES = {
    "SQLITE_CONSTRAINT_UNIQUE": ErrorCode.DATABASE_UNIQUE_CONSTRAINT,
    "SQLITE_CONSTRAINT_PRIMARYKEY": ErrorCode.DATABASE_UNIQUE_CONSTRAINT,
    "SQLITE_CONSTRAINT_FOREIGNKEY": ErrorCode.DATABASE_FOREIGN_KEY_VIOLATION,
    "SQLITE_CONSTRAINT_NOTNULL": ErrorCode.DATABASE_NOT_NULL_VIOLATION,
    "SQLITE_CONSTRAINT_CHECK": ErrorCode.DATABASE_CHECK_VIOLATION,
    "SQLITE_PERM": ErrorCode.DATABASE_PERMISSION_DENIED,
    "SQLITE_AUTH": ErrorCode.DATABASE_PERMISSION_DENIED,
    "SQLITE_READONLY": ErrorCode.DATABASE_PERMISSION_DENIED,
    "SQLITE_BUSY": ErrorCode.DATABASE_TIMEOUT,
    "SQLITE_LOCKED": ErrorCode.DATABASE_TIMEOUT,
    "SQLITE_CANTOPEN": ErrorCode.DATABASE_UNAVAILABLE,
}

# Message fragments for interpreters whose sqlite3 lacks sqlite_errorname
SQLITE_MESSAGE_FRAGMENTS = (
    ("unique constraint failed", ErrorCode.DATABASE_UNIQUE_CONSTRAINT),
    ("foreign key constraint failed", ErrorCode.DATABASE_FOREIGN_KEY_VIOLATION),
    ("not null constraint failed", ErrorCode.DATABASE_NOT_NULL_VIOLATION),
    ("check constraint failed", ErrorCode.DATABASE_CHECK_VIOLATION),
    ("readonly database", ErrorCode.DATABASE_PERMISSION_DENIED),
    ("database is locked", ErrorCode.DATABASE_TIMEOUT),
    ("unable to open database", ErrorCode.DATABASE_UNAVAILABLE),
)


def is_retryable(code: ErrorCode) -> bool:
    """Whether retrying the same operation can reasonably succeed."""
    return code in RETRYABLE_CODES


def severity(code: ErrorCode) -> ErrorSeverity:
    return SEVERITY_BY_CODE.get(code, ErrorSeverity.HIGH)


def localization_key(code: ErrorCode) -> str:
    """Message catalogue key, e.g. 'error.database_timeout'."""
    return f"error.{code.value}"


def map_postgres_code(code: Optional[str]) -> ErrorCode:
    """
    Map a PostgreSQL SQLSTATE code to an ErrorCode.

    Args:
        code: Five character SQLSTATE (e.g. '23505'), or None

    Returns:
        Matching ErrorCode, DATABASE_GENERIC when unknown
    """
    if code is None:
        return ErrorCode.DATABASE_GENERIC

    mapped = POSTGRES_CODES.get(code)
    if mapped is None:
        logger.warning("Unmapped Postgres error code: %s", code)
        return ErrorCode.DATABASE_GENERIC
    return mapped


def map_sqlite_error(exc: sqlite3.Error) -> ErrorCode:
    """
    Map a sqlite3 exception to an ErrorCode.

    Uses the extended result code name when the interpreter exposes it
    (Python 3.11+), then falls back to matching the message text.
    """
    error_name = getattr(exc, "sqlite_errorname", None)
    if error_name in SQLITE_ERROR_NAMES:
        return SQLITE_ERROR_NAMES[error_name]

    message = str(exc).lower()
    for fragment, code in SQLITE_MESSAGE_FRAGMENTS:
        if fragment in message:
            return code

    logger.warning("Unmapped SQLite error %s: %s", error_name, exc)
    return ErrorCode.DATABASE_GENERIC
