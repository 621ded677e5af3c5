"""
FILE: later/core/permissions.py
PURPOSE: Role-based creation limits
EXPORTS:
  - limit_for(role, model) -> Optional[int]
  - check_limit(role, model, current_count) -> None
DEPENDENCIES:
  - later.core.constants (roles, ANONYMOUS_LIMITS)
  - later.core.exceptions (LimitReachedError)
NOTES:
  - Authenticated users are unlimited
  - Anonymous limits are per space for content, global for spaces
"""

from typing import Optional

from .constants import ANONYMOUS_LIMITS, ROLE_ANONYMOUS
from .exceptions import LimitReachedError

# Plural labels used in limit messages
_PLURAL = {
    "spaces": "spaces",
    "notes": "notes",
    "todo_lists": "todo lists",
    "lists": "lists",
}


def limit_for(role: str, model) -> Optional[int]:
    """Creation limit for model under role, None when unlimited."""
    if role != ROLE_ANONYMOUS:
        return None
    return ANONYMOUS_LIMITS.get(model.TABLE)


def check_limit(role: str, model, current_count: int) -> None:
    """
    Raises:
        LimitReachedError: If creating one more would exceed the limit
    """
    limit = limit_for(role, model)
    if limit is not None and current_count >= limit:
        raise LimitReachedError(_PLURAL.get(model.TABLE, model.TABLE), limit)
