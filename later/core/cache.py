"""
FILE: later/core/cache.py
PURPOSE: Immutable snapshot of a controller's cached collection
EXPORTS:
  - Snapshot (frozen dataclass)
  - LOADING, DATA, ERROR (status names)
DEPENDENCIES:
  - dataclasses, typing (stdlib)
NOTES:
  - A snapshot always carries the last known good value, even while
    loading or after an error, so views never go blank
  - is_stale is True whenever a value is held but status isn't DATA
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

LOADING = "loading"
DATA = "data"
ERROR = "error"


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    status: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def loading(cls, previous: Optional[T] = None) -> "Snapshot[T]":
        return cls(LOADING, previous)

    @classmethod
    def data(cls, value: T) -> "Snapshot[T]":
        return cls(DATA, value)

    @classmethod
    def failure(cls, error: BaseException, previous: Optional[T] = None) -> "Snapshot[T]":
        return cls(ERROR, previous, error)

    @property
    def is_loading(self) -> bool:
        return self.status == LOADING

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def has_error(self) -> bool:
        return self.status == ERROR

    @property
    def is_stale(self) -> bool:
        """A value is held, but it may not match the store."""
        return self.has_value and self.status != DATA

    def require(self) -> T:
        """
        Returns:
            The held value

        Raises:
            The held error, if there is no value to fall back on
            RuntimeError: If still loading with nothing cached
        """
        if self.value is not None:
            return self.value
        if self.error is not None:
            raise self.error
        raise RuntimeError("Snapshot has no value yet")
