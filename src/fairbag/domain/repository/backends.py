"""Storage backend contracts.

Any backend satisfying these interfaces is interchangeable.  Both raise
PersistenceUnavailableError when the underlying storage fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """On-device cache: string keys, JSON text values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored text, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


class RemoteStore(ABC):
    """Remote table store, filtered by column equality."""

    @abstractmethod
    def upsert(self, table: str, record: dict[str, Any], on_conflict: tuple[str, ...]) -> None:
        """Insert ``record`` or replace the row matching it on ``on_conflict`` columns."""

    @abstractmethod
    def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete every row matching ``filters``."""

    @abstractmethod
    def select(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Return rows matching ``filters``."""

    @abstractmethod
    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (with generated ``id``)."""
