"""Notification store protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.notification import Notification


class NotificationStore(Protocol):
    """Storage collaborator that persists notifications handed over by the engine."""

    def add_if_absent(self, notification: Notification) -> bool:
        """Insert ``notification`` unless its id already exists. Return True when inserted."""
        ...

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        """Retrieve a notification by ID."""
        ...

    def list_all(self) -> list[Notification]:
        """List notifications, newest first."""
        ...

    def mark_read(self, notification_id: str) -> None:
        ...

    def mark_all_read(self) -> None:
        ...

    def delete(self, notification_id: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def prune(self, now: datetime) -> int:
        """Apply retention rules; return the number of records removed."""
        ...
