"""Notification manager: the single gate every monitor writes through.

A draft passes, in order: the per-type switch in the user's preferences, the
debounce window, and the store's insert-if-absent on a deterministic id. Only
then may it reach the popup queue, and never during quiet hours.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..domain.repositories.notification import NotificationStore
from ..errors import PersistenceFailure
from ..models.notification import (
    ENTITY_KEYS,
    NOTIFICATION_TYPES,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    Notification,
)
from ..models.preferences import NotificationPreferences
from .base import Clock
from .popups import PopupQueue

logger = logging.getLogger("finwatch.monitoring.manager")

DEBOUNCE_MS = 1000
POPUP_SEVERITIES = (SEVERITY_WARNING, SEVERITY_ERROR)


@dataclass(slots=True)
class NotificationDraft:
    """What a monitor wants to say; the manager turns it into a record."""

    type: str
    title: str
    message: str
    severity: str
    deep_link: Optional[str] = None
    meta: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False

    def entity_ids(self) -> list[str]:
        return [str(self.meta[key]) for key in ENTITY_KEYS if self.meta.get(key) is not None]


def notification_id(draft: NotificationDraft, day: date) -> str:
    """Build the deterministic id for ``draft`` on ``day``.

    Same type, same day and same entities collapse into one record. ``level``
    (an alert tier) is part of the key so an escalation is still recorded.
    Drafts without entity ids fall back to a digest of their title.
    """

    parts = [draft.type, day.isoformat(), *draft.entity_ids()]
    if draft.meta.get("level") is not None:
        parts.append(str(draft.meta["level"]))
    if len(parts) == 2:
        parts.append(hashlib.sha1(draft.title.encode("utf-8")).hexdigest()[:12])
    return ":".join(parts)


def debounce_key(draft: NotificationDraft) -> str:
    return ":".join([draft.type, draft.title, *draft.entity_ids()])


class NotificationManager:
    """Owns deduplication, quiet hours, and hand-off to the store and popups."""

    def __init__(
        self,
        store: NotificationStore,
        preferences: NotificationPreferences | None = None,
        *,
        popups: PopupQueue | None = None,
        clock: Clock = datetime.now,
        debounce_ms: int = DEBOUNCE_MS,
    ):
        self.store = store
        self.preferences = preferences or NotificationPreferences()
        self.popups = popups
        self.clock = clock
        self.debounce = timedelta(milliseconds=debounce_ms)
        self._debounce_map: dict[str, datetime] = {}

    def create_notification(self, draft: NotificationDraft) -> Notification | None:
        """Persist ``draft`` if it survives every gate. Return the stored record or None."""

        if draft.type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {draft.type!r}")

        if not self.preferences.is_enabled(draft.type):
            logger.info("Notification type disabled, skipping", extra={"type": draft.type})
            return None

        if self._is_duplicate(draft):
            logger.info("Duplicate notification detected, skipping", extra={"title": draft.title})
            return None

        now = self.clock()
        record = Notification(
            id=notification_id(draft, now.date()),
            type=draft.type,
            severity=draft.severity,
            is_read=draft.is_read,
            title=draft.title,
            message=draft.message,
            deep_link=draft.deep_link,
            meta=dict(draft.meta),
            created_at=now,
        )

        try:
            inserted = self.store.add_if_absent(record)
        except Exception as exc:
            logger.error(
                "Failed to create notification",
                exc_info=True,
                extra={"notification_id": record.id},
            )
            raise PersistenceFailure(f"Could not store notification {record.id}") from exc

        self._debounce_map[debounce_key(draft)] = now

        if not inserted:
            logger.info("Notification already recorded today", extra={"notification_id": record.id})
            return None

        if self.popups is not None and self.should_show_popup(record):
            self.popups.enqueue(record)

        logger.info(
            "Notification created",
            extra={"notification_id": record.id, "severity": record.severity},
        )
        return record

    def is_in_quiet_hours(self) -> bool:
        return self.preferences.quiet_hours.contains(self.clock().hour)

    def should_show_popup(self, notification: Notification) -> bool:
        if self.is_in_quiet_hours():
            return False
        return notification.severity in POPUP_SEVERITIES

    def _is_duplicate(self, draft: NotificationDraft) -> bool:
        last = self._debounce_map.get(debounce_key(draft))
        if last is None:
            return False
        return self.clock() - last < self.debounce

    def sweep(self) -> int:
        """Drop debounce entries older than twice the window."""

        cutoff = self.clock() - self.debounce * 2
        stale = [key for key, stamp in self._debounce_map.items() if stamp < cutoff]
        for key in stale:
            del self._debounce_map[key]
        return len(stale)

    # Record management -------------------------------------------------

    def _store_call(self, action: str, func, *args):
        try:
            return func(*args)
        except Exception as exc:
            logger.error(f"Failed to {action}", exc_info=True)
            raise PersistenceFailure(f"Could not {action}") from exc

    def mark_as_read(self, notification_id: str) -> None:
        self._store_call("mark notification as read", self.store.mark_read, notification_id)

    def mark_all_as_read(self) -> None:
        self._store_call("mark all notifications as read", self.store.mark_all_read)

    def delete(self, notification_id: str) -> None:
        self._store_call("delete notification", self.store.delete, notification_id)

    def clear_all(self) -> None:
        self._store_call("clear notifications", self.store.clear)

    def prune(self) -> int:
        return self._store_call("prune notifications", self.store.prune, self.clock())

    def notifications(
        self,
        *,
        type: str | None = None,
        is_read: bool | None = None,
        severity: str | None = None,
    ) -> list[Notification]:
        rows = self.store.list_all()
        if type is not None:
            rows = [n for n in rows if n.type == type]
        if is_read is not None:
            rows = [n for n in rows if n.is_read == is_read]
        if severity is not None:
            rows = [n for n in rows if n.severity == severity]
        return rows

    def unread_count(self) -> int:
        return sum(1 for n in self.store.list_all() if not n.is_read)


__all__ = [
    "NotificationDraft",
    "NotificationManager",
    "debounce_key",
    "notification_id",
]
