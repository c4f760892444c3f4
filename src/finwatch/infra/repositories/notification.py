"""Notification stores: SQLModel-backed and in-memory."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from ...config import BaseConfig
from ...models.notification import Notification

logger = logging.getLogger("finwatch.infra.notifications")

DEFAULT_RETENTION_DAYS = 30
DEFAULT_MAX_RECORDS = 100


class SQLModelNotificationRepository:
    """SQLModel-based notification store with 30-day / 100-record retention."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        max_records: int = DEFAULT_MAX_RECORDS,
    ):
        self.session_factory = session_factory
        self.retention_days = retention_days
        self.max_records = max_records

    def add_if_absent(self, notification: Notification) -> bool:
        try:
            with self.session_factory() as session:
                if session.get(Notification, notification.id) is not None:
                    return False
                session.add(notification)
                session.commit()
                session.refresh(notification)
        except IntegrityError:
            # Another writer inserted the same id between our check and commit.
            logger.info("Notification already stored", extra={"notification_id": notification.id})
            return False
        return True

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        with self.session_factory() as session:
            return session.get(Notification, notification_id)

    def list_all(self) -> list[Notification]:
        with self.session_factory() as session:
            statement = select(Notification).order_by(col(Notification.created_at).desc())
            return list(session.exec(statement).all())

    def mark_read(self, notification_id: str) -> None:
        with self.session_factory() as session:
            row = session.get(Notification, notification_id)
            if row is None:
                return
            row.is_read = True
            session.add(row)
            session.commit()

    def mark_all_read(self) -> None:
        with self.session_factory() as session:
            rows = session.exec(select(Notification).where(Notification.is_read == False)).all()  # noqa: E712
            for row in rows:
                row.is_read = True
                session.add(row)
            session.commit()

    def delete(self, notification_id: str) -> None:
        with self.session_factory() as session:
            row = session.get(Notification, notification_id)
            if row:
                session.delete(row)
                session.commit()

    def clear(self) -> None:
        with self.session_factory() as session:
            session.execute(delete(Notification))
            session.commit()

    def prune(self, now: datetime) -> int:
        """Delete records older than the retention window, then trim to ``max_records``."""

        cutoff = now - timedelta(days=self.retention_days)
        removed = 0
        with self.session_factory() as session:
            stale = session.exec(
                select(Notification).where(col(Notification.created_at) < cutoff)
            ).all()
            for row in stale:
                session.delete(row)
                removed += 1
            session.commit()

            overflow = session.exec(
                select(Notification)
                .order_by(col(Notification.created_at).desc())
                .offset(self.max_records)
            ).all()
            for row in overflow:
                session.delete(row)
                removed += 1
            session.commit()

        if removed:
            logger.info("Pruned old notifications", extra={"removed": removed})
        return removed


class InMemoryNotificationStore:
    """Dict-backed store for hosts without a database (and for tests)."""

    def __init__(
        self,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        max_records: int = DEFAULT_MAX_RECORDS,
    ):
        self.retention_days = retention_days
        self.max_records = max_records
        self._rows: dict[str, Notification] = {}

    def add_if_absent(self, notification: Notification) -> bool:
        if notification.id in self._rows:
            return False
        self._rows[notification.id] = notification
        if notification.created_at is not None:
            self.prune(notification.created_at)
        return True

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        return self._rows.get(notification_id)

    def list_all(self) -> list[Notification]:
        return sorted(
            self._rows.values(),
            key=lambda n: n.created_at or datetime.min,
            reverse=True,
        )

    def mark_read(self, notification_id: str) -> None:
        row = self._rows.get(notification_id)
        if row is not None:
            row.is_read = True

    def mark_all_read(self) -> None:
        for row in self._rows.values():
            row.is_read = True

    def delete(self, notification_id: str) -> None:
        self._rows.pop(notification_id, None)

    def clear(self) -> None:
        self._rows.clear()

    def prune(self, now: datetime) -> int:
        cutoff = now - timedelta(days=self.retention_days)
        before = len(self._rows)
        keep = [
            n for n in self.list_all() if n.created_at is None or n.created_at >= cutoff
        ][: self.max_records]
        self._rows = {n.id: n for n in keep}
        return before - len(self._rows)


def store_from_config(config: BaseConfig, session_factory: Optional[Callable[[], Session]] = None):
    """Build the store the host asked for, with retention taken from ``config``.

    Without a session factory the notifications live in memory only.
    """

    options = {
        "retention_days": config.NOTIFICATION_RETENTION_DAYS,
        "max_records": config.NOTIFICATION_MAX_RECORDS,
    }
    if session_factory is None:
        return InMemoryNotificationStore(**options)
    return SQLModelNotificationRepository(session_factory, **options)


__all__ = ["InMemoryNotificationStore", "SQLModelNotificationRepository", "store_from_config"]
