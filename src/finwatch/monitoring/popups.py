"""Bounded queue for transient on-screen alerts."""

from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

from ..models.notification import Notification

logger = logging.getLogger("finwatch.monitoring.popups")

MAX_VISIBLE_POPUPS = 3


class PopupPresenter(Protocol):
    """Presentation collaborator that actually renders popups."""

    def visible_count(self) -> int:  # pragma: no cover - interface
        ...

    def show(self, notification: Notification) -> None:  # pragma: no cover - interface
        ...


class PopupQueue:
    """FIFO of pending popups, drained while fewer than ``max_visible`` are on screen.

    ``drain`` never waits: when every slot is taken it returns and the host
    calls it again on its polling interval.
    """

    def __init__(self, presenter: PopupPresenter, *, max_visible: int = MAX_VISIBLE_POPUPS):
        self.presenter = presenter
        self.max_visible = max_visible
        self._pending: deque[Notification] = deque()
        self._draining = False

    def enqueue(self, notification: Notification) -> None:
        self._pending.append(notification)
        self.drain()

    def drain(self) -> int:
        """Show as many pending popups as free slots allow. Return how many were shown."""

        if self._draining:
            return 0
        self._draining = True
        shown = 0
        try:
            while self._pending and self.presenter.visible_count() < self.max_visible:
                self.presenter.show(self._pending.popleft())
                shown += 1
        finally:
            self._draining = False
        if self._pending:
            logger.debug("Popup slots full", extra={"pending": len(self._pending)})
        return shown

    @property
    def pending(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        self._pending.clear()


__all__ = ["MAX_VISIBLE_POPUPS", "PopupPresenter", "PopupQueue"]
