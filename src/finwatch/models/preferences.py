"""User notification preferences."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(slots=True)
class EnabledTypes:
    budget: bool = True
    recurring: bool = True
    unusual_spending: bool = True
    low_balance: bool = True
    debt: bool = True


@dataclass(slots=True)
class Thresholds:
    budget_warning: float = 80.0
    budget_critical: float = 90.0
    budget_exceeded: float = 100.0
    unusual_spending: float = 150.0
    low_balance: float = 100_000.0


@dataclass(slots=True)
class QuietHours:
    enabled: bool = False
    start_hour: int = 22
    end_hour: int = 8

    def contains(self, hour: int) -> bool:
        """Return True when ``hour`` falls inside the quiet window."""
        if not self.enabled:
            return False
        if self.start_hour < self.end_hour:
            return self.start_hour <= hour < self.end_hour
        # Window spans midnight
        return hour >= self.start_hour or hour < self.end_hour


@dataclass(slots=True)
class NotificationPreferences:
    """Which alerts are on, where their thresholds sit, and when to stay quiet."""

    enabled: EnabledTypes = field(default_factory=EnabledTypes)
    thresholds: Thresholds = field(default_factory=Thresholds)
    quiet_hours: QuietHours = field(default_factory=QuietHours)

    def is_enabled(self, notification_type: str) -> bool:
        # Types without a switch (``info``) are always on.
        return bool(getattr(self.enabled, notification_type, True))

    def validate(self) -> None:
        t = self.thresholds
        if not 0 <= t.budget_warning <= 100:
            raise ValueError("Budget warning threshold must be between 0 and 100")
        if not 0 <= t.budget_critical <= 100:
            raise ValueError("Budget critical threshold must be between 0 and 100")
        if not 0 <= t.budget_exceeded <= 200:
            raise ValueError("Budget exceeded threshold must be between 0 and 200")
        if not 100 <= t.unusual_spending <= 1000:
            raise ValueError("Unusual spending threshold must be between 100 and 1000")
        if t.low_balance < 0:
            raise ValueError("Low balance threshold must be positive")
        for label, hour in (("Start hour", self.quiet_hours.start_hour), ("End hour", self.quiet_hours.end_hour)):
            if not 0 <= hour <= 23:
                raise ValueError(f"{label} must be between 0 and 23")

    def merged(
        self,
        *,
        enabled: dict[str, Any] | None = None,
        thresholds: dict[str, Any] | None = None,
        quiet_hours: dict[str, Any] | None = None,
    ) -> "NotificationPreferences":
        """Return a validated copy with the given sections partially updated."""

        updated = NotificationPreferences(
            enabled=replace(self.enabled, **(enabled or {})),
            thresholds=replace(self.thresholds, **(thresholds or {})),
            quiet_hours=replace(self.quiet_hours, **(quiet_hours or {})),
        )
        updated.validate()
        return updated
