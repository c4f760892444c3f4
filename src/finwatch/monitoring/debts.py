"""Reminders for debts that have been open too long."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..models.debt import BORROWED, LENT, Debt
from ..models.notification import DEBT, SEVERITY_INFO, SEVERITY_WARNING
from ..services.debts import days_outstanding
from .base import DailyMonitor
from .manager import NotificationDraft

logger = logging.getLogger("finwatch.monitoring.debts")

REMIND_EVERY = timedelta(days=7)

# direction -> tiers, highest first: (min days, title prefix, severity)
TIERS = {
    BORROWED: ((60, "Outstanding debt", SEVERITY_WARNING), (30, "Debt reminder", SEVERITY_INFO)),
    LENT: ((90, "Outstanding loan", SEVERITY_INFO),),
}


class DebtMonitor(DailyMonitor):
    """Once a day, nudge about unsettled debts; never more than weekly per debt."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.last_reminder: dict[int, datetime] = {}

    def evaluate(self) -> None:
        if self.already_ran_today():
            logger.info("Debt check already run today, skipping")
            return

        now = self.clock()
        open_debts = [d for d in self.ledger.debts if not d.is_settled and d.id is not None]
        for debt in open_debts:
            tiers = TIERS.get(debt.direction)
            if not tiers:
                logger.warning("Unknown debt direction", extra={"debt_id": debt.id, "direction": debt.direction})
                continue
            days = days_outstanding(debt, now)
            if not self.should_remind(debt, days):
                continue
            for min_days, prefix, severity in tiers:
                if days >= min_days:
                    self._remind(debt, days, min_days, prefix, severity)
                    self.last_reminder[debt.id] = now
                    break

        self.last_run = now.date()
        logger.info("Debt check completed", extra={"debts_checked": len(open_debts)})

    def should_remind(self, debt: Debt, days: int) -> bool:
        last = self.last_reminder.get(debt.id)
        if last is None:
            return days >= min(t[0] for t in TIERS[debt.direction])
        return self.clock() - last >= REMIND_EVERY

    def _remind(self, debt: Debt, days: int, level: int, prefix: str, severity: str) -> None:
        if debt.direction == BORROWED:
            message = f"You owe {debt.remaining_amount:,.0f} to {debt.counterparty} for {days} days"
        else:
            message = f"{debt.counterparty} has owed you {debt.remaining_amount:,.0f} for {days} days"
        self.manager.create_notification(
            NotificationDraft(
                type=DEBT,
                title=f"{prefix}: {debt.counterparty}",
                message=message,
                severity=severity,
                deep_link="/debts",
                meta={"debt_id": debt.id, "amount": debt.remaining_amount, "level": level},
            )
        )

    def sweep(self) -> int:
        """Forget reminder history for debts that were settled or removed."""

        open_ids = {d.id for d in self.ledger.debts if not d.is_settled}
        stale = [debt_id for debt_id in self.last_reminder if debt_id not in open_ids]
        for debt_id in stale:
            del self.last_reminder[debt_id]
        return len(stale)

    def clear_reminder_history(self) -> None:
        self.last_reminder.clear()


__all__ = ["DebtMonitor"]
