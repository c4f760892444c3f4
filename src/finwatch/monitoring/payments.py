"""Reminders for recurring payments that are coming due."""

from __future__ import annotations

import logging
from datetime import date

from ..models.notification import RECURRING, SEVERITY_INFO, SEVERITY_WARNING
from ..models.recurring import MONTHLY, RecurringPayment
from ..services.billing_cycle import clamp_day
from .base import DailyMonitor
from .manager import NotificationDraft

logger = logging.getLogger("finwatch.monitoring.payments")

# days before due -> (title prefix, message suffix, severity)
REMINDERS = {
    3: ("Reminder", "is due in 3 days", SEVERITY_INFO),
    1: ("Payment due tomorrow", "is due tomorrow", SEVERITY_WARNING),
    0: ("Payment due today", "is due today", SEVERITY_WARNING),
}


def next_due_date(payment: RecurringPayment, today: date) -> date:
    """Return the next due date on or after ``today``."""

    if payment.frequency == MONTHLY:
        due = clamp_day(today.year, today.month, payment.due_day)
        if today > due:
            year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
            due = clamp_day(year, month, payment.due_day)
        return due

    due = clamp_day(today.year, payment.due_month, payment.due_day)
    if today > due:
        due = clamp_day(today.year + 1, payment.due_month, payment.due_day)
    return due


class PaymentMonitor(DailyMonitor):
    """Once a day, remind about unpaid recurring payments 3, 1 and 0 days out."""

    def evaluate(self) -> None:
        if self.already_ran_today():
            logger.info("Payment check already run today, skipping")
            return

        today = self.today()
        active = [p for p in self.ledger.recurring_payments if p.is_active and p.id is not None]
        for payment in active:
            due = next_due_date(payment, today)
            if self.is_paid_for_period(payment, due):
                continue
            reminder = REMINDERS.get((due - today).days)
            if reminder is None:
                continue
            prefix, suffix, severity = reminder
            self.manager.create_notification(
                NotificationDraft(
                    type=RECURRING,
                    title=f"{prefix}: {payment.name}",
                    message=f"The payment of {payment.amount:,.0f} {suffix}",
                    severity=severity,
                    deep_link="/recurring",
                    meta={
                        "recurring_payment_id": payment.id,
                        "amount": payment.amount,
                        "due_date": due.isoformat(),
                    },
                )
            )

        self.last_run = today
        logger.info("Payment check completed", extra={"payments_checked": len(active)})

    def days_until_due(self, payment: RecurringPayment) -> int:
        today = self.today()
        return (next_due_date(payment, today) - today).days

    def is_paid_for_period(self, payment: RecurringPayment, due: date) -> bool:
        """True when a linked, paid transaction falls in the period of ``due``."""

        for txn in self.ledger.transactions:
            if txn.recurring_payment_id != payment.id or not txn.paid:
                continue
            when = txn.occurred_at
            if payment.frequency == MONTHLY:
                if (when.year, when.month) == (due.year, due.month):
                    return True
            elif when.year == due.year:
                return True
        return False


__all__ = ["PaymentMonitor", "next_due_date"]
