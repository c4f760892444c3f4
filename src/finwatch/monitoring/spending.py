"""Unusual spending detection against a trailing category average."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from ..models.notification import SEVERITY_WARNING, UNUSUAL_SPENDING
from ..models.transaction import Transaction
from .base import Monitor, TTLCache, is_adjustment
from .manager import NotificationDraft

logger = logging.getLogger("finwatch.monitoring.spending")

CACHE_TTL = timedelta(minutes=5)
LOOKBACK_DAYS = 90
MIN_TRANSACTIONS = 3


@dataclass(frozen=True, slots=True)
class CategoryAverage:
    average: float
    transaction_count: int


class SpendingAnalyzer(Monitor):
    """Flags an expense that is well above what the category usually costs."""

    def __init__(self, *args, adjustment_categories: Iterable[str] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self.adjustment_categories = tuple(adjustment_categories)
        self.cache: TTLCache[CategoryAverage] = TTLCache(CACHE_TTL, self.clock)

    def evaluate(self, txn: Transaction) -> None:
        if not txn.is_paid_expense:
            return
        if is_adjustment(txn.category, self.adjustment_categories):
            return

        stats = self.category_average(txn.category)
        if stats.transaction_count < MIN_TRANSACTIONS:
            logger.info(
                "Category has insufficient history for unusual spending detection",
                extra={"category": txn.category, "count": stats.transaction_count},
            )
            return

        threshold_amount = stats.average * self.preferences.thresholds.unusual_spending / 100
        if txn.amount <= threshold_amount:
            return

        ratio = round(txn.amount / stats.average * 100) if stats.average else 0
        self.manager.create_notification(
            NotificationDraft(
                type=UNUSUAL_SPENDING,
                title=f"Unusual spending: {txn.category}",
                message=(
                    f"An expense of {txn.amount:,.0f} is {ratio}% of the usual "
                    f"{stats.average:,.0f} for this category"
                ),
                severity=SEVERITY_WARNING,
                deep_link="/transactions",
                meta={
                    "transaction_id": txn.id,
                    "category": txn.category,
                    "amount": txn.amount,
                    "threshold": threshold_amount,
                },
            )
        )

    def category_average(self, category: str) -> CategoryAverage:
        """Average paid expense in ``category`` over the trailing 90 days (cached)."""

        cached = self.cache.get(category)
        if cached is not None:
            return cached

        cutoff = self.clock() - timedelta(days=LOOKBACK_DAYS)
        amounts = [
            t.amount
            for t in self.ledger.transactions
            if t.is_paid_expense
            and t.category == category
            and t.occurred_at >= cutoff
            and not is_adjustment(t.category, self.adjustment_categories)
        ]
        average = sum(amounts) / len(amounts) if amounts else 0.0
        return self.cache.put(category, CategoryAverage(average=average, transaction_count=len(amounts)))

    def has_minimum_history(self, category: str) -> bool:
        return self.category_average(category).transaction_count >= MIN_TRANSACTIONS

    def invalidate(self, category: str | None = None) -> None:
        if category is None:
            self.cache.clear()
        else:
            self.cache.discard(category)

    def sweep(self) -> int:
        return self.cache.sweep()


__all__ = ["CategoryAverage", "SpendingAnalyzer"]
