"""Budget utilization alerts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from ..errors import NotFoundError
from ..models.notification import BUDGET, SEVERITY_ERROR, SEVERITY_WARNING
from ..models.transaction import Transaction
from .base import Monitor, TTLCache, is_adjustment
from .manager import NotificationDraft

logger = logging.getLogger("finwatch.monitoring.budget")

CACHE_TTL = timedelta(seconds=30)


@dataclass(frozen=True, slots=True)
class BudgetUtilization:
    budget_id: int
    category: str
    limit: float
    spent: float
    percentage: float


class BudgetMonitor(Monitor):
    """Emits the single highest tier crossed by a category's monthly spend."""

    def __init__(self, *args, adjustment_categories: Iterable[str] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self.adjustment_categories = tuple(adjustment_categories)
        self.cache: TTLCache[BudgetUtilization] = TTLCache(CACHE_TTL, self.clock)

    def evaluate(self, txn: Transaction) -> None:
        if not txn.is_paid_expense:
            return
        if is_adjustment(txn.category, self.adjustment_categories):
            return

        matching = [b for b in self.ledger.budgets if b.is_active and b.category == txn.category]
        for budget in matching:
            if budget.id is None:
                continue
            try:
                utilization = self.utilization(budget.id)
            except NotFoundError:
                logger.warning("Budget vanished during evaluation", extra={"budget_id": budget.id})
                continue
            self._check_thresholds(utilization)

    def utilization(self, budget_id: int) -> BudgetUtilization:
        """Current-month spend against the budget's limit, cached for 30 seconds."""

        cached = self.cache.get(budget_id)
        if cached is not None:
            return cached

        budget = self.ledger.budget(budget_id)
        today = self.today()
        spent = sum(
            t.amount
            for t in self.ledger.transactions
            if t.is_paid_expense
            and t.category == budget.category
            and t.occurred_at.year == today.year
            and t.occurred_at.month == today.month
            and not is_adjustment(t.category, self.adjustment_categories)
        )
        percentage = spent / budget.monthly_limit * 100 if budget.monthly_limit > 0 else 0.0

        return self.cache.put(
            budget_id,
            BudgetUtilization(
                budget_id=budget_id,
                category=budget.category,
                limit=budget.monthly_limit,
                spent=spent,
                percentage=percentage,
            ),
        )

    def invalidate(self, category: str | None = None) -> None:
        """Forget cached spend for ``category`` (or for every budget)."""

        if category is None:
            self.cache.clear()
            return
        for budget in self.ledger.budgets:
            if budget.category == category:
                self.cache.discard(budget.id)

    def _check_thresholds(self, u: BudgetUtilization) -> None:
        thresholds = self.preferences.thresholds
        tiers = (
            (thresholds.budget_exceeded, "exceeded", SEVERITY_ERROR, "Budget exceeded"),
            (thresholds.budget_critical, "critical", SEVERITY_WARNING, "Critical budget alert"),
            (thresholds.budget_warning, "warning", SEVERITY_WARNING, "Budget warning"),
        )
        for threshold, level, severity, label in tiers:
            if u.percentage < threshold:
                continue
            self.manager.create_notification(
                NotificationDraft(
                    type=BUDGET,
                    title=f"{label}: {u.category}",
                    message=f"You have spent {u.spent:,.0f} of {u.limit:,.0f} ({round(u.percentage)}%)",
                    severity=severity,
                    deep_link="/budgets",
                    meta={
                        "budget_id": u.budget_id,
                        "category": u.category,
                        "percentage": round(u.percentage),
                        "amount": u.spent,
                        "limit": u.limit,
                        "level": level,
                    },
                )
            )
            return

    def sweep(self) -> int:
        return self.cache.sweep()


__all__ = ["BudgetMonitor", "BudgetUtilization"]
