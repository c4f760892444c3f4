"""Engine facade routing ledger events to the monitors."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from ..config import BaseConfig
from ..domain.repositories.notification import NotificationStore
from ..errors import PersistenceFailure
from ..models.account import Account
from ..models.budget import Budget
from ..models.debt import Debt
from ..models.preferences import NotificationPreferences
from ..models.recurring import RecurringPayment
from ..models.transaction import TRANSFER, Transaction
from .balance import BalanceMonitor
from .base import Clock, Ledger
from .budget import BudgetMonitor
from .debts import DebtMonitor
from .manager import NotificationManager
from .payments import PaymentMonitor
from .popups import PopupPresenter, PopupQueue
from .spending import SpendingAnalyzer

logger = logging.getLogger("finwatch.monitoring.engine")


class MonitoringEngine:
    """Single-writer entry point: each event is evaluated to completion before the next."""

    def __init__(
        self,
        manager: NotificationManager,
        ledger: Ledger | None = None,
        *,
        clock: Clock = datetime.now,
        adjustment_categories: Iterable[str] = (),
    ):
        self.manager = manager
        self.ledger = ledger if ledger is not None else Ledger()
        self.clock = clock
        adjustments = tuple(adjustment_categories)

        self.budget = BudgetMonitor(manager, self.ledger, clock=clock, adjustment_categories=adjustments)
        self.spending = SpendingAnalyzer(manager, self.ledger, clock=clock, adjustment_categories=adjustments)
        self.balance = BalanceMonitor(manager, self.ledger, clock=clock)
        self.payments = PaymentMonitor(manager, self.ledger, clock=clock)
        self.debts = DebtMonitor(manager, self.ledger, clock=clock)

    @classmethod
    def from_config(
        cls,
        config: BaseConfig,
        store: NotificationStore,
        *,
        preferences: NotificationPreferences | None = None,
        presenter: PopupPresenter | None = None,
        ledger: Ledger | None = None,
        clock: Clock = datetime.now,
    ) -> "MonitoringEngine":
        popups = None
        if presenter is not None:
            popups = PopupQueue(presenter, max_visible=config.MAX_VISIBLE_POPUPS)
        manager = NotificationManager(
            store,
            preferences,
            popups=popups,
            clock=clock,
            debounce_ms=config.DEBOUNCE_MS,
        )
        return cls(
            manager,
            ledger,
            clock=clock,
            adjustment_categories=config.ADJUSTMENT_CATEGORIES,
        )

    @property
    def monitors(self):
        return (self.budget, self.spending, self.balance, self.payments, self.debts)

    def on_transaction(self, txn: Transaction) -> None:
        """Record ``txn`` (new or edited) in the ledger and run the per-transaction monitors.

        Every monitor runs even when an earlier one fails to persist; the first
        ``PersistenceFailure`` is re-raised once all of them have had their turn.
        """

        previous = self.ledger.add_transaction(txn)
        categories = {txn.category}
        account_ids = _account_ids(txn)
        if previous is not None and previous is not txn:
            categories.add(previous.category)
            account_ids += [a for a in _account_ids(previous) if a not in account_ids]
        for category in categories:
            self.budget.invalidate(category)
            self.spending.invalidate(category)

        units = [lambda: self.budget.evaluate(txn), lambda: self.spending.evaluate(txn)]
        units += [lambda account_id=account_id: self.balance.evaluate(account_id) for account_id in account_ids]
        _run_all(units)

    def daily_tick(self) -> None:
        _run_all([self.payments.evaluate, self.debts.evaluate])

    def sweep(self) -> int:
        """Evict stale cache and debounce entries. Return how many were dropped."""

        evicted = sum(monitor.sweep() for monitor in self.monitors)
        evicted += self.manager.sweep()
        if evicted:
            logger.debug("Swept monitoring caches", extra={"evicted": evicted})
        return evicted

    def drain_popups(self) -> int:
        if self.manager.popups is None:
            return 0
        return self.manager.popups.drain()

    def replace_ledger(
        self,
        *,
        accounts: Optional[Iterable[Account]] = None,
        transactions: Optional[Iterable[Transaction]] = None,
        budgets: Optional[Iterable[Budget]] = None,
        recurring_payments: Optional[Iterable[RecurringPayment]] = None,
        debts: Optional[Iterable[Debt]] = None,
    ) -> None:
        """Swap in fresh entity lists; derived caches are dropped, cooldowns survive."""

        self.ledger.replace(
            accounts=accounts,
            transactions=transactions,
            budgets=budgets,
            recurring_payments=recurring_payments,
            debts=debts,
        )
        self.budget.invalidate()
        self.spending.invalidate()


def _account_ids(txn: Transaction) -> list[int]:
    ids = [txn.account_id]
    if txn.kind == TRANSFER and txn.to_account_id is not None:
        ids.append(txn.to_account_id)
    return [account_id for account_id in ids if account_id is not None]


def _run_all(units: Iterable[Callable[[], object]]) -> None:
    failure: PersistenceFailure | None = None
    for unit in units:
        try:
            unit()
        except PersistenceFailure as exc:
            if failure is None:
                failure = exc
    if failure is not None:
        raise failure


__all__ = ["MonitoringEngine"]
