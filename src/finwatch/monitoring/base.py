"""Building blocks shared by the monitors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Callable, Generic, Iterable, Optional, TypeVar

from ..errors import NotFoundError
from ..models.account import Account
from ..models.budget import Budget
from ..models.debt import Debt
from ..models.recurring import RecurringPayment
from ..models.transaction import Transaction

if TYPE_CHECKING:  # pragma: no cover
    from .manager import NotificationManager

Clock = Callable[[], datetime]
T = TypeVar("T")


@dataclass
class Ledger:
    """Current entity lists handed over by the storage collaborator."""

    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)
    recurring_payments: list[RecurringPayment] = field(default_factory=list)
    debts: list[Debt] = field(default_factory=list)

    def account(self, account_id: int) -> Account:
        for account in self.accounts:
            if account.id == account_id:
                return account
        raise NotFoundError("Account", account_id)

    def budget(self, budget_id: int) -> Budget:
        for budget in self.budgets:
            if budget.id == budget_id:
                return budget
        raise NotFoundError("Budget", budget_id)

    def add_transaction(self, txn: Transaction) -> Optional[Transaction]:
        """Insert ``txn``, replacing any record with the same id.

        Returns the record that was replaced, or None for a new transaction.
        """

        for index, existing in enumerate(self.transactions):
            if existing is txn or (txn.id is not None and existing.id == txn.id):
                self.transactions[index] = txn
                return existing
        self.transactions.append(txn)
        return None

    def replace(
        self,
        *,
        accounts: Optional[Iterable[Account]] = None,
        transactions: Optional[Iterable[Transaction]] = None,
        budgets: Optional[Iterable[Budget]] = None,
        recurring_payments: Optional[Iterable[RecurringPayment]] = None,
        debts: Optional[Iterable[Debt]] = None,
    ) -> None:
        """Swap in fresh lists; omitted collections are left untouched."""

        if accounts is not None:
            self.accounts = list(accounts)
        if transactions is not None:
            self.transactions = list(transactions)
        if budgets is not None:
            self.budgets = list(budgets)
        if recurring_payments is not None:
            self.recurring_payments = list(recurring_payments)
        if debts is not None:
            self.debts = list(debts)


class TTLCache(Generic[T]):
    """Timestamped map; entries are fresh for ``ttl`` and swept after ``2 * ttl``."""

    def __init__(self, ttl: timedelta, clock: Clock):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[object, tuple[T, datetime]] = {}

    def get(self, key: object) -> Optional[T]:
        hit = self._entries.get(key)
        if hit is None:
            return None
        value, stamp = hit
        if self._clock() - stamp >= self.ttl:
            return None
        return value

    def put(self, key: object, value: T) -> T:
        self._entries[key] = (value, self._clock())
        return value

    def discard(self, key: object) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        cutoff = self._clock() - self.ttl * 2
        stale = [key for key, (_, stamp) in self._entries.items() if stamp < cutoff]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class Monitor:
    """Base class: a monitor reads the ledger and writes only through the manager."""

    def __init__(
        self,
        manager: "NotificationManager",
        ledger: Ledger,
        *,
        clock: Clock = datetime.now,
    ):
        self.manager = manager
        self.ledger = ledger
        self.clock = clock

    @property
    def preferences(self):
        return self.manager.preferences

    def today(self) -> date:
        return self.clock().date()

    def sweep(self) -> int:
        """Evict stale cache entries; monitors without caches have nothing to do."""
        return 0


class DailyMonitor(Monitor):
    """Monitor that runs at most once per calendar day."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.last_run: Optional[date] = None

    def already_ran_today(self) -> bool:
        return self.last_run == self.today()

    def reset_last_run(self) -> None:
        self.last_run = None


def is_adjustment(category: str, adjustment_categories: Iterable[str]) -> bool:
    return category in set(adjustment_categories)


__all__ = [
    "Clock",
    "DailyMonitor",
    "Ledger",
    "Monitor",
    "TTLCache",
    "is_adjustment",
]
