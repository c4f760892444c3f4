"""Pytest configuration and shared fixtures for finwatch tests.

Provides a frozen clock, in-memory ledger factories, notification stores and
an isolated SQLite database so monitors and repositories can be exercised
without touching the real application data directory.
"""

from __future__ import annotations

import itertools
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from finwatch.infra.database import create_session_factory
from finwatch.infra.repositories.notification import InMemoryNotificationStore
from finwatch.models import Account, Budget, Debt, RecurringPayment, Transaction
from finwatch.models.account import CREDIT, STANDARD
from finwatch.models.debt import BORROWED
from finwatch.models.preferences import NotificationPreferences
from finwatch.models.recurring import MONTHLY
from finwatch.models.transaction import EXPENSE
from finwatch.monitoring.base import Ledger
from finwatch.monitoring.manager import NotificationManager
from finwatch.monitoring.popups import PopupQueue

NOW = datetime(2025, 1, 15, 12, 0, 0)


# =============================================================================
# Time
# =============================================================================


class FrozenClock:
    """Callable clock that only moves when a test tells it to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return now


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at 2025-01-15 12:00."""
    return FrozenClock(NOW)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with every finwatch table created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in production."""
    return create_session_factory(db_engine)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def account_factory():
    """Factory for in-memory accounts with auto-assigned ids."""

    ids = itertools.count(1)

    def _create_account(
        name: str = "Checking",
        kind: str = STANDARD,
        opening_balance: float = 0.0,
        credit_limit: float = 0.0,
        cutoff_day: int | None = None,
        payment_day: int | None = None,
        annual_rate: float | None = None,
    ) -> Account:
        return Account(
            id=next(ids),
            name=name,
            kind=kind,
            opening_balance=opening_balance,
            credit_limit=credit_limit,
            cutoff_day=cutoff_day,
            payment_day=payment_day,
            annual_rate=annual_rate,
        )

    return _create_account


@pytest.fixture
def credit_card(account_factory):
    """Credit card with a 2,000,000 limit, cutoff on the 5th, payment on the 20th."""
    return account_factory(
        name="Visa",
        kind=CREDIT,
        credit_limit=2_000_000.0,
        cutoff_day=5,
        payment_day=20,
        annual_rate=23.99,
    )


@pytest.fixture
def transaction_factory():
    """Factory for in-memory transactions with auto-assigned ids."""

    ids = itertools.count(1)

    def _create_transaction(
        amount: float,
        account_id: int = 1,
        kind: str = EXPENSE,
        category: str = "Food",
        occurred_at: datetime | None = None,
        paid: bool = True,
        **extra,
    ) -> Transaction:
        return Transaction(
            id=next(ids),
            kind=kind,
            amount=amount,
            category=category,
            account_id=account_id,
            occurred_at=occurred_at or NOW,
            paid=paid,
            **extra,
        )

    return _create_transaction


@pytest.fixture
def budget_factory():
    ids = itertools.count(1)

    def _create_budget(category: str = "Food", monthly_limit: float = 1_000_000.0, is_active: bool = True):
        return Budget(id=next(ids), category=category, monthly_limit=monthly_limit, is_active=is_active)

    return _create_budget


@pytest.fixture
def recurring_factory():
    ids = itertools.count(1)

    def _create_recurring(
        name: str = "Rent",
        amount: float = 500_000.0,
        due_day: int = 1,
        frequency: str = MONTHLY,
        due_month: int = 1,
        is_active: bool = True,
    ) -> RecurringPayment:
        return RecurringPayment(
            id=next(ids),
            name=name,
            amount=amount,
            due_day=due_day,
            frequency=frequency,
            due_month=due_month,
            is_active=is_active,
        )

    return _create_recurring


@pytest.fixture
def debt_factory():
    ids = itertools.count(1)

    def _create_debt(
        counterparty: str = "Alex",
        direction: str = BORROWED,
        amount: float = 200_000.0,
        created_at: datetime | None = None,
        is_settled: bool = False,
    ) -> Debt:
        return Debt(
            id=next(ids),
            counterparty=counterparty,
            direction=direction,
            original_amount=amount,
            remaining_amount=0.0 if is_settled else amount,
            is_settled=is_settled,
            created_at=created_at or NOW,
        )

    return _create_debt


# =============================================================================
# Monitoring Fixtures
# =============================================================================


class RecordingPresenter:
    """Popup presenter that keeps what it was asked to show."""

    def __init__(self):
        self.visible: list = []
        self.shown: list = []

    def visible_count(self) -> int:
        return len(self.visible)

    def show(self, notification) -> None:
        self.visible.append(notification)
        self.shown.append(notification)

    def dismiss(self) -> None:
        self.visible.pop(0)


class FailingStore(InMemoryNotificationStore):
    """Store whose writes always blow up."""

    def add_if_absent(self, notification):
        raise RuntimeError("disk full")

    def mark_read(self, notification_id):
        raise RuntimeError("disk full")


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def preferences() -> NotificationPreferences:
    return NotificationPreferences()


@pytest.fixture
def manager(store, preferences, presenter, clock) -> NotificationManager:
    """Manager wired to the in-memory store, the recording presenter and the frozen clock."""
    return NotificationManager(store, preferences, popups=PopupQueue(presenter), clock=clock)
