"""Unusual spending detection tests."""

from __future__ import annotations

from datetime import timedelta

import pytest

from finwatch.models.notification import UNUSUAL_SPENDING
from finwatch.monitoring.spending import SpendingAnalyzer


@pytest.fixture
def analyzer(manager, ledger, clock):
    return SpendingAnalyzer(manager, ledger, clock=clock, adjustment_categories=["Adjustment"])


@pytest.fixture
def history(ledger, clock, transaction_factory):
    """Record past expenses relative to the frozen clock."""

    def _history(amounts, days_ago=10, category="Food"):
        for amount in amounts:
            ledger.add_transaction(
                transaction_factory(amount, category=category, occurred_at=clock.now - timedelta(days=days_ago))
            )

    return _history


def test_flags_expense_far_above_average(analyzer, ledger, store, transaction_factory, history):
    history([100.0, 100.0, 100.0])
    txn = transaction_factory(400.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    [record] = store.list_all()
    assert record.type == UNUSUAL_SPENDING
    assert record.meta["transaction_id"] == txn.id
    # average (100 * 3 + 400) / 4 = 175, threshold 150%
    assert record.meta["threshold"] == pytest.approx(262.5)


def test_within_threshold_is_silent(analyzer, ledger, store, transaction_factory, history):
    history([100.0, 100.0, 100.0])
    txn = transaction_factory(150.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []


def test_requires_three_transactions(analyzer, ledger, store, transaction_factory, history):
    history([10.0])
    txn = transaction_factory(10_000.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []
    assert not analyzer.has_minimum_history("Food")


def test_history_older_than_ninety_days_is_ignored(analyzer, ledger, store, transaction_factory, history):
    history([100.0, 100.0, 100.0], days_ago=91)
    txn = transaction_factory(10_000.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []


def test_other_categories_do_not_count(analyzer, ledger, store, transaction_factory, history):
    history([100.0, 100.0, 100.0], category="Transport")
    txn = transaction_factory(10_000.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []


def test_adjustments_are_ignored(analyzer, ledger, store, transaction_factory, history):
    history([1.0, 1.0, 1.0], category="Adjustment")
    txn = transaction_factory(10_000.0, category="Adjustment")
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []


def test_respects_configured_threshold(manager, ledger, clock, store, transaction_factory, history):
    manager.preferences = manager.preferences.merged(thresholds={"unusual_spending": 300})
    analyzer = SpendingAnalyzer(manager, ledger, clock=clock)
    history([100.0, 100.0, 100.0])
    txn = transaction_factory(400.0)
    ledger.add_transaction(txn)

    analyzer.evaluate(txn)

    assert store.list_all() == []


class TestCache:
    def test_average_is_cached_for_five_minutes(self, analyzer, ledger, clock, transaction_factory, history):
        history([100.0, 100.0, 100.0])
        assert analyzer.category_average("Food").average == 100.0

        history([500.0])
        clock.advance(minutes=4)
        assert analyzer.category_average("Food").transaction_count == 3

        clock.advance(minutes=2)
        assert analyzer.category_average("Food").transaction_count == 4

    def test_invalidate_forces_recompute(self, analyzer, ledger, transaction_factory, history):
        history([100.0, 100.0, 100.0])
        analyzer.category_average("Food")
        history([500.0])

        analyzer.invalidate("Food")

        assert analyzer.category_average("Food").average == 200.0
