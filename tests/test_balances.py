"""Tests for the per-kind account balance strategies."""

from __future__ import annotations

import pytest

from finwatch.errors import NotFoundError
from finwatch.models.account import CASH, CREDIT, ensure_single_default, prepare_account
from finwatch.models.transaction import EXPENSE, INCOME, TRANSFER
from finwatch.services import balances
from finwatch.services.balances import StandardStrategy


class TestCreditStrategy:
    """Revolving credit: balance is the credit still available."""

    def test_used_and_available_credit(self, credit_card, transaction_factory):
        """One paid 500,000 expense on a 2,000,000 card leaves 1,500,000."""
        txns = [transaction_factory(500_000.0, account_id=credit_card.id)]

        assert balances.used_credit(credit_card, txns) == 500_000.0
        assert balances.balance_of(credit_card, txns) == 1_500_000.0

    def test_validation_fails_beyond_limit(self, credit_card, transaction_factory):
        txns = [transaction_factory(500_000.0, account_id=credit_card.id)]

        result = balances.validate_transaction(credit_card, 1_600_000.0, txns)

        assert not result.ok
        assert result.available == 1_500_000.0
        assert result.reason.startswith("Insufficient credit")

    def test_validation_allows_exactly_the_limit(self, credit_card, transaction_factory):
        txns = [transaction_factory(500_000.0, account_id=credit_card.id)]

        result = balances.validate_transaction(credit_card, 1_500_000.0, txns)

        assert result.ok
        assert result.available == 1_500_000.0

    def test_unpaid_expenses_do_not_consume_credit(self, credit_card, transaction_factory):
        txns = [transaction_factory(300_000.0, account_id=credit_card.id, paid=False)]

        assert balances.used_credit(credit_card, txns) == 0.0
        assert balances.balance_of(credit_card, txns) == 2_000_000.0

    def test_payments_restore_credit(self, credit_card, account_factory, transaction_factory):
        checking = account_factory(opening_balance=1_000_000.0)
        txns = [
            transaction_factory(800_000.0, account_id=credit_card.id),
            transaction_factory(200_000.0, account_id=credit_card.id, kind=INCOME),
            transaction_factory(
                100_000.0, account_id=checking.id, kind=TRANSFER, to_account_id=credit_card.id
            ),
        ]

        assert balances.used_credit(credit_card, txns) == 500_000.0
        assert balances.balance_of(credit_card, txns) == 1_500_000.0
        assert balances.balance_of(checking, txns) == 900_000.0

    def test_opening_balance_is_ignored(self, credit_card):
        credit_card.opening_balance = 999.0
        assert balances.balance_of(credit_card, []) == credit_card.credit_limit

    def test_transfers_cannot_leave_a_credit_card(self, credit_card):
        result = balances.validate_transaction(credit_card, 10.0, [], kind=TRANSFER)
        assert not result.ok

    def test_payment_rejected_without_debt(self, credit_card):
        result = balances.validate_transaction(credit_card, 500_000.0, [], kind=INCOME)

        assert not result.ok
        assert result.used_credit == 0.0
        assert result.available == 2_000_000.0

    def test_payment_cannot_exceed_debt(self, credit_card, transaction_factory):
        txns = [transaction_factory(300_000.0, account_id=credit_card.id)]

        too_much = balances.validate_transaction(credit_card, 300_001.0, txns, kind=INCOME)
        exact = balances.validate_transaction(credit_card, 300_000.0, txns, kind=INCOME)

        assert not too_much.ok
        assert too_much.used_credit == 300_000.0
        assert "300000.00" in too_much.reason
        assert exact.ok

    def test_used_credit_rejects_non_credit_accounts(self, account_factory):
        with pytest.raises(ValueError):
            balances.used_credit(account_factory(), [])


class TestStandardStrategy:
    def test_opening_plus_signed_movements(self, account_factory, transaction_factory):
        checking = account_factory(opening_balance=1_000.0)
        savings = account_factory(name="Savings", opening_balance=0.0)
        txns = [
            transaction_factory(500.0, account_id=checking.id, kind=INCOME),
            transaction_factory(200.0, account_id=checking.id, kind=EXPENSE),
            transaction_factory(300.0, account_id=checking.id, kind=TRANSFER, to_account_id=savings.id),
        ]

        assert balances.balance_of(checking, txns) == 1_000.0
        assert balances.balance_of(savings, txns) == 300.0

    def test_remove_and_readd_is_balance_neutral(self, account_factory, transaction_factory):
        checking = account_factory(opening_balance=250.0)
        txns = [
            transaction_factory(40.0, account_id=checking.id),
            transaction_factory(90.0, account_id=checking.id, kind=INCOME),
        ]
        before = balances.balance_of(checking, txns)

        removed = txns.pop(0)
        txns.append(removed)

        assert balances.balance_of(checking, txns) == before

    def test_unpaid_transactions_are_pending(self, account_factory, transaction_factory):
        checking = account_factory(opening_balance=100.0)
        txns = [transaction_factory(60.0, account_id=checking.id, paid=False)]

        assert balances.balance_of(checking, txns) == 100.0

    def test_overdraft_is_allowed(self, account_factory):
        result = balances.validate_transaction(account_factory(opening_balance=10.0), 1_000.0, [])
        assert result.ok

    def test_cash_behaves_like_standard(self, account_factory, transaction_factory):
        wallet = account_factory(name="Wallet", kind=CASH, opening_balance=50.0)
        txns = [transaction_factory(20.0, account_id=wallet.id)]

        assert balances.balance_of(wallet, txns) == 30.0
        assert balances.included_in_aggregate(CASH)


class TestAggregation:
    def test_credit_is_excluded_from_the_total(self, account_factory, credit_card, transaction_factory):
        checking = account_factory(opening_balance=1_000.0)
        txns = [
            transaction_factory(100.0, account_id=checking.id),
            transaction_factory(50_000.0, account_id=credit_card.id),
        ]

        assert balances.aggregate_balance([checking, credit_card], txns) == 900.0
        assert not balances.included_in_aggregate(CREDIT)

    def test_balances_by_account(self, account_factory, credit_card, transaction_factory):
        checking = account_factory(opening_balance=10.0)

        result = balances.balances_by_account([checking, credit_card], [])

        assert result == {checking.id: 10.0, credit_card.id: 2_000_000.0}


class TestStrategyRegistry:
    def test_unknown_kind_raises(self, account_factory):
        account = account_factory(kind="crypto")
        with pytest.raises(NotFoundError):
            balances.balance_of(account, [])

    def test_new_kind_is_added_by_registration(self, monkeypatch, account_factory):
        class SavingsStrategy(StandardStrategy):
            def include_in_aggregate(self) -> bool:
                return False

        monkeypatch.setitem(balances._STRATEGIES, "savings", SavingsStrategy())

        assert balances.has_strategy("savings")
        assert not balances.included_in_aggregate("savings")
        assert balances.balance_of(account_factory(kind="savings", opening_balance=5.0), []) == 5.0

    def test_register_strategy_replaces_existing(self, monkeypatch):
        monkeypatch.setattr(balances, "_STRATEGIES", dict(balances._STRATEGIES))
        custom = StandardStrategy()

        balances.register_strategy(CASH, custom)

        assert balances.strategy_for(CASH) is custom


class TestAccountRules:
    def test_prepare_account_zeroes_credit_opening_balance(self, credit_card):
        credit_card.opening_balance = 123.0
        assert prepare_account(credit_card).opening_balance == 0.0

    def test_prepare_account_rejects_bad_cutoff(self, credit_card):
        credit_card.cutoff_day = 32
        with pytest.raises(ValueError, match="cutoff_day"):
            prepare_account(credit_card)

    def test_single_default(self, account_factory):
        first = account_factory()
        second = account_factory(name="Savings")
        first.is_default = True

        changed = ensure_single_default([first, second], second.id)

        assert {a.id for a in changed} == {first.id, second.id}
        assert second.is_default and not first.is_default

    def test_single_default_missing_account(self, account_factory):
        with pytest.raises(LookupError):
            ensure_single_default([account_factory()], 99)
