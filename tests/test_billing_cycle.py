"""Tests for credit card billing cycles and statements."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from finwatch.errors import InvalidInputError
from finwatch.models.transaction import INCOME, TRANSFER
from finwatch.services.billing_cycle import clamp_day, current_cycle, statement_for, statements_for


class TestCurrentCycle:
    def test_after_cutoff_rolls_to_next_month(self):
        """Cutoff 5, payment 20, as of Jan 10: Jan 6 to Feb 5, due Mar 20."""
        cycle = current_cycle(5, 20, date(2025, 1, 10))

        assert cycle.cycle_start == date(2025, 1, 6)
        assert cycle.cycle_end == date(2025, 2, 5)
        assert cycle.payment_due_date == date(2025, 3, 20)

    def test_on_cutoff_day_closes_today(self):
        cycle = current_cycle(5, 20, date(2025, 1, 5))

        assert cycle.cycle_start == date(2024, 12, 6)
        assert cycle.cycle_end == date(2025, 1, 5)
        assert cycle.payment_due_date == date(2025, 2, 20)

    def test_year_wrap(self):
        cycle = current_cycle(5, 20, date(2025, 12, 20))

        assert cycle.cycle_start == date(2025, 12, 6)
        assert cycle.cycle_end == date(2026, 1, 5)
        assert cycle.payment_due_date == date(2026, 2, 20)

    def test_cutoff_31_clamps_in_february(self):
        cycle = current_cycle(31, 15, date(2025, 2, 10))

        assert cycle.cycle_end == date(2025, 2, 28)
        assert cycle.cycle_start == date(2025, 2, 1)

    def test_start_follows_clamped_february_cutoff(self):
        cycle = current_cycle(31, 15, date(2025, 3, 10))

        assert cycle.cycle_start == date(2025, 3, 1)
        assert cycle.cycle_end == date(2025, 3, 31)

    def test_leap_year_february(self):
        assert current_cycle(30, 10, date(2024, 2, 15)).cycle_end == date(2024, 2, 29)

    @pytest.mark.parametrize("cutoff", [1, 5, 15, 28, 30, 31])
    def test_start_is_day_after_previous_cutoff(self, cutoff):
        as_of = date(2025, 1, 1)
        for offset in range(0, 365, 11):
            today = as_of + timedelta(days=offset)
            cycle = current_cycle(cutoff, 10, today)
            previous = current_cycle(cutoff, 10, cycle.cycle_start - timedelta(days=1))

            assert cycle.cycle_start == previous.cycle_end + timedelta(days=1)
            assert cycle.contains(today)

    def test_accepts_datetime(self):
        cycle = current_cycle(5, 20, datetime(2025, 1, 10, 23, 59))
        assert cycle.cycle_end == date(2025, 2, 5)

    @pytest.mark.parametrize("cutoff,payment", [(0, 10), (32, 10), (5, 0), (5, 40)])
    def test_invalid_days_raise(self, cutoff, payment):
        with pytest.raises(InvalidInputError):
            current_cycle(cutoff, payment, date(2025, 1, 10))

    def test_clamp_day(self):
        assert clamp_day(2025, 4, 31) == date(2025, 4, 30)
        assert clamp_day(2025, 4, 12) == date(2025, 4, 12)


class TestStatement:
    def test_statement_totals(self, credit_card, account_factory, transaction_factory):
        checking = account_factory(opening_balance=1_000_000.0)
        txns = [
            transaction_factory(100.0, account_id=credit_card.id, occurred_at=datetime(2025, 1, 8)),
            # previous cycle
            transaction_factory(50.0, account_id=credit_card.id, occurred_at=datetime(2024, 12, 30)),
            transaction_factory(30.0, account_id=credit_card.id, kind=INCOME, occurred_at=datetime(2025, 1, 7)),
            transaction_factory(
                1_200.0,
                account_id=credit_card.id,
                occurred_at=datetime(2025, 1, 9),
                installment_count=12,
                installment_amount=110.0,
            ),
            transaction_factory(
                20.0,
                account_id=checking.id,
                kind=TRANSFER,
                to_account_id=credit_card.id,
                occurred_at=datetime(2025, 1, 9),
            ),
        ]

        statement = statement_for(credit_card, txns, date(2025, 1, 10))

        assert statement.total_charges == 1_300.0
        assert statement.total_payments == 50.0
        assert statement.installment_charges == 110.0
        assert statement.regular_charges == 100.0
        assert statement.balance == 1_250.0
        assert statement.days_until_due == 69
        assert len(statement.transactions) == 4

    def test_statement_requires_cycle(self, account_factory):
        with pytest.raises(InvalidInputError):
            statement_for(account_factory(), [], date(2025, 1, 10))

    def test_statements_for_skips_accounts_without_cycle(self, credit_card, account_factory):
        statements = statements_for([account_factory(), credit_card], [], date(2025, 1, 10))

        assert [s.account_id for s in statements] == [credit_card.id]
