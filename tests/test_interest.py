"""
Test suite for interest module

Tests the interest formulas and the fixed month-end sequence for each
account kind.
"""

import pytest

from smart_banking.accounts import SavingsAccount, CurrentAccount, LoanAccount
from smart_banking.interest import (
    compound_interest_component, simple_monthly_interest, process_month_end
)
from smart_banking.statements import StatementEventType


class TestInterestFormulas:
    """Test the raw interest formulas"""

    def test_compound_one_month(self):
        """Test one month of monthly compounding"""
        result = compound_interest_component(1000.0, 0.04, 12, 1 / 12)
        assert result == pytest.approx(1000.0 * (0.04 / 12))

    def test_compound_full_year(self):
        """Test a full year of monthly compounding"""
        result = compound_interest_component(1000.0, 0.12, 12, 1)
        assert result == pytest.approx(1000.0 * (1.01 ** 12 - 1))

    @pytest.mark.parametrize("principal,rate", [(0.0, 0.04), (-10.0, 0.04), (100.0, 0.0), (100.0, -0.01)])
    def test_compound_non_positive_inputs(self, principal, rate):
        """Test that non-positive principal or rate earns nothing"""
        assert compound_interest_component(principal, rate, 12, 1 / 12) == 0.0

    def test_simple_monthly_interest(self):
        """Test simple monthly interest"""
        assert simple_monthly_interest(1000.0, 0.12) == pytest.approx(10.0)
        assert simple_monthly_interest(0.0, 0.12) == 0.0


class TestMonthEnd:
    """Test the month-end procedure"""

    def test_savings_month_end(self):
        """Test month-end on savings credits interest"""
        account = SavingsAccount(account_number=1001, name="Ann", balance=1000.0, annual_rate=0.04)

        interest = process_month_end(account)

        assert interest == pytest.approx(3.3333, abs=1e-4)
        assert account.balance == pytest.approx(1003.3333, abs=1e-4)
        assert [line.event_type for line in account.pending_statements] == [StatementEventType.INTEREST]

    def test_current_month_end_is_silent(self):
        """Test month-end on a current account changes nothing"""
        account = CurrentAccount(account_number=1002, name="Bob", balance=500.0)

        assert process_month_end(account) == 0.0
        assert account.balance == 500.0
        assert account.pending_statements == []

    def test_loan_month_end(self):
        """Test month-end on a loan charges interest and shortens the term"""
        loan = LoanAccount.open(1003, "Carol", 1000.0, months=12, annual_rate=0.12)

        interest = process_month_end(loan)

        assert interest == pytest.approx(10.0)
        assert loan.balance == pytest.approx(-1010.0)
        assert loan.months_remaining == 11
        assert loan.pending_statements[-1].event_type == StatementEventType.LOAN_INTEREST

    def test_paid_off_loan_month_end(self):
        """Test that a settled loan accrues nothing but still counts down"""
        loan = LoanAccount.open(1003, "Carol", 100.0, months=2)
        loan.repay(100.0)
        loan.pending_statements.clear()

        assert process_month_end(loan) == 0.0
        assert loan.pending_statements == []
        assert loan.months_remaining == 1

    def test_hook_order(self):
        """Test that hooks run pre, calculate, apply, post"""
        calls = []

        class TracingAccount(CurrentAccount):
            def pre_month_end(self):
                calls.append("pre")

            def calculate_interest(self):
                calls.append("calculate")
                return 1.0

            def apply_interest(self, amount):
                calls.append(("apply", amount))

            def post_month_end(self):
                calls.append("post")

        process_month_end(TracingAccount(account_number=1, name="T", balance=0.0))

        assert calls == ["pre", "calculate", ("apply", 1.0), "post"]
