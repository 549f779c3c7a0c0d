"""
Interest Module

Interest formulas and the month-end procedure. Month-end is the same
fixed sequence for every account kind: a pre-step, interest calculation
and application, then a post-step. Kinds only customise the hooks.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .accounts import Account


MONTHS_PER_YEAR = 12


def compound_interest_component(principal: float, annual_rate: float,
                                compounds_per_year: int, years: float) -> float:
    """
    Interest earned by compounding `principal` over `years`.

    Computes P * ((1 + r/n) ** (n*t) - 1). Non-positive principal or rate
    earns nothing.

    Args:
        principal: Balance the interest is computed on
        annual_rate: Annual rate as a fraction (0.04 for 4%)
        compounds_per_year: Compounding periods per year
        years: Length of the period in years (1/12 for one month)

    Returns:
        Interest amount (not the compounded total)
    """
    if annual_rate <= 0 or principal <= 0:
        return 0.0
    base = 1.0 + annual_rate / compounds_per_year
    total = base ** (compounds_per_year * years)
    return principal * (total - 1.0)


def simple_monthly_interest(outstanding: float, annual_rate: float) -> float:
    """One month of simple interest on an outstanding amount"""
    return outstanding * (annual_rate / MONTHS_PER_YEAR)


def process_month_end(account: 'Account') -> float:
    """
    Run the month-end sequence on one account.

    Returns the interest amount passed to apply_interest (0.0 when the
    account earned or owed nothing this month).
    """
    account.pre_month_end()
    interest = account.calculate_interest()
    account.apply_interest(interest)
    account.post_month_end()
    return interest
