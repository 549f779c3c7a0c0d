"""
Account Module

Account kinds and their balance rules. Savings and current accounts hold
money (positive balance, optionally overdrawn down to the overdraft
ceiling); loan accounts carry the amount owed as a negative balance.
Interest formulas live in the interest module and are selected per kind.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, ClassVar, Dict, List, Optional, Union

from .errors import (
    InvalidAmountError, InsufficientFundsError, OverdraftLimitExceededError,
    InvalidArgumentError
)
from .interest import compound_interest_component, simple_monthly_interest
from .statements import StatementLine, StatementEventType


OVERDRAFT_LIMIT = -5000.0
DEFAULT_SAVINGS_RATE = 0.04
DEFAULT_LOAN_MONTHS = 12
DEFAULT_LOAN_RATE = 0.12


class AccountKind(Enum):
    """Account kinds, valued by their persisted tag"""
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"
    LOAN = "LOAN"

    @classmethod
    def parse(cls, value: Union['AccountKind', str]) -> 'AccountKind':
        """Accept a kind or its persisted tag in any case"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidArgumentError(f"Unknown account type: {value}")


class Feature(IntFlag):
    """Account capabilities, persisted as a bitmask"""
    NONE = 0
    OVERDRAFT = 1 << 0
    SMS_ALERT = 1 << 1  # inert metadata
    PREMIUM = 1 << 2    # inert metadata


FEATURE_LABELS = (
    (Feature.OVERDRAFT, "OVERDRAFT"),
    (Feature.SMS_ALERT, "SMS"),
    (Feature.PREMIUM, "PREMIUM"),
)


@dataclass
class Account(ABC):
    """
    Common balance rules shared by every kind.

    Kinds customise interest through calculate_interest/apply_interest and
    the pre/post month-end hooks; the month-end sequence itself is fixed.
    """
    account_number: int
    name: str
    balance: float
    features: Feature = Feature.NONE
    pending_statements: List[StatementLine] = field(default_factory=list, repr=False, compare=False)

    kind: ClassVar[AccountKind]

    def __post_init__(self):
        self.features = Feature(int(self.features))

    def has_feature(self, flag: Feature) -> bool:
        """Check whether a feature flag is set"""
        return bool(self.features & flag)

    @property
    def allows_overdraft(self) -> bool:
        """Check if withdrawals may take the balance below zero"""
        return self.has_feature(Feature.OVERDRAFT)

    def deposit(self, amount: float) -> None:
        """Credit a positive amount"""
        if amount <= 0:
            raise InvalidAmountError("Amount must be positive.")
        self.balance += amount
        self.record_statement(StatementEventType.DEPOSIT, amount)

    def withdraw(self, amount: float, overdraft_limit: float = OVERDRAFT_LIMIT) -> None:
        """
        Debit a positive amount.

        Without OVERDRAFT the balance may not go below zero; with it the
        balance may not go below overdraft_limit. Nothing changes on failure.
        """
        if amount <= 0:
            raise InvalidAmountError("Amount must be positive.")

        if amount > self.balance:
            if not self.allows_overdraft:
                raise InsufficientFundsError("Insufficient balance.")
            if self.balance - amount < overdraft_limit:
                raise OverdraftLimitExceededError("Exceeded overdraft limit.")

        self.balance -= amount
        self.record_statement(StatementEventType.WITHDRAW, amount)

    @abstractmethod
    def calculate_interest(self) -> float:
        """One month of interest for the current balance"""

    def apply_interest(self, amount: float) -> None:
        """Credit interest earned (zero amounts leave no statement line)"""
        if amount != 0:
            self.balance += amount
            self.record_statement(StatementEventType.INTEREST, amount)

    def pre_month_end(self) -> None:
        pass

    def post_month_end(self) -> None:
        pass

    def extra_fields(self) -> Dict[str, str]:
        """Kind-specific parameters for the record's extension field"""
        return {}

    def record_statement(self, event_type: StatementEventType, amount: float) -> StatementLine:
        """Buffer a statement line carrying the post-operation balance"""
        line = StatementLine(
            account_number=self.account_number,
            event_type=event_type,
            amount=amount,
            balance=self.balance
        )
        self.pending_statements.append(line)
        return line

    def feature_labels(self) -> List[str]:
        return [label for flag, label in FEATURE_LABELS if self.has_feature(flag)]

    def describe(self) -> str:
        """One-line summary shown by list and show operations"""
        return "%d | %s | Bal: %.2f | Features: %s" % (
            self.account_number, self.name, self.balance, ",".join(self.feature_labels())
        )

    def __str__(self) -> str:
        return self.describe()


@dataclass
class SavingsAccount(Account):
    """Interest-bearing account, compounded monthly"""
    annual_rate: float = DEFAULT_SAVINGS_RATE

    kind: ClassVar[AccountKind] = AccountKind.SAVINGS

    def calculate_interest(self) -> float:
        return compound_interest_component(self.balance, self.annual_rate, 12, 1 / 12)

    def extra_fields(self) -> Dict[str, str]:
        return {"rate": "%.4f" % self.annual_rate}


@dataclass
class CurrentAccount(Account):
    """Transactional account without interest"""

    kind: ClassVar[AccountKind] = AccountKind.CURRENT

    def calculate_interest(self) -> float:
        return 0.0


@dataclass
class LoanAccount(Account):
    """
    Loan carried as a negative balance (the amount owed).

    Interest is simple monthly interest on the outstanding magnitude and
    makes the balance more negative. Repayments move it toward zero and are
    not clamped: overpaying leaves a positive balance.
    """
    annual_rate: float = DEFAULT_LOAN_RATE
    months_remaining: int = DEFAULT_LOAN_MONTHS
    original_principal: float = 0.0

    kind: ClassVar[AccountKind] = AccountKind.LOAN

    def __post_init__(self):
        super().__post_init__()
        if not self.original_principal:
            self.original_principal = abs(self.balance)

    @classmethod
    def open(cls, account_number: int, name: str, principal: float,
             months: int = DEFAULT_LOAN_MONTHS, annual_rate: float = DEFAULT_LOAN_RATE,
             features: Feature = Feature.NONE) -> 'LoanAccount':
        """Open a loan for `principal`, owed as a balance of -principal"""
        return cls(
            account_number=account_number,
            name=name,
            balance=-principal,
            features=features,
            annual_rate=annual_rate,
            months_remaining=months,
            original_principal=principal
        )

    @property
    def allows_overdraft(self) -> bool:
        return False

    @property
    def outstanding(self) -> float:
        """Amount currently owed"""
        return abs(self.balance)

    def calculate_interest(self) -> float:
        return simple_monthly_interest(self.outstanding, self.annual_rate)

    def apply_interest(self, amount: float) -> None:
        # interest increases what is owed
        if amount != 0:
            self.balance -= amount
            self.record_statement(StatementEventType.LOAN_INTEREST, amount)

    def post_month_end(self) -> None:
        if self.months_remaining > 0:
            self.months_remaining -= 1

    def repay(self, amount: float) -> None:
        """Pay down the loan by a positive amount"""
        if amount <= 0:
            raise InvalidAmountError("Amount must be positive.")
        self.balance += amount
        self.record_statement(StatementEventType.LOAN_REPAY, amount)

    def extra_fields(self) -> Dict[str, str]:
        return {
            "months": "%d" % self.months_remaining,
            "rate": "%.4f" % self.annual_rate,
        }


def _param(params: Dict[str, Any], key: str, default, convert):
    value = params.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return convert(str(value).strip()) if isinstance(value, str) else convert(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid value for {key}: {value!r}")


def create_account(
    kind: Union[AccountKind, str],
    account_number: int,
    name: str,
    amount: float,
    features: Union[Feature, int] = Feature.NONE,
    params: Optional[Dict[str, Any]] = None,
    default_savings_rate: float = DEFAULT_SAVINGS_RATE,
    default_loan_months: int = DEFAULT_LOAN_MONTHS,
    default_loan_rate: float = DEFAULT_LOAN_RATE
) -> Account:
    """
    Build an account of the given kind.

    Args:
        kind: Account kind or its tag
        account_number: Number assigned by the ledger
        name: Holder name
        amount: Opening balance, or the principal for loans
        features: Feature flags or their integer bitmask
        params: Kind parameters ("rate" for savings, "months" and "rate"
            for loans); values may be numbers or text as typed at a prompt

    Returns:
        The new account, not yet registered anywhere
    """
    kind = AccountKind.parse(kind)
    params = params or {}
    features = Feature(int(features))

    if kind is AccountKind.SAVINGS:
        rate = _param(params, "rate", default_savings_rate, float)
        return SavingsAccount(
            account_number=account_number,
            name=name,
            balance=amount,
            features=features,
            annual_rate=rate
        )

    if kind is AccountKind.CURRENT:
        return CurrentAccount(
            account_number=account_number,
            name=name,
            balance=amount,
            features=features
        )

    months = _param(params, "months", default_loan_months, int)
    rate = _param(params, "rate", default_loan_rate, float)
    return LoanAccount.open(
        account_number=account_number,
        name=name,
        principal=amount,
        months=months,
        annual_rate=rate,
        features=features
    )
