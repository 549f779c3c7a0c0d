"""
Error Types Module

Typed failures raised by the ledger and its collaborators. Every error
carries an ErrorKind so callers (menu, HTTP layer) can choose a message
or status code by matching on the kind rather than on the class.
"""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of recoverable ledger failures"""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    OVERDRAFT_LIMIT_EXCEEDED = "overdraft_limit_exceeded"
    ACCOUNT_NOT_FOUND = "account_not_found"
    WRONG_ACCOUNT_KIND = "wrong_account_kind"
    INVALID_ARGUMENT = "invalid_argument"
    PERSISTENCE_FAILED = "persistence_failed"


class BankingError(Exception):
    """Base class for all ledger errors"""
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(BankingError, ValueError):
    """Non-positive amount where a positive one is required"""
    kind = ErrorKind.INVALID_AMOUNT


class InsufficientFundsError(BankingError, ValueError):
    """Withdrawal exceeds the balance and the account has no overdraft"""
    kind = ErrorKind.INSUFFICIENT_FUNDS


class OverdraftLimitExceededError(BankingError, ValueError):
    """Withdrawal would take the balance below the overdraft ceiling"""
    kind = ErrorKind.OVERDRAFT_LIMIT_EXCEEDED


class AccountNotFoundError(BankingError, LookupError):
    """Unknown account number"""
    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, account_number: int):
        super().__init__(f"Account {account_number} not found.")
        self.account_number = account_number


class WrongAccountKindError(BankingError, ValueError):
    """Operation not applicable to the account's kind"""
    kind = ErrorKind.WRONG_ACCOUNT_KIND


class InvalidArgumentError(BankingError, ValueError):
    """Malformed or contradictory request arguments"""
    kind = ErrorKind.INVALID_ARGUMENT


class PersistenceError(BankingError):
    """
    Writing the account store failed.

    The in-memory mutation that preceded the write is NOT rolled back, so
    memory and disk may disagree until the next successful rewrite.
    """
    kind = ErrorKind.PERSISTENCE_FAILED


class RecordFormatError(ValueError):
    """A stored account record could not be parsed"""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed account record ({reason}): {line!r}")
        self.line = line
        self.reason = reason
