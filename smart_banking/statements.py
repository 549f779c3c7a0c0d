"""
Statement Module

Human-readable transaction lines and the append-only statement log.
Accounts buffer their own lines; the recorder appends them to the log
file and clears the buffer once they are written.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Union, TYPE_CHECKING

from .logging_config import get_logger, log_action

if TYPE_CHECKING:
    from .accounts import Account


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = get_logger("smart_banking.statements")


class StatementEventType(Enum):
    """Transaction events written to the statement log"""
    ACCOUNT_CREATED = "AccountCreated"
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    INTEREST = "Interest"
    LOAN_INTEREST = "LoanInterest"
    LOAN_REPAY = "LoanRepay"


@dataclass
class StatementLine:
    """One balance-changing event on one account"""
    account_number: int
    event_type: StatementEventType
    amount: float
    balance: float
    timestamp: datetime = field(default_factory=datetime.now)

    def render(self) -> str:
        """Format as `timestamp | accNo | event | amount | Bal: balance`"""
        return "%s | %d | %s | %.2f | Bal: %.2f" % (
            self.timestamp.strftime(TIMESTAMP_FORMAT),
            self.account_number,
            self.event_type.value,
            self.amount,
            self.balance,
        )

    def __str__(self) -> str:
        return self.render()


class StatementRecorder:
    """Appends buffered account statements to the statement log"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def flush(self, account: 'Account') -> bool:
        """
        Append the account's pending lines to the log and clear them.

        Returns False when the log could not be written; the lines then stay
        pending and go out with the account's next successful flush.
        """
        pending = account.pending_statements
        if not pending:
            return True

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                for line in pending:
                    handle.write(line.render())
                    handle.write("\n")
        except OSError as e:
            log_action(
                logger, "error", f"Could not write statements: {e}",
                action="flush_statements",
                resource=str(account.account_number),
                extra={"path": str(self.path), "pending": len(pending)}
            )
            return False

        pending.clear()
        return True

    def tail(self, limit: int = 50) -> List[str]:
        """
        Last `limit` lines of the statement log (empty if it does not exist).

        Bytes that are not valid UTF-8 are shown as replacement characters.
        """
        if limit <= 0 or not self.path.exists():
            return []

        with self.path.open("r", encoding="utf-8", errors="replace") as handle:
            lines = deque((line.rstrip("\n") for line in handle), maxlen=limit)
        return list(lines)
