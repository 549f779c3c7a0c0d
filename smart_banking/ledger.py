"""
Ledger Service Module

Owns every account, allocates account numbers and orchestrates deposits,
withdrawals, transfers, loan repayments and month-end processing. Each
successful mutation flushes the statements of the accounts it touched and
rewrites the whole account store.

Persistence is best effort: if the store rewrite fails the caller gets a
PersistenceError, but the in-memory mutation already applied stays in
place. Memory and disk can therefore diverge until the next successful
rewrite.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Union
import threading

from .accounts import Account, AccountKind, Feature, LoanAccount, create_account
from .config import SmartBankingConfig
from .errors import (
    BankingError, InvalidAmountError, AccountNotFoundError,
    WrongAccountKindError, InvalidArgumentError, PersistenceError
)
from .interest import process_month_end
from .logging_config import get_logger, log_action
from .statements import StatementRecorder, StatementEventType
from .storage import AccountStore, FileAccountStore


logger = get_logger("smart_banking.ledger")


class Ledger:
    """
    Account registry and operation orchestrator.

    Operations are serialized by one re-entrant lock so each one is atomic
    as observed by callers, including callers on different threads.
    """

    def __init__(
        self,
        store: AccountStore,
        recorder: StatementRecorder,
        config: Optional[SmartBankingConfig] = None
    ):
        self.store = store
        self.recorder = recorder
        self.config = config or SmartBankingConfig()
        self._accounts: Dict[int, Account] = {}
        self._next_account_number = self.config.first_account_number
        self._lock = threading.RLock()

        self._load()

    @classmethod
    def from_config(cls, config: SmartBankingConfig) -> 'Ledger':
        """Build a ledger over the files named in the configuration"""
        return cls(
            store=FileAccountStore(config.accounts_file),
            recorder=StatementRecorder(config.statements_file),
            config=config
        )

    def _load(self) -> None:
        """Populate the account map from the store"""
        highest = self._next_account_number - 1
        for account in self.store.load_all():
            self._accounts[account.account_number] = account
            highest = max(highest, account.account_number)
        self._next_account_number = highest + 1

        log_action(
            logger, "info", f"Loaded {len(self._accounts)} accounts",
            action="load_accounts",
            extra={"next_account_number": self._next_account_number}
        )

    @property
    def next_account_number(self) -> int:
        """Number the next created account will receive"""
        return self._next_account_number

    @contextmanager
    def _operation(self, action: str, resource: Optional[int] = None):
        """Serialize an operation and log validation failures"""
        with self._lock:
            try:
                yield
            except PersistenceError:
                raise
            except BankingError as e:
                log_action(
                    logger, "warning", e.message,
                    action=action,
                    resource=str(resource) if resource is not None else None,
                    extra={"error": e.kind.value}
                )
                raise

    def _commit(self, *accounts: Account) -> None:
        """Flush the touched accounts' statements, then rewrite the store"""
        for account in accounts:
            self.recorder.flush(account)

        try:
            self.store.save_all(self._accounts.values())
        except PersistenceError as e:
            log_action(
                logger, "error", e.message,
                action="save_accounts",
                extra={"accounts": [account.account_number for account in accounts]}
            )
            raise

    def _resolve(self, account_number: int) -> Account:
        account = self._accounts.get(account_number)
        if account is None:
            raise AccountNotFoundError(account_number)
        return account

    def create_account(
        self,
        kind: Union[AccountKind, str],
        name: str,
        amount: float,
        features: Union[Feature, int] = Feature.NONE,
        params: Optional[Dict[str, Any]] = None
    ) -> Account:
        """
        Open a new account.

        Args:
            kind: Account kind or its tag
            name: Holder name
            amount: Initial deposit (>= 0), or loan principal (> 0)
            features: Feature flags or bitmask
            params: Kind parameters ("rate", "months")

        Returns:
            The created account
        """
        with self._operation("create_account"):
            kind = AccountKind.parse(kind)
            if kind is AccountKind.LOAN and amount <= 0:
                raise InvalidAmountError("Loan principal must be positive.")
            if kind is not AccountKind.LOAN and amount < 0:
                raise InvalidAmountError("Initial deposit must be non-negative.")

            account = create_account(
                kind,
                self._next_account_number,
                name,
                amount,
                features=features,
                params=params,
                default_savings_rate=self.config.default_savings_rate,
                default_loan_months=self.config.default_loan_months,
                default_loan_rate=self.config.default_loan_rate
            )
            self._next_account_number += 1
            self._accounts[account.account_number] = account

            account.record_statement(StatementEventType.ACCOUNT_CREATED, amount)
            self._commit(account)

            log_action(
                logger, "info", "Account created",
                action="create_account",
                resource=str(account.account_number),
                extra={"kind": kind.value, "balance": account.balance,
                       "features": int(account.features)}
            )
            return account

    def get_account(self, account_number: int) -> Account:
        """Get an account by number"""
        with self._lock:
            return self._resolve(account_number)

    def show_account(self, account_number: int) -> str:
        """One-line description of an account"""
        return self.get_account(account_number).describe()

    def list_accounts(self) -> List[Account]:
        """All accounts in ledger order"""
        with self._lock:
            return list(self._accounts.values())

    def deposit(self, account_number: int, amount: float) -> Account:
        """Deposit into an account"""
        with self._operation("deposit", account_number):
            account = self._resolve(account_number)
            account.deposit(amount)
            self._commit(account)

            log_action(
                logger, "info", "Deposit posted",
                action="deposit",
                resource=str(account_number),
                extra={"amount": amount, "balance": account.balance}
            )
            return account

    def withdraw(self, account_number: int, amount: float) -> Account:
        """Withdraw from an account"""
        with self._operation("withdraw", account_number):
            account = self._resolve(account_number)
            account.withdraw(amount, overdraft_limit=self.config.overdraft_limit)
            self._commit(account)

            log_action(
                logger, "info", "Withdrawal posted",
                action="withdraw",
                resource=str(account_number),
                extra={"amount": amount, "balance": account.balance}
            )
            return account

    def transfer(self, from_account_number: int, to_account_number: int, amount: float) -> None:
        """
        Move money between two accounts.

        Runs as withdraw-then-deposit. A rejected withdrawal leaves both
        accounts untouched. There is no compensation if the deposit step
        fails after a successful withdrawal; with the current rules that
        cannot happen because the same positive amount always deposits.
        """
        with self._operation("transfer", from_account_number):
            if from_account_number == to_account_number:
                raise InvalidArgumentError("Cannot transfer to same account.")

            source = self._resolve(from_account_number)
            target = self._resolve(to_account_number)

            source.withdraw(amount, overdraft_limit=self.config.overdraft_limit)
            target.deposit(amount)
            self._commit(source, target)

            log_action(
                logger, "info", "Transfer posted",
                action="transfer",
                resource=str(from_account_number),
                extra={"to_account": to_account_number, "amount": amount}
            )

    def repay_loan(self, account_number: int, amount: float) -> LoanAccount:
        """Apply a repayment to a loan account"""
        with self._operation("repay_loan", account_number):
            account = self._resolve(account_number)
            if not isinstance(account, LoanAccount):
                raise WrongAccountKindError("Not a loan account.")

            account.repay(amount)
            self._commit(account)

            log_action(
                logger, "info", "Loan repayment posted",
                action="repay_loan",
                resource=str(account_number),
                extra={"amount": amount, "balance": account.balance}
            )
            return account

    def process_month_end_all(self) -> Dict[int, float]:
        """
        Run month-end on every account, then rewrite the store once.

        Returns:
            Interest amount computed per account number
        """
        with self._operation("month_end"):
            applied: Dict[int, float] = {}
            for account in self._accounts.values():
                applied[account.account_number] = process_month_end(account)
                self.recorder.flush(account)

            self._commit()

            log_action(
                logger, "info", "Month-end processing completed",
                action="month_end",
                extra={"accounts": len(applied)}
            )
            return applied

    def recent_statements(self, limit: Optional[int] = None) -> List[str]:
        """Last lines of the statement log, oldest first"""
        if limit is None:
            limit = self.config.statement_tail_lines
        try:
            return self.recorder.tail(limit)
        except OSError as e:
            raise PersistenceError(f"Could not read statements: {e}") from e

    def close(self) -> None:
        self.store.close()
