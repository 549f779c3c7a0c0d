"""
Interactive Menu Module

Console front end over the ledger. Handles prompting, re-prompting on
unreadable numbers and menu dispatch; every ledger error is shown to the
user and the loop carries on.
"""

from typing import Callable, Dict, Optional

from .accounts import AccountKind, Feature
from .config import get_config
from .errors import BankingError, InvalidArgumentError
from .ledger import Ledger
from .logging_config import setup_logging


MENU = """
===== MENU =====
1. Create Account
2. Deposit
3. Withdraw
4. Transfer
5. List Accounts
6. Show Account Details
7. Repay Loan
8. Process Month-End (interest)
9. Show statements (last {tail} lines)
0. Exit"""

KIND_CHOICES = {
    1: AccountKind.SAVINGS,
    2: AccountKind.CURRENT,
    3: AccountKind.LOAN,
}

FEATURE_CHOICES = {
    "1": Feature.OVERDRAFT,
    "2": Feature.SMS_ALERT,
    "3": Feature.PREMIUM,
}


class BankingMenu:
    """Prompt loop driving a ledger"""

    def __init__(
        self,
        ledger: Ledger,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print
    ):
        self.ledger = ledger
        self.input = input_func
        self.output = output_func
        self.actions: Dict[int, Callable[[], None]] = {
            1: self.create_account,
            2: self.deposit,
            3: self.withdraw,
            4: self.transfer,
            5: self.list_accounts,
            6: self.show_account,
            7: self.repay_loan,
            8: self.process_month_end,
            9: self.show_statements,
        }

    def read_int(self, prompt: str) -> int:
        while True:
            try:
                return int(self.input(prompt).strip())
            except ValueError:
                self.output("Invalid integer. Try again.")

    def read_float(self, prompt: str) -> float:
        while True:
            try:
                return float(self.input(prompt).strip())
            except ValueError:
                self.output("Invalid number. Try again.")

    def read_default(self, prompt: str, default: str) -> str:
        value = self.input(prompt).strip()
        return value if value else default

    def run(self) -> None:
        """Show the menu until the user picks 0 (or input runs out)"""
        self.output("Smart Banking Simulator")
        while True:
            self.output(MENU.format(tail=self.ledger.config.statement_tail_lines))
            try:
                choice = self.read_int("Choice: ")
                if choice == 0:
                    self.output("Goodbye!")
                    break
                self.dispatch(choice)
            except EOFError:
                break

    def dispatch(self, choice: int) -> None:
        """Run one menu action, reporting ledger errors"""
        action = self.actions.get(choice)
        if action is None:
            self.output("Invalid choice.")
            return
        try:
            action()
        except BankingError as e:
            self.output(f"ERROR: {e.message}")

    def create_account(self) -> None:
        self.output("Account Types: 1.Savings 2.Current 3.Loan")
        number = self.read_int("Type: ")
        kind = KIND_CHOICES.get(number)
        if kind is None:
            raise InvalidArgumentError(f"Unknown account type: {number}")
        name = self.input("Name: ")
        amount = self.read_float("Amount (deposit or loan principal): ")

        self.output("Features: 1) Overdraft  2) SMS alerts  3) Premium")
        features = Feature.NONE
        for token in self.input("Enter feature numbers separated by space (or empty): ").split():
            features |= FEATURE_CHOICES.get(token, Feature.NONE)

        config = self.ledger.config
        params = {}
        if kind is AccountKind.SAVINGS:
            params["rate"] = self.read_default(
                f"Annual rate (e.g., 0.04) [default {config.default_savings_rate}]: ",
                str(config.default_savings_rate)
            )
        elif kind is AccountKind.LOAN:
            params["months"] = self.read_default(
                f"Months for loan [default {config.default_loan_months}]: ",
                str(config.default_loan_months)
            )
            params["rate"] = self.read_default(
                f"Annual rate for loan [default {config.default_loan_rate}]: ",
                str(config.default_loan_rate)
            )

        account = self.ledger.create_account(kind, name, amount, features, params)
        self.output(f"Created: {account.describe()}")

    def deposit(self) -> None:
        number = self.read_int("Account No: ")
        amount = self.read_float("Amount: ")
        self.ledger.deposit(number, amount)
        self.output("Deposit successful.")

    def withdraw(self) -> None:
        number = self.read_int("Account No: ")
        amount = self.read_float("Amount: ")
        self.ledger.withdraw(number, amount)
        self.output("Withdraw successful.")

    def transfer(self) -> None:
        source = self.read_int("From Acc: ")
        target = self.read_int("To Acc: ")
        amount = self.read_float("Amount: ")
        self.ledger.transfer(source, target, amount)
        self.output("Transfer successful.")

    def repay_loan(self) -> None:
        number = self.read_int("Loan Account No: ")
        amount = self.read_float("Payment Amount: ")
        self.ledger.repay_loan(number, amount)
        self.output("Loan repayment processed.")

    def list_accounts(self) -> None:
        accounts = self.ledger.list_accounts()
        if not accounts:
            self.output("No accounts.")
            return
        for account in accounts:
            self.output(account.describe())

    def show_account(self) -> None:
        number = self.read_int("Account No: ")
        self.output(self.ledger.show_account(number))

    def process_month_end(self) -> None:
        self.ledger.process_month_end_all()
        self.output("Month-end processing completed for all accounts.")

    def show_statements(self) -> None:
        lines = self.ledger.recent_statements()
        if not lines:
            self.output("No statements found.")
            return
        for line in lines:
            self.output(line)


def main(ledger: Optional[Ledger] = None) -> None:
    """Console entry point"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    try:
        BankingMenu(ledger or Ledger.from_config(config)).run()
    except KeyboardInterrupt:
        print("\nGoodbye!")
