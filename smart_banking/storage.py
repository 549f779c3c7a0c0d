"""
Account Store Module

Provides the abstract account store and two implementations: a
file-backed store that truncates and rewrites the whole file on every
save, and an in-memory store for testing. Both go through the record
codec so the stored form is always the one-line text record.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Union
import threading

from .accounts import Account
from .codec import encode_account, decode_account
from .errors import PersistenceError, RecordFormatError
from .logging_config import get_logger, log_action


logger = get_logger("smart_banking.storage")


def decode_records(lines: Iterable[Union[str, bytes]], source: str) -> List[Account]:
    """
    Decode store lines, skipping blank, unknown and malformed records.

    Lines may be raw bytes; a line that is not valid UTF-8 is skipped like
    any other malformed record.
    """
    accounts = []
    for line_number, line in enumerate(lines, start=1):
        try:
            if isinstance(line, bytes):
                line = line.decode("utf-8")
            account = decode_account(line)
        except UnicodeDecodeError as e:
            log_action(
                logger, "warning", f"Skipping undecodable account record: {e.reason}",
                action="load_accounts",
                resource=source,
                extra={"line_number": line_number, "record": line.decode("utf-8", "replace")}
            )
            continue
        except RecordFormatError as e:
            log_action(
                logger, "warning", f"Skipping malformed account record: {e.reason}",
                action="load_accounts",
                resource=source,
                extra={"line_number": line_number, "record": e.line}
            )
            continue
        if account is not None:
            accounts.append(account)
    return accounts


class AccountStore(ABC):
    """Abstract interface for account stores"""

    @abstractmethod
    def load_all(self) -> List[Account]:
        """Load every readable account record"""
        pass

    @abstractmethod
    def save_all(self, accounts: Iterable[Account]) -> None:
        """Replace the stored records with the given accounts"""
        pass

    def close(self) -> None:
        """Release store resources (default no-op)"""
        pass


class InMemoryAccountStore(AccountStore):
    """In-memory store implementation for testing"""

    def __init__(self, lines: Iterable[str] = ()):
        self._lines: List[str] = list(lines)
        self._lock = threading.RLock()
        self.save_count = 0

    @property
    def lines(self) -> List[str]:
        """Copy of the currently stored records"""
        with self._lock:
            return list(self._lines)

    def load_all(self) -> List[Account]:
        with self._lock:
            return decode_records(list(self._lines), "memory")

    def save_all(self, accounts: Iterable[Account]) -> None:
        with self._lock:
            self._lines = [encode_account(account) for account in accounts]
            self.save_count += 1


class FileAccountStore(AccountStore):
    """Text file store, one record per line, rewritten wholesale on save"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    def load_all(self) -> List[Account]:
        """Load accounts; a missing file means no prior data"""
        with self._lock:
            if not self.path.exists():
                return []
            try:
                with self.path.open("rb") as handle:
                    lines = handle.readlines()
            except OSError as e:
                raise PersistenceError(f"Error loading accounts file: {e}") from e
            return decode_records(lines, str(self.path))

    def save_all(self, accounts: Iterable[Account]) -> None:
        """Truncate the file and write every account"""
        with self._lock:
            records = [encode_account(account) for account in accounts]
            try:
                payload = "".join(record + "\n" for record in records).encode("utf-8")
            except UnicodeEncodeError as e:
                raise PersistenceError(f"Error encoding accounts file: {e}") from e

            # the whole payload exists before the file is truncated
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("wb") as handle:
                    handle.write(payload)
            except OSError as e:
                raise PersistenceError(f"Error saving accounts file: {e}") from e
