"""
Account Record Codec

Converts accounts to and from the one-line records of the account store:

    accountNumber,KIND,name,balance,features,extra

`extra` holds kind parameters as comma separated key=value pairs, e.g.
`rate=0.0400` for savings or `months=11,rate=0.1200` for loans. Decoding
is tolerant: unknown kinds are dropped, missing or unreadable extension
keys fall back to defaults. Only unreadable core fields are an error.
"""

from typing import Dict, Optional

from .accounts import (
    Account, AccountKind, SavingsAccount, CurrentAccount, LoanAccount, Feature,
    DEFAULT_SAVINGS_RATE, DEFAULT_LOAN_MONTHS, DEFAULT_LOAN_RATE
)
from .errors import RecordFormatError
from .logging_config import get_logger


FIELD_COUNT = 6

logger = get_logger("smart_banking.codec")


def sanitize_name(name: str) -> str:
    """Make a holder name safe for one comma separated UTF-8 field"""
    name = name.encode("utf-8", "replace").decode("utf-8")
    return name.replace(",", " ").replace("\r", " ").replace("\n", " ")


def encode_extra(fields: Dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in fields.items())


def encode_account(account: Account) -> str:
    """Encode an account as one store record (no trailing newline)"""
    return "%d,%s,%s,%.6f,%d,%s" % (
        account.account_number,
        account.kind.value,
        sanitize_name(account.name),
        account.balance,
        int(account.features),
        encode_extra(account.extra_fields()),
    )


def parse_extra(extra: str) -> Dict[str, str]:
    """Split `k=v,k=v` into a dict; tokens without '=' are ignored"""
    result: Dict[str, str] = {}
    for token in extra.split(","):
        token = token.strip()
        if "=" not in token:
            continue
        key, _, value = token.partition("=")
        key = key.strip()
        # first occurrence wins
        if key and key not in result:
            result[key] = value.strip()
    return result


def extract_int(extra: Dict[str, str], key: str, default: int) -> int:
    try:
        return int(extra[key])
    except (KeyError, ValueError):
        return default


def extract_float(extra: Dict[str, str], key: str, default: float) -> float:
    try:
        return float(extra[key])
    except (KeyError, ValueError):
        return default


def decode_account(line: str) -> Optional[Account]:
    """
    Decode one store record.

    Returns None for blank lines and for records with an unknown kind tag.
    The stored balance is restored verbatim; a loan's original principal is
    taken as the magnitude of that stored balance.

    Raises:
        RecordFormatError: fewer than five fields, or an unreadable account
            number, balance or feature mask
    """
    line = line.rstrip("\r\n")
    if not line.strip():
        return None

    parts = line.split(",", FIELD_COUNT - 1)
    if len(parts) < FIELD_COUNT - 1:
        raise RecordFormatError(line, f"expected {FIELD_COUNT} fields, got {len(parts)}")

    try:
        account_number = int(parts[0].strip())
    except ValueError:
        raise RecordFormatError(line, "account number")
    try:
        balance = float(parts[3].strip())
    except ValueError:
        raise RecordFormatError(line, "balance")
    try:
        features = Feature(int(parts[4].strip()))
    except ValueError:
        raise RecordFormatError(line, "features")

    tag = parts[1].strip().upper()
    name = parts[2]
    extra = parse_extra(parts[5]) if len(parts) == FIELD_COUNT else {}

    if tag == AccountKind.SAVINGS.value:
        return SavingsAccount(
            account_number=account_number,
            name=name,
            balance=balance,
            features=features,
            annual_rate=extract_float(extra, "rate", DEFAULT_SAVINGS_RATE)
        )

    if tag == AccountKind.CURRENT.value:
        return CurrentAccount(
            account_number=account_number,
            name=name,
            balance=balance,
            features=features
        )

    if tag == AccountKind.LOAN.value:
        return LoanAccount(
            account_number=account_number,
            name=name,
            balance=balance,
            features=features,
            annual_rate=extract_float(extra, "rate", DEFAULT_LOAN_RATE),
            months_remaining=extract_int(extra, "months", DEFAULT_LOAN_MONTHS),
            original_principal=abs(balance)
        )

    logger.debug("Skipping record with unknown account kind %r", parts[1])
    return None
