"""
Test suite for the account record codec

Tests encoding, tolerant decoding, extension field defaults and the
loan principal approximation on reload.
"""

import pytest

from smart_banking.accounts import (
    AccountKind, Feature, SavingsAccount, CurrentAccount, LoanAccount
)
from smart_banking.codec import (
    encode_account, decode_account, parse_extra, extract_int, extract_float, sanitize_name
)
from smart_banking.errors import RecordFormatError


class TestEncode:
    """Test record encoding"""

    def test_encode_savings(self):
        """Test a savings record"""
        account = SavingsAccount(
            account_number=1001, name="Ann Lee", balance=1000.0,
            features=Feature.SMS_ALERT, annual_rate=0.04
        )
        assert encode_account(account) == "1001,SAVINGS,Ann Lee,1000.000000,2,rate=0.0400"

    def test_encode_current(self):
        """Test a current record with an empty extension"""
        account = CurrentAccount(
            account_number=1002, name="Bob", balance=-12.5, features=Feature.OVERDRAFT
        )
        assert encode_account(account) == "1002,CURRENT,Bob,-12.500000,1,"

    def test_encode_loan(self):
        """Test a loan record"""
        loan = LoanAccount.open(1003, "Carol", 1200.0, months=11, annual_rate=0.12)
        assert encode_account(loan) == "1003,LOAN,Carol,-1200.000000,0,months=11,rate=0.1200"

    def test_name_commas_replaced(self):
        """Test that commas in names become spaces"""
        account = CurrentAccount(account_number=1, name="Doe, Jane", balance=0.0)
        assert encode_account(account) == "1,CURRENT,Doe  Jane,0.000000,0,"

    def test_name_line_breaks_replaced(self):
        """Test that a name cannot split a record across lines"""
        assert sanitize_name("a\nb\r,c") == "a b  c"

    def test_unencodable_name_replaced(self):
        """Test that a lone surrogate in a name cannot break the UTF-8 store"""
        assert sanitize_name("X\udcff") == "X?"
        account = CurrentAccount(account_number=1, name="X\udcff", balance=0.0)
        assert encode_account(account).encode("utf-8") == b"1,CURRENT,X?,0.000000,0,"


class TestDecode:
    """Test record decoding"""

    def test_decode_savings(self):
        """Test decoding a savings record"""
        account = decode_account("1001,SAVINGS,Ann,1003.333333,3,rate=0.0500\n")

        assert isinstance(account, SavingsAccount)
        assert account.account_number == 1001
        assert account.name == "Ann"
        assert account.balance == pytest.approx(1003.333333)
        assert account.features == Feature.OVERDRAFT | Feature.SMS_ALERT
        assert account.annual_rate == pytest.approx(0.05)
        assert account.pending_statements == []

    def test_decode_loan_restores_balance_and_principal(self):
        """Test that the stored loan balance is kept and principal derived from it"""
        loan = decode_account("1003,LOAN,Carol,-1010.000000,0,months=11,rate=0.1200")

        assert isinstance(loan, LoanAccount)
        assert loan.balance == pytest.approx(-1010.0)
        assert loan.original_principal == pytest.approx(1010.0)
        assert loan.months_remaining == 11
        assert loan.annual_rate == pytest.approx(0.12)

    def test_decode_kind_is_case_insensitive(self):
        """Test lower case kind tags"""
        account = decode_account("7,current,Bob,5.000000,0,")
        assert isinstance(account, CurrentAccount)

    def test_decode_missing_extension_uses_defaults(self):
        """Test defaults when the extension field is absent"""
        savings = decode_account("1,SAVINGS,Ann,10.0,0")
        loan = decode_account("2,LOAN,Carol,-10.0,0,")

        assert savings.annual_rate == pytest.approx(0.04)
        assert loan.months_remaining == 12
        assert loan.annual_rate == pytest.approx(0.12)

    def test_decode_malformed_extension_uses_defaults(self):
        """Test defaults when extension values are unreadable"""
        loan = decode_account("2,LOAN,Carol,-10.0,0,months=abc,rate=")
        assert loan.months_remaining == 12
        assert loan.annual_rate == pytest.approx(0.12)

    def test_unknown_kind_is_dropped(self):
        """Test that unknown kinds decode to nothing"""
        assert decode_account("5,CHECKING,Eve,10.0,0,") is None

    @pytest.mark.parametrize("line", ["", "   ", "\n"])
    def test_blank_lines(self, line):
        """Test that blank lines decode to nothing"""
        assert decode_account(line) is None

    @pytest.mark.parametrize("line,reason", [
        ("1001,SAVINGS,Ann", "fields"),
        ("abc,SAVINGS,Ann,10.0,0,", "account number"),
        ("1001,SAVINGS,Ann,ten,0,", "balance"),
        ("1001,SAVINGS,Ann,10.0,x,", "features"),
    ])
    def test_malformed_core_fields(self, line, reason):
        """Test that unreadable core fields raise a format error"""
        with pytest.raises(RecordFormatError) as exc_info:
            decode_account(line)
        assert reason in exc_info.value.reason
        assert exc_info.value.line == line


class TestRoundTrip:
    """Test that decode then encode preserves a record's content"""

    @pytest.mark.parametrize("line", [
        "1001,SAVINGS,Ann,1003.333333,2,rate=0.0400",
        "1002,CURRENT,Bob,-4000.000000,1,",
        "1003,LOAN,Carol,-1010.000000,4,months=11,rate=0.1200",
    ])
    def test_round_trip(self, line):
        """Test that a valid record survives a round trip unchanged"""
        assert encode_account(decode_account(line)) == line

    def test_round_trip_object(self):
        """Test that an account survives encode then decode"""
        loan = LoanAccount.open(1003, "Carol", 1200.0, months=6, annual_rate=0.09,
                                features=Feature.PREMIUM)
        loan.repay(200.123456)

        restored = decode_account(encode_account(loan))

        assert restored.kind is AccountKind.LOAN
        assert restored.balance == pytest.approx(loan.balance, abs=1e-6)
        assert restored.months_remaining == 6
        assert restored.annual_rate == pytest.approx(0.09)
        assert restored.features == Feature.PREMIUM


class TestExtraHelpers:
    """Test extension field helpers"""

    def test_parse_extra(self):
        """Test key=value parsing"""
        assert parse_extra("months=11, rate=0.12") == {"months": "11", "rate": "0.12"}
        assert parse_extra("") == {}
        assert parse_extra("junk,rate=1") == {"rate": "1"}

    def test_first_key_wins(self):
        """Test that repeated keys keep the first value"""
        assert parse_extra("rate=1,rate=2") == {"rate": "1"}

    def test_extract_defaults(self):
        """Test typed extraction with fallbacks"""
        extra = {"months": "7", "rate": "oops"}
        assert extract_int(extra, "months", 12) == 7
        assert extract_float(extra, "rate", 0.12) == 0.12
        assert extract_int(extra, "missing", 3) == 3
