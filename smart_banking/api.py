"""
FastAPI REST API Module

Provides REST endpoints over the ledger: account creation and lookup,
deposits, withdrawals, transfers, loan repayments, month-end processing
and the statement log tail.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
from fastapi import FastAPI, HTTPException, Depends, Query, status
from pydantic import BaseModel, Field
import uvicorn

from .accounts import Account, LoanAccount, SavingsAccount
from .config import get_config
from .logging_config import setup_logging
from .errors import BankingError, ErrorKind
from .ledger import Ledger


# Pydantic models for API requests/responses
class CreateAccountRequest(BaseModel):
    kind: str = Field(..., description="Account kind (savings, current, loan)")
    name: str
    amount: float = Field(..., description="Initial deposit, or principal for loans")
    features: int = Field(0, description="Feature bitmask (1=overdraft, 2=sms, 4=premium)")
    rate: Optional[float] = Field(None, description="Annual rate as a fraction")
    months: Optional[int] = Field(None, description="Loan term in months")


class AmountRequest(BaseModel):
    amount: float


class TransferRequest(BaseModel):
    from_account: int
    to_account: int
    amount: float


def account_to_dict(account: Account) -> Dict[str, Any]:
    """Serialize an account for API responses"""
    result = {
        "account_number": account.account_number,
        "kind": account.kind.value,
        "name": account.name,
        "balance": account.balance,
        "features": account.feature_labels(),
    }
    if isinstance(account, SavingsAccount):
        result["annual_rate"] = account.annual_rate
    if isinstance(account, LoanAccount):
        result["annual_rate"] = account.annual_rate
        result["months_remaining"] = account.months_remaining
        result["original_principal"] = account.original_principal
    return result


def to_http_error(error: BankingError) -> HTTPException:
    """Map a ledger error to an HTTP error"""
    if error.kind == ErrorKind.ACCOUNT_NOT_FOUND:
        status_code = status.HTTP_404_NOT_FOUND
    elif error.kind == ErrorKind.PERSISTENCE_FAILED:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=status_code,
        detail={"error": error.kind.value, "message": error.message}
    )


_ledger: Optional[Ledger] = None


def get_ledger() -> Ledger:
    """Dependency returning the process-wide ledger, built on first use"""
    global _ledger
    if _ledger is None:
        _ledger = Ledger.from_config(get_config())
    return _ledger


# Create FastAPI app
app = FastAPI(
    title="Smart Banking Ledger API",
    description="Savings, current and loan accounts with month-end interest",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/accounts")
async def list_accounts(ledger: Ledger = Depends(get_ledger)):
    """List all accounts"""
    return {"accounts": [account_to_dict(a) for a in ledger.list_accounts()]}


@app.post("/accounts", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Create a new account"""
    params = {}
    if request.rate is not None:
        params["rate"] = request.rate
    if request.months is not None:
        params["months"] = request.months

    try:
        account = ledger.create_account(
            request.kind, request.name, request.amount,
            features=request.features, params=params
        )
    except BankingError as e:
        raise to_http_error(e)
    return account_to_dict(account)


@app.get("/accounts/{account_number}")
async def get_account(account_number: int, ledger: Ledger = Depends(get_ledger)):
    """Get account details"""
    try:
        return account_to_dict(ledger.get_account(account_number))
    except BankingError as e:
        raise to_http_error(e)


@app.post("/accounts/{account_number}/deposit")
async def deposit(
    account_number: int,
    request: AmountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Make a deposit"""
    try:
        return account_to_dict(ledger.deposit(account_number, request.amount))
    except BankingError as e:
        raise to_http_error(e)


@app.post("/accounts/{account_number}/withdraw")
async def withdraw(
    account_number: int,
    request: AmountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Make a withdrawal"""
    try:
        return account_to_dict(ledger.withdraw(account_number, request.amount))
    except BankingError as e:
        raise to_http_error(e)


@app.post("/accounts/{account_number}/repay")
async def repay_loan(
    account_number: int,
    request: AmountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Repay part of a loan"""
    try:
        return account_to_dict(ledger.repay_loan(account_number, request.amount))
    except BankingError as e:
        raise to_http_error(e)


@app.post("/transfers")
async def transfer(request: TransferRequest, ledger: Ledger = Depends(get_ledger)):
    """Transfer between two accounts"""
    try:
        ledger.transfer(request.from_account, request.to_account, request.amount)
        return {
            "from_account": account_to_dict(ledger.get_account(request.from_account)),
            "to_account": account_to_dict(ledger.get_account(request.to_account)),
            "message": "Transfer successful"
        }
    except BankingError as e:
        raise to_http_error(e)


@app.post("/month-end")
async def month_end(ledger: Ledger = Depends(get_ledger)):
    """Run month-end interest processing for every account"""
    try:
        applied = ledger.process_month_end_all()
    except BankingError as e:
        raise to_http_error(e)
    return {"interest": {str(number): amount for number, amount in applied.items()}}


@app.get("/statements")
async def statements(
    limit: Optional[int] = Query(None, ge=1),
    ledger: Ledger = Depends(get_ledger)
):
    """Tail of the statement log"""
    try:
        lines: List[str] = ledger.recent_statements(limit)
    except BankingError as e:
        raise to_http_error(e)
    return {"lines": lines}


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    uvicorn.run(
        "smart_banking.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )


def main():
    """Console entry point for the API server"""
    run_server()
