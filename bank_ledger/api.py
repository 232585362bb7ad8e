"""
Bank Ledger API Application Factory

JSON-over-HTTP surface for the ledger. Every route resolves ids through the
Bank and calls one ledger operation; BankingError kinds map to HTTP status
codes in a single exception handler.
"""

from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from . import __version__
from .bank import Bank
from .config import get_settings
from .errors import BankingError, ErrorKind
from .logging_config import get_logger
from .schemas import (
    AccountModel, AmountRequest, CreateCustomerRequest, CustomerModel,
    HistoryModel, OpenAccountRequest, TransactionModel, TransactionResult,
    TransferRequest, TransferResult
)


logger = get_logger("bank_ledger.api")

ERROR_STATUS = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DOMAIN: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def get_bank(request: Request) -> Bank:
    """Dependency returning the bank bound to the application"""
    return request.app.state.bank


customers_router = APIRouter()
accounts_router = APIRouter()
interest_router = APIRouter()


@customers_router.post("", status_code=status.HTTP_201_CREATED, response_model=CustomerModel)
async def create_customer(request: CreateCustomerRequest, bank: Bank = Depends(get_bank)):
    """Register a customer"""
    customer = bank.create_customer(request.name, request.email)
    return CustomerModel.from_customer(customer)


@customers_router.get("")
async def list_customers(bank: Bank = Depends(get_bank)):
    """List customers in registration order"""
    return {"customers": [CustomerModel.from_customer(c) for c in bank.all_customers()]}


@customers_router.get("/{customer_id}", response_model=CustomerModel)
async def get_customer(customer_id: str, bank: Bank = Depends(get_bank)):
    """Get customer by ID"""
    return CustomerModel.from_customer(bank.get_customer(customer_id))


@accounts_router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountModel)
async def open_account(request: OpenAccountRequest, bank: Bank = Depends(get_bank)):
    """Open a savings or current account for an existing customer"""
    account = bank.open_account(request.account_type, request.customer_id, request.opening_balance)
    return AccountModel.from_account(account)


@accounts_router.get("")
async def list_accounts(bank: Bank = Depends(get_bank)):
    """List accounts in opening order"""
    return {"accounts": [AccountModel.from_account(a) for a in bank.all_accounts()]}


@accounts_router.get("/{account_id}", response_model=AccountModel)
async def get_account(account_id: str, bank: Bank = Depends(get_bank)):
    """Get account details"""
    return AccountModel.from_account(bank.get_account(account_id))


@accounts_router.post("/{account_id}/deposit", response_model=TransactionResult)
async def deposit(account_id: str, request: AmountRequest, bank: Bank = Depends(get_bank)):
    """Deposit into an account"""
    entry = bank.deposit(account_id, request.amount)
    return TransactionResult(
        transaction=TransactionModel.from_transaction(entry),
        balance=str(bank.get_account(account_id).balance)
    )


@accounts_router.post("/{account_id}/withdraw", response_model=TransactionResult)
async def withdraw(account_id: str, request: AmountRequest, bank: Bank = Depends(get_bank)):
    """Withdraw from an account"""
    entry = bank.withdraw(account_id, request.amount)
    return TransactionResult(
        transaction=TransactionModel.from_transaction(entry),
        balance=str(bank.get_account(account_id).balance)
    )


@accounts_router.post("/{account_id}/transfer", response_model=TransferResult)
async def transfer(account_id: str, request: TransferRequest, bank: Bank = Depends(get_bank)):
    """Transfer from this account to another account of the bank"""
    debit, credit = bank.transfer(account_id, request.target_account_id, request.amount)
    return TransferResult(
        debit=TransactionModel.from_transaction(debit),
        credit=TransactionModel.from_transaction(credit),
        source_balance=str(bank.get_account(account_id).balance),
        target_balance=str(bank.get_account(request.target_account_id).balance)
    )


@accounts_router.get("/{account_id}/transactions", response_model=HistoryModel)
async def get_account_transactions(account_id: str, bank: Bank = Depends(get_bank)):
    """Get transaction history for account"""
    account = bank.get_account(account_id)
    return HistoryModel(
        account_id=account.id,
        balance=str(account.balance),
        transactions=[TransactionModel.from_transaction(t) for t in account.history()]
    )


@interest_router.post("/monthly", status_code=status.HTTP_204_NO_CONTENT)
async def apply_monthly_interest(bank: Bank = Depends(get_bank)):
    """Apply one month of interest to all savings accounts"""
    bank.apply_monthly_interest_to_all_savings()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def banking_error_handler(request: Request, exc: BankingError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        content=exc.to_dict()
    )


def create_app(bank: Optional[Bank] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    if bank is None:
        bank = Bank(get_settings().bank_name)

    app = FastAPI(
        title="Bank Ledger API",
        description="In-memory banking ledger with savings and current accounts",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.bank = bank
    app.add_exception_handler(BankingError, banking_error_handler)

    app.include_router(customers_router, prefix="/customers", tags=["Customers"])
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(interest_router, prefix="/interest", tags=["Interest"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_ledger_api",
            "bank": app.state.bank.name,
            "version": __version__
        }

    return app


def run_server(app: FastAPI, host: str = "0.0.0.0", port: int = 8090):
    """Run the FastAPI server"""
    logger.info(f"Serving {app.state.bank.name} on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
