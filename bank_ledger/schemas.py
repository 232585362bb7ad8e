"""
Pydantic schemas for API requests and responses
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from .accounts import Account, CurrentAccount, SavingsAccount
from .customers import Customer
from .transactions import Transaction


# Customer schemas
class CreateCustomerRequest(BaseModel):
    name: str
    email: str


class CustomerModel(BaseModel):
    id: str
    name: str
    email: str
    created_at: str

    @classmethod
    def from_customer(cls, customer: Customer) -> 'CustomerModel':
        return cls(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            created_at=customer.created_at.isoformat()
        )


# Account schemas
class OpenAccountRequest(BaseModel):
    customer_id: str
    account_type: str = Field(..., description="Account type (SAVINGS or CURRENT)")
    opening_balance: str = Field("0", description="Decimal amount as string")


class AccountModel(BaseModel):
    id: str
    account_type: str
    owner_id: str
    owner_name: str
    balance: str
    annual_rate: Optional[str] = None
    overdraft_limit: Optional[str] = None
    created_at: str

    @classmethod
    def from_account(cls, account: Account) -> 'AccountModel':
        annual_rate = None
        overdraft_limit = None
        if isinstance(account, SavingsAccount):
            annual_rate = str(account.annual_rate)
        if isinstance(account, CurrentAccount):
            overdraft_limit = str(account.overdraft_limit)

        return cls(
            id=account.id,
            account_type=account.account_type.value,
            owner_id=account.owner.id,
            owner_name=account.owner.name,
            balance=str(account.balance),
            annual_rate=annual_rate,
            overdraft_limit=overdraft_limit,
            created_at=account.created_at.isoformat()
        )


# Transaction schemas
class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(BaseModel):
    target_account_id: str
    amount: str = Field(..., description="Decimal amount as string")


class TransactionModel(BaseModel):
    id: str
    timestamp: str
    transaction_type: str
    amount: str
    note: str

    @classmethod
    def from_transaction(cls, txn: Transaction) -> 'TransactionModel':
        return cls(
            id=txn.id,
            timestamp=txn.timestamp.isoformat(),
            transaction_type=txn.transaction_type.value,
            amount=str(txn.amount),
            note=txn.note
        )


class TransactionResult(BaseModel):
    transaction: TransactionModel
    balance: str


class TransferResult(BaseModel):
    debit: TransactionModel
    credit: TransactionModel
    source_balance: str
    target_balance: str


class HistoryModel(BaseModel):
    account_id: str
    balance: str
    transactions: List[TransactionModel]
