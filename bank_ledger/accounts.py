"""
Account Module

Savings and current accounts with an append-only ledger. The withdrawal
rule of each account type lives in a policy object and monthly interest in
a strategy object; the account classes only pick which policy and strategy
they carry. Every balance change happens under the account lock together
with exactly one ledger append (two for a transfer, one per side).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Tuple, Union
import threading

from .customers import Customer
from .errors import (
    InsufficientFunds, InvalidArgument, InvalidOpeningBalance,
    SelfTransferError, ValidationError
)
from .identity import IdentityAllocator, TRANSACTION_PREFIX
from .logging_config import get_logger, log_action
from .money import AmountLike, ZERO, format_money, to_exact_money, to_money
from .transactions import Clock, Ledger, Transaction, TransactionType, utc_now


logger = get_logger("bank_ledger.accounts")

MONTHS_PER_YEAR = Decimal("12")


class AccountType(Enum):
    """Account kinds"""
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"

    @classmethod
    def parse(cls, value: Union["AccountType", str]) -> "AccountType":
        """Accept an AccountType or its name in any case"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise InvalidArgument(f"Unknown account type: {value!r}")


class WithdrawalPolicy(ABC):
    """Decides whether a balance reduction is allowed"""

    @property
    @abstractmethod
    def floor(self) -> Decimal:
        """Lowest balance the account may reach"""

    def allows(self, balance: Decimal, amount: Decimal) -> bool:
        return balance - amount >= self.floor


class NoOverdraftPolicy(WithdrawalPolicy):
    """Balance may never go below zero"""

    @property
    def floor(self) -> Decimal:
        return ZERO


class OverdraftPolicy(WithdrawalPolicy):
    """Balance may go down to -limit"""

    def __init__(self, limit: AmountLike):
        self.limit = limit

    @property
    def limit(self) -> Decimal:
        return self._limit

    @limit.setter
    def limit(self, value: AmountLike) -> None:
        limit = _parse_amount(value, "Overdraft limit")
        if limit < ZERO:
            raise ValidationError("Overdraft limit cannot be negative")
        self._limit = limit

    @property
    def floor(self) -> Decimal:
        return -self._limit


class FlatMonthlyInterest:
    """Monthly interest of balance * annual_rate / 12, rounded to cents"""

    def __init__(self, annual_rate: AmountLike):
        self.annual_rate = annual_rate

    @property
    def annual_rate(self) -> Decimal:
        return self._annual_rate

    @annual_rate.setter
    def annual_rate(self, value: AmountLike) -> None:
        try:
            rate = Decimal(str(value)) if not isinstance(value, Decimal) else value
        except ArithmeticError:
            raise ValidationError(f"Invalid annual rate: {value!r}")
        if not rate.is_finite() or rate < 0:
            raise ValidationError("Annual rate cannot be negative")
        self._annual_rate = rate

    def monthly_interest(self, balance: Decimal) -> Decimal:
        return to_money(balance * (self._annual_rate / MONTHS_PER_YEAR))


class InterestBearing(ABC):
    """Capability of accounts that accrue monthly interest"""

    @abstractmethod
    def calculate_monthly_interest(self) -> Decimal:
        """Interest one month would add at the current balance"""

    @abstractmethod
    def apply_monthly_interest(self) -> Decimal:
        """Add one month of interest, returning the amount applied"""


class Account:
    """
    Bank account holding a balance, an owner back-reference and a ledger

    Not constructed directly: use SavingsAccount, CurrentAccount or the
    AccountFactory.
    """

    account_type: AccountType

    def __init__(
        self,
        account_id: str,
        owner: Customer,
        opening_balance: AmountLike,
        policy: WithdrawalPolicy,
        ids: IdentityAllocator,
        clock: Clock = utc_now
    ):
        opening = parse_opening_balance(opening_balance)

        self._init_state(account_id, owner, policy, ids, clock, clock())
        entry = self._new_entry(TransactionType.DEPOSIT, opening, "Opening balance")
        self._balance = opening
        self._ledger.append(entry)

    def _init_state(
        self,
        account_id: str,
        owner: Customer,
        policy: WithdrawalPolicy,
        ids: IdentityAllocator,
        clock: Clock,
        created_at: datetime
    ) -> None:
        if owner is None:
            raise InvalidArgument("Account owner is required")
        self._id = account_id
        self._owner = owner
        self._policy = policy
        self._ids = ids
        self._clock = clock
        self._created_at = created_at
        self._balance = ZERO
        self._ledger = Ledger()
        self._lock = threading.RLock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def owner(self) -> Customer:
        return self._owner

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    @property
    def policy(self) -> WithdrawalPolicy:
        return self._policy

    @property
    def lock(self) -> threading.RLock:
        """Account lock; acquire in ascending id order when holding several"""
        return self._lock

    def history(self) -> Tuple[Transaction, ...]:
        """Ledger entries in insertion order"""
        return self._ledger.entries()

    def can_withdraw(self, amount: AmountLike) -> bool:
        """Whether the withdrawal policy accepts a reduction of amount"""
        value = _parse_amount(amount, "Amount")
        with self._lock:
            return self._policy.allows(self._balance, value)

    def deposit(self, amount: AmountLike) -> Transaction:
        """Add funds; returns the DEPOSIT entry"""
        value = self._validate_amount(amount)
        with self._lock:
            entry = self._new_entry(TransactionType.DEPOSIT, value, "Cash deposit")
            self._balance += value
            self._ledger.append(entry)
            balance = self._balance

        log_action(logger, "debug", f"Deposit of {format_money(value)} to {self._id}",
                   action="deposit", resource=f"account:{self._id}",
                   extra={"transaction_id": entry.id, "balance": str(balance)})
        return entry

    def withdraw(self, amount: AmountLike) -> Transaction:
        """Remove funds within the withdrawal policy; returns the WITHDRAW entry"""
        value = self._validate_amount(amount)
        with self._lock:
            if not self._policy.allows(self._balance, value):
                raise InsufficientFunds("Withdrawal would exceed limit", account_id=self._id)
            entry = self._new_entry(TransactionType.WITHDRAW, value, "Cash withdrawal")
            self._balance -= value
            self._ledger.append(entry)
            balance = self._balance

        log_action(logger, "debug", f"Withdrawal of {format_money(value)} from {self._id}",
                   action="withdraw", resource=f"account:{self._id}",
                   extra={"transaction_id": entry.id, "balance": str(balance)})
        return entry

    def transfer_to(self, target: "Account", amount: AmountLike) -> Tuple[Transaction, Transaction]:
        """
        Move funds to target as one atomic unit

        Both account locks are taken in ascending id order, so two transfers
        running in opposite directions cannot deadlock. The withdrawal policy
        check and both balance changes happen while both locks are held.

        Returns:
            (TRANSFER_OUT entry on self, TRANSFER_IN entry on target)
        """
        if not isinstance(target, Account):
            raise InvalidArgument("Transfer target must be an account")
        if target is self or target.id == self._id:
            raise SelfTransferError("Cannot transfer to same account")
        value = self._validate_amount(amount)

        first, second = sorted((self, target), key=lambda a: a.id)
        with first._lock, second._lock:
            if not self._policy.allows(self._balance, value):
                raise InsufficientFunds("Transfer would exceed limit", account_id=self._id)
            out_entry = self._new_entry(TransactionType.TRANSFER_OUT, value, f"To {target.id}")
            in_entry = target._new_entry(TransactionType.TRANSFER_IN, value, f"From {self._id}")
            self._balance -= value
            self._ledger.append(out_entry)
            target._balance += value
            target._ledger.append(in_entry)

        log_action(logger, "debug", f"Transfer of {format_money(value)} from {self._id} to {target.id}",
                   action="transfer", resource=f"account:{self._id}",
                   extra={"target_account": target.id,
                          "out_transaction_id": out_entry.id,
                          "in_transaction_id": in_entry.id})
        return out_entry, in_entry

    def describe(self) -> str:
        """One-line summary: id | type | owner | balance"""
        return (f"{self._id} | {self.account_type.value:<7} | "
                f"{self._owner.name:<20} | Bal: {self.balance:.2f}")

    def to_dict(self) -> Dict[str, Any]:
        """Full account state, including the ledger, for snapshots"""
        with self._lock:
            result = {
                "id": self._id,
                "account_type": self.account_type.value,
                "owner_id": self._owner.id,
                "balance": str(self._balance),
                "created_at": self._created_at.isoformat(),
                "transactions": [t.to_dict() for t in self._ledger.entries()],
            }
            result.update(self._params_to_dict())
            return result

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        owner: Customer,
        ids: IdentityAllocator,
        clock: Clock = utc_now
    ) -> "Account":
        """
        Rebuild an account from to_dict() output

        No opening entry is appended and no identifier is allocated; the
        stored ledger is taken as is.
        """
        if owner.id != data["owner_id"]:
            raise InvalidArgument(f"Owner {owner.id} does not match {data['owner_id']}")

        account = cls.__new__(cls)
        account._init_state(data["id"], owner, NoOverdraftPolicy(), ids, clock,
                            datetime.fromisoformat(data["created_at"]))
        account._params_from_dict(data)
        account._balance = Decimal(data["balance"])
        account._ledger = Ledger([Transaction.from_dict(t) for t in data["transactions"]])

        if account._balance < account._policy.floor:
            raise ValidationError(f"Stored balance of {account.id} violates its withdrawal policy")
        return account

    def _params_to_dict(self) -> Dict[str, Any]:
        return {}

    def _params_from_dict(self, data: Dict[str, Any]) -> None:
        pass

    def _new_entry(self, transaction_type: TransactionType, amount: Decimal, note: str) -> Transaction:
        return Transaction(
            id=self._ids.next(TRANSACTION_PREFIX),
            timestamp=self._clock(),
            transaction_type=transaction_type,
            amount=amount,
            note=note
        )

    @staticmethod
    def _validate_amount(amount: AmountLike) -> Decimal:
        value = _parse_amount(amount, "Amount")
        if value <= ZERO:
            raise ValidationError("Amount must be > 0")
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, balance={self.balance!r})"


class SavingsAccount(Account, InterestBearing):
    """Interest-bearing account without overdraft"""

    account_type = AccountType.SAVINGS

    def __init__(
        self,
        account_id: str,
        owner: Customer,
        opening_balance: AmountLike,
        annual_rate: AmountLike,
        ids: IdentityAllocator,
        clock: Clock = utc_now
    ):
        interest = FlatMonthlyInterest(annual_rate)
        super().__init__(account_id, owner, opening_balance, NoOverdraftPolicy(), ids, clock)
        self._interest = interest

    @property
    def annual_rate(self) -> Decimal:
        return self._interest.annual_rate

    @annual_rate.setter
    def annual_rate(self, value: AmountLike) -> None:
        with self._lock:
            self._interest.annual_rate = value

    def calculate_monthly_interest(self) -> Decimal:
        with self._lock:
            return self._interest.monthly_interest(self._balance)

    def apply_monthly_interest(self) -> Decimal:
        with self._lock:
            interest = self._interest.monthly_interest(self._balance)
            if interest == ZERO:
                return ZERO
            entry = self._new_entry(TransactionType.INTEREST, interest, "Monthly interest")
            self._balance += interest
            self._ledger.append(entry)

        log_action(logger, "debug", f"Interest of {format_money(interest)} applied to {self._id}",
                   action="apply_interest", resource=f"account:{self._id}",
                   extra={"transaction_id": entry.id, "annual_rate": str(self.annual_rate)})
        return interest

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"annual_rate": str(self._interest.annual_rate)}

    def _params_from_dict(self, data: Dict[str, Any]) -> None:
        self._interest = FlatMonthlyInterest(Decimal(data["annual_rate"]))


class CurrentAccount(Account):
    """Account with an overdraft facility and no interest"""

    account_type = AccountType.CURRENT

    def __init__(
        self,
        account_id: str,
        owner: Customer,
        opening_balance: AmountLike,
        overdraft_limit: AmountLike,
        ids: IdentityAllocator,
        clock: Clock = utc_now
    ):
        policy = OverdraftPolicy(overdraft_limit)
        super().__init__(account_id, owner, opening_balance, policy, ids, clock)

    @property
    def overdraft_limit(self) -> Decimal:
        return self._policy.limit

    @overdraft_limit.setter
    def overdraft_limit(self, value: AmountLike) -> None:
        with self._lock:
            self._policy.limit = value

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"overdraft_limit": str(self._policy.limit)}

    def _params_from_dict(self, data: Dict[str, Any]) -> None:
        self._policy = OverdraftPolicy(Decimal(data["overdraft_limit"]))


def _parse_amount(value: AmountLike, label: str,
                  error: type = ValidationError) -> Decimal:
    try:
        return to_exact_money(value)
    except ValueError as e:
        raise error(f"{label} must be a number in cents: {e}")
    except ArithmeticError:
        raise error(f"{label} must be a number, got {value!r}")


def parse_opening_balance(value: AmountLike) -> Decimal:
    """Normalise an opening balance, which may be zero but never negative"""
    opening = _parse_amount(value, "Opening balance", InvalidOpeningBalance)
    if opening < ZERO:
        raise InvalidOpeningBalance("Opening balance must be >= 0")
    return opening
