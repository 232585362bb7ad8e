"""
Domain Error Module

Error taxonomy for ledger operations. Every error carries an ErrorKind so
presentation layers can branch on the kind instead of the concrete class.
All errors are recoverable by the caller; a failed precondition aborts the
operation before any balance or ledger change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar


T = TypeVar("T")


class ErrorKind(Enum):
    """Kinds of ledger errors"""
    VALIDATION = "validation"                  # Non-positive amount, bad rate/limit
    INSUFFICIENT_FUNDS = "insufficient_funds"  # Withdrawal policy rejected
    NOT_FOUND = "not_found"                    # Unknown customer or account id
    INVALID_ARGUMENT = "invalid_argument"      # Unknown account kind
    DOMAIN = "domain"                          # Generic rule violation


class BankingError(Exception):
    """Base class for all ledger errors"""

    kind: ErrorKind = ErrorKind.DOMAIN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "detail": self.message}


class DomainError(BankingError):
    """Generic business rule violation"""
    kind = ErrorKind.DOMAIN


class ValidationError(BankingError, ValueError):
    """Invalid amount, rate, limit or field value"""
    kind = ErrorKind.VALIDATION


class InsufficientFunds(BankingError):
    """Withdrawal or transfer would breach the account's withdrawal policy"""
    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, message: str, account_id: Optional[str] = None):
        super().__init__(message)
        self.account_id = account_id


class NotFound(BankingError, LookupError):
    """Referenced customer or account does not exist"""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidArgument(BankingError, ValueError):
    """Argument outside the accepted set, e.g. an unknown account kind"""
    kind = ErrorKind.INVALID_ARGUMENT


class InvalidOpeningBalance(ValidationError, InvalidArgument):
    """Opening balance below zero"""
    kind = ErrorKind.VALIDATION


class SelfTransferError(DomainError, InvalidArgument):
    """Transfer source and target are the same account"""
    kind = ErrorKind.DOMAIN


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation captured as a value

    Exactly one of value/error is meaningful: ok is True when the operation
    succeeded.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[BankingError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BankingError) -> "Result[T]":
        return cls(ok=False, error=error)

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind, None on success"""
        return self.error.kind if self.error else None

    def unwrap(self) -> T:
        """Return the value or re-raise the captured error"""
        if not self.ok:
            raise self.error
        return self.value


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """
    Run func and capture a BankingError as a failed Result

    Any other exception propagates unchanged.
    """
    try:
        return Result.success(func(*args, **kwargs))
    except BankingError as e:
        return Result.failure(e)
