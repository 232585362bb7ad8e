"""
Transaction Ledger Module

Immutable transaction records and the append-only ledger that holds them.
A Transaction never looks up the clock or allocates its own id: the owning
account supplies both at the moment of append, which keeps the record a
pure value and lets tests inject a fixed clock.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
import threading

from .errors import ValidationError
from .money import to_money


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock"""
    return datetime.now(timezone.utc)


class TransactionType(Enum):
    """Kinds of ledger entries; direction is encoded here, never in the sign"""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"
    INTEREST = "INTEREST"

    @property
    def is_credit(self) -> bool:
        """True if the entry increases the balance"""
        return self in (TransactionType.DEPOSIT, TransactionType.TRANSFER_IN,
                        TransactionType.INTEREST)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry

    amount is always stored as a non-negative Decimal; only an opening
    balance of zero produces a zero-amount entry.
    """
    id: str
    timestamp: datetime
    transaction_type: TransactionType
    amount: Decimal
    note: str = ""

    def __post_init__(self):
        try:
            amount = to_money(self.amount)
        except ValueError as e:
            raise ValidationError(str(e))
        if amount < Decimal("0"):
            raise ValidationError("Transaction amount cannot be negative")
        object.__setattr__(self, "amount", amount)

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the balance"""
        return self.amount if self.transaction_type.is_credit else -self.amount

    def describe(self) -> str:
        """One-line rendering: id | time | type | amount | note"""
        return (f"{self.id} | {self.timestamp.isoformat()} | "
                f"{self.transaction_type.value} | {self.amount:.2f} | {self.note}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "transaction_type": self.transaction_type.value,
            "amount": str(self.amount),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Create Transaction from dictionary"""
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            transaction_type=TransactionType(data["transaction_type"]),
            amount=Decimal(data["amount"]),
            note=data.get("note", ""),
        )


class Ledger:
    """
    Append-only sequence of transactions belonging to one account

    Readers always get tuple snapshots, never the backing list.
    """

    def __init__(self, entries: Optional[List[Transaction]] = None):
        self._entries: List[Transaction] = list(entries or [])
        self._lock = threading.Lock()

    def append(self, transaction: Transaction) -> Transaction:
        with self._lock:
            self._entries.append(transaction)
        return transaction

    def entries(self) -> Tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._entries)

    def last(self) -> Optional[Transaction]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def of_type(self, transaction_type: TransactionType) -> Tuple[Transaction, ...]:
        """Entries of a single type, in order"""
        return tuple(t for t in self.entries() if t.transaction_type == transaction_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.entries())
