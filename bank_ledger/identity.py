"""
Identity Allocation Module

Issues prefixed, zero-padded, strictly increasing identifiers such as
CUST00001, ACC00001 and TXN00001. One allocator is owned by each Bank and
handed to every entity constructor.
"""

import threading
from typing import Dict, Mapping


CUSTOMER_PREFIX = "CUST"
ACCOUNT_PREFIX = "ACC"
TRANSACTION_PREFIX = "TXN"

ID_WIDTH = 5


class IdentityAllocator:
    """
    Thread-safe per-prefix counter

    Counters start at 1. Past 99999 the number simply grows wider.
    """

    def __init__(self, counters: Mapping[str, int] = None):
        self._counters: Dict[str, int] = dict(counters or {})
        self._lock = threading.Lock()

    def next(self, prefix: str) -> str:
        """Allocate the next identifier for prefix"""
        with self._lock:
            n = self._counters.get(prefix, 0) + 1
            self._counters[prefix] = n
        return f"{prefix}{n:0{ID_WIDTH}d}"

    def peek(self, prefix: str) -> int:
        """Last number issued for prefix (0 if none)"""
        with self._lock:
            return self._counters.get(prefix, 0)

    def counters(self) -> Dict[str, int]:
        """Snapshot of all counters"""
        with self._lock:
            return dict(self._counters)

    def restore(self, counters: Mapping[str, int]) -> None:
        """
        Advance counters to at least the given values

        Counters never move backwards, so restoring an older snapshot cannot
        cause an identifier to be issued twice.
        """
        with self._lock:
            for prefix, value in counters.items():
                if value > self._counters.get(prefix, 0):
                    self._counters[prefix] = int(value)

    def observe(self, identifier: str, prefix: str) -> None:
        """Advance the prefix counter past an existing identifier"""
        if not identifier.startswith(prefix):
            raise ValueError(f"Identifier {identifier} does not start with {prefix}")
        self.restore({prefix: int(identifier[len(prefix):])})
