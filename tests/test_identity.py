"""
Test suite for identity allocation

Identifiers must be unique and strictly increasing per prefix, including
under concurrent allocation.
"""

import threading

import pytest

from bank_ledger.identity import (
    ACCOUNT_PREFIX, CUSTOMER_PREFIX, TRANSACTION_PREFIX, IdentityAllocator
)


class TestIdentityAllocator:
    """Test IdentityAllocator"""

    def setup_method(self):
        self.ids = IdentityAllocator()

    def test_format(self):
        """Test prefix plus five-digit zero padding"""
        assert self.ids.next(CUSTOMER_PREFIX) == "CUST00001"
        assert self.ids.next(ACCOUNT_PREFIX) == "ACC00001"
        assert self.ids.next(TRANSACTION_PREFIX) == "TXN00001"

    def test_counters_are_independent(self):
        self.ids.next(ACCOUNT_PREFIX)
        self.ids.next(ACCOUNT_PREFIX)
        assert self.ids.next(CUSTOMER_PREFIX) == "CUST00001"
        assert self.ids.next(ACCOUNT_PREFIX) == "ACC00003"
        assert self.ids.peek(ACCOUNT_PREFIX) == 3
        assert self.ids.peek(TRANSACTION_PREFIX) == 0

    def test_grows_past_five_digits(self):
        ids = IdentityAllocator({ACCOUNT_PREFIX: 99999})
        assert ids.next(ACCOUNT_PREFIX) == "ACC100000"

    def test_restore_never_moves_backwards(self):
        self.ids.restore({ACCOUNT_PREFIX: 10})
        self.ids.restore({ACCOUNT_PREFIX: 3})
        assert self.ids.next(ACCOUNT_PREFIX) == "ACC00011"

    def test_observe(self):
        """Test observe advances past an existing id"""
        self.ids.observe("TXN00041", TRANSACTION_PREFIX)
        assert self.ids.next(TRANSACTION_PREFIX) == "TXN00042"

    def test_observe_wrong_prefix(self):
        with pytest.raises(ValueError):
            self.ids.observe("ACC00001", CUSTOMER_PREFIX)

    def test_counters_snapshot(self):
        self.ids.next(CUSTOMER_PREFIX)
        snapshot = self.ids.counters()
        snapshot[CUSTOMER_PREFIX] = 100
        assert self.ids.peek(CUSTOMER_PREFIX) == 1

    def test_concurrent_allocation_is_unique(self):
        """Test parallel callers never get the same id"""
        issued = []
        lock = threading.Lock()

        def worker():
            local = [self.ids.next(TRANSACTION_PREFIX) for _ in range(500)]
            with lock:
                issued.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(issued) == 4000
        assert len(set(issued)) == 4000
        assert self.ids.peek(TRANSACTION_PREFIX) == 4000
