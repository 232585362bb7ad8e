"""
Snapshot Persistence Module

Saves the full state of a Bank (customers, accounts with their ledgers,
identity counters) into a storage backend and rebuilds it. The core only
defines what a snapshot contains; the encoding belongs to the backend.
"""

from contextlib import ExitStack
from typing import Any, Dict, Optional

from .bank import Bank
from .customers import Customer
from .errors import NotFound
from .identity import CUSTOMER_PREFIX, TRANSACTION_PREFIX, IdentityAllocator
from .logging_config import get_logger, log_action
from .storage import StorageInterface
from .transactions import Clock, utc_now


SNAPSHOT_VERSION = 1

logger = get_logger("bank_ledger.persistence")


def snapshot_bank(bank: Bank) -> Dict[str, Any]:
    """
    Capture the bank as plain JSON-compatible data

    All account locks are held (in ascending id order) while the accounts
    are read, so no transfer can be half-visible in the snapshot.
    """
    accounts = sorted(bank.all_accounts(), key=lambda a: a.id)
    with ExitStack() as stack:
        for account in accounts:
            stack.enter_context(account.lock)
        account_data = {a.id: a.to_dict() for a in accounts}
        counters = bank.ids.counters()

    return {
        "version": SNAPSHOT_VERSION,
        "bank": {"name": bank.name, "counters": counters},
        "customers": [c.to_dict() for c in bank.all_customers()],
        # Repository order, not lock order
        "accounts": [account_data[a.id] for a in bank.all_accounts() if a.id in account_data],
    }


def restore_bank(data: Dict[str, Any], clock: Clock = utc_now) -> Bank:
    """
    Rebuild a Bank from snapshot_bank() output

    Identity counters resume after the highest stored id of each prefix.

    Raises:
        NotFound: An account references a customer missing from the snapshot
    """
    ids = IdentityAllocator(data["bank"].get("counters", {}))
    bank = Bank(data["bank"]["name"], ids=ids, clock=clock)

    for customer_data in data.get("customers", []):
        customer = Customer.from_dict(customer_data)
        ids.observe(customer.id, CUSTOMER_PREFIX)
        bank.customers.save(customer)

    for account_data in data.get("accounts", []):
        owner = bank.find_customer(account_data["owner_id"])
        if owner is None:
            raise NotFound("customer", account_data["owner_id"])
        account = bank.factory.restore(account_data, owner)
        for entry in account.history():
            ids.observe(entry.id, TRANSACTION_PREFIX)
        bank.accounts.save(account)

    return bank


class BankSnapshotStore:
    """
    Stores bank snapshots in a StorageInterface

    Layout: one "bank" record in the meta table, one record per customer
    and per account. save() replaces all three tables in one atomic step.
    """

    META_TABLE = "bank_meta"
    CUSTOMERS_TABLE = "customers"
    ACCOUNTS_TABLE = "accounts"
    META_ID = "bank"

    def __init__(self, storage: StorageInterface):
        self.storage = storage

    def save(self, bank: Bank) -> None:
        snapshot = snapshot_bank(bank)

        self.storage.replace_tables({
            self.META_TABLE: [{
                "id": self.META_ID,
                "version": snapshot["version"],
                **snapshot["bank"],
            }],
            self.CUSTOMERS_TABLE: snapshot["customers"],
            self.ACCOUNTS_TABLE: snapshot["accounts"],
        })

        log_action(logger, "info", f"Bank snapshot saved: {bank.name}",
                   action="save_snapshot", resource="bank",
                   extra={"customers": len(snapshot["customers"]),
                          "accounts": len(snapshot["accounts"])})

    def load(self, clock: Clock = utc_now) -> Optional[Bank]:
        """Rebuild the stored bank, or None if nothing was saved"""
        meta = self.storage.load(self.META_TABLE, self.META_ID)
        if meta is None:
            return None

        version = meta.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")

        bank = restore_bank({
            "version": version,
            "bank": {"name": meta["name"], "counters": meta.get("counters", {})},
            "customers": self.storage.load_all(self.CUSTOMERS_TABLE),
            "accounts": self.storage.load_all(self.ACCOUNTS_TABLE),
        }, clock=clock)

        log_action(logger, "info", f"Bank snapshot loaded: {bank.name}",
                   action="load_snapshot", resource="bank",
                   extra={"accounts": len(bank.all_accounts())})
        return bank

    def exists(self) -> bool:
        return self.storage.load(self.META_TABLE, self.META_ID) is not None
