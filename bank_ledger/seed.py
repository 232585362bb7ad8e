"""
Demo seed data so a fresh bank has something to look at.
"""

from typing import Dict

from .accounts import AccountType
from .bank import Bank
from .logging_config import get_logger


logger = get_logger("bank_ledger.seed")


def seed_demo_data(bank: Bank) -> Dict[str, object]:
    """
    Register two customers, open three accounts and run a few transactions

    Returns the created customers and accounts keyed by short names.
    """
    alice = bank.create_customer("Alice", "alice@example.com")
    bob = bank.create_customer("Bob", "bob@example.com")

    alice_savings = bank.open_account(AccountType.SAVINGS, alice.id, 25_000)
    alice_current = bank.open_account(AccountType.CURRENT, alice.id, 5_000)
    bob_savings = bank.open_account(AccountType.SAVINGS, bob.id, 15_000)

    alice_savings.deposit(2_000)
    alice_current.withdraw(1_000)
    alice_savings.transfer_to(bob_savings, 1_500)

    logger.info(f"Seeded {bank.name} with {len(bank.all_accounts())} accounts")

    return {
        "alice": alice,
        "bob": bob,
        "alice_savings": alice_savings,
        "alice_current": alice_current,
        "bob_savings": bob_savings,
    }
