"""
Test suite for demo seed data
"""

from decimal import Decimal

from bank_ledger.bank import Bank
from bank_ledger.seed import seed_demo_data
from bank_ledger.transactions import TransactionType


class TestSeedDemoData:
    """Test the demo bank contents"""

    def setup_method(self):
        self.bank = Bank("Demo Bank")
        self.seeded = seed_demo_data(self.bank)

    def test_customers_and_accounts(self):
        assert [c.name for c in self.bank.all_customers()] == ["Alice", "Bob"]
        assert len(self.bank.all_accounts()) == 3

    def test_balances(self):
        """25000 + 2000 - 1500, 5000 - 1000, 15000 + 1500"""
        assert self.seeded["alice_savings"].balance == Decimal("25500.00")
        assert self.seeded["alice_current"].balance == Decimal("4000.00")
        assert self.seeded["bob_savings"].balance == Decimal("16500.00")

    def test_history(self):
        types = [t.transaction_type for t in self.seeded["alice_savings"].history()]
        assert types == [TransactionType.DEPOSIT, TransactionType.DEPOSIT,
                         TransactionType.TRANSFER_OUT]
