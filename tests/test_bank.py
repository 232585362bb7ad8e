"""
Test suite for the Bank aggregate

End-to-end ledger scenarios: registration, account opening, money
movement by id, monthly interest and failure atomicity.
"""

import logging

import pytest
from decimal import Decimal

from bank_ledger.accounts import AccountType, CurrentAccount, SavingsAccount
from bank_ledger.bank import Bank
from bank_ledger.errors import (
    DomainError, ErrorKind, InsufficientFunds, InvalidArgument,
    InvalidOpeningBalance, NotFound, ValidationError, attempt
)
from bank_ledger.factory import AccountFactory
from bank_ledger.identity import ACCOUNT_PREFIX, IdentityAllocator
from bank_ledger.transactions import TransactionType


class TestCustomers:
    """Test customer registration"""

    def setup_method(self):
        self.bank = Bank("Test Bank")

    def test_create_customer(self):
        alice = self.bank.create_customer("Alice", "alice@example.com")
        bob = self.bank.create_customer("Bob", "bob@example.com")
        assert alice.id == "CUST00001"
        assert bob.id == "CUST00002"
        assert self.bank.all_customers() == (alice, bob)
        assert self.bank.get_customer("CUST00002") is bob

    def test_duplicates_allowed(self):
        first = self.bank.create_customer("Alice", "alice@example.com")
        second = self.bank.create_customer("Alice", "alice@example.com")
        assert first.id != second.id

    def test_unknown_customer(self):
        assert self.bank.find_customer("CUST00001") is None
        with pytest.raises(NotFound):
            self.bank.get_customer("CUST00001")

    def test_bank_name_required(self):
        with pytest.raises(ValueError):
            Bank("")


class TestOpenAccount:
    """Test account opening"""

    def setup_method(self):
        self.bank = Bank("Test Bank")
        self.alice = self.bank.create_customer("Alice", "alice@example.com")

    def test_open_savings(self):
        account = self.bank.open_account(AccountType.SAVINGS, self.alice.id, Decimal("25000"))
        assert isinstance(account, SavingsAccount)
        assert account.id == "ACC00001"
        assert account.owner is self.alice
        assert account.annual_rate == Decimal("0.06")
        assert self.bank.get_account("ACC00001") is account

    def test_open_current_by_name(self):
        account = self.bank.open_account("current", self.alice.id, 5000)
        assert isinstance(account, CurrentAccount)
        assert account.overdraft_limit == Decimal("10000")

    def test_unknown_customer_consumes_no_id(self):
        before = self.bank.ids.peek(ACCOUNT_PREFIX)
        with pytest.raises(NotFound):
            self.bank.open_account(AccountType.SAVINGS, "CUST99999", 100)
        assert self.bank.ids.peek(ACCOUNT_PREFIX) == before
        assert self.bank.all_accounts() == ()

    def test_unknown_type(self):
        with pytest.raises(InvalidArgument):
            self.bank.open_account("BROKERAGE", self.alice.id, 100)
        assert self.bank.ids.peek(ACCOUNT_PREFIX) == 0

    def test_negative_opening_balance(self):
        with pytest.raises(InvalidOpeningBalance):
            self.bank.open_account(AccountType.CURRENT, self.alice.id, Decimal("-1"))
        assert self.bank.ids.peek(ACCOUNT_PREFIX) == 0
        assert self.bank.all_accounts() == ()

    def test_accounts_in_opening_order(self):
        first = self.bank.open_account(AccountType.SAVINGS, self.alice.id)
        second = self.bank.open_account(AccountType.CURRENT, self.alice.id)
        assert self.bank.all_accounts() == (first, second)

    def test_custom_factory_defaults(self):
        ids = IdentityAllocator()
        factory = AccountFactory(ids, savings_rate=Decimal("0.12"),
                                 overdraft_limit=Decimal("500"))
        bank = Bank("Custom", ids=ids, factory=factory)
        customer = bank.create_customer("Carol", "carol@example.com")
        savings = bank.open_account(AccountType.SAVINGS, customer.id, 1000)
        current = bank.open_account(AccountType.CURRENT, customer.id)
        assert savings.calculate_monthly_interest() == Decimal("10.00")
        assert current.overdraft_limit == Decimal("500")

    @pytest.mark.parametrize("params", [
        {"savings_rate": Decimal("-0.01")},
        {"overdraft_limit": Decimal("-1")},
        {"overdraft_limit": "lots"},
    ])
    def test_invalid_factory_defaults(self, params):
        """Test bad defaults are refused when the factory is built"""
        ids = IdentityAllocator()
        with pytest.raises(ValidationError):
            AccountFactory(ids, **params)
        assert ids.peek(ACCOUNT_PREFIX) == 0

    def test_rejection_is_logged(self, caplog):
        caplog.set_level(logging.WARNING, logger="bank_ledger.bank")
        with pytest.raises(NotFound):
            self.bank.open_account(AccountType.SAVINGS, "CUST99999")
        assert any("open_account rejected" in r.getMessage() for r in caplog.records)


class TestLedgerScenarios:
    """Worked examples against a fresh bank"""

    def setup_method(self):
        self.bank = Bank("OOP National Bank")
        self.alice = self.bank.create_customer("Alice", "alice@example.com")
        self.bob = self.bank.create_customer("Bob", "bob@example.com")
        self.alice_savings = self.bank.open_account(AccountType.SAVINGS, self.alice.id, Decimal("25000"))
        self.alice_current = self.bank.open_account(AccountType.CURRENT, self.alice.id, Decimal("5000"))
        self.bob_savings = self.bank.open_account(AccountType.SAVINGS, self.bob.id, Decimal("15000"))

    def test_monthly_interest(self):
        """Test interest lands on savings accounts only"""
        self.bank.apply_monthly_interest_to_all_savings()
        assert self.alice_savings.balance == Decimal("25125.00")
        assert self.bob_savings.balance == Decimal("15075.00")
        assert self.alice_current.balance == Decimal("5000.00")
        assert self.alice_savings.history()[-1].transaction_type == TransactionType.INTEREST
        assert len(self.alice_current.history()) == 1

    def test_overdraft(self):
        self.bank.withdraw(self.alice_current.id, Decimal("14000"))
        assert self.alice_current.balance == Decimal("-9000.00")
        with pytest.raises(InsufficientFunds):
            self.bank.withdraw(self.alice_current.id, Decimal("1001"))
        assert self.alice_current.balance == Decimal("-9000.00")

    def test_transfer(self):
        debit, credit = self.bank.transfer(self.alice_savings.id, self.bob_savings.id, Decimal("1500"))
        assert self.alice_savings.balance == Decimal("23500.00")
        assert self.bob_savings.balance == Decimal("16500.00")
        assert debit.transaction_type == TransactionType.TRANSFER_OUT
        assert credit.transaction_type == TransactionType.TRANSFER_IN

    def test_self_transfer(self):
        with pytest.raises(DomainError):
            self.bank.transfer(self.alice_savings.id, self.alice_savings.id, Decimal("10"))
        assert self.alice_savings.balance == Decimal("25000.00")

    def test_transfer_unknown_target(self):
        with pytest.raises(NotFound):
            self.bank.transfer(self.alice_savings.id, "ACC99999", Decimal("10"))
        assert self.alice_savings.balance == Decimal("25000.00")
        assert len(self.alice_savings.history()) == 1

    def test_unknown_account(self):
        with pytest.raises(NotFound):
            self.bank.deposit("ACC99999", 10)
        with pytest.raises(NotFound):
            self.bank.history("ACC99999")

    def test_deposit_and_history(self):
        self.bank.deposit(self.alice_savings.id, Decimal("2000"))
        history = self.bank.history(self.alice_savings.id)
        assert [t.transaction_type for t in history] == [
            TransactionType.DEPOSIT, TransactionType.DEPOSIT
        ]
        assert self.alice_savings.balance == Decimal("27000.00")

    def test_invalid_amount(self):
        with pytest.raises(ValidationError):
            self.bank.deposit(self.alice_savings.id, Decimal("0"))

    def test_balance_matches_ledger(self):
        """Test the balance always equals the signed sum of the ledger"""
        self.bank.deposit(self.alice_savings.id, 2000)
        self.bank.withdraw(self.alice_current.id, 1000)
        self.bank.transfer(self.alice_savings.id, self.bob_savings.id, 1500)
        self.bank.apply_monthly_interest_to_all_savings()

        for account in self.bank.all_accounts():
            assert account.balance == sum((t.signed_amount for t in account.history()), Decimal("0"))

    def test_total_deposits(self):
        assert self.bank.total_deposits() == Decimal("45000.00")
        self.bank.transfer(self.alice_savings.id, self.bob_savings.id, 1500)
        assert self.bank.total_deposits() == Decimal("45000.00")

    def test_attempt_reports_kind(self):
        result = attempt(self.bank.withdraw, self.alice_savings.id, Decimal("999999"))
        assert not result.ok
        assert result.kind == ErrorKind.INSUFFICIENT_FUNDS
