"""
Bank Module

The Bank aggregate owns the customer and account repositories and the
identity allocator. It validates account opening against registered
customers, resolves account ids for presentation layers, and runs the
monthly interest batch.
"""

from decimal import Decimal
from typing import Optional, Tuple, Union

from .accounts import Account, AccountType, InterestBearing
from .customers import Customer
from .errors import BankingError, NotFound
from .factory import AccountFactory
from .identity import CUSTOMER_PREFIX, IdentityAllocator
from .logging_config import get_logger, log_action
from .money import AmountLike, ZERO, format_money
from .repository import Repository
from .transactions import Clock, Transaction, utc_now


class Bank:
    """
    Aggregate root for customers and accounts

    Accounts reference customers, customers never reference accounts.
    """

    def __init__(
        self,
        name: str,
        ids: Optional[IdentityAllocator] = None,
        clock: Clock = utc_now,
        factory: Optional[AccountFactory] = None
    ):
        if not name:
            raise ValueError("Bank name is required")
        self.name = name
        self.ids = ids or IdentityAllocator()
        self.clock = clock
        self.factory = factory or AccountFactory(self.ids, clock)
        self.customers: Repository[Customer] = Repository("customers")
        self.accounts: Repository[Account] = Repository("accounts")
        self.logger = get_logger("bank_ledger.bank")

    # Customers

    def create_customer(self, name: str, email: str) -> Customer:
        """Register a customer; no uniqueness constraint on name or email"""
        customer = Customer(
            id=self.ids.next(CUSTOMER_PREFIX),
            name=name,
            email=email,
            created_at=self.clock()
        )
        self.customers.save(customer)

        log_action(self.logger, "info", f"Customer created: {customer.id}",
                   action="create_customer", resource=f"customer:{customer.id}")
        return customer

    def find_customer(self, customer_id: str) -> Optional[Customer]:
        return self.customers.find(customer_id)

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.customers.find(customer_id)
        if customer is None:
            raise NotFound("customer", customer_id)
        return customer

    def all_customers(self) -> Tuple[Customer, ...]:
        return self.customers.all()

    # Accounts

    def open_account(
        self,
        account_type: Union[AccountType, str],
        customer_id: str,
        opening_balance: AmountLike = 0
    ) -> Account:
        """
        Open an account for a registered customer

        The customer is resolved before anything is allocated, so a failed
        lookup consumes no account id.

        Raises:
            NotFound: Unknown customer
            InvalidArgument: Unknown account type
            InvalidOpeningBalance: Opening balance below zero
        """
        try:
            customer = self.get_customer(customer_id)
            account = self.factory.create(account_type, customer, opening_balance)
        except BankingError as e:
            self._log_rejection("open_account", f"customer:{customer_id}", e)
            raise
        self.accounts.save(account)

        log_action(self.logger, "info", f"Account opened: {account.id}",
                   action="open_account", resource=f"account:{account.id}",
                   extra={"customer_id": customer.id,
                          "account_type": account.account_type.value,
                          "opening_balance": str(account.balance)})
        return account

    def find_account(self, account_id: str) -> Optional[Account]:
        return self.accounts.find(account_id)

    def get_account(self, account_id: str) -> Account:
        account = self.accounts.find(account_id)
        if account is None:
            raise NotFound("account", account_id)
        return account

    def all_accounts(self) -> Tuple[Account, ...]:
        return self.accounts.all()

    # Money movement by account id

    def deposit(self, account_id: str, amount: AmountLike) -> Transaction:
        return self._run("deposit", account_id, lambda a: a.deposit(amount))

    def withdraw(self, account_id: str, amount: AmountLike) -> Transaction:
        return self._run("withdraw", account_id, lambda a: a.withdraw(amount))

    def transfer(
        self,
        source_id: str,
        target_id: str,
        amount: AmountLike
    ) -> Tuple[Transaction, Transaction]:
        """
        Transfer between two accounts of this bank

        Raises:
            NotFound: Either account id is unknown
            SelfTransferError: source_id == target_id
            ValidationError: amount <= 0
            InsufficientFunds: Source policy rejects the debit
        """
        def run(source: Account) -> Tuple[Transaction, Transaction]:
            return source.transfer_to(self.get_account(target_id), amount)

        return self._run("transfer", source_id, run)

    def history(self, account_id: str) -> Tuple[Transaction, ...]:
        return self.get_account(account_id).history()

    # Interest

    def apply_monthly_interest_to_all_savings(self) -> None:
        """Apply one month of interest to every interest-bearing account"""
        credited = 0
        total = ZERO
        for account in self.accounts.all():
            if isinstance(account, InterestBearing):
                interest = account.apply_monthly_interest()
                if interest != ZERO:
                    credited += 1
                    total += interest

        log_action(self.logger, "info", "Monthly interest applied",
                   action="apply_monthly_interest", resource="bank",
                   extra={"accounts_credited": credited, "total_interest": format_money(total)})

    def total_deposits(self) -> Decimal:
        """Sum of all account balances"""
        return sum((a.balance for a in self.accounts.all()), ZERO)

    def _run(self, action: str, account_id: str, operation):
        try:
            return operation(self.get_account(account_id))
        except BankingError as e:
            self._log_rejection(action, f"account:{account_id}", e)
            raise

    def _log_rejection(self, action: str, resource: str, error: BankingError) -> None:
        log_action(self.logger, "warning", f"{action} rejected: {error.message}",
                   action=action, resource=resource, extra={"error": error.kind.value})
