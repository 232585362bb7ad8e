"""
Account Factory Module

Builds the right account variant with its configured defaults.
"""

from decimal import Decimal
from typing import Optional, Union

from .accounts import (
    Account, AccountType, CurrentAccount, FlatMonthlyInterest, OverdraftPolicy,
    SavingsAccount, parse_opening_balance
)
from .config import get_settings
from .customers import Customer
from .identity import ACCOUNT_PREFIX, IdentityAllocator
from .money import AmountLike
from .transactions import Clock, utc_now


class AccountFactory:
    """
    Maps an account type to its class and default policy parameters

    SAVINGS gets the default annual rate, CURRENT the default overdraft
    limit; both come from BankSettings unless given explicitly.
    """

    def __init__(
        self,
        ids: IdentityAllocator,
        clock: Clock = utc_now,
        savings_rate: Optional[Decimal] = None,
        overdraft_limit: Optional[Decimal] = None
    ):
        settings = get_settings()
        self.ids = ids
        self.clock = clock
        # Bad rates or limits fail here, before any ACC id is allocated
        self.savings_rate = FlatMonthlyInterest(
            settings.default_savings_rate if savings_rate is None else savings_rate
        ).annual_rate
        self.overdraft_limit = OverdraftPolicy(
            settings.default_overdraft_limit if overdraft_limit is None else overdraft_limit
        ).limit

    def create(
        self,
        account_type: Union[AccountType, str],
        owner: Customer,
        opening_balance: AmountLike = 0
    ) -> Account:
        """
        Create an account of the given type

        Raises:
            InvalidArgument: Unknown account type
            InvalidOpeningBalance: Opening balance below zero
        """
        kind = AccountType.parse(account_type)
        opening_balance = parse_opening_balance(opening_balance)

        if kind is AccountType.SAVINGS:
            return SavingsAccount(
                self.ids.next(ACCOUNT_PREFIX), owner, opening_balance,
                self.savings_rate, self.ids, self.clock
            )
        return CurrentAccount(
            self.ids.next(ACCOUNT_PREFIX), owner, opening_balance,
            self.overdraft_limit, self.ids, self.clock
        )

    def restore(self, data: dict, owner: Customer) -> Account:
        """Rebuild an account of the stored type from its snapshot"""
        kind = AccountType.parse(data["account_type"])
        cls = SavingsAccount if kind is AccountType.SAVINGS else CurrentAccount
        account = cls.from_dict(data, owner, self.ids, self.clock)
        self.ids.observe(account.id, ACCOUNT_PREFIX)
        return account
