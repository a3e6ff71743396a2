"""Cash account balances."""

from finledger.cashflow._balances import (
    EXPENSE_KINDS,
    INCOME_KINDS,
    compute_account_balances,
)

__all__ = [
    "EXPENSE_KINDS",
    "INCOME_KINDS",
    "compute_account_balances",
]
