"""Cash account balances from booked transactions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd

from finledger.ledger import read_accounts, read_cash_transactions

logger = logging.getLogger(__name__)

INCOME_KINDS: frozenset[str] = frozenset({"RECEITA", "INCOME", "DEPOSITO"})
EXPENSE_KINDS: frozenset[str] = frozenset({"DESPESA", "EXPENSE", "SAQUE"})


def compute_account_balances(
    accounts: Iterable[Any],
    transactions: Iterable[Any],
) -> pd.Series:
    """Current balance of every account.

    Parameters
    ----------
    accounts : iterable of mapping or Account
        Accounts with their initial balances.
    transactions : iterable of mapping or CashTransaction
        Booked transactions.  Income kinds add to the balance, expense
        kinds subtract; transfers, unknown kinds and transactions for
        unknown accounts are ignored.

    Returns
    -------
    pd.Series
        Balance indexed by account id, in account order.
    """
    account_list = read_accounts(accounts)
    balances = pd.Series(
        [a.initial_balance for a in account_list],
        index=pd.Index([a.account_id for a in account_list], name="account_id"),
        dtype=float,
        name="balance",
    )
    # first record wins for duplicated ids
    balances = balances[~balances.index.duplicated(keep="first")]

    ignored = 0
    for tx in read_cash_transactions(transactions):
        if tx.account_id not in balances.index:
            ignored += 1
            continue
        if tx.kind in INCOME_KINDS:
            balances.loc[tx.account_id] += tx.value
        elif tx.kind in EXPENSE_KINDS:
            balances.loc[tx.account_id] -= tx.value

    if ignored:
        logger.info("Ignored %d transactions for unknown accounts", ignored)
    return balances
