"""Personal investment ledger derivations built on pandas.

Modules
-------
ledger
    Canonical trade, dividend, asset and cash records, and the
    normalization of heterogeneous raw records (mixed field names,
    locale-specific side and category spellings) into them.
positions
    Weighted-average position reconstruction from the trade ledger,
    with over-sell clamping, price fallbacks and portfolio totals.
dividends
    Dividend aggregation by ticker, year, month, asset class and
    category, trailing windows, income goals and yield on cost.
classification
    Deterministic asset classification from explicit metadata,
    configurable membership lists and ticker shape.
valuation
    Fair-value models (Graham number, dividend yield, Gordon growth,
    pass-through), margin of safety, BUY/HOLD/SELL signals and
    concurrent portfolio valuation.
cashflow
    Cash account balances from booked income and expenses.
domain
    Protocols for the price, fundamentals and record-store
    collaborators.
"""

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

logging.getLogger("finledger").addHandler(logging.NullHandler())

from finledger.dividends import aggregate_dividends
from finledger.exceptions import (
    ConfigurationError,
    DataError,
    FinLedgerError,
)
from finledger.positions import reconstruct_positions
from finledger.valuation import valuate, valuate_portfolio

__all__ = [
    "ConfigurationError",
    "DataError",
    "FinLedgerError",
    "aggregate_dividends",
    "reconstruct_positions",
    "valuate",
    "valuate_portfolio",
]

try:
    __version__ = _pkg_version("finledger")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
