"""Ledger records and their normalization from raw storage rows."""

from finledger.ledger._config import (
    ASSET_FIELD_ALIASES,
    DIVIDEND_CATEGORY_SYNONYMS,
    DIVIDEND_FIELD_ALIASES,
    TRADE_FIELD_ALIASES,
    TRADE_SIDE_SYNONYMS,
    DividendCategory,
    LedgerConfig,
    TradeSide,
)
from finledger.ledger._events import (
    Account,
    AssetMeta,
    CashTransaction,
    DividendEvent,
    DividendLedger,
    TradeEvent,
    TradeLedger,
)
from finledger.ledger._reader import (
    parse_date,
    parse_number,
    read_accounts,
    read_assets,
    read_cash_transactions,
    read_dividends,
    read_trades,
)

__all__ = [
    "ASSET_FIELD_ALIASES",
    "DIVIDEND_CATEGORY_SYNONYMS",
    "DIVIDEND_FIELD_ALIASES",
    "TRADE_FIELD_ALIASES",
    "TRADE_SIDE_SYNONYMS",
    "Account",
    "AssetMeta",
    "CashTransaction",
    "DividendCategory",
    "DividendEvent",
    "DividendLedger",
    "LedgerConfig",
    "TradeEvent",
    "TradeLedger",
    "TradeSide",
    "parse_date",
    "parse_number",
    "read_accounts",
    "read_assets",
    "read_cash_transactions",
    "read_dividends",
    "read_trades",
]
