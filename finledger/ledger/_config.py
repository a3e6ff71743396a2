"""Configuration for ledger normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from finledger.exceptions import ConfigurationError


class TradeSide(str, Enum):
    """Direction of a trade event."""

    BUY = "buy"
    SELL = "sell"


class DividendCategory(str, Enum):
    """Kind of income received from a holding."""

    DIVIDEND = "dividend"
    INTEREST_ON_EQUITY = "interest_on_equity"
    FUND_DISTRIBUTION = "fund_distribution"


# ---------------------------------------------------------------------------
# Synonym tables
# ---------------------------------------------------------------------------

TRADE_SIDE_SYNONYMS: dict[str, TradeSide] = {
    "BUY": TradeSide.BUY,
    "B": TradeSide.BUY,
    "COMPRA": TradeSide.BUY,
    "C": TradeSide.BUY,
    "COMPRAR": TradeSide.BUY,
    "SELL": TradeSide.SELL,
    "S": TradeSide.SELL,
    "VENDA": TradeSide.SELL,
    "V": TradeSide.SELL,
    "VENDER": TradeSide.SELL,
}

DIVIDEND_CATEGORY_SYNONYMS: dict[str, DividendCategory] = {
    "DIVIDEND": DividendCategory.DIVIDEND,
    "DIVIDENDO": DividendCategory.DIVIDEND,
    "DIVIDENDOS": DividendCategory.DIVIDEND,
    "DIV": DividendCategory.DIVIDEND,
    "INTEREST_ON_EQUITY": DividendCategory.INTEREST_ON_EQUITY,
    "JCP": DividendCategory.INTEREST_ON_EQUITY,
    "JUROS": DividendCategory.INTEREST_ON_EQUITY,
    "FUND_DISTRIBUTION": DividendCategory.FUND_DISTRIBUTION,
    "DISTRIBUTION": DividendCategory.FUND_DISTRIBUTION,
    "RENDIMENTO": DividendCategory.FUND_DISTRIBUTION,
    "RENDIMENTOS": DividendCategory.FUND_DISTRIBUTION,
    "REND": DividendCategory.FUND_DISTRIBUTION,
}

# Field aliases, checked in order; the first present, non-empty key wins
TRADE_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "event_id": ("id", "event_id", "trade_id"),
    "ticker": ("ticker", "symbol"),
    "asset_id": ("asset_id", "assetId"),
    "side": ("type", "side", "trade_type", "operation"),
    "quantity": ("quantity", "qty", "quantidade"),
    "unit_price": ("price", "unit_price", "unitPrice", "preco"),
    "fees": ("fees", "fee", "taxas", "costs"),
    "occurred_at": ("date", "occurred_at", "occurredAt", "trade_date", "data"),
    "insertion_order": ("insertion_order", "insertionOrder"),
}

DIVIDEND_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "event_id": ("id", "event_id", "dividend_id"),
    "ticker": ("ticker", "symbol"),
    "category": ("type", "category"),
    "amount": ("total_value", "totalValue", "amount", "value"),
    "paid_on": ("payment_date", "paymentDate", "paid_on", "paidOn", "date"),
}

ASSET_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "asset_id": ("id", "asset_id", "assetId"),
    "ticker": ("ticker", "symbol"),
    "name": ("name",),
    "asset_type": ("type", "asset_type", "assetType"),
    "sector": ("sector",),
    "currency": ("currency",),
    "quantity": ("quantity",),
    "average_price": ("avg_price", "avgPrice", "average_price"),
    "last_price": ("last_price", "lastPrice"),
}


@dataclass(frozen=True)
class LedgerConfig:
    """Immutable configuration for normalizing raw ledger records.

    Parameters
    ----------
    trade_sides : dict[str, TradeSide]
        Upper-cased side spellings mapped to the canonical side.
    dividend_categories : dict[str, DividendCategory]
        Upper-cased category spellings mapped to the canonical category.
    default_dividend_category : DividendCategory
        Category used when a dividend record has a missing or unknown
        category.
    allow_comma_decimal : bool
        Parse numeric strings written with a comma decimal separator
        (``"1.234,56"``).
    """

    trade_sides: dict[str, TradeSide] = field(
        default_factory=lambda: dict(TRADE_SIDE_SYNONYMS)
    )
    dividend_categories: dict[str, DividendCategory] = field(
        default_factory=lambda: dict(DIVIDEND_CATEGORY_SYNONYMS)
    )
    default_dividend_category: DividendCategory = DividendCategory.DIVIDEND
    allow_comma_decimal: bool = True

    def __post_init__(self) -> None:
        if not self.trade_sides:
            raise ConfigurationError("trade_sides must not be empty")
        missing = set(TradeSide) - set(self.trade_sides.values())
        if missing:
            msg = f"trade_sides has no spelling for {sorted(s.value for s in missing)}"
            raise ConfigurationError(msg)

    def __hash__(self) -> int:
        return hash(
            (
                tuple(sorted(self.trade_sides.items())),
                tuple(sorted(self.dividend_categories.items())),
                self.default_dividend_category,
                self.allow_comma_decimal,
            )
        )

    @classmethod
    def for_english_only(cls) -> LedgerConfig:
        """Accept only the English spellings of sides and categories."""
        return cls(
            trade_sides={
                "BUY": TradeSide.BUY,
                "SELL": TradeSide.SELL,
            },
            dividend_categories={
                c.name: c for c in DividendCategory
            },
            allow_comma_decimal=False,
        )
