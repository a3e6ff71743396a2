"""Canonical ledger records.

Every record here is immutable.  The ledger is append-only from the
library's point of view: corrections arrive as new events, never as
in-place edits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from finledger.ledger._config import DividendCategory, TradeSide


@dataclass(frozen=True)
class TradeEvent:
    """A single buy or sell of a security.

    Attributes
    ----------
    ticker : str
        Normalized (upper-case) ticker symbol.
    side : TradeSide
        Buy or sell.
    quantity : float
        Units traded, ``>= 0``.
    unit_price : float
        Price per unit, ``>= 0``.
    fees : float
        Brokerage and exchange fees, ``>= 0``.
    occurred_at : date
        Trade date.
    insertion_order : int
        Position of the record in the ledger.  Breaks ties between
        events sharing ``occurred_at``.
    event_id : str or None
        Persisted identifier, when known.
    """

    ticker: str
    side: TradeSide
    quantity: float
    unit_price: float
    fees: float
    occurred_at: date
    insertion_order: int = 0
    event_id: str | None = None

    @property
    def gross_amount(self) -> float:
        """``quantity * unit_price`` before fees."""
        return self.quantity * self.unit_price

    @property
    def sort_key(self) -> tuple[date, int]:
        """Fold ordering: trade date, then insertion order."""
        return (self.occurred_at, self.insertion_order)


@dataclass(frozen=True)
class DividendEvent:
    """A dividend, interest-on-equity or fund distribution receipt.

    Attributes
    ----------
    ticker : str
        Normalized ticker symbol.
    category : DividendCategory
        Kind of income.
    amount : float
        Total amount received, ``>= 0``.
    paid_on : date
        Payment date.
    event_id : str or None
        Persisted identifier.  Deduplication uses this identifier only;
        two payments with identical content but distinct identifiers
        are both counted.
    """

    ticker: str
    category: DividendCategory
    amount: float
    paid_on: date
    event_id: str | None = None


@dataclass(frozen=True)
class AssetMeta:
    """Asset record as kept by the record store.

    ``quantity`` and ``average_price`` describe a holding loaded before
    any trade was recorded (legacy import).
    """

    ticker: str
    asset_id: str | None = None
    name: str | None = None
    asset_type: str | None = None
    sector: str | None = None
    currency: str = "BRL"
    quantity: float = 0.0
    average_price: float = 0.0
    last_price: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "ticker": self.ticker,
            "asset_id": self.asset_id,
            "name": self.name,
            "asset_type": self.asset_type,
            "sector": self.sector,
            "currency": self.currency,
            "quantity": self.quantity,
            "average_price": self.average_price,
            "last_price": self.last_price,
        }


@dataclass(frozen=True)
class Account:
    """A cash account at a bank or broker."""

    account_id: str
    name: str = ""
    bank: str = ""
    initial_balance: float = 0.0


@dataclass(frozen=True)
class CashTransaction:
    """An income, expense or transfer booked against an account."""

    account_id: str | None
    kind: str
    value: float
    occurred_on: date | None = None
    description: str = ""


@dataclass
class TradeLedger:
    """Normalized trade events plus the records that were rejected.

    Attributes
    ----------
    events : list[TradeEvent]
        Valid events sorted by ``(occurred_at, insertion_order)``.
    warnings : list[str]
        One message per skipped record.
    skipped : int
        Number of records that could not be normalized.
    """

    events: list[TradeEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.events)

    def tickers(self) -> list[str]:
        """Distinct tickers, in first-seen order."""
        return list(dict.fromkeys(e.ticker for e in self.events))

    def for_ticker(self, ticker: str) -> list[TradeEvent]:
        """Events of a single ticker, in fold order."""
        return [e for e in self.events if e.ticker == ticker]


@dataclass
class DividendLedger:
    """Normalized dividend events plus rejected-record warnings."""

    events: list[DividendEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.events)
