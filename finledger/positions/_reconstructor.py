"""Weighted-average position reconstruction from a trade ledger."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import pandas as pd

from finledger.classification import AssetClass, classify_asset, classify_assets
from finledger.exceptions import ConfigurationError
from finledger.ledger import (
    AssetMeta,
    TradeEvent,
    TradeLedger,
    TradeSide,
    read_assets,
    read_trades,
)
from finledger.positions._config import OpeningHoldingPolicy, PositionConfig

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = [
    "ticker",
    "name",
    "asset_class",
    "currency",
    "quantity",
    "average_cost",
    "total_cost_basis",
    "current_price",
    "market_value",
    "gain_loss",
    "gain_loss_percent",
]


@dataclass(frozen=True)
class Position:
    """Current holding of a single ticker.

    Derived on every call and never persisted.  ``quantity`` is never
    negative and ``quantity * average_cost`` equals ``total_cost_basis``
    within float tolerance.

    Attributes
    ----------
    ticker : str
        Ticker symbol.
    quantity : float
        Units held.
    average_cost : float
        Weighted-average cost per unit, fees included.
    total_cost_basis : float
        Cost of the units still held.
    current_price : float or None
        Price used for market value.  ``None`` values the position at
        ``average_cost``.
    asset_class : AssetClass
        Class assigned by the classifier.
    name : str or None
        Display name from the asset record.
    currency : str
        Quote currency.
    """

    ticker: str
    quantity: float = 0.0
    average_cost: float = 0.0
    total_cost_basis: float = 0.0
    current_price: float | None = None
    asset_class: AssetClass = AssetClass.EQUITY
    name: str | None = None
    currency: str = "BRL"

    @property
    def is_open(self) -> bool:
        return self.quantity > 0.0

    @property
    def price(self) -> float:
        """``current_price``, falling back to ``average_cost``."""
        if self.current_price is None:
            return self.average_cost
        return self.current_price

    @property
    def market_value(self) -> float:
        return self.quantity * self.price

    @property
    def gain_loss(self) -> float:
        return self.market_value - self.total_cost_basis

    @property
    def gain_loss_percent(self) -> float:
        """Gain or loss relative to cost basis, 0 when the basis is 0."""
        if self.total_cost_basis <= 0.0:
            return 0.0
        return self.gain_loss / self.total_cost_basis * 100.0

    def with_price(self, price: float | None) -> Position:
        """Return a copy valued at ``price``."""
        return replace(self, current_price=price)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation, derived values included."""
        return {
            "ticker": self.ticker,
            "name": self.name,
            "asset_class": self.asset_class.value,
            "currency": self.currency,
            "quantity": self.quantity,
            "average_cost": self.average_cost,
            "total_cost_basis": self.total_cost_basis,
            "current_price": self.price,
            "market_value": self.market_value,
            "gain_loss": self.gain_loss,
            "gain_loss_percent": self.gain_loss_percent,
        }


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------


def fold_trades(
    events: Iterable[TradeEvent],
    opening: Position | None = None,
    ticker: str | None = None,
    warnings: list[str] | None = None,
    tolerance: float = 1e-9,
) -> Position:
    """Fold a single ticker's trades into a weighted-average position.

    Events are applied in ``(occurred_at, insertion_order)`` order:

    - BUY ``q @ p`` with fees ``f``: the cost basis grows by
      ``q * p + f`` and the average cost is recomputed.
    - SELL ``q``: the cost basis shrinks by ``q * average_cost``; the
      average cost is unchanged.

    Events whose side is not a ``TradeSide`` are ignored with a warning.
    A sell larger than the held quantity (beyond ``tolerance``) clamps
    the position to zero and records a warning.  A remaining quantity
    within ``tolerance`` of zero snaps to exactly zero.

    Parameters
    ----------
    events : iterable of TradeEvent
        Trades of one ticker.
    opening : Position or None
        Holding to start the fold from.
    ticker : str or None
        Ticker of the resulting position.  Defaults to the ticker of
        the first event (or of ``opening``).
    warnings : list[str] or None
        Receives one message per over-sell.
    tolerance : float
        Absolute quantity tolerance.

    Returns
    -------
    Position
        Position without price or classification.

    Raises
    ------
    ConfigurationError
        If the events span more than one ticker.
    """
    ordered = sorted(events, key=lambda e: e.sort_key)
    if ticker is None:
        if ordered:
            ticker = ordered[0].ticker
        elif opening is not None:
            ticker = opening.ticker
        else:
            ticker = ""
    foreign = {e.ticker for e in ordered} - {ticker}
    if foreign:
        msg = f"fold_trades folds a single ticker ({ticker!r}), got events for {sorted(foreign)}"
        raise ConfigurationError(msg)

    quantity = 0.0
    total = 0.0
    average = 0.0
    if opening is not None and opening.quantity > tolerance:
        quantity = opening.quantity
        average = opening.average_cost
        total = quantity * average

    for event in ordered:
        if event.side is TradeSide.BUY:
            total += event.gross_amount + event.fees
            quantity += event.quantity
            if quantity <= tolerance:
                quantity = total = average = 0.0
            else:
                average = total / quantity
            continue
        if event.side is not TradeSide.SELL:
            msg = (
                f"{ticker}: unknown trade side {event.side!r} "
                f"on {event.occurred_at}; event ignored"
            )
            logger.warning(msg)
            if warnings is not None:
                warnings.append(msg)
            continue

        remaining = quantity - event.quantity
        if remaining < -tolerance:
            msg = (
                f"{ticker}: sell of {event.quantity:g} on {event.occurred_at} "
                f"exceeds held quantity {quantity:g}; position clamped to zero"
            )
            logger.warning(msg)
            if warnings is not None:
                warnings.append(msg)
            quantity = total = average = 0.0
        elif remaining <= tolerance:
            quantity = total = average = 0.0
        else:
            total -= event.quantity * average
            quantity = remaining

    return Position(
        ticker=ticker,
        quantity=quantity,
        average_cost=average,
        total_cost_basis=total,
    )


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


@dataclass
class ReconstructionResult:
    """Open and closed positions with portfolio-level aggregates.

    Attributes
    ----------
    positions : list[Position]
        Open positions sorted by market value descending, then ticker.
    closed : list[Position]
        Zero-quantity positions kept for audit, sorted by ticker.
    warnings : list[str]
        Skipped-record and over-sell messages.
    skipped : int
        Number of trade records that could not be normalized.
    """

    positions: list[Position] = field(default_factory=list)
    closed: list[Position] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, ticker: object) -> bool:
        return self.get(str(ticker)) is not None

    def get(self, ticker: str) -> Position | None:
        """Open position of ``ticker``, or ``None``."""
        symbol = ticker.strip().upper()
        for position in self.positions:
            if position.ticker == symbol:
                return position
        return None

    @property
    def total_market_value(self) -> float:
        return sum(p.market_value for p in self.positions)

    @property
    def total_cost_basis(self) -> float:
        return sum(p.total_cost_basis for p in self.positions)

    @property
    def total_gain_loss(self) -> float:
        return self.total_market_value - self.total_cost_basis

    @property
    def total_gain_loss_percent(self) -> float:
        basis = self.total_cost_basis
        if basis <= 0.0:
            return 0.0
        return self.total_gain_loss / basis * 100.0

    def to_frame(self) -> pd.DataFrame:
        """Open positions as a DataFrame indexed by ticker."""
        frame = pd.DataFrame(
            [p.to_dict() for p in self.positions], columns=_FRAME_COLUMNS
        )
        return frame.set_index("ticker")

    def _totals_by(self, column: str) -> pd.DataFrame:
        frame = self.to_frame()
        grouped = frame.groupby(column).agg(
            market_value=("market_value", "sum"),
            cost_basis=("total_cost_basis", "sum"),
            gain_loss=("gain_loss", "sum"),
            count=("quantity", "size"),
        )
        cost = grouped["cost_basis"]
        grouped["gain_loss_percent"] = (
            (grouped["gain_loss"] / cost * 100.0).where(cost > 0.0, 0.0)
        )
        total = grouped["market_value"].sum()
        grouped["weight"] = (
            grouped["market_value"] / total * 100.0 if total > 0.0 else 0.0
        )
        return grouped.sort_values("market_value", ascending=False)

    def totals_by_asset_class(self) -> pd.DataFrame:
        """Market value, cost basis, gain/loss and count per asset class.

        Returns
        -------
        pd.DataFrame
            Indexed by asset class value, sorted by market value
            descending.  ``weight`` is the share of total market value
            in percent.
        """
        return self._totals_by("asset_class")

    def totals_by_currency(self) -> pd.DataFrame:
        """Same aggregates as :meth:`totals_by_asset_class`, per currency."""
        return self._totals_by("currency")


def _valid_price(value: Any) -> float | None:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0.0:
        return None
    return price


def reconstruct_positions(
    trades: TradeLedger | Iterable[Any],
    assets: Iterable[Any] | None = None,
    prices: Mapping[str, float] | None = None,
    config: PositionConfig | None = None,
) -> ReconstructionResult:
    """Rebuild current holdings from the trade ledger.

    Parameters
    ----------
    trades : TradeLedger or iterable of mapping or TradeEvent
        Trade history.  Raw records are normalized through
        :func:`~finledger.ledger.read_trades`.
    assets : iterable of mapping or AssetMeta, optional
        Asset records supplying names, currencies, explicit classes,
        last prices and pre-loaded holdings.
    prices : mapping of str to float, optional
        Current prices by ticker.  Missing or non-positive prices fall
        back to the asset's ``last_price``, then to the average cost.
    config : PositionConfig or None
        Reconstruction configuration.

    Returns
    -------
    ReconstructionResult
        Tickers with no trades and no pre-loaded holding are absent.
    """
    if config is None:
        config = PositionConfig()

    asset_list = read_assets(assets or (), config.ledger)
    assets_by_ticker: dict[str, AssetMeta] = {}
    for asset in asset_list:
        assets_by_ticker.setdefault(asset.ticker, asset)

    if isinstance(trades, TradeLedger):
        ledger = trades
    else:
        ledger = read_trades(trades, asset_list, config.ledger)

    warnings = list(ledger.warnings)
    classes = classify_assets(asset_list, config.classifier)
    quotes = {
        str(k).strip().upper(): v for k, v in (prices or {}).items()
    }

    grouped: dict[str, list[TradeEvent]] = {}
    for event in ledger.events:
        grouped.setdefault(event.ticker, []).append(event)

    policy = config.opening_holding_policy
    folded: dict[str, Position] = {}
    for ticker, events in grouped.items():
        opening = None
        asset = assets_by_ticker.get(ticker)
        if policy is OpeningHoldingPolicy.SEED and asset is not None:
            opening = _opening_position(asset)
        folded[ticker] = fold_trades(
            events, opening, ticker, warnings, config.tolerance
        )

    if policy is not OpeningHoldingPolicy.IGNORE:
        for ticker, asset in assets_by_ticker.items():
            if ticker not in folded and asset.quantity > config.tolerance:
                folded[ticker] = _opening_position(asset)

    open_positions: list[Position] = []
    closed: list[Position] = []
    for ticker, position in folded.items():
        asset = assets_by_ticker.get(ticker)
        price = _valid_price(quotes.get(ticker))
        if price is None and asset is not None:
            price = _valid_price(asset.last_price)
        if price is None:
            price = position.average_cost
        position = replace(
            position,
            current_price=price,
            asset_class=classes.get(ticker)
            or classify_asset(ticker, None, config.classifier),
            name=asset.name if asset is not None else None,
            currency=asset.currency if asset is not None else "BRL",
        )
        if position.is_open:
            open_positions.append(position)
        elif config.include_closed:
            closed.append(position)

    open_positions.sort(key=lambda p: (-p.market_value, p.ticker))
    closed.sort(key=lambda p: p.ticker)

    logger.info(
        "Reconstructed %d open positions (%d closed) from %d trades; %d skipped",
        len(open_positions),
        len(closed),
        len(ledger.events),
        ledger.skipped,
    )
    return ReconstructionResult(
        positions=open_positions,
        closed=closed,
        warnings=warnings,
        skipped=ledger.skipped,
    )


def _opening_position(asset: AssetMeta) -> Position | None:
    if asset.quantity <= 0.0:
        return None
    average = max(asset.average_price, 0.0)
    return Position(
        ticker=asset.ticker,
        quantity=asset.quantity,
        average_cost=average,
        total_cost_basis=asset.quantity * average,
    )
