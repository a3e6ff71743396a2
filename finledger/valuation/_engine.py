"""Per-position valuation and concurrent portfolio fan-out."""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from collections.abc import AsyncIterator, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import pandas as pd

from finledger.classification import AssetClass
from finledger.domain.protocols import FundamentalsLookup, PriceLookup
from finledger.positions import Position, ReconstructionResult
from finledger.valuation._config import (
    FundamentalsBundle,
    ValuationConfig,
    ValuationModel,
    ValuationResult,
)
from finledger.valuation._models import (
    dividend_yield_value,
    earnings_multiple_value,
    gordon_growth_value,
    graham_number,
    margin_of_safety,
    recommend,
)

logger = logging.getLogger(__name__)

FundamentalsSource = Union[
    Mapping[str, Union[FundamentalsBundle, Mapping[str, Any], None]],
    FundamentalsLookup,
    None,
]


def _as_bundle(raw: Any) -> FundamentalsBundle | None:
    if raw is None or isinstance(raw, FundamentalsBundle):
        return raw
    if isinstance(raw, Mapping):
        return FundamentalsBundle.from_mapping(raw)
    msg = f"unsupported fundamentals type {type(raw).__name__}"
    raise TypeError(msg)


def _class_model(
    price: float,
    fundamentals: FundamentalsBundle | None,
    asset_class: AssetClass,
    config: ValuationConfig,
) -> tuple[float | None, ValuationModel]:
    if asset_class is AssetClass.INDEX_FUND:
        return price, ValuationModel.PASS_THROUGH

    if asset_class is AssetClass.INCOME_TRUST:
        if config.income_trust_model is ValuationModel.GORDON_GROWTH:
            dividend = fundamentals.annual_dividend(price) if fundamentals else None
            if dividend is None:
                return None, ValuationModel.GORDON_GROWTH
            growth = fundamentals.growth_rate
            discount = fundamentals.discount_rate
            return (
                gordon_growth_value(
                    dividend,
                    config.growth_rate if growth is None else growth,
                    config.discount_rate if discount is None else discount,
                ),
                ValuationModel.GORDON_GROWTH,
            )
        trailing = fundamentals.trailing_yield(price) if fundamentals else None
        if trailing is None:
            return None, ValuationModel.DIVIDEND_YIELD
        return (
            dividend_yield_value(price, trailing, config.target_yield),
            ValuationModel.DIVIDEND_YIELD,
        )

    if fundamentals is None or fundamentals.eps is None:
        return None, ValuationModel.GRAHAM
    bvps = fundamentals.book_value_per_share(price)
    if bvps is None:
        return None, ValuationModel.GRAHAM
    return (
        graham_number(fundamentals.eps, bvps, config.graham_multiplier),
        ValuationModel.GRAHAM,
    )


def valuate_price(
    ticker: str,
    price: float | None,
    fundamentals: FundamentalsBundle | Mapping[str, Any] | None,
    asset_class: AssetClass,
    config: ValuationConfig | None = None,
) -> ValuationResult | None:
    """Estimate fair value for one ticker at a known price.

    Parameters
    ----------
    ticker : str
        Ticker symbol.
    price : float or None
        Current price.  ``None`` or a non-finite price yields no result.
    fundamentals : FundamentalsBundle, mapping or None
        Per-share fundamentals.  Index funds need none.
    asset_class : AssetClass
        Selects the model: Graham for equities, yield-based (or Gordon)
        for income trusts, pass-through for index funds.
    config : ValuationConfig or None
        Valuation configuration.

    Returns
    -------
    ValuationResult or None
        ``None`` when the class is excluded or the required inputs are
        missing.
    """
    if config is None:
        config = ValuationConfig()

    if asset_class in config.excluded_classes:
        return None
    if price is None or not math.isfinite(price):
        return None

    bundle = _as_bundle(fundamentals)
    intrinsic, model = _class_model(price, bundle, asset_class, config)

    if (
        config.earnings_multiple is not None
        and (intrinsic is None or not math.isfinite(intrinsic) or intrinsic <= 0)
        and bundle is not None
        and bundle.eps is not None
        and bundle.eps > 0
    ):
        intrinsic = earnings_multiple_value(bundle.eps, config.earnings_multiple)
        model = ValuationModel.EARNINGS_MULTIPLE

    if intrinsic is None:
        logger.debug("No %s inputs for %s", model.value, ticker)
        return None

    margin = margin_of_safety(intrinsic, price)
    coerced = False
    if not (math.isfinite(intrinsic) and math.isfinite(margin)):
        logger.warning(
            "%s: %s produced a non-finite value; reporting HOLD", ticker, model.value
        )
        intrinsic = price
        margin = 0.0
        coerced = True

    return ValuationResult(
        ticker=ticker,
        current_price=price,
        intrinsic_value=intrinsic,
        margin_percent=margin,
        recommendation=recommend(
            margin, config.buy_threshold, config.sell_threshold
        ),
        model_used=model.value,
        asset_class=asset_class,
        coerced=coerced,
    )


async def valuate(
    position: Position,
    price_lookup: PriceLookup,
    fundamentals: FundamentalsBundle | Mapping[str, Any] | None,
    config: ValuationConfig | None = None,
) -> ValuationResult | None:
    """Look up the current price of a position and value it.

    Parameters
    ----------
    position : Position
        Holding to value; its ``asset_class`` selects the model.
    price_lookup : PriceLookup
        Async callable returning the current price or ``None``.
    fundamentals : FundamentalsBundle, mapping or None
        Per-share fundamentals of the position's ticker.
    config : ValuationConfig or None
        Valuation configuration.

    Returns
    -------
    ValuationResult or None
        ``None`` when the class is excluded, no price is available or
        the model inputs are missing.  Lookup errors propagate.
    """
    if config is None:
        config = ValuationConfig()
    if position.asset_class in config.excluded_classes:
        return None

    price = await price_lookup(position.ticker)
    if price is None:
        logger.warning("No price for %s; skipping valuation", position.ticker)
        return None
    return valuate_price(
        position.ticker, float(price), fundamentals, position.asset_class, config
    )


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


@dataclass
class ValuationReport:
    """Outcome of a portfolio valuation batch.

    Attributes
    ----------
    results : list[ValuationResult]
        Valued positions, in input order.
    skipped : list[str]
        Tickers with no result (excluded class, missing price or
        fundamentals, failed lookup).
    warnings : list[str]
        One message per failed lookup.
    """

    results: list[ValuationResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results) + len(self.skipped)

    @property
    def summary(self) -> str:
        return (
            f"{len(self.results)} of {self.total} positions valued; "
            f"{len(self.skipped)} skipped"
        )

    def get(self, ticker: str) -> ValuationResult | None:
        for result in self.results:
            if result.ticker == ticker:
                return result
        return None

    def to_frame(self) -> pd.DataFrame:
        """Results as a DataFrame indexed by ticker."""
        frame = pd.DataFrame(
            [r.to_dict() for r in self.results],
            columns=[
                "ticker",
                "current_price",
                "intrinsic_value",
                "margin_percent",
                "recommendation",
                "model_used",
                "asset_class",
                "coerced",
            ],
        )
        return frame.set_index("ticker")


def _positions(positions: ReconstructionResult | Iterable[Position]) -> list[Position]:
    if isinstance(positions, ReconstructionResult):
        return list(positions.positions)
    return list(positions)


async def _fundamentals_for(ticker: str, source: FundamentalsSource) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(ticker)
    found = source(ticker)
    if inspect.isawaitable(found):
        found = await found
    return found


async def _valuate_with_sources(
    position: Position,
    price_lookup: PriceLookup,
    fundamentals: FundamentalsSource,
    config: ValuationConfig,
) -> ValuationResult | None:
    if position.asset_class in config.excluded_classes:
        return None
    bundle = await _fundamentals_for(position.ticker, fundamentals)
    return await valuate(position, price_lookup, bundle, config)


async def valuate_portfolio(
    positions: ReconstructionResult | Iterable[Position],
    price_lookup: PriceLookup,
    fundamentals: FundamentalsSource = None,
    config: ValuationConfig | None = None,
) -> ValuationReport:
    """Value every position concurrently.

    One lookup per holding is issued and all are gathered before the
    report is built.  A failing or missing lookup skips that ticker
    only.

    Parameters
    ----------
    positions : ReconstructionResult or iterable of Position
        Holdings to value.
    price_lookup : PriceLookup
        Async callable returning the current price or ``None``.
    fundamentals : mapping or FundamentalsLookup, optional
        Fundamentals by ticker, or a (sync or async) callable returning
        them.
    config : ValuationConfig or None
        Valuation configuration.

    Returns
    -------
    ValuationReport
    """
    if config is None:
        config = ValuationConfig()

    holdings = _positions(positions)
    tasks = [
        _valuate_with_sources(p, price_lookup, fundamentals, config) for p in holdings
    ]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    report = ValuationReport()
    for position, outcome in zip(holdings, outcomes):
        if isinstance(outcome, Exception):
            msg = f"{position.ticker}: valuation failed: {outcome}"
            logger.warning(msg)
            report.warnings.append(msg)
            report.skipped.append(position.ticker)
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            report.skipped.append(position.ticker)
            continue
        report.results.append(outcome)

    logger.info("Valuation batch: %s", report.summary)
    return report


async def iter_valuations(
    positions: ReconstructionResult | Iterable[Position],
    price_lookup: PriceLookup,
    fundamentals: FundamentalsSource = None,
    config: ValuationConfig | None = None,
) -> AsyncIterator[ValuationResult]:
    """Yield valuation results as each ticker's lookup completes.

    Results arrive in completion order, not input order.  Tickers that
    cannot be valued are skipped; lookup failures are logged.
    """
    if config is None:
        config = ValuationConfig()

    async def _run(position: Position) -> tuple[Position, Any]:
        try:
            return position, await _valuate_with_sources(
                position, price_lookup, fundamentals, config
            )
        except Exception as exc:
            return position, exc

    tasks = [asyncio.create_task(_run(p)) for p in _positions(positions)]
    try:
        for completed in asyncio.as_completed(tasks):
            position, outcome = await completed
            if isinstance(outcome, Exception):
                logger.warning("%s: valuation failed: %s", position.ticker, outcome)
                continue
            if outcome is not None:
                yield outcome
    finally:
        # Consumer stopped early: drop the lookups still in flight.
        for task in tasks:
            if not task.done():
                task.cancel()
