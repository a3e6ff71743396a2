"""Configuration and result types for the valuation engine."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from finledger.classification import AssetClass
from finledger.exceptions import ConfigurationError


class Recommendation(str, Enum):
    """Discrete signal derived from the margin of safety."""

    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"


class ValuationModel(str, Enum):
    """Fair-value model applied to a position."""

    GRAHAM = "graham"
    DIVIDEND_YIELD = "dividend_yield"
    GORDON_GROWTH = "gordon_growth"
    PASS_THROUGH = "pass_through"
    EARNINGS_MULTIPLE = "earnings_multiple"


_INCOME_TRUST_MODELS = (ValuationModel.DIVIDEND_YIELD, ValuationModel.GORDON_GROWTH)


@dataclass(frozen=True)
class ValuationConfig:
    """Immutable configuration for fair-value estimation.

    Parameters
    ----------
    graham_multiplier : float
        Constant under the Graham square root
        (``sqrt(multiplier * eps * bvps)``).
    target_yield : float
        Yield at which an income trust is considered fairly priced.
    buy_threshold : float
        Margin (percent) strictly above which the signal is BUY.
    sell_threshold : float
        Margin (percent) strictly below which the signal is SELL.
    income_trust_model : ValuationModel
        ``DIVIDEND_YIELD`` (price scaled by trailing yield over target
        yield) or ``GORDON_GROWTH`` (dividend-discount model).
    growth_rate : float
        Dividend growth assumed by the Gordon model when the
        fundamentals carry none.
    discount_rate : float
        Required return assumed by the Gordon model when the
        fundamentals carry none.
    earnings_multiple : float or None
        When set, a class model that yields no positive value falls
        back to ``eps * earnings_multiple``.
    excluded_classes : tuple[AssetClass, ...]
        Classes never valued.
    """

    graham_multiplier: float = 22.5
    target_yield: float = 0.08
    buy_threshold: float = 15.0
    sell_threshold: float = -10.0
    income_trust_model: ValuationModel = ValuationModel.DIVIDEND_YIELD
    growth_rate: float = 0.03
    discount_rate: float = 0.10
    earnings_multiple: float | None = None
    excluded_classes: tuple[AssetClass, ...] = (AssetClass.FIXED_INCOME,)

    def __post_init__(self) -> None:
        if self.graham_multiplier <= 0:
            msg = f"graham_multiplier must be > 0, got {self.graham_multiplier}"
            raise ConfigurationError(msg)
        if self.target_yield <= 0:
            msg = f"target_yield must be > 0, got {self.target_yield}"
            raise ConfigurationError(msg)
        if self.sell_threshold > self.buy_threshold:
            msg = (
                f"sell_threshold ({self.sell_threshold}) must not exceed "
                f"buy_threshold ({self.buy_threshold})"
            )
            raise ConfigurationError(msg)
        if self.income_trust_model not in _INCOME_TRUST_MODELS:
            msg = (
                f"income_trust_model must be one of "
                f"{[m.value for m in _INCOME_TRUST_MODELS]}, "
                f"got {self.income_trust_model!r}"
            )
            raise ConfigurationError(msg)
        if self.earnings_multiple is not None and self.earnings_multiple <= 0:
            msg = f"earnings_multiple must be > 0, got {self.earnings_multiple}"
            raise ConfigurationError(msg)

    @classmethod
    def for_gordon_growth(
        cls, growth_rate: float = 0.03, discount_rate: float = 0.10
    ) -> ValuationConfig:
        """Value income trusts with the dividend-discount model."""
        return cls(
            income_trust_model=ValuationModel.GORDON_GROWTH,
            growth_rate=growth_rate,
            discount_rate=discount_rate,
        )

    @classmethod
    def for_earnings_fallback(cls, multiple: float = 15.0) -> ValuationConfig:
        """Fall back to ``eps * multiple`` when the class model gives nothing."""
        return cls(earnings_multiple=multiple)


# ---------------------------------------------------------------------------
# Fundamentals
# ---------------------------------------------------------------------------

_EPS_KEYS = ("eps", "lpa", "earnings_per_share")
_BVPS_KEYS = ("bvps", "vpa", "book_value_per_share")
_PVP_KEYS = ("pvp", "p_vp", "price_to_book")
_DY_PERCENT_KEYS = ("dy", "dividend_yield_percent")
_DY_KEYS = ("dividend_yield", "trailing_yield")
_DPS_KEYS = ("dividend_per_share", "dps", "dpa")
_GROWTH_KEYS = ("growth_rate", "growth")
_DISCOUNT_KEYS = ("discount_rate", "discount")


def _number(raw: Mapping[str, Any], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        value = raw.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            number = float(str(value).replace(",", ".")) if isinstance(value, str) else float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number):
            return number
    return None


@dataclass(frozen=True)
class FundamentalsBundle:
    """Per-share fundamentals used by the valuation models.

    All fields are optional; a model whose inputs are missing yields no
    result.

    Parameters
    ----------
    eps : float or None
        Earnings per share.
    bvps : float or None
        Book value per share.
    price_to_book : float or None
        Price-to-book multiple, used to derive ``bvps`` from the price
        when ``bvps`` is absent.
    dividend_yield : float or None
        Trailing dividend yield as a fraction (``0.10`` = 10%).
    dividend_per_share : float or None
        Trailing twelve-month dividend per share.
    growth_rate : float or None
        Expected dividend growth, fraction.
    discount_rate : float or None
        Required return, fraction.
    """

    eps: float | None = None
    bvps: float | None = None
    price_to_book: float | None = None
    dividend_yield: float | None = None
    dividend_per_share: float | None = None
    growth_rate: float | None = None
    discount_rate: float | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> FundamentalsBundle:
        """Build a bundle from a quote-service payload.

        Recognises ``eps``/``lpa``, ``bvps``/``vpa``, ``pvp``, ``dy``
        (percent), ``dividend_yield`` (fraction), ``dividend_per_share``
        /``dpa`` and ``growth_rate``/``discount_rate``.  Non-numeric
        values are ignored.
        """
        dividend_yield = _number(raw, _DY_KEYS)
        if dividend_yield is None:
            percent = _number(raw, _DY_PERCENT_KEYS)
            dividend_yield = percent / 100.0 if percent is not None else None
        return cls(
            eps=_number(raw, _EPS_KEYS),
            bvps=_number(raw, _BVPS_KEYS),
            price_to_book=_number(raw, _PVP_KEYS),
            dividend_yield=dividend_yield,
            dividend_per_share=_number(raw, _DPS_KEYS),
            growth_rate=_number(raw, _GROWTH_KEYS),
            discount_rate=_number(raw, _DISCOUNT_KEYS),
        )

    def book_value_per_share(self, price: float) -> float | None:
        """``bvps``, or ``price / price_to_book`` when only the multiple is known."""
        if self.bvps is not None:
            return self.bvps
        if self.price_to_book is not None and self.price_to_book > 0 and price > 0:
            return price / self.price_to_book
        return None

    def trailing_yield(self, price: float) -> float | None:
        """``dividend_yield``, or ``dividend_per_share / price``."""
        if self.dividend_yield is not None:
            return self.dividend_yield
        if self.dividend_per_share is not None and price > 0:
            return self.dividend_per_share / price
        return None

    def annual_dividend(self, price: float) -> float | None:
        """``dividend_per_share``, or ``price * dividend_yield``."""
        if self.dividend_per_share is not None:
            return self.dividend_per_share
        if self.dividend_yield is not None:
            return price * self.dividend_yield
        return None


@dataclass(frozen=True)
class ValuationResult:
    """Fair-value estimate and signal for one ticker.

    ``intrinsic_value`` and ``margin_percent`` are always finite.
    ``coerced`` marks results whose model produced a non-finite value
    that was replaced by a neutral HOLD.
    """

    ticker: str
    current_price: float
    intrinsic_value: float
    margin_percent: float
    recommendation: Recommendation
    model_used: str
    asset_class: AssetClass = AssetClass.EQUITY
    coerced: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "ticker": self.ticker,
            "current_price": self.current_price,
            "intrinsic_value": self.intrinsic_value,
            "margin_percent": self.margin_percent,
            "recommendation": self.recommendation.value,
            "model_used": self.model_used,
            "asset_class": self.asset_class.value,
            "coerced": self.coerced,
        }
