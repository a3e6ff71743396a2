"""Fair-value formulas and the margin-of-safety signal."""

from __future__ import annotations

import math

from finledger.valuation._config import Recommendation


def graham_number(eps: float, bvps: float, multiplier: float = 22.5) -> float:
    """Graham number ``sqrt(multiplier * eps * bvps)``.

    Parameters
    ----------
    eps : float
        Earnings per share.
    bvps : float
        Book value per share.
    multiplier : float
        Product of the maximum P/E and P/B Graham accepted (15 * 1.5).

    Returns
    -------
    float
        0 when either input is not positive.
    """
    if eps <= 0 or bvps <= 0:
        return 0.0
    return math.sqrt(multiplier * eps * bvps)


def dividend_yield_value(
    price: float, trailing_yield: float, target_yield: float = 0.08
) -> float:
    """Price at which the current distribution would yield ``target_yield``.

    Parameters
    ----------
    price : float
        Current price.
    trailing_yield : float
        Trailing dividend yield, fraction.
    target_yield : float
        Target yield, fraction.

    Returns
    -------
    float
        ``price * trailing_yield / target_yield``; ``inf`` when
        ``target_yield`` is 0.
    """
    if target_yield == 0:
        return math.inf
    return price * trailing_yield / target_yield


def gordon_growth_value(
    dividend: float, growth_rate: float, discount_rate: float
) -> float:
    """Gordon dividend-discount value ``d1 / (r - g)``.

    ``d1`` is next year's dividend, ``dividend * (1 + growth_rate)``.
    The model is undefined when ``discount_rate <= growth_rate`` and
    returns ``inf`` in that case.
    """
    spread = discount_rate - growth_rate
    if spread <= 0:
        return math.inf
    return dividend * (1.0 + growth_rate) / spread


def earnings_multiple_value(eps: float, multiple: float = 15.0) -> float:
    """``eps * multiple``, floored at 0."""
    return max(eps * multiple, 0.0)


def margin_of_safety(intrinsic_value: float, price: float) -> float:
    """Percentage by which ``intrinsic_value`` exceeds ``price``.

    Returns 0 when ``price <= 0``.  Non-finite inputs yield a non-finite
    margin.
    """
    if price <= 0:
        return 0.0
    return (intrinsic_value - price) / price * 100.0


def recommend(
    margin: float,
    buy_threshold: float = 15.0,
    sell_threshold: float = -10.0,
) -> Recommendation:
    """Map a margin (percent) to a recommendation.

    BUY strictly above ``buy_threshold``, SELL strictly below
    ``sell_threshold``, HOLD otherwise and for non-finite margins.
    """
    if not math.isfinite(margin):
        return Recommendation.HOLD
    if margin > buy_threshold:
        return Recommendation.BUY
    if margin < sell_threshold:
        return Recommendation.SELL
    return Recommendation.HOLD
