"""Fair-value estimation, margin of safety and BUY/HOLD/SELL signals."""

from finledger.valuation._config import (
    FundamentalsBundle,
    Recommendation,
    ValuationConfig,
    ValuationModel,
    ValuationResult,
)
from finledger.valuation._engine import (
    ValuationReport,
    iter_valuations,
    valuate,
    valuate_portfolio,
    valuate_price,
)
from finledger.valuation._models import (
    dividend_yield_value,
    earnings_multiple_value,
    gordon_growth_value,
    graham_number,
    margin_of_safety,
    recommend,
)

__all__ = [
    "FundamentalsBundle",
    "Recommendation",
    "ValuationConfig",
    "ValuationModel",
    "ValuationReport",
    "ValuationResult",
    "dividend_yield_value",
    "earnings_multiple_value",
    "gordon_growth_value",
    "graham_number",
    "iter_valuations",
    "margin_of_safety",
    "recommend",
    "valuate",
    "valuate_portfolio",
    "valuate_price",
]
