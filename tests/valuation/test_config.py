"""Tests for valuation configs and fundamentals parsing."""

from __future__ import annotations

import pytest

from finledger.classification import AssetClass
from finledger.exceptions import ConfigurationError
from finledger.valuation import (
    FundamentalsBundle,
    Recommendation,
    ValuationConfig,
    ValuationModel,
    ValuationResult,
)


class TestRecommendation:
    def test_members(self) -> None:
        assert set(Recommendation) == {
            Recommendation.BUY,
            Recommendation.HOLD,
            Recommendation.SELL,
        }

    def test_str_serialization(self) -> None:
        assert Recommendation.BUY.value == "buy"


class TestValuationConfig:
    def test_defaults(self) -> None:
        cfg = ValuationConfig()
        assert cfg.graham_multiplier == 22.5
        assert cfg.target_yield == 0.08
        assert cfg.buy_threshold == 15.0
        assert cfg.sell_threshold == -10.0
        assert cfg.income_trust_model == ValuationModel.DIVIDEND_YIELD
        assert cfg.earnings_multiple is None
        assert cfg.excluded_classes == (AssetClass.FIXED_INCOME,)

    def test_frozen(self) -> None:
        cfg = ValuationConfig()
        with pytest.raises(AttributeError):
            cfg.target_yield = 0.1  # type: ignore[misc]

    def test_is_hashable(self) -> None:
        assert hash(ValuationConfig()) == hash(ValuationConfig())

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"graham_multiplier": 0.0}, "graham_multiplier"),
            ({"target_yield": -0.01}, "target_yield"),
            ({"buy_threshold": -20.0}, "sell_threshold"),
            ({"income_trust_model": ValuationModel.GRAHAM}, "income_trust_model"),
            ({"earnings_multiple": 0.0}, "earnings_multiple"),
        ],
    )
    def test_invalid(self, kwargs: dict, match: str) -> None:
        with pytest.raises(ConfigurationError, match=match):
            ValuationConfig(**kwargs)

    def test_for_gordon_growth(self) -> None:
        cfg = ValuationConfig.for_gordon_growth(growth_rate=0.02, discount_rate=0.12)
        assert cfg.income_trust_model == ValuationModel.GORDON_GROWTH
        assert cfg.growth_rate == 0.02
        assert cfg.discount_rate == 0.12

    def test_for_earnings_fallback(self) -> None:
        assert ValuationConfig.for_earnings_fallback().earnings_multiple == 15.0


class TestFundamentalsBundle:
    def test_from_mapping_english(self) -> None:
        bundle = FundamentalsBundle.from_mapping(
            {"eps": 5.0, "bvps": 20.0, "dividend_yield": 0.1, "growth_rate": 0.02}
        )
        assert bundle == FundamentalsBundle(
            eps=5.0, bvps=20.0, dividend_yield=0.1, growth_rate=0.02
        )

    def test_from_mapping_quote_service(self) -> None:
        bundle = FundamentalsBundle.from_mapping({"lpa": "5", "vpa": 20, "dy": "10", "pvp": "2"})
        assert bundle.eps == 5.0
        assert bundle.bvps == 20.0
        assert bundle.dividend_yield == pytest.approx(0.10)
        assert bundle.price_to_book == 2.0

    def test_non_numeric_ignored(self) -> None:
        bundle = FundamentalsBundle.from_mapping({"eps": "n/a", "dy": None, "pvp": True})
        assert bundle == FundamentalsBundle()

    def test_decimal_comma(self) -> None:
        assert FundamentalsBundle.from_mapping({"eps": "2,5"}).eps == 2.5

    def test_book_value_from_price_to_book(self) -> None:
        bundle = FundamentalsBundle(price_to_book=2.0)
        assert bundle.book_value_per_share(40.0) == 20.0
        assert FundamentalsBundle(price_to_book=0.0).book_value_per_share(40.0) is None
        assert FundamentalsBundle(bvps=15.0, price_to_book=2.0).book_value_per_share(40.0) == 15.0

    def test_trailing_yield_from_dividend(self) -> None:
        assert FundamentalsBundle(dividend_per_share=10.0).trailing_yield(100.0) == 0.1
        assert FundamentalsBundle().trailing_yield(100.0) is None

    def test_annual_dividend_from_yield(self) -> None:
        assert FundamentalsBundle(dividend_yield=0.1).annual_dividend(100.0) == pytest.approx(10.0)


class TestValuationResult:
    def test_to_dict(self) -> None:
        result = ValuationResult(
            ticker="PETR4",
            current_price=40.0,
            intrinsic_value=47.43,
            margin_percent=18.58,
            recommendation=Recommendation.BUY,
            model_used="graham",
        )
        d = result.to_dict()
        assert d["recommendation"] == "buy"
        assert d["asset_class"] == "equity"
        assert d["coerced"] is False
