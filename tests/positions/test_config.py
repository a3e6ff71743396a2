"""Tests for position reconstruction configs."""

from __future__ import annotations

import pytest

from finledger.classification import ClassifierConfig
from finledger.exceptions import ConfigurationError
from finledger.positions import OpeningHoldingPolicy, PositionConfig


class TestOpeningHoldingPolicy:
    def test_members(self) -> None:
        assert set(OpeningHoldingPolicy) == {
            OpeningHoldingPolicy.FALLBACK,
            OpeningHoldingPolicy.SEED,
            OpeningHoldingPolicy.IGNORE,
        }

    def test_str_serialization(self) -> None:
        assert OpeningHoldingPolicy.FALLBACK.value == "fallback"


class TestPositionConfig:
    def test_defaults(self) -> None:
        cfg = PositionConfig()
        assert cfg.tolerance == 1e-9
        assert cfg.opening_holding_policy == OpeningHoldingPolicy.FALLBACK
        assert cfg.include_closed is True
        assert cfg.classifier == ClassifierConfig()

    def test_frozen(self) -> None:
        cfg = PositionConfig()
        with pytest.raises(AttributeError):
            cfg.tolerance = 0.1  # type: ignore[misc]

    def test_is_hashable(self) -> None:
        assert hash(PositionConfig()) == hash(PositionConfig())

    @pytest.mark.parametrize("tolerance", [-1e-9, 1.0, 5.0])
    def test_invalid_tolerance(self, tolerance: float) -> None:
        with pytest.raises(ConfigurationError, match="tolerance"):
            PositionConfig(tolerance=tolerance)

    def test_for_trades_only(self) -> None:
        cfg = PositionConfig.for_trades_only()
        assert cfg.opening_holding_policy == OpeningHoldingPolicy.IGNORE

    def test_for_seeded_history(self) -> None:
        cfg = PositionConfig.for_seeded_history()
        assert cfg.opening_holding_policy == OpeningHoldingPolicy.SEED
