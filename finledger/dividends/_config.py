"""Configuration for dividend aggregation and income goals."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from finledger.classification import ClassifierConfig
from finledger.exceptions import ConfigurationError
from finledger.ledger import LedgerConfig


@dataclass(frozen=True)
class DividendConfig:
    """Immutable configuration for dividend aggregation.

    Parameters
    ----------
    ledger : LedgerConfig
        Configuration used to normalize raw dividend records.
    classifier : ClassifierConfig
        Configuration used for tickers missing from the caller-supplied
        asset-class mapping.
    """

    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    @classmethod
    def for_explicit_classes(cls) -> DividendConfig:
        """Disable ticker-shape classification for unmapped tickers."""
        return cls(classifier=ClassifierConfig.for_explicit_only())


@dataclass(frozen=True)
class DividendGoals:
    """Yearly passive-income targets.

    Parameters
    ----------
    yearly : mapping of int to float
        Target income per calendar year.  The monthly target is one
        twelfth of the yearly one.  Years without an entry have a
        target of 0.
    """

    yearly: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for year, target in self.yearly.items():
            if not math.isfinite(target) or target < 0:
                msg = f"goal for {year} must be a finite number >= 0, got {target}"
                raise ConfigurationError(msg)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.yearly.items())))

    def yearly_goal(self, year: int) -> float:
        """Target for ``year`` (0 when unset)."""
        return float(self.yearly.get(year, 0.0))

    def monthly_goal(self, year: int) -> float:
        """Monthly target for ``year``: the yearly target divided by 12."""
        return self.yearly_goal(year) / 12.0

    @classmethod
    def for_growth(
        cls,
        start_year: int,
        start_amount: float,
        growth_rate: float,
        years: int,
    ) -> DividendGoals:
        """Targets compounding at ``growth_rate`` per year.

        Parameters
        ----------
        start_year : int
            First calendar year.
        start_amount : float
            Target for ``start_year``.
        growth_rate : float
            Year-over-year growth as a fraction (``0.10`` = 10%).
        years : int
            Number of years to generate, ``>= 1``.
        """
        if years < 1:
            msg = f"years must be >= 1, got {years}"
            raise ConfigurationError(msg)
        if growth_rate <= -1.0:
            msg = f"growth_rate must be > -1, got {growth_rate}"
            raise ConfigurationError(msg)
        return cls(
            yearly={
                start_year + i: round(start_amount * (1.0 + growth_rate) ** i, 2)
                for i in range(years)
            }
        )
