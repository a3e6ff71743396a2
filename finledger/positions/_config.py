"""Configuration for position reconstruction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from finledger.classification import ClassifierConfig
from finledger.exceptions import ConfigurationError
from finledger.ledger import LedgerConfig


class OpeningHoldingPolicy(str, Enum):
    """How an asset's pre-loaded holding combines with its trade history.

    Asset records imported before any trade was recorded carry a
    quantity and average price of their own.
    """

    FALLBACK = "fallback"
    SEED = "seed"
    IGNORE = "ignore"


@dataclass(frozen=True)
class PositionConfig:
    """Immutable configuration for rebuilding holdings from trades.

    Parameters
    ----------
    tolerance : float
        Absolute quantity tolerance.  A remaining quantity within
        ``tolerance`` of zero after a sell snaps to exactly zero; a sell
        exceeding the held quantity by more than ``tolerance`` is an
        over-sell and clamps the position to zero.
    opening_holding_policy : OpeningHoldingPolicy
        ``FALLBACK`` uses the asset's pre-loaded holding only for tickers
        without valid trades.  ``SEED`` starts every fold from it.
        ``IGNORE`` derives positions from trades alone.
    include_closed : bool
        Keep zero-quantity positions in ``ReconstructionResult.closed``.
    classifier : ClassifierConfig
        Configuration used to assign each position its asset class.
    ledger : LedgerConfig
        Configuration used to normalize raw trade records.
    """

    tolerance: float = 1e-9
    opening_holding_policy: OpeningHoldingPolicy = OpeningHoldingPolicy.FALLBACK
    include_closed: bool = True
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)

    def __post_init__(self) -> None:
        if not 0.0 <= self.tolerance < 1.0:
            msg = f"tolerance must be in [0, 1), got {self.tolerance}"
            raise ConfigurationError(msg)

    @classmethod
    def for_trades_only(cls) -> PositionConfig:
        """Ignore pre-loaded holdings; positions come from trades alone."""
        return cls(opening_holding_policy=OpeningHoldingPolicy.IGNORE)

    @classmethod
    def for_seeded_history(cls) -> PositionConfig:
        """Treat pre-loaded holdings as the opening balance of every fold."""
        return cls(opening_holding_policy=OpeningHoldingPolicy.SEED)
