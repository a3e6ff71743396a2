"""Position reconstruction from the trade ledger."""

from finledger.positions._config import OpeningHoldingPolicy, PositionConfig
from finledger.positions._reconstructor import (
    Position,
    ReconstructionResult,
    fold_trades,
    reconstruct_positions,
)

__all__ = [
    "OpeningHoldingPolicy",
    "Position",
    "PositionConfig",
    "ReconstructionResult",
    "fold_trades",
    "reconstruct_positions",
]
