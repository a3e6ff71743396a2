"""Dividend aggregation, income goals and yield on cost."""

from finledger.dividends._aggregator import (
    DividendSummary,
    aggregate_dividends,
    goal_progress,
    monthly_goal_progress,
    yearly_breakdown,
    yield_on_cost,
)
from finledger.dividends._config import DividendConfig, DividendGoals

__all__ = [
    "DividendConfig",
    "DividendGoals",
    "DividendSummary",
    "aggregate_dividends",
    "goal_progress",
    "monthly_goal_progress",
    "yearly_breakdown",
    "yield_on_cost",
]
