"""Dividend income aggregation, goal tracking and yield on cost."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

import pandas as pd

from finledger.classification import (
    AssetClass,
    classify_asset,
    normalize_ticker,
    parse_asset_class,
)
from finledger.dividends._config import DividendConfig, DividendGoals
from finledger.exceptions import ConfigurationError
from finledger.ledger import DividendEvent, DividendLedger, read_dividends

if TYPE_CHECKING:
    from finledger.positions import ReconstructionResult

logger = logging.getLogger(__name__)

_QUARTERS = ["Q1", "Q2", "Q3", "Q4"]
_SEMESTERS = ["S1", "S2"]


def _empty_series(index: pd.Index | None = None, name: str = "amount") -> pd.Series:
    return pd.Series(
        dtype=float, index=index if index is not None else pd.Index([]), name=name
    )


@dataclass
class DividendSummary:
    """Dividend totals along several dimensions.

    All series hold sums of ``amount`` over the deduplicated events.

    Attributes
    ----------
    events : list[DividendEvent]
        Deduplicated events in input order.
    by_ticker : pd.Series
        Indexed by ticker, sorted by amount descending.
    by_year : pd.Series
        Indexed by calendar year (int), ascending.
    by_month : pd.Series
        Indexed by monthly ``pd.Period``, ascending.  Only months with
        receipts appear.
    by_asset_class : pd.Series
        Indexed by ``AssetClass`` value.
    by_category : pd.Series
        Indexed by ``DividendCategory`` value.
    trailing : pd.Series
        Exactly ``window_months`` monthly buckets ending at the month of
        ``reference_date``, chronological and zero-filled.
    reference_date : date
        End of the trailing window.
    window_months : int
        Length of the trailing window.
    asset_classes : dict[str, AssetClass]
        Class used for each ticker.
    duplicates : int
        Events dropped because their identifier was already seen.
    warnings : list[str]
        Messages for records that could not be normalized.
    """

    events: list[DividendEvent]
    by_ticker: pd.Series
    by_year: pd.Series
    by_month: pd.Series
    by_asset_class: pd.Series
    by_category: pd.Series
    trailing: pd.Series
    reference_date: date
    window_months: int
    asset_classes: dict[str, AssetClass] = field(default_factory=dict)
    duplicates: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> float:
        return float(sum(e.amount for e in self.events))

    @property
    def trailing_total(self) -> float:
        return float(self.trailing.sum())

    @property
    def monthly_average(self) -> float:
        """Total divided by the number of months with receipts."""
        if len(self.by_month) == 0:
            return 0.0
        return self.total / len(self.by_month)

    def to_frame(self) -> pd.DataFrame:
        """Deduplicated events, one row each, with their asset class."""
        return _events_frame(self.events, self.asset_classes)


def _events_frame(
    events: list[DividendEvent], classes: Mapping[str, AssetClass]
) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "event_id": e.event_id,
                "ticker": e.ticker,
                "category": e.category.value,
                "asset_class": classes[e.ticker].value,
                "amount": e.amount,
                "paid_on": pd.Timestamp(e.paid_on),
            }
            for e in events
        ],
        columns=["event_id", "ticker", "category", "asset_class", "amount", "paid_on"],
    )
    frame["paid_on"] = pd.to_datetime(frame["paid_on"])
    frame["amount"] = frame["amount"].astype(float)
    frame["year"] = frame["paid_on"].dt.year
    frame["month"] = frame["paid_on"].dt.to_period("M")
    return frame


def _dedupe(events: Iterable[DividendEvent]) -> tuple[list[DividendEvent], int]:
    seen: set[str] = set()
    unique: list[DividendEvent] = []
    duplicates = 0
    for event in events:
        if event.event_id is not None:
            if event.event_id in seen:
                duplicates += 1
                continue
            seen.add(event.event_id)
        unique.append(event)
    return unique, duplicates


def aggregate_dividends(
    events: DividendLedger | Iterable[Any],
    reference_date: date | str,
    window_months: int = 12,
    asset_classes: Mapping[str, AssetClass | str] | None = None,
    config: DividendConfig | None = None,
) -> DividendSummary:
    """Aggregate dividend receipts by ticker, period, class and category.

    Parameters
    ----------
    events : DividendLedger or iterable of mapping or DividendEvent
        Dividend history.  Raw records are normalized through
        :func:`~finledger.ledger.read_dividends`.
    reference_date : date or str
        Last day of the trailing window.
    window_months : int
        Number of monthly buckets in the trailing window, ``>= 1``.
    asset_classes : mapping of str to AssetClass, optional
        Asset class per ticker.  Tickers missing from the mapping are
        classified from their symbol.
    config : DividendConfig or None
        Aggregation configuration.

    Returns
    -------
    DividendSummary

    Raises
    ------
    ConfigurationError
        If ``window_months`` is not a positive integer.
    """
    if config is None:
        config = DividendConfig()
    if isinstance(window_months, bool) or not isinstance(window_months, int):
        msg = f"window_months must be an integer, got {window_months!r}"
        raise ConfigurationError(msg)
    if window_months < 1:
        msg = f"window_months must be >= 1, got {window_months}"
        raise ConfigurationError(msg)

    try:
        reference = pd.Timestamp(reference_date)
    except (TypeError, ValueError) as exc:
        msg = f"invalid reference_date {reference_date!r}"
        raise ConfigurationError(msg) from exc
    if pd.isna(reference):
        msg = f"invalid reference_date {reference_date!r}"
        raise ConfigurationError(msg)
    end = reference.to_period("M")

    if isinstance(events, DividendLedger):
        ledger = events
    else:
        ledger = read_dividends(events, config.ledger)

    unique, duplicates = _dedupe(ledger.events)
    if duplicates:
        logger.info("Dropped %d duplicate dividend events", duplicates)

    explicit: dict[str, AssetClass] = {}
    for ticker, value in (asset_classes or {}).items():
        parsed = parse_asset_class(value)
        if parsed is not None:
            explicit[normalize_ticker(ticker)] = parsed
    classes = {
        e.ticker: explicit.get(e.ticker) or classify_asset(e.ticker, None, config.classifier)
        for e in unique
    }

    frame = _events_frame(unique, classes)
    months = pd.period_range(end=end, periods=window_months, freq="M")

    if frame.empty:
        by_ticker = _empty_series()
        by_year = _empty_series()
        by_month = _empty_series(pd.PeriodIndex([], freq="M"))
        by_asset_class = _empty_series()
        by_category = _empty_series()
        trailing = pd.Series(0.0, index=months, name="amount")
    else:
        by_ticker = (
            frame.groupby("ticker")["amount"].sum().sort_values(
                ascending=False, kind="stable"
            )
        )
        by_year = frame.groupby("year")["amount"].sum()
        by_month = frame.groupby("month")["amount"].sum()
        by_asset_class = frame.groupby("asset_class")["amount"].sum()
        by_category = frame.groupby("category")["amount"].sum()
        trailing = by_month.reindex(months, fill_value=0.0)

    summary = DividendSummary(
        events=unique,
        by_ticker=by_ticker,
        by_year=by_year,
        by_month=by_month,
        by_asset_class=by_asset_class,
        by_category=by_category,
        trailing=trailing,
        reference_date=reference.date(),
        window_months=window_months,
        asset_classes=classes,
        duplicates=duplicates,
        warnings=list(ledger.warnings),
    )
    logger.info(
        "Aggregated %d dividend events (%d duplicates, %d skipped): total %.2f",
        len(unique),
        duplicates,
        ledger.skipped,
        summary.total,
    )
    return summary


# ---------------------------------------------------------------------------
# Breakdowns and goals
# ---------------------------------------------------------------------------


def yearly_breakdown(summary: DividendSummary) -> pd.DataFrame:
    """Per-year totals split by quarter, semester and asset class.

    Parameters
    ----------
    summary : DividendSummary
        Aggregated dividends.

    Returns
    -------
    pd.DataFrame
        Indexed by year with columns ``total``, ``Q1``..``Q4``,
        ``S1``, ``S2`` and one column per asset class value.
    """
    class_columns = [c.value for c in AssetClass]
    columns = ["total", *_QUARTERS, *_SEMESTERS, *class_columns]
    frame = summary.to_frame()
    if frame.empty:
        return pd.DataFrame(columns=columns, dtype=float)

    frame["quarter"] = "Q" + frame["paid_on"].dt.quarter.astype(str)
    frame["semester"] = frame["paid_on"].dt.month.map(lambda m: "S1" if m <= 6 else "S2")

    def _pivot(column: str, labels: list[str]) -> pd.DataFrame:
        return frame.pivot_table(
            index="year", columns=column, values="amount", aggfunc="sum", fill_value=0.0
        ).reindex(columns=labels, fill_value=0.0)

    result = pd.concat(
        [
            frame.groupby("year")["amount"].sum().rename("total"),
            _pivot("quarter", _QUARTERS),
            _pivot("semester", _SEMESTERS),
            _pivot("asset_class", class_columns),
        ],
        axis=1,
    )
    result.columns.name = None
    return result[columns].astype(float)


def goal_progress(summary: DividendSummary, goals: DividendGoals) -> pd.DataFrame:
    """Yearly income against targets, with year-over-year growth.

    Parameters
    ----------
    summary : DividendSummary
        Aggregated dividends.
    goals : DividendGoals
        Yearly targets.

    Returns
    -------
    pd.DataFrame
        Indexed by each year with receipts.  Columns: ``total``,
        ``goal``, ``achievement_percent`` (0 when the goal is 0) and
        ``growth_percent`` against the previous calendar year (0 when
        that year had no income).
    """
    rows = []
    for year, total in summary.by_year.items():
        goal = goals.yearly_goal(int(year))
        previous = float(summary.by_year.get(year - 1, 0.0))
        rows.append(
            {
                "year": int(year),
                "total": float(total),
                "goal": goal,
                "achievement_percent": total / goal * 100.0 if goal > 0 else 0.0,
                "growth_percent": (
                    (total - previous) / previous * 100.0 if previous > 0 else 0.0
                ),
            }
        )
    frame = pd.DataFrame(
        rows,
        columns=["year", "total", "goal", "achievement_percent", "growth_percent"],
    )
    return frame.set_index("year")


def monthly_goal_progress(
    summary: DividendSummary, goals: DividendGoals
) -> pd.DataFrame:
    """Trailing-window monthly income against one twelfth of each yearly goal."""
    goal = pd.Series(
        [goals.monthly_goal(p.year) for p in summary.trailing.index],
        index=summary.trailing.index,
        dtype=float,
    )
    achievement = (summary.trailing / goal * 100.0).where(goal > 0.0, 0.0)
    return pd.DataFrame(
        {"total": summary.trailing, "goal": goal, "achievement_percent": achievement}
    )


def yield_on_cost(summary: DividendSummary, reconstruction: ReconstructionResult) -> float:
    """Total dividends as a percentage of the portfolio's cost basis.

    Returns 0 when the cost basis is 0.
    """
    basis = reconstruction.total_cost_basis
    if basis <= 0.0:
        return 0.0
    return summary.total / basis * 100.0
