"""Normalization of heterogeneous ledger records into canonical events.

Records arrive from the record store and from spreadsheet imports with
mixed naming conventions (``snake_case``, ``camelCase`` and Portuguese
column names) and locale-specific spellings for trade sides and income
categories.  Everything downstream of this module sees only the
canonical shapes defined in :mod:`finledger.ledger._events`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, is_dataclass, replace
from datetime import date, datetime
from typing import Any

import pandas as pd

from finledger.exceptions import DataError
from finledger.ledger._config import (
    ASSET_FIELD_ALIASES,
    DIVIDEND_FIELD_ALIASES,
    TRADE_FIELD_ALIASES,
    DividendCategory,
    LedgerConfig,
    TradeSide,
)
from finledger.ledger._events import (
    Account,
    AssetMeta,
    CashTransaction,
    DividendEvent,
    DividendLedger,
    TradeEvent,
    TradeLedger,
)

logger = logging.getLogger(__name__)

_MISSING = object()


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _pick(record: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    """Return the first present, non-empty value among ``aliases``."""
    for key in aliases:
        value = record.get(key, _MISSING)
        if value is _MISSING or value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return _MISSING


def _as_mapping(record: Any) -> Mapping[str, Any]:
    if isinstance(record, Mapping):
        return record
    if is_dataclass(record) and not isinstance(record, type):
        return asdict(record)
    msg = f"unsupported record type {type(record).__name__}"
    raise DataError(msg)


def parse_number(value: Any, allow_comma_decimal: bool = True) -> float:
    """Parse a numeric field.

    Parameters
    ----------
    value : int, float, str
        Raw value.  Strings may use a comma decimal separator with dot
        thousands separators (``"1.234,56"``) when
        ``allow_comma_decimal`` is set.
    allow_comma_decimal : bool
        Accept the comma-decimal locale form.

    Returns
    -------
    float

    Raises
    ------
    DataError
        If the value is missing, non-numeric or non-finite.
    """
    if value is _MISSING or value is None or isinstance(value, bool):
        raise DataError(f"expected a number, got {value!r}")
    if isinstance(value, str):
        text = value.strip().replace(" ", "")
        if allow_comma_decimal and "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            number = float(text)
        except ValueError as exc:
            raise DataError(f"expected a number, got {value!r}") from exc
    else:
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise DataError(f"expected a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise DataError(f"expected a finite number, got {value!r}")
    return number


def parse_date(value: Any) -> date:
    """Parse a date field from a ``date``, ``datetime``, timestamp or string.

    Raises
    ------
    DataError
        If the value is missing or not a recognisable date.
    """
    if value is _MISSING or value is None:
        raise DataError("missing date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise DataError(f"expected a date, got {value!r}") from exc
    if pd.isna(ts):
        raise DataError(f"expected a date, got {value!r}")
    return ts.date()


def _non_negative(
    record: Mapping[str, Any],
    aliases: tuple[str, ...],
    name: str,
    config: LedgerConfig,
    default: float | None = None,
) -> float:
    raw = _pick(record, aliases)
    if raw is _MISSING and default is not None:
        return default
    try:
        number = parse_number(raw, config.allow_comma_decimal)
    except DataError as exc:
        raise DataError(f"{name}: {exc}") from exc
    if number < 0:
        raise DataError(f"{name} must be >= 0, got {number}")
    return number


def _optional_str(value: Any) -> str | None:
    if value is _MISSING or value is None:
        return None
    return str(value)


def _ticker(value: Any) -> str:
    if value is _MISSING or value is None:
        raise DataError("missing ticker")
    symbol = str(value).strip().upper()
    if not symbol:
        raise DataError("missing ticker")
    return symbol


def _trade_side(value: Any, config: LedgerConfig) -> TradeSide:
    """Map a side spelling (or a ``TradeSide``) through ``config.trade_sides``."""
    side = None
    if value is not _MISSING and value is not None:
        key = value.name if isinstance(value, TradeSide) else str(value)
        side = config.trade_sides.get(key.strip().upper())
    if side is None:
        shown = None if value is _MISSING else value
        raise DataError(f"unknown trade side {shown!r}")
    return side


def _dividend_category(value: Any, config: LedgerConfig) -> DividendCategory:
    """Unknown or missing categories fall back to the configured default."""
    if value is _MISSING or value is None:
        return config.default_dividend_category
    key = value.name if isinstance(value, DividendCategory) else str(value)
    return config.dividend_categories.get(
        key.strip().upper(), config.default_dividend_category
    )


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


def _parse_asset(record: Mapping[str, Any], config: LedgerConfig) -> AssetMeta:
    ticker = _pick(record, ASSET_FIELD_ALIASES["ticker"])
    if ticker is _MISSING:
        raise DataError("missing ticker")

    def _number(key: str, default: float | None) -> float | None:
        raw = _pick(record, ASSET_FIELD_ALIASES[key])
        if raw is _MISSING:
            return default
        try:
            return parse_number(raw, config.allow_comma_decimal)
        except DataError:
            return default

    currency = _pick(record, ASSET_FIELD_ALIASES["currency"])
    last_price = _number("last_price", None)
    return AssetMeta(
        ticker=str(ticker).strip().upper(),
        asset_id=_optional_str(_pick(record, ASSET_FIELD_ALIASES["asset_id"])),
        name=_optional_str(_pick(record, ASSET_FIELD_ALIASES["name"])),
        asset_type=_optional_str(_pick(record, ASSET_FIELD_ALIASES["asset_type"])),
        sector=_optional_str(_pick(record, ASSET_FIELD_ALIASES["sector"])),
        currency=str(currency).upper() if currency is not _MISSING else "BRL",
        quantity=max(_number("quantity", 0.0) or 0.0, 0.0),
        average_price=max(_number("average_price", 0.0) or 0.0, 0.0),
        last_price=last_price if last_price is not None and last_price > 0 else None,
    )


def read_assets(
    records: Iterable[Any],
    config: LedgerConfig | None = None,
) -> list[AssetMeta]:
    """Normalize asset records.

    Records without a ticker are skipped with a warning.  Numeric
    fields that cannot be parsed fall back to their defaults.

    Parameters
    ----------
    records : iterable of mapping or AssetMeta
        Raw asset records.
    config : LedgerConfig or None
        Normalization configuration.

    Returns
    -------
    list[AssetMeta]
    """
    if config is None:
        config = LedgerConfig()

    assets: list[AssetMeta] = []
    for idx, record in enumerate(records):
        if isinstance(record, AssetMeta):
            assets.append(record)
            continue
        try:
            assets.append(_parse_asset(_as_mapping(record), config))
        except DataError as exc:
            logger.warning("Skipping asset record %d: %s", idx, exc)
    return assets


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------


def _parse_trade(
    record: Mapping[str, Any],
    position: int,
    tickers_by_asset_id: Mapping[str, str],
    config: LedgerConfig,
) -> TradeEvent:
    ticker = _pick(record, TRADE_FIELD_ALIASES["ticker"])
    if ticker is _MISSING:
        asset_id = _pick(record, TRADE_FIELD_ALIASES["asset_id"])
        if asset_id is _MISSING:
            raise DataError("missing ticker")
        ticker = tickers_by_asset_id.get(str(asset_id), _MISSING)
        if ticker is _MISSING:
            raise DataError(f"unknown asset_id {asset_id!r}")
    symbol = _ticker(ticker)

    side = _trade_side(_pick(record, TRADE_FIELD_ALIASES["side"]), config)

    quantity = _non_negative(record, TRADE_FIELD_ALIASES["quantity"], "quantity", config)
    unit_price = _non_negative(record, TRADE_FIELD_ALIASES["unit_price"], "unit_price", config)
    fees = _non_negative(record, TRADE_FIELD_ALIASES["fees"], "fees", config, default=0.0)
    occurred_at = parse_date(_pick(record, TRADE_FIELD_ALIASES["occurred_at"]))

    order_raw = _pick(record, TRADE_FIELD_ALIASES["insertion_order"])
    insertion_order = position
    if order_raw is not _MISSING:
        try:
            insertion_order = int(parse_number(order_raw, False))
        except DataError:
            insertion_order = position

    return TradeEvent(
        ticker=symbol,
        side=side,
        quantity=quantity,
        unit_price=unit_price,
        fees=fees,
        occurred_at=occurred_at,
        insertion_order=insertion_order,
        event_id=_optional_str(_pick(record, TRADE_FIELD_ALIASES["event_id"])),
    )


def _field_value(value: Any, name: str, config: LedgerConfig) -> float:
    return _non_negative({name: value}, (name,), name, config)


def _insertion_order(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataError(f"insertion_order must be an integer, got {value!r}")
    return value


def _validate_event(event: TradeEvent, config: LedgerConfig) -> TradeEvent:
    """Re-normalize a caller-built event the way raw records are normalized."""
    return replace(
        event,
        ticker=_ticker(event.ticker),
        side=_trade_side(event.side, config),
        quantity=_field_value(event.quantity, "quantity", config),
        unit_price=_field_value(event.unit_price, "unit_price", config),
        fees=_field_value(event.fees, "fees", config),
        occurred_at=parse_date(event.occurred_at),
        insertion_order=_insertion_order(event.insertion_order),
    )


def _validate_dividend(event: DividendEvent, config: LedgerConfig) -> DividendEvent:
    return replace(
        event,
        ticker=_ticker(event.ticker),
        category=_dividend_category(event.category, config),
        amount=_field_value(event.amount, "amount", config),
        paid_on=parse_date(event.paid_on),
    )


def read_trades(
    records: Iterable[Any],
    assets: Iterable[Any] | None = None,
    config: LedgerConfig | None = None,
) -> TradeLedger:
    """Normalize trade records into a canonical, ordered event stream.

    Parameters
    ----------
    records : iterable of mapping or TradeEvent
        Raw trade records in insertion order.  ``TradeEvent`` instances
        go through the same checks as raw records: the ticker is
        upper-cased, the side mapped through ``config.trade_sides`` and
        the numeric fields parsed.
    assets : iterable of mapping or AssetMeta, optional
        Asset records used to resolve ``asset_id`` references to
        tickers.
    config : LedgerConfig or None
        Normalization configuration.

    Returns
    -------
    TradeLedger
        Events sorted by ``(occurred_at, insertion_order)``, plus one
        warning per skipped record.
    """
    if config is None:
        config = LedgerConfig()

    tickers_by_asset_id = {
        a.asset_id: a.ticker
        for a in read_assets(assets or (), config)
        if a.asset_id is not None
    }

    ledger = TradeLedger()
    for position, record in enumerate(records):
        try:
            if isinstance(record, TradeEvent):
                event = _validate_event(record, config)
            else:
                event = _parse_trade(
                    _as_mapping(record), position, tickers_by_asset_id, config
                )
        except DataError as exc:
            msg = f"trade record {position} skipped: {exc}"
            logger.warning(msg)
            ledger.warnings.append(msg)
            ledger.skipped += 1
            continue
        ledger.events.append(event)

    ledger.events.sort(key=lambda e: e.sort_key)
    return ledger


# ---------------------------------------------------------------------------
# Dividends
# ---------------------------------------------------------------------------


def _parse_dividend(record: Mapping[str, Any], config: LedgerConfig) -> DividendEvent:
    category = _dividend_category(
        _pick(record, DIVIDEND_FIELD_ALIASES["category"]), config
    )

    return DividendEvent(
        ticker=_ticker(_pick(record, DIVIDEND_FIELD_ALIASES["ticker"])),
        category=category,
        amount=_non_negative(record, DIVIDEND_FIELD_ALIASES["amount"], "amount", config),
        paid_on=parse_date(_pick(record, DIVIDEND_FIELD_ALIASES["paid_on"])),
        event_id=_optional_str(_pick(record, DIVIDEND_FIELD_ALIASES["event_id"])),
    )


def read_dividends(
    records: Iterable[Any],
    config: LedgerConfig | None = None,
) -> DividendLedger:
    """Normalize dividend records.

    Missing or unknown categories map to
    ``config.default_dividend_category``.  Records without a ticker,
    amount or payment date, or with a negative amount, are skipped with
    a warning.

    Parameters
    ----------
    records : iterable of mapping or DividendEvent
        Raw dividend records.  ``DividendEvent`` instances get the same
        ticker, category and amount checks.
    config : LedgerConfig or None
        Normalization configuration.

    Returns
    -------
    DividendLedger
    """
    if config is None:
        config = LedgerConfig()

    ledger = DividendLedger()
    for idx, record in enumerate(records):
        try:
            if isinstance(record, DividendEvent):
                event = _validate_dividend(record, config)
            else:
                event = _parse_dividend(_as_mapping(record), config)
        except DataError as exc:
            msg = f"dividend record {idx} skipped: {exc}"
            logger.warning(msg)
            ledger.warnings.append(msg)
            ledger.skipped += 1
            continue
        ledger.events.append(event)
    return ledger


# ---------------------------------------------------------------------------
# Accounts and cash transactions
# ---------------------------------------------------------------------------


def read_accounts(
    records: Iterable[Any],
    config: LedgerConfig | None = None,
) -> list[Account]:
    """Normalize account records; records without an id are skipped."""
    if config is None:
        config = LedgerConfig()

    accounts: list[Account] = []
    for idx, record in enumerate(records):
        if isinstance(record, Account):
            accounts.append(record)
            continue
        try:
            mapping = _as_mapping(record)
        except DataError as exc:
            logger.warning("Skipping account record %d: %s", idx, exc)
            continue
        account_id = _pick(mapping, ("id", "account_id", "accountId"))
        if account_id is _MISSING:
            logger.warning("Skipping account record %d: missing id", idx)
            continue
        try:
            balance = parse_number(
                _pick(mapping, ("initial_balance", "initialBalance")),
                config.allow_comma_decimal,
            )
        except DataError:
            balance = 0.0
        accounts.append(
            Account(
                account_id=str(account_id),
                name=str(mapping.get("name") or ""),
                bank=str(mapping.get("bank") or ""),
                initial_balance=balance,
            )
        )
    return accounts


def read_cash_transactions(
    records: Iterable[Any],
    config: LedgerConfig | None = None,
) -> list[CashTransaction]:
    """Normalize cash transactions.

    Non-numeric values count as zero rather than rejecting the record.
    """
    if config is None:
        config = LedgerConfig()

    transactions: list[CashTransaction] = []
    for idx, record in enumerate(records):
        if isinstance(record, CashTransaction):
            transactions.append(record)
            continue
        try:
            mapping = _as_mapping(record)
        except DataError as exc:
            logger.warning("Skipping cash transaction %d: %s", idx, exc)
            continue
        try:
            value = parse_number(
                _pick(mapping, ("value", "amount")), config.allow_comma_decimal
            )
        except DataError:
            value = 0.0
        try:
            occurred_on: date | None = parse_date(_pick(mapping, ("date", "occurred_on")))
        except DataError:
            occurred_on = None
        kind = _pick(mapping, ("type", "kind"))
        transactions.append(
            CashTransaction(
                account_id=_optional_str(_pick(mapping, ("account_id", "accountId"))),
                kind="" if kind is _MISSING else str(kind).strip().upper(),
                value=value,
                occurred_on=occurred_on,
                description=str(mapping.get("description") or ""),
            )
        )
    return transactions
