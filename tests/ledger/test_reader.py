"""Tests for ledger record normalization."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

import pandas as pd
import pytest

from finledger.exceptions import DataError
from finledger.ledger import (
    Account,
    AssetMeta,
    CashTransaction,
    DividendCategory,
    DividendEvent,
    LedgerConfig,
    TradeEvent,
    TradeSide,
    parse_date,
    parse_number,
    read_accounts,
    read_assets,
    read_cash_transactions,
    read_dividends,
    read_trades,
)


class TestParseNumber:
    def test_numeric_passthrough(self) -> None:
        assert parse_number(12) == 12.0
        assert parse_number(3.5) == 3.5

    def test_plain_string(self) -> None:
        assert parse_number(" 42.5 ") == 42.5

    def test_comma_decimal(self) -> None:
        assert parse_number("1.234,56") == pytest.approx(1234.56)
        assert parse_number("160,50") == pytest.approx(160.5)

    def test_comma_decimal_disabled(self) -> None:
        with pytest.raises(DataError):
            parse_number("160,50", allow_comma_decimal=False)

    @pytest.mark.parametrize("value", [None, "", "abc", True, float("nan"), "inf"])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(DataError):
            parse_number(value)


class TestParseDate:
    def test_date(self) -> None:
        assert parse_date(date(2024, 1, 10)) == date(2024, 1, 10)

    def test_datetime(self) -> None:
        assert parse_date(datetime(2024, 1, 10, 15, 30)) == date(2024, 1, 10)

    def test_timestamp(self) -> None:
        assert parse_date(pd.Timestamp("2024-01-10")) == date(2024, 1, 10)

    def test_iso_string(self) -> None:
        assert parse_date("2024-01-10") == date(2024, 1, 10)

    @pytest.mark.parametrize("value", [None, "not a date"])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(DataError):
            parse_date(value)


class TestReadAssets:
    def test_aliases(self, asset_records: list[dict]) -> None:
        assets = read_assets(asset_records)
        by_ticker = {a.ticker: a for a in assets}
        assert by_ticker["PETR4"].asset_id == "a1"
        assert by_ticker["PETR4"].asset_type == "ACAO"
        assert by_ticker["PETR4"].last_price == 38.5
        assert by_ticker["ITSA4"].quantity == 300.0
        assert by_ticker["ITSA4"].average_price == 9.5
        assert by_ticker["TESOURO-IPCA"].currency == "BRL"

    def test_lowercase_ticker_normalized(self) -> None:
        (asset,) = read_assets([{"ticker": " petr4 "}])
        assert asset.ticker == "PETR4"

    def test_non_positive_last_price_dropped(self) -> None:
        (asset,) = read_assets([{"ticker": "PETR4", "last_price": 0}])
        assert asset.last_price is None

    def test_missing_ticker_skipped(self) -> None:
        assert read_assets([{"id": "x", "name": "nameless"}]) == []

    def test_asset_meta_passthrough(self) -> None:
        meta = AssetMeta(ticker="VALE3")
        assert read_assets([meta]) == [meta]


class TestReadTrades:
    def test_aliases_and_resolution(
        self, trade_records: list[dict], asset_records: list[dict]
    ) -> None:
        ledger = read_trades(trade_records, asset_records)
        assert len(ledger) == 5
        assert ledger.skipped == 0
        hglg = ledger.for_ticker("HGLG11")
        assert len(hglg) == 1
        assert hglg[0].unit_price == pytest.approx(160.5)
        assert hglg[0].side is TradeSide.BUY
        bova = ledger.for_ticker("BOVA11")[0]
        assert bova.quantity == 20.0
        assert bova.occurred_at == date(2024, 2, 15)

    def test_side_synonyms(self, trade_records: list[dict], asset_records: list[dict]) -> None:
        ledger = read_trades(trade_records, asset_records)
        petr = ledger.for_ticker("PETR4")
        assert [e.side for e in petr] == [TradeSide.BUY, TradeSide.SELL]

    def test_sorted_by_date(self, trade_records: list[dict], asset_records: list[dict]) -> None:
        ledger = read_trades(list(reversed(trade_records)), asset_records)
        dates = [e.occurred_at for e in ledger.events]
        assert dates == sorted(dates)

    def test_ties_broken_by_insertion_order(self) -> None:
        records = [
            {"ticker": "PETR4", "type": "SELL", "quantity": 10, "price": 1, "date": "2024-01-01", "insertion_order": 2},
            {"ticker": "PETR4", "type": "BUY", "quantity": 10, "price": 1, "date": "2024-01-01", "insertionOrder": 1},
        ]
        ledger = read_trades(records)
        assert [e.side for e in ledger.events] == [TradeSide.BUY, TradeSide.SELL]

    def test_insertion_order_defaults_to_position(self) -> None:
        records = [
            {"ticker": "PETR4", "type": "BUY", "quantity": 1, "price": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "BUY", "quantity": 2, "price": 1, "date": "2024-01-01"},
        ]
        ledger = read_trades(records)
        assert [e.insertion_order for e in ledger.events] == [0, 1]

    def test_fees_default_to_zero(self) -> None:
        ledger = read_trades(
            [{"ticker": "PETR4", "type": "BUY", "quantity": 1, "price": 1, "date": "2024-01-01"}]
        )
        assert ledger.events[0].fees == 0.0

    @pytest.mark.parametrize(
        "record",
        [
            {"type": "BUY", "quantity": 1, "price": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "XPTO", "quantity": 1, "price": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "quantity": 1, "price": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "BUY", "quantity": -1, "price": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "BUY", "quantity": 1, "price": "abc", "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "BUY", "quantity": 1, "price": 1, "fees": -2, "date": "2024-01-01"},
            {"ticker": "PETR4", "type": "BUY", "quantity": 1, "price": 1},
            {"assetId": "unknown", "type": "BUY", "quantity": 1, "price": 1, "date": "2024-01-01"},
        ],
    )
    def test_malformed_record_skipped(self, record: dict) -> None:
        good = {"ticker": "VALE3", "type": "BUY", "quantity": 1, "price": 1, "date": "2024-01-01"}
        ledger = read_trades([record, good])
        assert len(ledger) == 1
        assert ledger.skipped == 1
        assert len(ledger.warnings) == 1
        assert "trade record 0" in ledger.warnings[0]

    def test_skip_logged_at_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="finledger"):
            read_trades([{"ticker": "PETR4", "type": "XPTO"}])
        assert any("skipped" in r.message for r in caplog.records)

    def test_unsupported_record_type_skipped(self) -> None:
        ledger = read_trades(["not a record"])
        assert len(ledger) == 0
        assert ledger.skipped == 1

    def test_trade_event_passthrough(self) -> None:
        event = TradeEvent(
            ticker="PETR4",
            side=TradeSide.BUY,
            quantity=10,
            unit_price=20,
            fees=0,
            occurred_at=date(2024, 1, 1),
        )
        assert read_trades([event]).events == [event]

    def test_invalid_trade_event_skipped(self) -> None:
        event = TradeEvent(
            ticker="PETR4",
            side=TradeSide.BUY,
            quantity=-10,
            unit_price=20,
            fees=0,
            occurred_at=date(2024, 1, 1),
        )
        ledger = read_trades([event])
        assert len(ledger) == 0
        assert ledger.skipped == 1

    def test_trade_event_normalized(self) -> None:
        event = TradeEvent(" petr4", "venda", "5", 20.0, 0, "2024-01-03")  # type: ignore[arg-type]
        normalized = read_trades([event]).events[0]
        assert normalized.ticker == "PETR4"
        assert normalized.side is TradeSide.SELL
        assert normalized.quantity == 5.0
        assert normalized.occurred_at == date(2024, 1, 3)

    @pytest.mark.parametrize(
        "changes",
        [
            {"side": "HOLD"},
            {"side": None},
            {"quantity": "abc"},
            {"unit_price": None},
            {"fees": float("nan")},
            {"ticker": "  "},
            {"occurred_at": "not a date"},
            {"insertion_order": "first"},
        ],
    )
    def test_malformed_trade_event_skipped(self, changes: dict) -> None:
        good = TradeEvent("PETR4", TradeSide.BUY, 10, 20, 0, date(2024, 1, 1))
        bad = replace(good, **changes)
        ledger = read_trades([good, bad])
        assert ledger.events == [good]
        assert ledger.skipped == 1
        assert ledger.warnings[0].startswith("trade record 1 skipped")

    def test_english_only_rejects_portuguese(self) -> None:
        records = [{"ticker": "PETR4", "type": "COMPRA", "quantity": 1, "price": 1, "date": "2024-01-01"}]
        ledger = read_trades(records, config=LedgerConfig.for_english_only())
        assert ledger.skipped == 1

    def test_tickers_first_seen_order(self, trade_records: list[dict], asset_records: list[dict]) -> None:
        ledger = read_trades(trade_records, asset_records)
        assert ledger.tickers() == ["PETR4", "HGLG11", "BOVA11", "TAEE11"]


class TestReadDividends:
    def test_aliases(self, dividend_records: list[dict]) -> None:
        ledger = read_dividends(dividend_records)
        assert len(ledger) == 6
        first = ledger.events[0]
        assert first.event_id == "d1"
        assert first.amount == 120.0
        assert first.paid_on == date(2024, 1, 20)

    def test_categories(self, dividend_records: list[dict]) -> None:
        ledger = read_dividends(dividend_records)
        categories = {e.event_id: e.category for e in ledger.events}
        assert categories["d1"] is DividendCategory.DIVIDEND
        assert categories["d2"] is DividendCategory.FUND_DISTRIBUTION
        assert categories["d3"] is DividendCategory.INTEREST_ON_EQUITY
        assert categories["d5"] is DividendCategory.DIVIDEND

    def test_unknown_category_defaults(self) -> None:
        ledger = read_dividends(
            [{"ticker": "PETR4", "type": "BONUS", "amount": 1, "date": "2024-01-01"}]
        )
        assert ledger.events[0].category is DividendCategory.DIVIDEND

    def test_zero_amount_is_valid(self) -> None:
        ledger = read_dividends([{"ticker": "PETR4", "amount": 0, "date": "2024-01-01"}])
        assert len(ledger) == 1

    @pytest.mark.parametrize(
        "record",
        [
            {"amount": 1, "date": "2024-01-01"},
            {"ticker": "PETR4", "date": "2024-01-01"},
            {"ticker": "PETR4", "amount": -1, "date": "2024-01-01"},
            {"ticker": "PETR4", "amount": 1},
        ],
    )
    def test_malformed_record_skipped(self, record: dict) -> None:
        ledger = read_dividends([record])
        assert len(ledger) == 0
        assert ledger.skipped == 1
        assert ledger.warnings

    def test_dividend_event_passthrough(self) -> None:
        event = DividendEvent("PETR4", DividendCategory.DIVIDEND, 10.0, date(2024, 1, 1), "d1")
        assert read_dividends([event]).events == [event]

    def test_dividend_event_normalized(self) -> None:
        event = DividendEvent("petr4", "JCP", "12,50", "2024-02-10", "d9")  # type: ignore[arg-type]
        normalized = read_dividends([event]).events[0]
        assert normalized.ticker == "PETR4"
        assert normalized.category is DividendCategory.INTEREST_ON_EQUITY
        assert normalized.amount == pytest.approx(12.5)
        assert normalized.paid_on == date(2024, 2, 10)

    def test_dividend_event_unknown_category_defaults(self) -> None:
        event = DividendEvent("PETR4", "BONUS", 1.0, date(2024, 1, 1))  # type: ignore[arg-type]
        assert read_dividends([event]).events[0].category is DividendCategory.DIVIDEND

    @pytest.mark.parametrize("amount", ["abc", -1.0, None, float("inf")])
    def test_malformed_dividend_event_skipped(self, amount: object) -> None:
        good = DividendEvent("PETR4", DividendCategory.DIVIDEND, 10.0, date(2024, 1, 1))
        bad = replace(good, amount=amount)
        ledger = read_dividends([good, bad])
        assert ledger.events == [good]
        assert ledger.skipped == 1


class TestReadCashRecords:
    def test_accounts(self) -> None:
        accounts = read_accounts(
            [
                {"id": "acc1", "name": "Checking", "bank": "Itau", "initial_balance": "1.000,00"},
                {"name": "no id"},
                Account(account_id="acc2"),
            ]
        )
        assert [a.account_id for a in accounts] == ["acc1", "acc2"]
        assert accounts[0].initial_balance == pytest.approx(1000.0)

    def test_transactions(self) -> None:
        (tx, bad) = read_cash_transactions(
            [
                {"account_id": "acc1", "type": "receita", "value": "250,00", "date": "2024-01-05"},
                {"accountId": "acc1", "type": "DESPESA", "value": "n/a"},
            ]
        )
        assert tx == CashTransaction("acc1", "RECEITA", 250.0, date(2024, 1, 5))
        assert bad.value == 0.0
        assert bad.occurred_on is None
