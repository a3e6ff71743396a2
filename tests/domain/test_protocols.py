"""Tests for collaborator protocols."""

from __future__ import annotations

import asyncio

from finledger.domain import FundamentalsLookup, PriceLookup, RecordStore
from finledger.positions import reconstruct_positions
from finledger.valuation import valuate_portfolio


class InMemoryStore:
    """Record store backed by lists."""

    def __init__(self, trades: list[dict], assets: list[dict]) -> None:
        self._trades = trades
        self._assets = assets

    def trades(self) -> list[dict]:
        return self._trades

    def dividends(self) -> list[dict]:
        return []

    def assets(self) -> list[dict]:
        return self._assets

    def accounts(self) -> list[dict]:
        return []

    def transactions(self) -> list[dict]:
        return []


class TestProtocols:
    def test_async_function_is_price_lookup(self) -> None:
        async def lookup(ticker: str) -> float | None:
            return None

        assert isinstance(lookup, PriceLookup)

    def test_mapping_getter_is_fundamentals_lookup(self) -> None:
        assert isinstance({}.get, FundamentalsLookup)

    def test_record_store(self, trade_records: list[dict], asset_records: list[dict]) -> None:
        store = InMemoryStore(trade_records, asset_records)
        assert isinstance(store, RecordStore)
        assert not isinstance(object(), RecordStore)

    def test_store_snapshot_drives_pipeline(
        self, trade_records: list[dict], asset_records: list[dict]
    ) -> None:
        store = InMemoryStore(trade_records, asset_records)
        result = reconstruct_positions(store.trades(), store.assets())

        async def lookup(ticker: str) -> float | None:
            return {"BOVA11": 125.0}.get(ticker)

        report = asyncio.run(valuate_portfolio(result, lookup))
        assert report.summary == "1 of 5 positions valued; 4 skipped"
