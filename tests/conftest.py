"""Shared test fixtures for the finledger test suite."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date

import numpy as np
import pytest

from finledger.ledger import TradeEvent, TradeSide


@pytest.fixture()
def asset_records() -> list[dict]:
    """Asset rows as stored: mixed naming, one legacy pre-loaded holding."""
    return [
        {"id": "a1", "ticker": "PETR4", "name": "Petrobras PN", "type": "ACAO", "lastPrice": 38.5},
        {"id": "a2", "ticker": "HGLG11", "name": "CSHG Logistica", "type": "FII"},
        {"id": "a3", "ticker": "BOVA11", "name": "iShares Ibovespa"},
        {"id": "a4", "ticker": "TAEE11", "name": "Taesa"},
        {"id": "a5", "ticker": "ITSA4", "quantity": 300, "avg_price": 9.5},
        {"id": "a6", "ticker": "TESOURO-IPCA", "type": "RENDA FIXA", "currency": "brl"},
    ]


@pytest.fixture()
def trade_records() -> list[dict]:
    """Trade rows using snake_case, camelCase and Portuguese spellings."""
    return [
        {"id": "t1", "ticker": "PETR4", "type": "COMPRA", "quantity": 100, "price": 30.0, "fees": 5.0, "date": "2024-01-10"},
        {"id": "t2", "assetId": "a2", "side": "buy", "qty": 10, "unitPrice": "160,50", "date": "2024-02-01"},
        {"id": "t3", "ticker": "BOVA11", "type": "C", "quantidade": "20", "preco": "120", "data": "2024-02-15"},
        {"id": "t4", "ticker": "PETR4", "type": "VENDA", "quantity": 40, "price": 36.0, "date": "2024-03-01"},
        {"id": "t5", "ticker": "TAEE11", "type": "BUY", "quantity": 50, "price": 35.0, "trade_date": "2024-03-05"},
    ]


@pytest.fixture()
def dividend_records() -> list[dict]:
    """Dividend rows with aliases, categories and one re-ingested duplicate."""
    return [
        {"id": "d1", "ticker": "PETR4", "type": "DIVIDENDO", "total_value": 120.0, "payment_date": "2024-01-20"},
        {"id": "d2", "ticker": "HGLG11", "type": "RENDIMENTO", "totalValue": 11.0, "paymentDate": "2024-02-14"},
        {"id": "d2", "ticker": "HGLG11", "type": "RENDIMENTO", "totalValue": 11.0, "paymentDate": "2024-02-14"},
        {"id": "d3", "ticker": "PETR4", "type": "JCP", "amount": 45.5, "date": "2024-05-02"},
        {"id": "d4", "ticker": "HGLG11", "type": "REND", "value": 11.0, "paid_on": "2024-03-14"},
        {"id": "d5", "ticker": "TAEE11", "total_value": 30.0, "payment_date": "2023-11-30"},
    ]


@pytest.fixture()
def random_trades() -> list[TradeEvent]:
    """Random single-ticker trade stream: 60 events, seed 42, sells may over-sell."""
    rng = np.random.default_rng(42)
    events = []
    for i in range(60):
        side = TradeSide.BUY if rng.random() < 0.6 else TradeSide.SELL
        events.append(
            TradeEvent(
                ticker="RAND3",
                side=side,
                quantity=float(rng.integers(1, 200)),
                unit_price=float(np.round(rng.uniform(5.0, 50.0), 2)),
                fees=float(np.round(rng.uniform(0.0, 3.0), 2)),
                occurred_at=date(2024, 1 + i // 6, 1 + i % 6),
                insertion_order=i,
            )
        )
    return events


@pytest.fixture()
def make_price_lookup() -> Callable[..., Callable[[str], Awaitable[float | None]]]:
    """Build an async price lookup backed by a dict.

    Tickers mapped to an exception instance raise it when looked up.
    """

    def _factory(prices: dict) -> Callable[[str], Awaitable[float | None]]:
        async def _lookup(ticker: str) -> float | None:
            value = prices.get(ticker)
            if isinstance(value, Exception):
                raise value
            return value

        return _lookup

    return _factory
