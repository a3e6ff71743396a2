"""Deterministic asset classification."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from finledger.classification._config import (
    ASSET_TYPE_SYNONYMS,
    AssetClass,
    ClassifierConfig,
)

logger = logging.getLogger(__name__)


def normalize_ticker(ticker: object) -> str:
    """Upper-case and strip a ticker symbol (``None`` becomes ``""``)."""
    if ticker is None:
        return ""
    return str(ticker).strip().upper()


def parse_asset_class(value: object) -> AssetClass | None:
    """Map an explicit asset-type value to an :class:`AssetClass`.

    Parameters
    ----------
    value : AssetClass, str or None
        Explicit class from an asset record.  Strings are matched
        case-insensitively against the enum values and the synonym
        table.

    Returns
    -------
    AssetClass or None
        ``None`` when the value is missing or not recognised.
    """
    if value is None:
        return None
    if isinstance(value, AssetClass):
        return value
    key = str(value).strip().upper()
    if not key:
        return None
    try:
        return AssetClass(key.lower())
    except ValueError:
        return ASSET_TYPE_SYNONYMS.get(key)


def classify_asset(
    ticker: str,
    explicit: AssetClass | str | None = None,
    config: ClassifierConfig | None = None,
) -> AssetClass:
    """Classify a ticker into one of the four asset classes.

    Rules are evaluated in order and the first match wins:

    1. ``explicit``, when present and valid.
    2. Membership lists: index trackers, then unit equities.
    3. Shape heuristic: a ticker of ``income_trust_length`` characters
       ending in ``income_trust_suffix`` is an income trust.
    4. ``AssetClass.EQUITY``.

    Parameters
    ----------
    ticker : str
        Ticker symbol.
    explicit : AssetClass, str or None
        Explicit class metadata from the asset record.
    config : ClassifierConfig or None
        Classification configuration.  Defaults to B3 conventions.

    Returns
    -------
    AssetClass
    """
    if config is None:
        config = ClassifierConfig()

    parsed = parse_asset_class(explicit)
    if parsed is not None:
        return parsed
    if explicit is not None and str(explicit).strip():
        logger.debug("Ignoring unrecognised asset type %r for %s", explicit, ticker)

    symbol = normalize_ticker(ticker)

    if symbol in {normalize_ticker(t) for t in config.index_trackers}:
        return AssetClass.INDEX_FUND
    if symbol in {normalize_ticker(t) for t in config.unit_equities}:
        return AssetClass.EQUITY

    suffix = config.income_trust_suffix
    if (
        suffix
        and len(symbol) == config.income_trust_length
        and symbol.endswith(suffix)
    ):
        return AssetClass.INCOME_TRUST

    return AssetClass.EQUITY


def classify_assets(
    assets: Iterable[object],
    config: ClassifierConfig | None = None,
) -> dict[str, AssetClass]:
    """Classify every asset record by ticker.

    Parameters
    ----------
    assets : iterable of AssetMeta
        Asset records exposing ``ticker`` and ``asset_type``.
    config : ClassifierConfig or None
        Classification configuration.

    Returns
    -------
    dict[str, AssetClass]
        Mapping of normalized ticker to asset class.  When a ticker
        appears more than once, the first record wins.
    """
    classes: dict[str, AssetClass] = {}
    for asset in assets:
        symbol = normalize_ticker(getattr(asset, "ticker", None))
        if not symbol or symbol in classes:
            continue
        classes[symbol] = classify_asset(
            symbol, getattr(asset, "asset_type", None), config
        )
    return classes
