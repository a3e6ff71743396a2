"""Asset classification from explicit metadata and ticker conventions."""

from finledger.classification._classifier import (
    classify_asset,
    classify_assets,
    normalize_ticker,
    parse_asset_class,
)
from finledger.classification._config import (
    ASSET_TYPE_SYNONYMS,
    AssetClass,
    ClassifierConfig,
)

__all__ = [
    "ASSET_TYPE_SYNONYMS",
    "AssetClass",
    "ClassifierConfig",
    "classify_asset",
    "classify_assets",
    "normalize_ticker",
    "parse_asset_class",
]
