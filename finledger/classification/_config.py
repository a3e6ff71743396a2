"""Configuration for asset classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from finledger.exceptions import ConfigurationError


class AssetClass(str, Enum):
    """Asset class taxonomy.

    Selects the valuation model and the dividend-grouping bucket.
    """

    EQUITY = "equity"
    INCOME_TRUST = "income_trust"
    INDEX_FUND = "index_fund"
    FIXED_INCOME = "fixed_income"


# Raw asset-type spellings found on asset records
ASSET_TYPE_SYNONYMS: dict[str, AssetClass] = {
    "EQUITY": AssetClass.EQUITY,
    "STOCK": AssetClass.EQUITY,
    "ACAO": AssetClass.EQUITY,
    "AÇÃO": AssetClass.EQUITY,
    "ACOES": AssetClass.EQUITY,
    "AÇÕES": AssetClass.EQUITY,
    "INCOME_TRUST": AssetClass.INCOME_TRUST,
    "FII": AssetClass.INCOME_TRUST,
    "FUNDO IMOBILIARIO": AssetClass.INCOME_TRUST,
    "FUNDO IMOBILIÁRIO": AssetClass.INCOME_TRUST,
    "INDEX_FUND": AssetClass.INDEX_FUND,
    "ETF": AssetClass.INDEX_FUND,
    "FUNDO DE ÍNDICE": AssetClass.INDEX_FUND,
    "FUNDO DE INDICE": AssetClass.INDEX_FUND,
    "FIXED_INCOME": AssetClass.FIXED_INCOME,
    "RF": AssetClass.FIXED_INCOME,
    "RENDA FIXA": AssetClass.FIXED_INCOME,
    "RENDA_FIXA": AssetClass.FIXED_INCOME,
    "CDB": AssetClass.FIXED_INCOME,
    "LCI": AssetClass.FIXED_INCOME,
    "LCA": AssetClass.FIXED_INCOME,
    "TESOURO": AssetClass.FIXED_INCOME,
}

_B3_INDEX_TRACKERS: tuple[str, ...] = (
    "BOVA11",
    "IVVB11",
    "SMAL11",
    "HASH11",
    "QBTC11",
    "TFLO",
)

# Share units that look like income-trust tickers
_B3_UNIT_EQUITIES: tuple[str, ...] = (
    "TAEE11",
    "SAPR11",
    "ALUP11",
    "ENGI11",
    "SANB11",
    "BPAC11",
    "KLBN11",
)


@dataclass(frozen=True)
class ClassifierConfig:
    """Immutable configuration for ticker classification.

    The membership lists are checked before the ticker-shape heuristic,
    so a ticker listed here is never reclassified by its shape.

    Parameters
    ----------
    index_trackers : tuple[str, ...]
        Tickers always classified as ``AssetClass.INDEX_FUND``.
    unit_equities : tuple[str, ...]
        Tickers always classified as ``AssetClass.EQUITY`` even though
        their shape matches the income-trust heuristic.
    income_trust_suffix : str
        Ticker suffix that marks an income trust under the shape
        heuristic.  An empty string disables the heuristic.
    income_trust_length : int
        Exact ticker length required by the shape heuristic.
    """

    index_trackers: tuple[str, ...] = _B3_INDEX_TRACKERS
    unit_equities: tuple[str, ...] = _B3_UNIT_EQUITIES
    income_trust_suffix: str = "11"
    income_trust_length: int = 6

    def __post_init__(self) -> None:
        if self.income_trust_length < len(self.income_trust_suffix):
            msg = (
                f"income_trust_length ({self.income_trust_length}) must be "
                f">= len(income_trust_suffix) ({len(self.income_trust_suffix)})"
            )
            raise ConfigurationError(msg)
        overlap = {t.upper() for t in self.index_trackers} & {
            t.upper() for t in self.unit_equities
        }
        if overlap:
            msg = f"tickers listed as both index trackers and unit equities: {sorted(overlap)}"
            raise ConfigurationError(msg)

    @classmethod
    def for_b3(cls) -> ClassifierConfig:
        """Brazilian exchange conventions (default)."""
        return cls()

    @classmethod
    def for_explicit_only(cls) -> ClassifierConfig:
        """No membership lists and no shape heuristic.

        Unclassified tickers fall through to ``AssetClass.EQUITY``.
        """
        return cls(
            index_trackers=(),
            unit_equities=(),
            income_trust_suffix="",
            income_trust_length=0,
        )

    def with_index_trackers(self, *tickers: str) -> ClassifierConfig:
        """Return a copy with additional index-tracker tickers."""
        return ClassifierConfig(
            index_trackers=self.index_trackers + tuple(tickers),
            unit_equities=self.unit_equities,
            income_trust_suffix=self.income_trust_suffix,
            income_trust_length=self.income_trust_length,
        )

    def with_unit_equities(self, *tickers: str) -> ClassifierConfig:
        """Return a copy with additional unit-equity tickers."""
        return ClassifierConfig(
            index_trackers=self.index_trackers,
            unit_equities=self.unit_equities + tuple(tickers),
            income_trust_suffix=self.income_trust_suffix,
            income_trust_length=self.income_trust_length,
        )
