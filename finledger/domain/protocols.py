"""
Collaborator Protocols - interfaces to the surrounding application.

The core never talks to storage or quote services directly. The
application passes objects satisfying these protocols (or plain
snapshots) into the entry points.

Design Principles:
- Read-only: the core never writes through these interfaces
- Snapshots are plain records (mappings or dataclasses)
- Price lookups are awaited and may run concurrently per ticker
"""

from typing import (
    Any,
    Awaitable,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)


@runtime_checkable
class PriceLookup(Protocol):
    """
    Async quote lookup.

    Implementations should:
    - Return the latest price for the ticker, or None when unknown
    - Handle their own retries and rate limiting
    """

    def __call__(self, ticker: str) -> Awaitable[Optional[float]]:
        """
        Fetch the current price of a ticker.

        Args:
            ticker: Upper-case ticker symbol

        Returns:
            Awaitable resolving to the price, or None
        """
        ...


@runtime_checkable
class FundamentalsLookup(Protocol):
    """
    Per-ticker fundamentals source (sync or async).

    The returned value is a FundamentalsBundle or a raw quote-service
    mapping with keys such as eps/lpa, bvps/vpa, pvp and dy.
    """

    def __call__(self, ticker: str) -> Union[Any, Awaitable[Any]]:
        """
        Fetch fundamentals for a ticker.

        Args:
            ticker: Upper-case ticker symbol

        Returns:
            Fundamentals (or an awaitable of them), or None when unknown
        """
        ...


@runtime_checkable
class RecordStore(Protocol):
    """
    Read-only snapshot access to one user's records.

    Implementations should:
    - Scope every query to the authenticated user
    - Return records in insertion order
    """

    def trades(self) -> Iterable[Mapping[str, Any]]:
        """Trade records (buys and sells)."""
        ...

    def dividends(self) -> Iterable[Mapping[str, Any]]:
        """Dividend, interest-on-equity and distribution records."""
        ...

    def assets(self) -> Iterable[Mapping[str, Any]]:
        """Asset records, including pre-loaded holdings and last prices."""
        ...

    def accounts(self) -> Iterable[Mapping[str, Any]]:
        """Cash account records."""
        ...

    def transactions(self) -> Iterable[Mapping[str, Any]]:
        """Cash transactions booked against accounts."""
        ...
