"""
Domain Layer - protocols for the application's collaborators.

This layer contains:
- PriceLookup: async current-price source
- FundamentalsLookup: per-ticker fundamentals source
- RecordStore: read-only snapshots of the user's records

No storage or network dependencies allowed in this layer.
"""

from finledger.domain.protocols import FundamentalsLookup, PriceLookup, RecordStore

__all__ = [
    "FundamentalsLookup",
    "PriceLookup",
    "RecordStore",
]
