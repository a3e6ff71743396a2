"""Custom exception hierarchy for the finledger library."""


class FinLedgerError(Exception):
    """Base exception for all finledger library errors."""


class ConfigurationError(FinLedgerError):
    """Invalid configuration parameters or caller arguments."""


class DataError(FinLedgerError):
    """A record that cannot be normalized: missing or non-numeric fields."""
