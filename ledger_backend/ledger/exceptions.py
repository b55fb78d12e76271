# ledger/exceptions.py

"""
LEDGER ERRORS

- DataUnavailable: a store read failed. Callers show an error + retry,
  never a zero or partial balance.
- InvalidInput: bad date range, non-positive amount, unknown value shape.
  Rejected before any computation starts.

Anomalous transactions are NOT errors: see engine.AnomalousTransaction.
"""


class LedgerError(Exception):
    """Base exception for ledger computation failures."""


class DataUnavailable(LedgerError):
    """Raised when party or transaction data could not be read."""

    retryable = True


class InvalidInput(LedgerError, ValueError):
    """Raised when engine input is malformed."""
