"""Congregational ledger with monthly archive and reset."""

__version__ = "0.1.0"
