"""Schema Ledger core: snapshot, diff and version history for schema collections."""

__version__ = "0.4.0"
