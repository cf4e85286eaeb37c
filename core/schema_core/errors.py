"""Error taxonomy shared by every schema_core component.

Each error carries a stable ``code`` so that an outer layer (HTTP handler,
CLI) can map it to a response without parsing messages.
"""

from __future__ import annotations


class SchemaLedgerError(Exception):
    """Base class for all domain errors raised by schema_core."""

    code: str = "SCHEMA_LEDGER_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class NormalizationError(SchemaLedgerError):
    """Raised when a raw schema cannot be turned into a snapshot.

    A partially normalised snapshot would poison every later diff, so the
    normaliser never skips a malformed schema or property.
    """

    code = "NORMALIZATION_ERROR"


class SchemaLoadError(SchemaLedgerError):
    """Raised when a schema file on disk cannot be read or parsed."""

    code = "SCHEMA_LOAD_ERROR"


class StoreError(SchemaLedgerError):
    """Raised by the version store for invalid writes or unreadable files."""

    code = "STORE_ERROR"


class StoreIOError(StoreError):
    """Raised when the filesystem fails underneath the version store.

    The originating :class:`OSError` is attached as ``__cause__``.
    """

    code = "STORE_IO_ERROR"


class PreconditionFailedError(SchemaLedgerError):
    """Raised when an operation is requested in a state that cannot satisfy it."""

    code = "PRECONDITION_FAILED"


class ConfigurationError(SchemaLedgerError):
    """Raised when the environment holds an invalid setting."""

    code = "INVALID_SETTINGS"
