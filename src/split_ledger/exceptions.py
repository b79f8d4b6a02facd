"""Custom exceptions for Split Ledger."""


class SplitLedgerError(Exception):
    """Base exception for all Split Ledger errors."""

    pass


class ConfigurationError(SplitLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(SplitLedgerError):
    """Raised when an expense or registry request is malformed or inconsistent.

    Covers bad split input (share counts, share totals, negative amounts,
    empty participant lists) as well as broken references (unknown group,
    payer or participant). No ledger state is changed when this is raised.
    """

    pass


class UnknownStrategyError(SplitLedgerError):
    """Raised when a split strategy tag cannot be resolved."""

    def __init__(self, tag: str, message: str | None = None):
        self.tag = tag
        super().__init__(message or f"Unknown split strategy type: {tag}")


class PersistenceError(SplitLedgerError):
    """Raised when the ledger document cannot be read or written."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Failed to access ledger file: {path}")
