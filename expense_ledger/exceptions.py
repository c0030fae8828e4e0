"""Domain-specific exceptions for the expense ledger core."""

class ValidationError(ValueError):
    """Raised when a candidate expense does not meet validation requirements."""


class PersistenceError(IOError):
    """Raised when the persistence adapter cannot complete a request."""


class PersistenceReadError(PersistenceError):
    """Raised when a stored value exists but cannot be read or decoded."""


class PersistenceWriteError(PersistenceError):
    """Raised when a value cannot be written to the persistence adapter."""
