"""Exceptions raised by the Openly core."""


class OpenlyError(Exception):
    """Base class for Openly errors."""


class StorageError(OpenlyError):
    """The backing store failed (connection, constraint, I/O)."""


class DuplicateShortIDError(StorageError):
    """An insert hit the short_id uniqueness constraint."""


class NotAuthenticatedError(OpenlyError):
    """An admin-only operation was attempted without a valid session."""


class LinkCreationError(OpenlyError):
    """A short link could not be created. Carries no client-facing detail."""
