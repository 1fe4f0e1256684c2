"""
Exception types raised by the data core.
"""


class SnaposError(Exception):
    """Base class for all data core errors."""


class StorageError(SnaposError):
    """A local store read or write failed. The change was not saved."""


class UnknownCollectionError(SnaposError, ValueError):
    """A collection name that the store does not know about."""
