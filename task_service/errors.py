"""Exceptions raised by the storage layer."""


class StorageError(Exception):
    """The storage backend failed: unreachable, timed out, or returned data
    that could not be decoded.

    The original exception is always available as ``__cause__``.
    """
