"""Exceptions raised by the filter's collaborators."""


class AllyFilterError(Exception):
    """Base class for filter errors."""


class FileStoreError(AllyFilterError):
    """The file store could not answer a lookup (unreachable, corrupted record)."""


class HostError(AllyFilterError):
    """The host's page, context or capability subsystem failed."""
