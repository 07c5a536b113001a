from __future__ import annotations


class ContactSyncError(Exception):
    """Base class for failures raised by the sync adapters."""


class ConfigError(ContactSyncError):
    pass


class SourceError(ContactSyncError):
    """The contact source could not be read."""


class StoreError(ContactSyncError):
    """The contact store could not be read or written."""
