"""Errors raised while reconciling the change ledger with the remote store."""

from typing import Optional


class SyncError(Exception):
    """Base class for failures applying a single ledger entry."""


class MissingRecordError(SyncError):
    """A create or update entry refers to a record that is no longer stored locally."""


class MissingDependencyError(SyncError):
    """A foreign key cannot be resolved to a remote identifier."""


class RemoteError(SyncError):
    """The remote store rejected a request or could not be reached."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (code {self.code})"
        return self.message


class ConfigurationError(ValueError):
    """Remote store credentials are missing or invalid."""
