"""Synchronization of the local store with the remote store."""

from debtbook.sync.engine import SyncEngine, SyncSummary, order_entries
from debtbook.sync.errors import (
    ConfigurationError,
    MissingDependencyError,
    MissingRecordError,
    RemoteError,
    SyncError,
)
from debtbook.sync.id_mapping import IdentifierMap
from debtbook.sync.remote import RemoteSession, RemoteStore

__all__ = [
    "SyncEngine",
    "SyncSummary",
    "order_entries",
    "IdentifierMap",
    "RemoteStore",
    "RemoteSession",
    "SyncError",
    "MissingRecordError",
    "MissingDependencyError",
    "RemoteError",
    "ConfigurationError",
]
