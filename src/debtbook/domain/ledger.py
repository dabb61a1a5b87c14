"""Change ledger (SyncLog) service.

Every local mutation that must eventually reach the remote store is
described by one ledger entry written in the same write transaction as the
mutation itself. Entries are coalesced so that at most one unprocessed entry
represents the latest state of a record.
"""

import logging
from collections import Counter
from datetime import datetime, UTC
from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.entities import (
    LOG_COMPLETED,
    LOG_FAILED,
    LOG_PENDING,
    OP_CREATE,
    OP_DELETE,
    OP_UPDATE,
    SyncLogEntry,
)
from debtbook.domain.errors import WriteTransactionError

logger = logging.getLogger(__name__)

UNPROCESSED = (LOG_PENDING, LOG_FAILED)


class ChangeLedger:
    """Service for recording and consuming pending mutations."""

    def __init__(self, db: Database):
        """Initialize change ledger.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_write(self) -> None:
        if not self.db.in_write:
            raise WriteTransactionError(
                "Ledger entries must be recorded inside the write that performs the mutation"
            )

    def _unprocessed(self, table: str, record_id: str) -> list[SyncLogEntry]:
        return self.db.list_sync_logs(table_name=table, record_id=record_id, statuses=UNPROCESSED)

    def record(self, operation: str, table: str, record_id: str, user_id: str) -> Optional[SyncLogEntry]:
        """Record a mutation, dispatching on operation."""
        if operation == OP_CREATE:
            return self.record_create(table, record_id, user_id)
        if operation == OP_UPDATE:
            return self.record_update(table, record_id, user_id)
        if operation == OP_DELETE:
            return self.record_delete(table, record_id, user_id)
        raise ValueError(f"Unknown ledger operation '{operation}'")

    def record_create(self, table: str, record_id: str, user_id: str) -> SyncLogEntry:
        """Record creation of a record."""
        self._require_write()
        return self.db.add_sync_log(user_id, table, record_id, OP_CREATE)

    def record_update(self, table: str, record_id: str, user_id: str) -> SyncLogEntry:
        """Record an update.

        An unprocessed create or update for the same record already carries
        the latest state (records are read at sync time), so no new entry is
        written and that entry is returned instead.
        """
        self._require_write()
        for entry in self._unprocessed(table, record_id):
            if entry.operation in (OP_CREATE, OP_UPDATE):
                return entry
        return self.db.add_sync_log(user_id, table, record_id, OP_UPDATE)

    def record_delete(self, table: str, record_id: str, user_id: str) -> Optional[SyncLogEntry]:
        """Record a deletion, coalescing earlier unprocessed entries.

        - A record whose create never reached the remote store is forgotten:
          its entries are dropped and no delete is written (returns None).
        - Unprocessed updates are dropped and a delete is written.
        - Otherwise a delete is written.

        The caller deletes the domain record in the same write.
        """
        self._require_write()
        existing = self._unprocessed(table, record_id)
        if any(entry.operation == OP_CREATE for entry in existing):
            for entry in existing:
                self.db.delete_sync_log(entry.id)
            logger.debug("Dropped %d ledger entries for never-synced %s %s", len(existing), table, record_id)
            return None

        for entry in existing:
            if entry.operation == OP_DELETE:
                return entry
            self.db.delete_sync_log(entry.id)
        return self.db.add_sync_log(user_id, table, record_id, OP_DELETE)

    def pending_entries(self, user_id: str) -> list[SyncLogEntry]:
        """Return pending and failed entries for a user in creation order."""
        return self.db.list_sync_logs(user_id=user_id, statuses=UNPROCESSED)

    def mark_completed(self, entry_id: str) -> None:
        self._require_write()
        self.db.update_sync_log(entry_id, LOG_COMPLETED, error=None, processed_at=datetime.now(UTC))

    def mark_failed(self, entry_id: str, error: str) -> None:
        self._require_write()
        self.db.update_sync_log(entry_id, LOG_FAILED, error=error, processed_at=datetime.now(UTC))

    def summarize(self, user_id: Optional[str] = None) -> dict[str, int]:
        """Count ledger entries by status."""
        counts = Counter(entry.status for entry in self.db.list_sync_logs(user_id=user_id))
        return {status: counts.get(status, 0) for status in (LOG_PENDING, LOG_FAILED, LOG_COMPLETED)}
