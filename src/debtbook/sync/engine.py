"""Sync engine: drains the change ledger into the remote store.

Entries are applied one at a time in dependency order (users, accounts,
contacts, transactions, then everything else; creates before updates
before deletes). A create replaces the local record with one carrying the
server-issued identifier, and every local reference to the old identifier
is rewritten in the same write. A failing entry is marked ``failed`` and the
run moves on; failed entries are picked up again by the next run.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from typing import Any, Callable, Iterable, Optional

from debtbook.database.base import Database
from debtbook.database.mappers import local_record_to_fields, to_local_record
from debtbook.domain.entities import (
    OP_CREATE,
    OP_DELETE,
    OP_UPDATE,
    SYNC_FAILED,
    SYNC_SYNCED,
    SYNCED_ENTITIES,
    SyncedEntity,
    SyncLogEntry,
)
from debtbook.domain.errors import NotFoundError, user_not_found
from debtbook.domain.ledger import UNPROCESSED, ChangeLedger
from debtbook.sync.errors import MissingDependencyError, MissingRecordError, SyncError
from debtbook.sync.id_mapping import IdentifierMap
from debtbook.sync.remote import RemoteStore
from debtbook.sync.transform import FOREIGN_KEYS, from_remote_row, is_remote_id, to_remote_row

logger = logging.getLogger(__name__)

TABLE_PRIORITY = {"users": 0, "accounts": 1, "contacts": 2, "transactions": 3}
OPERATION_PRIORITY = {OP_CREATE: 0, OP_UPDATE: 1, OP_DELETE: 2}

ProgressCallback = Callable[[int, int, str], None]


def order_entries(entries: Iterable[SyncLogEntry]) -> list[SyncLogEntry]:
    """Sort ledger entries by table priority, then operation priority.

    Unknown tables sort last. The sort is stable, so entries of the same
    table and operation keep their creation order.
    """
    return sorted(
        entries,
        key=lambda e: (
            TABLE_PRIORITY.get(e.table_name, len(TABLE_PRIORITY)),
            OPERATION_PRIORITY.get(e.operation, len(OPERATION_PRIORITY)),
        ),
    )


@dataclass
class SyncSummary:
    """Outcome of one reconcile run."""

    total: int = 0
    success: int = 0
    failed: int = 0
    id_mapping: dict[str, dict[str, str]] = field(default_factory=dict)
    errors: list[tuple[str, str]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "idMapping": self.id_mapping,
        }


class SyncEngine:
    """Applies pending ledger entries to the remote store."""

    def __init__(
        self,
        db: Database,
        remote: RemoteStore,
        is_online: Optional[Callable[[], bool]] = None,
    ):
        """Initialize sync engine.

        Args:
            db: Database instance
            remote: Remote store to apply entries to
            is_online: Connectivity check; the device is assumed online if None
        """
        self.db = db
        self.remote = remote
        self.is_online = is_online or (lambda: True)
        self.ledger = ChangeLedger(db)

    def reconcile(self, user_id: str, on_progress: Optional[ProgressCallback] = None) -> SyncSummary:
        """Drain the user's pending and failed ledger entries.

        The run is skipped (an empty summary is returned) when the user is not
        on the paid tier, the device is offline, or nothing is pending.

        Args:
            user_id: Local user ID whose entries are applied
            on_progress: Called after each entry with (index, total, message)

        Returns:
            SyncSummary with counts and the identifiers issued in this run

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        id_map = IdentifierMap()
        if not user.is_entitled:
            logger.info("Sync skipped: user %s is not on the paid tier", user_id)
            return SyncSummary(id_mapping=id_map.as_dict())
        if not self.is_online():
            logger.info("Sync skipped: device is offline")
            return SyncSummary(id_mapping=id_map.as_dict())
        entries = order_entries(self.ledger.pending_entries(user_id))
        if not entries:
            logger.debug("Sync skipped: no pending entries for user %s", user_id)
            return SyncSummary(id_mapping=id_map.as_dict())

        if user.supabase_id:
            id_map.record("users", user.id, user.supabase_id)

        summary = SyncSummary(total=len(entries))
        logger.info("Syncing %d ledger entries for user %s", len(entries), user_id)
        for index, entry in enumerate(entries, start=1):
            # Earlier creates in this run may have renamed the record
            entry = self.db.get_sync_log(entry.id) or entry
            try:
                self._apply(entry, id_map)
            except Exception as e:
                logger.warning(
                    "Failed to sync %s %s %s: %s", entry.operation, entry.table_name, entry.record_id, e
                )
                self._record_failure(entry, str(e))
                summary.failed += 1
                summary.errors.append((entry.id, str(e)))
                message = f"Failed to {entry.operation} {entry.table_name} record: {e}"
            else:
                summary.success += 1
                message = f"Synced {entry.operation} of {entry.table_name} record"
            if on_progress is not None:
                on_progress(index, len(entries), message)

        summary.id_mapping = id_map.as_dict()
        logger.info(
            "Sync finished: %d succeeded, %d failed of %d", summary.success, summary.failed, summary.total
        )
        return summary

    def _apply(self, entry: SyncLogEntry, id_map: IdentifierMap) -> None:
        table = entry.table_name
        if table not in SYNCED_ENTITIES:
            raise SyncError(f"Unknown table '{table}'")
        entity = self.db.get_record(table, entry.record_id)

        if entry.operation == OP_DELETE:
            self._apply_delete(entry, entity, id_map)
            return
        if entity is None:
            raise MissingRecordError(f"{table} record {entry.record_id} no longer exists locally")

        row = self._resolve_foreign_keys(table, to_remote_row(to_local_record(entity)), id_map)
        if entry.operation == OP_CREATE:
            self._apply_create(entry, entity, row, id_map)
        elif entry.operation == OP_UPDATE:
            server_row = self.remote.update(table, self._remote_id(entity), row)
            self._fold_update(entry, entity, server_row)
        else:
            raise SyncError(f"Unknown ledger operation '{entry.operation}'")

    def _apply_create(
        self, entry: SyncLogEntry, entity: SyncedEntity, row: dict[str, Any], id_map: IdentifierMap
    ) -> None:
        table = entry.table_name
        if table == "users":
            # The remote user row is provisioned at sign-up; the ledger only updates it
            server_row = self.remote.update(table, self._remote_id(entity), row)
            self._fold_update(entry, entity, server_row)
            return

        if table == "transactions":
            row["id"] = str(uuid.uuid4())
        server_row = self.remote.insert(table, row)
        new_id = str(server_row["id"])
        synced = self._merge_server_row(entity, server_row, id=new_id, supabase_id=new_id)
        with self.db.write():
            self.db.replace_record_id(table, entity.id, synced)
            self.ledger.mark_completed(entry.id)
        id_map.record(table, entity.id, new_id)
        logger.debug("Created %s %s remotely as %s", table, entity.id, new_id)

    def _apply_delete(
        self, entry: SyncLogEntry, entity: Optional[SyncedEntity], id_map: IdentifierMap
    ) -> None:
        if entity is not None:
            remote_id = self._remote_id(entity)
        else:
            remote_id = id_map.resolve(entry.table_name, entry.record_id) or entry.record_id
        self.remote.delete(entry.table_name, remote_id)
        with self.db.write():
            self.db.delete_record(entry.table_name, entry.record_id)
            self.ledger.mark_completed(entry.id)

    def _fold_update(self, entry: SyncLogEntry, entity: SyncedEntity, server_row: dict[str, Any]) -> None:
        synced = self._merge_server_row(entity, server_row)
        with self.db.write():
            self.db.save_record(synced)
            self.ledger.mark_completed(entry.id)

    @staticmethod
    def _remote_id(entity: SyncedEntity) -> str:
        if entity.supabase_id:
            return entity.supabase_id
        if entity.TABLE == "users":
            raise MissingDependencyError(f"User {entity.id} is not linked to a remote user")
        return entity.id

    @staticmethod
    def _merge_server_row(entity: SyncedEntity, server_row: dict[str, Any], **overrides: Any) -> SyncedEntity:
        """Fold the server's representation into the local record.

        Foreign keys keep their local values: they name local records, and
        the local records they name have already been renamed to their
        remote identifiers where one was issued.
        """
        fields = local_record_to_fields(entity.TABLE, from_remote_row(server_row))
        for column in FOREIGN_KEYS.get(entity.TABLE, {}):
            fields.pop(column, None)
        fields.update(overrides)
        return replace(
            entity,
            **fields,
            sync_status=SYNC_SYNCED,
            needs_upload=False,
            last_sync_at=datetime.now(UTC),
        )

    def _awaiting_create(self, table: str, record_id: str) -> bool:
        entries = self.db.list_sync_logs(table_name=table, record_id=record_id, statuses=UNPROCESSED)
        return any(e.operation == OP_CREATE for e in entries)

    def _resolve_foreign_keys(self, table: str, row: dict[str, Any], id_map: IdentifierMap) -> dict[str, Any]:
        """Replace local identifiers in foreign-key columns with remote ones.

        Raises:
            MissingDependencyError: If a referenced record is gone or has no remote
                identifier yet and the value is not already one
        """
        for column, target in FOREIGN_KEYS.get(table, {}).items():
            value = row.get(column)
            if value is None:
                continue
            mapped = id_map.resolve(target, value)
            if mapped is not None:
                row[column] = mapped
            elif self.db.get_record(target, value) is None:
                raise MissingDependencyError(
                    f"{table}.{column} refers to {target} record {value}, which no longer exists locally"
                )
            elif self._awaiting_create(target, value) or not is_remote_id(value):
                raise MissingDependencyError(
                    f"{table}.{column} refers to {target} record {value}, which has not been synced"
                )
        return row

    def _record_failure(self, entry: SyncLogEntry, error: str) -> None:
        with self.db.write():
            self.ledger.mark_failed(entry.id, error)
            if entry.operation == OP_DELETE or entry.table_name not in SYNCED_ENTITIES:
                return
            entity = self.db.get_record(entry.table_name, entry.record_id)
            if entity is not None:
                self.db.save_record(replace(entity, sync_status=SYNC_FAILED))
