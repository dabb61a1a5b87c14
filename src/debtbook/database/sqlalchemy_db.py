"""Generic SQLAlchemy database implementation."""

import logging
import uuid
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterable, Iterator, Optional

from sqlalchemy import event, func, or_
from sqlalchemy.orm import Session

from debtbook.database.base import ChangeListener, Database
from debtbook.database.models import (
    SCHEMA_VERSION,
    LOCAL_REFERENCES,
    TABLE_MODELS,
    CodeList,
    CodeListElement,
    ProxyPayment,
    SyncLog,
    Transaction,
    create_engine_for,
    create_session_factory,
)
from debtbook.database.mappers import (
    code_list_element_to_domain,
    copy_to_orm,
    domain_to_orm,
    record_to_domain,
    sync_log_to_domain,
)
from debtbook.domain.entities import (
    LOG_FAILED,
    LOG_PENDING,
    Account as DomainAccount,
    ChangeSet,
    CodeListElement as DomainCodeListElement,
    Contact as DomainContact,
    ProxyPayment as DomainProxyPayment,
    SyncedEntity,
    SyncLogEntry,
    Transaction as DomainTransaction,
    User as DomainUser,
)
from debtbook.domain.errors import (
    NotFoundError,
    SchemaVersionError,
    WriteTransactionError,
    record_not_found,
)

logger = logging.getLogger(__name__)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.engine = create_engine_for(database_url)
        self.session_factory = create_session_factory(self.engine)
        self._session: Optional[Session] = None
        self._write_depth = 0
        self._listeners: dict[str, list[ChangeListener]] = defaultdict(list)
        self._changes: dict[str, dict[str, list[str]]] = {}
        event.listen(self.session_factory, "before_flush", self._collect_changes)

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _require_write(self) -> Session:
        if self._write_depth == 0:
            raise WriteTransactionError("Cannot modify the local store outside of a write transaction")
        return self._get_session()

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None
        self.engine.dispose()

    def initialize_schema(self) -> None:
        """Verify the schema version, stamping a fresh store.

        Raises:
            SchemaVersionError: If the store was created by another schema version
        """
        with self.engine.begin() as conn:
            version = conn.exec_driver_sql("PRAGMA user_version").scalar()
            if version == 0:
                conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION}")
            elif version != SCHEMA_VERSION:
                raise SchemaVersionError(
                    f"Local store has schema version {version}, expected {SCHEMA_VERSION}"
                )

    # Transactions and change notification
    @contextmanager
    def write(self) -> Iterator[Session]:
        """Open a scoped write transaction."""
        session = self._get_session()
        if self._write_depth > 0:
            self._write_depth += 1
            try:
                yield session
            finally:
                self._write_depth -= 1
            return

        self._write_depth = 1
        self._changes = {}
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            self._changes = {}
            raise
        finally:
            self._write_depth = 0
        self._dispatch_changes()

    @property
    def in_write(self) -> bool:
        return self._write_depth > 0

    def add_listener(self, table: str, callback: ChangeListener) -> None:
        self._listeners[table].append(callback)

    def remove_listener(self, table: str, callback: ChangeListener) -> None:
        if callback in self._listeners.get(table, []):
            self._listeners[table].remove(callback)

    def _collect_changes(self, session: Session, flush_context, instances) -> None:
        def track(objects, kind: str) -> None:
            for obj in objects:
                key = getattr(obj, "id", None) or getattr(obj, "name", None)
                table = self._changes.setdefault(
                    obj.__tablename__,
                    {"insertions": [], "modifications": [], "deletions": []},
                )
                if key not in table[kind]:
                    table[kind].append(key)

        track(session.new, "insertions")
        track([obj for obj in session.dirty if session.is_modified(obj)], "modifications")
        track(session.deleted, "deletions")

    def _dispatch_changes(self) -> None:
        changes, self._changes = self._changes, {}
        for table, kinds in changes.items():
            listeners = list(self._listeners.get(table, []))
            if not listeners:
                continue
            change_set = ChangeSet(
                table=table,
                insertions=tuple(kinds["insertions"]),
                modifications=tuple(i for i in kinds["modifications"] if i not in kinds["insertions"]),
                deletions=tuple(kinds["deletions"]),
            )
            for callback in listeners:
                callback(change_set)

    # Generic record operations
    def _query_record(self, table: str, record_id: str) -> Any:
        model = TABLE_MODELS[table]
        session = self._get_session()
        return session.query(model).filter(model.id == record_id).first()

    def get_record(self, table: str, record_id: str) -> Optional[SyncedEntity]:
        """Get any synced record by table name and ID."""
        record = self._query_record(table, record_id)
        if record is None:
            return None
        return record_to_domain(record)

    def list_records(
        self,
        table: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        **filters: Any,
    ) -> list[SyncedEntity]:
        """List records of a table with optional equality filters."""
        model = TABLE_MODELS[table]
        session = self._get_session()
        query = session.query(model)
        for attr, value in filters.items():
            column = getattr(model, attr)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)
        if order_by is not None:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column)
        else:
            query = query.order_by(model.created_on, model.id)
        return [record_to_domain(record) for record in query.all()]

    def insert_record(self, entity: SyncedEntity) -> SyncedEntity:
        """Insert a new record. Returns the stored entity."""
        session = self._require_write()
        record = domain_to_orm(entity)
        session.add(record)
        session.flush()
        return record_to_domain(record)

    def save_record(self, entity: SyncedEntity) -> SyncedEntity:
        """Overwrite an existing record with the entity's fields."""
        session = self._require_write()
        record = self._query_record(entity.TABLE, entity.id)
        if record is None:
            raise NotFoundError(record_not_found(entity.TABLE, entity.id))
        copy_to_orm(entity, record)
        session.flush()
        return record_to_domain(record)

    def delete_record(self, table: str, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        session = self._require_write()
        record = self._query_record(table, record_id)
        if record is None:
            return False
        session.delete(record)
        session.flush()
        return True

    def replace_record_id(self, table: str, old_id: str, entity: SyncedEntity) -> SyncedEntity:
        """Replace a record with one carrying a new primary key."""
        session = self._require_write()
        new_id = entity.id
        if new_id == old_id:
            return self.save_record(entity)

        old_record = self._query_record(table, old_id)
        if old_record is None:
            raise NotFoundError(record_not_found(table, old_id))
        session.delete(old_record)
        session.flush()
        session.add(domain_to_orm(entity))

        rewritten = 0
        for ref_table, references in LOCAL_REFERENCES.items():
            model = TABLE_MODELS[ref_table]
            for attr, target in references:
                if target != table:
                    continue
                column = getattr(model, attr)
                for record in session.query(model).filter(column == old_id).all():
                    setattr(record, attr, new_id)
                    rewritten += 1

        unprocessed = (
            session.query(SyncLog)
            .filter(
                SyncLog.table_name == table,
                SyncLog.record_id == old_id,
                SyncLog.status.in_([LOG_PENDING, LOG_FAILED]),
            )
            .all()
        )
        for log in unprocessed:
            log.record_id = new_id

        session.flush()
        logger.debug(
            "Replaced %s %s with %s (%d references, %d ledger entries rewritten)",
            table, old_id, new_id, rewritten, len(unprocessed),
        )
        return self.get_record(table, new_id)

    # Typed helpers
    def get_user(self, user_id: str) -> Optional[DomainUser]:
        return self.get_record("users", user_id)

    def get_account(self, account_id: str) -> Optional[DomainAccount]:
        return self.get_record("accounts", account_id)

    def get_contact(self, contact_id: str) -> Optional[DomainContact]:
        return self.get_record("contacts", contact_id)

    def get_transaction(self, transaction_id: str) -> Optional[DomainTransaction]:
        return self.get_record("transactions", transaction_id)

    def get_proxy_payment_by_transaction(self, transaction_id: str) -> Optional[DomainProxyPayment]:
        """Get the proxy payment that links the given transaction, as either leg."""
        session = self._get_session()
        record = (
            session.query(ProxyPayment)
            .filter(
                or_(
                    ProxyPayment.original_transaction_id == transaction_id,
                    ProxyPayment.adjustment_transaction_id == transaction_id,
                )
            )
            .first()
        )
        if record is None:
            return None
        return record_to_domain(record)

    def count_transactions(
        self, account_id: Optional[str] = None, contact_id: Optional[str] = None
    ) -> int:
        """Count transactions referencing an account or a contact."""
        session = self._get_session()
        query = session.query(Transaction)
        if account_id is not None:
            query = query.filter(Transaction.account_id == account_id)
        if contact_id is not None:
            query = query.filter(
                or_(
                    Transaction.contact_id == contact_id,
                    Transaction.on_behalf_of_contact_id == contact_id,
                )
            )
        return query.count()

    # Change ledger operations
    def add_sync_log(
        self, user_id: str, table_name: str, record_id: str, operation: str
    ) -> SyncLogEntry:
        """Append a pending ledger entry."""
        session = self._require_write()
        last_seq = session.query(func.max(SyncLog.seq)).scalar() or 0
        log = SyncLog(
            id=str(uuid.uuid4()),
            seq=last_seq + 1,
            user_id=user_id,
            table_name=table_name,
            record_id=record_id,
            operation=operation,
            status=LOG_PENDING,
        )
        session.add(log)
        session.flush()
        return sync_log_to_domain(log)

    def get_sync_log(self, entry_id: str) -> Optional[SyncLogEntry]:
        session = self._get_session()
        log = session.query(SyncLog).filter(SyncLog.id == entry_id).first()
        if log is None:
            return None
        return sync_log_to_domain(log)

    def list_sync_logs(
        self,
        user_id: Optional[str] = None,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> list[SyncLogEntry]:
        """List ledger entries in creation order."""
        session = self._get_session()
        query = session.query(SyncLog)
        if user_id is not None:
            query = query.filter(SyncLog.user_id == user_id)
        if table_name is not None:
            query = query.filter(SyncLog.table_name == table_name)
        if record_id is not None:
            query = query.filter(SyncLog.record_id == record_id)
        if statuses is not None:
            query = query.filter(SyncLog.status.in_(list(statuses)))
        logs = query.order_by(SyncLog.created_on, SyncLog.seq).all()
        return [sync_log_to_domain(log) for log in logs]

    def update_sync_log(
        self,
        entry_id: str,
        status: str,
        error: Optional[str] = None,
        processed_at: Optional[datetime] = None,
    ) -> None:
        session = self._require_write()
        log = session.query(SyncLog).filter(SyncLog.id == entry_id).first()
        if log is None:
            raise NotFoundError(record_not_found("sync_logs", entry_id))
        log.status = status
        log.error = error
        log.processed_at = processed_at
        session.flush()

    def delete_sync_log(self, entry_id: str) -> None:
        session = self._require_write()
        log = session.query(SyncLog).filter(SyncLog.id == entry_id).first()
        if log is not None:
            session.delete(log)
            session.flush()

    # Code list operations
    def create_code_list(self, name: str, description: Optional[str] = None) -> None:
        session = self._require_write()
        if session.query(CodeList).filter(CodeList.name == name).first() is None:
            session.add(CodeList(name=name, description=description))
            session.flush()

    def add_code_list_element(
        self, code_list_name: str, element: str, description: Optional[str] = None, sort_order: int = 0
    ) -> str:
        session = self._require_write()
        element_id = str(uuid.uuid4())
        session.add(
            CodeListElement(
                id=element_id,
                code_list_name=code_list_name,
                element=element,
                description=description,
                sort_order=sort_order,
            )
        )
        session.flush()
        return element_id

    def list_code_list_elements(self, code_list_name: str) -> list[DomainCodeListElement]:
        session = self._get_session()
        elements = (
            session.query(CodeListElement)
            .filter(CodeListElement.code_list_name == code_list_name, CodeListElement.active.is_(True))
            .order_by(CodeListElement.sort_order, CodeListElement.element)
            .all()
        )
        return [code_list_element_to_domain(e) for e in elements]
