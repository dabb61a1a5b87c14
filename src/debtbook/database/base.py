"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from debtbook.domain.entities import (
    Account,
    ChangeSet,
    CodeListElement,
    Contact,
    ProxyPayment,
    SyncedEntity,
    SyncLogEntry,
    Transaction,
    User,
)

ChangeListener = Callable[[ChangeSet], None]


class Database(ABC):
    """Abstract local store interface for debtbook.

    All mutating operations must run inside ``write()``; the store raises
    ``WriteTransactionError`` otherwise, so a domain mutation and the ledger
    entry describing it always commit or roll back together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema and verify its version."""
        pass

    # Transactions and change notification
    @abstractmethod
    def write(self) -> AbstractContextManager[Any]:
        """Open a scoped write transaction.

        Commits when the block exits normally and rolls back when it raises.
        Nested calls join the outermost transaction.
        """
        pass

    @property
    @abstractmethod
    def in_write(self) -> bool:
        """Whether a write transaction is currently open."""
        pass

    @abstractmethod
    def add_listener(self, table: str, callback: ChangeListener) -> None:
        """Register a callback receiving a ChangeSet after each committed write."""
        pass

    @abstractmethod
    def remove_listener(self, table: str, callback: ChangeListener) -> None:
        """Unregister a change listener."""
        pass

    # Generic record operations
    @abstractmethod
    def get_record(self, table: str, record_id: str) -> Optional[SyncedEntity]:
        """Get any synced record by table name and ID."""
        pass

    @abstractmethod
    def list_records(
        self,
        table: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        **filters: Any,
    ) -> list[SyncedEntity]:
        """List records of a table.

        Args:
            table: Remote table name (e.g. 'accounts')
            order_by: Optional entity attribute to sort by
            descending: Sort direction when order_by is given
            **filters: Attribute equality filters; list/tuple/set values match any member
        """
        pass

    @abstractmethod
    def insert_record(self, entity: SyncedEntity) -> SyncedEntity:
        """Insert a new record. Returns the stored entity."""
        pass

    @abstractmethod
    def save_record(self, entity: SyncedEntity) -> SyncedEntity:
        """Overwrite an existing record with the entity's fields."""
        pass

    @abstractmethod
    def delete_record(self, table: str, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        pass

    @abstractmethod
    def replace_record_id(self, table: str, old_id: str, entity: SyncedEntity) -> SyncedEntity:
        """Replace a record with one carrying a new primary key.

        Every local reference to ``old_id`` (foreign-key columns and
        unprocessed ledger entries) is rewritten to the new ID in the same
        transaction.
        """
        pass

    # Typed helpers
    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_contact(self, contact_id: str) -> Optional[Contact]:
        """Get contact by ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_proxy_payment_by_transaction(self, transaction_id: str) -> Optional[ProxyPayment]:
        """Get the proxy payment that links the given transaction, as either leg."""
        pass

    @abstractmethod
    def count_transactions(
        self, account_id: Optional[str] = None, contact_id: Optional[str] = None
    ) -> int:
        """Count transactions referencing an account or a contact."""
        pass

    # Change ledger operations
    @abstractmethod
    def add_sync_log(
        self, user_id: str, table_name: str, record_id: str, operation: str
    ) -> SyncLogEntry:
        """Append a pending ledger entry."""
        pass

    @abstractmethod
    def get_sync_log(self, entry_id: str) -> Optional[SyncLogEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    def list_sync_logs(
        self,
        user_id: Optional[str] = None,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> list[SyncLogEntry]:
        """List ledger entries in creation order."""
        pass

    @abstractmethod
    def update_sync_log(
        self,
        entry_id: str,
        status: str,
        error: Optional[str] = None,
        processed_at: Optional[datetime] = None,
    ) -> None:
        """Set a ledger entry's status, error and processing time."""
        pass

    @abstractmethod
    def delete_sync_log(self, entry_id: str) -> None:
        """Delete a ledger entry."""
        pass

    # Code list operations
    @abstractmethod
    def create_code_list(self, name: str, description: Optional[str] = None) -> None:
        """Create a code list if it does not exist."""
        pass

    @abstractmethod
    def add_code_list_element(
        self, code_list_name: str, element: str, description: Optional[str] = None, sort_order: int = 0
    ) -> str:
        """Add an element to a code list. Returns element ID."""
        pass

    @abstractmethod
    def list_code_list_elements(self, code_list_name: str) -> list[CodeListElement]:
        """List active elements of a code list ordered by sort order."""
        pass
