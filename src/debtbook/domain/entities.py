"""Domain model entities for debtbook.

These are pure data classes representing business concepts, independent of
the local store's schema and of the remote store's row format. Each syncable
entity names the remote table it mirrors in ``TABLE``.
"""

from dataclasses import dataclass, replace
from datetime import datetime, date, UTC
from decimal import Decimal
from typing import ClassVar, Optional

SYNC_SYNCED = "synced"
SYNC_PENDING = "pending"
SYNC_FAILED = "failed"

OP_CREATE = "create"
OP_UPDATE = "update"
OP_DELETE = "delete"
OPERATIONS = (OP_CREATE, OP_UPDATE, OP_DELETE)

LOG_PENDING = "pending"
LOG_COMPLETED = "completed"
LOG_FAILED = "failed"

USER_FREE = "free"
USER_PAID = "paid"

# Transaction types and the direction they move an account balance in
INFLOW_TYPES = frozenset({"cashIn", "credit", "receive", "borrow"})
OUTFLOW_TYPES = frozenset({"cashOut", "debit", "sendOut", "lend"})
TRANSACTION_TYPES = INFLOW_TYPES | OUTFLOW_TYPES

ACCOUNT_TYPES = frozenset({"cash_in_cash_out", "debit_credit", "receive_send_out", "borrow_lend"})

TXN_ACTIVE = "active"
TXN_CANCELLED = "cancelled"

PROXY_ACTIVE = "active"
PROXY_CANCELLED = "cancelled"


@dataclass(frozen=True, kw_only=True)
class SyncedEntity:
    """Fields shared by every record that is mirrored to the remote store."""

    TABLE: ClassVar[str] = ""

    id: str
    supabase_id: Optional[str] = None
    sync_status: str = SYNC_PENDING
    needs_upload: bool = True
    last_sync_at: Optional[datetime] = None
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None


@dataclass(frozen=True, kw_only=True)
class User(SyncedEntity):
    """Device owner profile."""

    TABLE: ClassVar[str] = "users"

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    email_confirmed: bool = False
    biometric_enabled: bool = False
    pin_enabled: bool = False
    pin_code: Optional[str] = None
    password_hash: Optional[str] = None
    user_type: str = USER_FREE
    profile_picture_url: Optional[str] = None
    language: str = "en"
    timezone: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None

    @property
    def is_entitled(self) -> bool:
        return self.user_type == USER_PAID


@dataclass(frozen=True, kw_only=True)
class Account(SyncedEntity):
    """Money account with a running balance and per-type totals."""

    TABLE: ClassVar[str] = "accounts"

    name: str
    user_id: str
    currency: str = "USD"
    type: str = "cash_in_cash_out"
    language: str = "en"
    is_primary: bool = False
    initial_amount: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    cash_in: Decimal = Decimal("0")
    cash_out: Decimal = Decimal("0")
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    receive: Decimal = Decimal("0")
    send_out: Decimal = Decimal("0")
    borrow: Decimal = Decimal("0")
    lend: Decimal = Decimal("0")
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class Contact(SyncedEntity):
    """Person money is lent to, borrowed from, or paid on behalf of."""

    TABLE: ClassVar[str] = "contacts"

    name: str
    user_id: str
    phone: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    total_owed: Decimal = Decimal("0")
    total_owing: Decimal = Decimal("0")
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class Transaction(SyncedEntity):
    """Single money movement on an account."""

    TABLE: ClassVar[str] = "transactions"

    type: str
    amount: Decimal
    account_id: str
    user_id: str
    transaction_date: date
    purpose: Optional[str] = None
    contact_id: Optional[str] = None
    category_id: Optional[str] = None
    on_behalf_of_contact_id: Optional[str] = None
    due_date: Optional[date] = None
    remarks: Optional[str] = None
    status: str = TXN_ACTIVE
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None
    parent_transaction_id: Optional[str] = None
    is_settled: bool = False
    settled_at: Optional[datetime] = None
    settlement_note: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class Category(SyncedEntity):
    """Income, expense or debt category."""

    TABLE: ClassVar[str] = "categories"

    name: str
    user_id: str
    type: str = "expense"
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_category_id: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class Budget(SyncedEntity):
    """Spending limit for a category over a date range."""

    TABLE: ClassVar[str] = "budgets"

    name: str
    amount: Decimal
    period: str
    user_id: str
    category_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class ProxyPayment(SyncedEntity):
    """Link between a payment made on behalf of a contact and its debt adjustment."""

    TABLE: ClassVar[str] = "proxy_payments"

    user_id: str
    original_transaction_id: str
    adjustment_transaction_id: str
    on_behalf_of_contact_id: str
    amount: Decimal
    status: str = PROXY_ACTIVE


@dataclass(frozen=True)
class SyncLogEntry:
    """Change ledger entry describing one pending local mutation."""

    id: str
    user_id: str
    table_name: str
    record_id: str
    operation: str
    status: str
    error: Optional[str]
    created_on: datetime
    processed_at: Optional[datetime] = None


@dataclass(frozen=True)
class CodeListElement:
    """Reference value (currency, language, ...) belonging to a code list."""

    id: str
    code_list_name: str
    element: str
    description: Optional[str]
    active: bool
    sort_order: int


@dataclass(frozen=True)
class ChangeSet:
    """Record ids touched in one committed write, per table."""

    table: str
    insertions: tuple[str, ...] = ()
    modifications: tuple[str, ...] = ()
    deletions: tuple[str, ...] = ()


SYNCED_ENTITIES: dict[str, type[SyncedEntity]] = {
    cls.TABLE: cls
    for cls in (User, Account, Contact, Transaction, Category, Budget, ProxyPayment)
}


def touched(entity, **changes):
    """Return a copy of the entity with changes applied and marked for upload."""
    return replace(
        entity,
        updated_on=datetime.now(UTC),
        sync_status=SYNC_PENDING,
        needs_upload=True,
        **changes,
    )
