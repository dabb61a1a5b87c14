"""SQLAlchemy models for the debtbook local store.

Attribute names follow Python conventions; column names keep the local
store's medial-capital convention (``accountId``, ``syncStatus``), which the
sync layer translates to the remote store's underscore style.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    ForeignKey,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()

# Bump when the schema changes; stored in SQLite's user_version pragma
SCHEMA_VERSION = 1


def _now() -> datetime:
    return datetime.now(UTC)


def _money(name: str, default: str = "0", nullable: bool = False) -> Column:
    return Column(name, Numeric(14, 2), default=default, nullable=nullable)


class SyncColumnsMixin:
    """Bookkeeping columns shared by every table mirrored to the remote store."""

    id = Column("id", String, primary_key=True)
    supabase_id = Column("supabaseId", String, nullable=True)
    sync_status = Column("syncStatus", String, default="pending", nullable=False)
    needs_upload = Column("needsUpload", Boolean, default=True, nullable=False)
    last_sync_at = Column("lastSyncAt", DateTime, nullable=True)
    created_on = Column("createdOn", DateTime, default=_now, nullable=False)
    updated_on = Column("updatedOn", DateTime, default=_now, onupdate=_now, nullable=False)


class User(SyncColumnsMixin, Base):
    """User profile model."""

    __tablename__ = "users"

    first_name = Column("firstName", String, nullable=True)
    last_name = Column("lastName", String, nullable=True)
    email = Column("email", String, nullable=True)
    email_confirmed = Column("emailConfirmed", Boolean, default=False, nullable=False)
    biometric_enabled = Column("biometricEnabled", Boolean, default=False, nullable=False)
    pin_enabled = Column("pinEnabled", Boolean, default=False, nullable=False)
    pin_code = Column("pinCode", String, nullable=True)
    password_hash = Column("passwordHash", String, nullable=True)
    user_type = Column("userType", String, default="free", nullable=False)
    profile_picture_url = Column("profilePictureUrl", String, nullable=True)
    language = Column("language", String, default="en", nullable=False)
    timezone = Column("timezone", String, nullable=True)
    is_active = Column("isActive", Boolean, default=True, nullable=False)
    last_login_at = Column("lastLoginAt", DateTime, nullable=True)


class Account(SyncColumnsMixin, Base):
    """Money account model."""

    __tablename__ = "accounts"

    name = Column("name", String, nullable=False)
    user_id = Column("userId", String, nullable=False)
    currency = Column("currency", String, nullable=False)
    type = Column("type", String, nullable=False)
    language = Column("language", String, default="en", nullable=False)
    is_primary = Column("isPrimary", Boolean, default=False, nullable=False)
    initial_amount = _money("initialAmount")
    current_balance = _money("currentBalance")
    cash_in = _money("cashIn")
    cash_out = _money("cashOut")
    debit = _money("debit")
    credit = _money("credit")
    receive = _money("receive")
    send_out = _money("sendOut")
    borrow = _money("borrow")
    lend = _money("lend")
    is_active = Column("isActive", Boolean, default=True, nullable=False)


class Contact(SyncColumnsMixin, Base):
    """Contact model."""

    __tablename__ = "contacts"

    name = Column("name", String, nullable=False)
    user_id = Column("userId", String, nullable=False)
    phone = Column("phone", String, nullable=True)
    email = Column("email", String, nullable=True)
    photo_url = Column("photoUrl", String, nullable=True)
    total_owed = _money("totalOwed")
    total_owing = _money("totalOwing")
    is_active = Column("isActive", Boolean, default=True, nullable=False)


class Transaction(SyncColumnsMixin, Base):
    """Transaction model.

    Foreign keys are plain strings rather than ForeignKey constraints because
    identifiers are swapped for server-issued ones during sync.
    """

    __tablename__ = "transactions"

    type = Column("type", String, nullable=False)
    purpose = Column("purpose", String, nullable=True)
    amount = _money("amount")
    account_id = Column("accountId", String, nullable=False, index=True)
    user_id = Column("userId", String, nullable=False)
    contact_id = Column("contactId", String, nullable=True, index=True)
    category_id = Column("categoryId", String, nullable=True)
    on_behalf_of_contact_id = Column("onBehalfOfContactId", String, nullable=True)
    transaction_date = Column("transactionDate", Date, nullable=False)
    due_date = Column("dueDate", Date, nullable=True)
    remarks = Column("remarks", String, nullable=True)
    status = Column("status", String, default="active", nullable=False)
    is_recurring = Column("isRecurring", Boolean, default=False, nullable=False)
    recurring_pattern = Column("recurringPattern", String, nullable=True)
    parent_transaction_id = Column("parentTransactionId", String, nullable=True)
    is_settled = Column("isSettled", Boolean, default=False, nullable=False)
    settled_at = Column("settledAt", DateTime, nullable=True)
    settlement_note = Column("settlementNote", String, nullable=True)


class Category(SyncColumnsMixin, Base):
    """Category model."""

    __tablename__ = "categories"

    name = Column("name", String, nullable=False)
    user_id = Column("userId", String, nullable=False)
    type = Column("type", String, default="expense", nullable=False)
    description = Column("description", String, nullable=True)
    color = Column("color", String, nullable=True)
    icon = Column("icon", String, nullable=True)
    parent_category_id = Column("parentCategoryId", String, nullable=True)
    is_active = Column("isActive", Boolean, default=True, nullable=False)


class Budget(SyncColumnsMixin, Base):
    """Budget model."""

    __tablename__ = "budgets"

    name = Column("name", String, nullable=False)
    amount = _money("amount")
    period = Column("period", String, nullable=False)
    user_id = Column("userId", String, nullable=False)
    category_id = Column("categoryId", String, nullable=True)
    start_date = Column("startDate", Date, nullable=True)
    end_date = Column("endDate", Date, nullable=True)
    is_active = Column("isActive", Boolean, default=True, nullable=False)


class ProxyPayment(SyncColumnsMixin, Base):
    """Proxy payment link model."""

    __tablename__ = "proxy_payments"

    user_id = Column("userId", String, nullable=False)
    original_transaction_id = Column("originalTransactionId", String, nullable=False, index=True)
    adjustment_transaction_id = Column("adjustmentTransactionId", String, nullable=False, index=True)
    on_behalf_of_contact_id = Column("onBehalfOfContactId", String, nullable=False)
    amount = _money("amount")
    status = Column("status", String, default="active", nullable=False)


class SyncLog(Base):
    """Change ledger entry model."""

    __tablename__ = "sync_logs"

    id = Column("id", String, primary_key=True)
    seq = Column("seq", Integer, nullable=False, index=True)
    user_id = Column("userId", String, nullable=False, index=True)
    table_name = Column("tableName", String, nullable=False)
    record_id = Column("recordId", String, nullable=False, index=True)
    operation = Column("operation", String, nullable=False)
    status = Column("status", String, default="pending", nullable=False)
    error = Column("error", String, nullable=True)
    created_on = Column("createdOn", DateTime, default=_now, nullable=False)
    processed_at = Column("processedAt", DateTime, nullable=True)


class CodeList(Base):
    """Code list model (currencies, languages, ...)."""

    __tablename__ = "code_lists"

    name = Column("name", String, primary_key=True)
    description = Column("description", String, nullable=True)
    is_active = Column("isActive", Boolean, default=True, nullable=False)
    created_on = Column("createdOn", DateTime, default=_now, nullable=False)
    updated_on = Column("updatedOn", DateTime, default=_now, nullable=False)


class CodeListElement(Base):
    """Code list element model."""

    __tablename__ = "code_list_elements"

    id = Column("id", String, primary_key=True)
    code_list_name = Column("codeListName", String, ForeignKey("code_lists.name"), nullable=False)
    element = Column("element", String, nullable=False)
    description = Column("description", String, nullable=True)
    active = Column("active", Boolean, default=True, nullable=False)
    sort_order = Column("sortOrder", Integer, default=0, nullable=False)
    created_on = Column("createdOn", DateTime, default=_now, nullable=False)
    updated_on = Column("updatedOn", DateTime, default=_now, nullable=False)


TABLE_MODELS = {
    model.__tablename__: model
    for model in (User, Account, Contact, Transaction, Category, Budget, ProxyPayment)
}

# Local columns that hold another record's identifier: table -> [(attribute, referenced table)]
LOCAL_REFERENCES = {
    "accounts": [("user_id", "users")],
    "contacts": [("user_id", "users")],
    "transactions": [
        ("account_id", "accounts"),
        ("contact_id", "contacts"),
        ("on_behalf_of_contact_id", "contacts"),
        ("category_id", "categories"),
        ("parent_transaction_id", "transactions"),
    ],
    "categories": [("parent_category_id", "categories")],
    "budgets": [("category_id", "categories")],
    "proxy_payments": [
        ("original_transaction_id", "transactions"),
        ("adjustment_transaction_id", "transactions"),
        ("on_behalf_of_contact_id", "contacts"),
    ],
}


def create_engine_for(database_url: str) -> Engine:
    """Create a SQLAlchemy engine and the schema."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    return sessionmaker(bind=engine, expire_on_commit=False)
