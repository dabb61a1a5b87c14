"""Shared pytest fixtures for debtbook tests."""

import tempfile
import os
import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal

import pytest

from debtbook.database.factories import create_sqlite_database
from debtbook.domain.account import AccountService
from debtbook.domain.budget import BudgetService
from debtbook.domain.category import CategoryService
from debtbook.domain.contact import ContactService
from debtbook.domain.entities import USER_PAID
from debtbook.domain.ledger import ChangeLedger
from debtbook.domain.proxy_payment import ProxyPaymentService
from debtbook.domain.transaction import TransactionService
from debtbook.domain.user import UserService
from debtbook.sync.engine import SyncEngine
from debtbook.sync.errors import RemoteError
from debtbook.sync.remote import RemoteSession, RemoteStore
from debtbook.sync.transform import FOREIGN_KEYS

REMOTE_USER_ID = "9b2f4c1e-5d7a-4e0b-8c3d-1f6a2b7c9d04"


class FakeRemoteStore(RemoteStore):
    """In-memory remote store that assigns UUIDs and enforces foreign keys."""

    def __init__(self):
        self.tables = defaultdict(dict)
        self.calls = []
        self.failures = {}
        self.session = None
        self.listeners = []
        self.credentials = {}

    def fail_on(self, operation: str, table: str, message: str = "rejected by server") -> None:
        self.failures[(operation, table)] = message

    def recover(self) -> None:
        self.failures.clear()

    def _check(self, operation: str, table: str, row=None) -> None:
        if (operation, table) in self.failures:
            raise RemoteError(self.failures[(operation, table)], code="P0001")
        for column, target in FOREIGN_KEYS.get(table, {}).items():
            value = (row or {}).get(column)
            if value is not None and value not in self.tables[target]:
                raise RemoteError(
                    f'insert or update on table "{table}" violates foreign key constraint on {column}',
                    code="23503",
                )

    def insert(self, table, row):
        self._check("insert", table, row)
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        self.tables[table][stored["id"]] = stored
        self.calls.append(("insert", table, stored["id"], dict(row)))
        return dict(stored)

    def update(self, table, record_id, row):
        self._check("update", table, row)
        if record_id not in self.tables[table]:
            raise RemoteError(f"No {table} row with id {record_id}", code="PGRST116")
        self.tables[table][record_id].update(row)
        self.calls.append(("update", table, record_id, dict(row)))
        return dict(self.tables[table][record_id])

    def delete(self, table, record_id):
        self._check("delete", table)
        self.tables[table].pop(record_id, None)
        self.calls.append(("delete", table, record_id, None))

    def select(self, table, columns="*", filters=None, order_by=None, descending=False):
        rows = [
            dict(row)
            for row in self.tables[table].values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by is not None:
            rows.sort(key=lambda r: r.get(order_by), reverse=descending)
        return rows

    def get_session(self):
        return self.session

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return lambda: self.listeners.remove(callback)

    def sign_in(self, email, password):
        if self.credentials.get(email) != password:
            raise RemoteError("Invalid login credentials", code="400")
        self.session = RemoteSession(user_id=REMOTE_USER_ID, email=email, access_token="token-1")
        for callback in list(self.listeners):
            callback("SIGNED_IN", self.session)
        return self.session


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger(temp_db):
    return ChangeLedger(temp_db)


@pytest.fixture
def user_service(temp_db):
    return UserService(temp_db)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def contact_service(temp_db):
    return ContactService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def proxy_service(temp_db):
    return ProxyPaymentService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def sample_user(user_service):
    """Create a free-tier user."""
    user_id = user_service.create_user("Ayesha", last_name="Khan", email="ayesha@example.com")
    return user_service.get_user(user_id)


@pytest.fixture
def sample_account(account_service, sample_user):
    """Create an account with a zero opening balance."""
    account_id = account_service.create_account(sample_user.id, "Wallet")
    return account_service.get_account(account_id)


@pytest.fixture
def sample_contact(contact_service, sample_user):
    contact_id = contact_service.create_contact(sample_user.id, "Bilal", phone="+92 300 1234567")
    return contact_service.get_contact(contact_id)


@pytest.fixture
def fake_remote():
    """Remote store with the remote user row already provisioned."""
    remote = FakeRemoteStore()
    remote.tables["users"][REMOTE_USER_ID] = {"id": REMOTE_USER_ID, "email": "ayesha@example.com"}
    return remote


@pytest.fixture
def paid_user(user_service, sample_user):
    """Upgrade the sample user to the paid tier and link the remote user row."""
    user_service.set_user_type(sample_user.id, USER_PAID)
    return user_service.link_remote_user(sample_user.id, REMOTE_USER_ID)


@pytest.fixture
def sync_engine(temp_db, fake_remote):
    return SyncEngine(temp_db, fake_remote)


@pytest.fixture
def add_transaction(transaction_service, sample_user, sample_account):
    """Return a helper that adds a transaction to the sample account."""

    def _add(transaction_type="cashIn", amount="50", **kwargs):
        kwargs.setdefault("transaction_date", date(2025, 3, 14))
        return transaction_service.create_transaction(
            user_id=sample_user.id,
            account_id=kwargs.pop("account_id", sample_account.id),
            transaction_type=transaction_type,
            amount=Decimal(amount),
            **kwargs,
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
