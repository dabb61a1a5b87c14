"""Tests for mapper functions between domain and ORM models and local records."""

from datetime import date, datetime
from decimal import Decimal

from debtbook.database.mappers import (
    domain_to_orm,
    local_record_to_fields,
    record_to_domain,
    to_local_record,
)
from debtbook.database.models import Account as ORMAccount, Transaction as ORMTransaction
from debtbook.domain import entities


def test_domain_to_orm_leaves_unset_fields_to_defaults():
    account = entities.Account(id="acc-1", name="Wallet", user_id="u-1")

    orm_account = domain_to_orm(account)

    assert isinstance(orm_account, ORMAccount)
    assert orm_account.id == "acc-1"
    assert orm_account.supabase_id is None
    # Column defaults are filled in at flush time
    assert orm_account.created_on is None


def test_record_to_domain_picks_entity_by_table():
    orm_txn = ORMTransaction(
        id="t-1",
        type="lend",
        amount=Decimal("25.00"),
        account_id="acc-1",
        user_id="u-1",
        transaction_date=date(2025, 3, 14),
        status="active",
        is_recurring=False,
        is_settled=False,
        sync_status="pending",
        needs_upload=True,
    )

    txn = record_to_domain(orm_txn)

    assert isinstance(txn, entities.Transaction)
    assert txn.type == "lend"
    assert txn.amount == Decimal("25.00")


def test_local_record_uses_column_names():
    txn = entities.Transaction(
        id="t-1",
        type="cashOut",
        amount=Decimal("10"),
        account_id="acc-1",
        user_id="u-1",
        transaction_date=date(2025, 3, 14),
        on_behalf_of_contact_id="c-1",
    )

    record = to_local_record(txn)

    assert record["accountId"] == "acc-1"
    assert record["onBehalfOfContactId"] == "c-1"
    assert record["transactionDate"] == date(2025, 3, 14)
    assert record["supabaseId"] is None
    assert "account_id" not in record


def test_local_record_to_fields_coerces_remote_values():
    fields = local_record_to_fields(
        "transactions",
        {
            "amount": 12.5,
            "transactionDate": "2025-03-14",
            "settledAt": "2025-03-15T10:30:00+00:00",
            "accountId": "acc-1",
            "serverOnlyColumn": "ignored",
        },
    )

    assert fields["amount"] == Decimal("12.5")
    assert fields["transaction_date"] == date(2025, 3, 14)
    assert isinstance(fields["settled_at"], datetime)
    assert fields["account_id"] == "acc-1"
    assert "serverOnlyColumn" not in fields


def test_local_record_round_trips_to_entity():
    account = entities.Account(id="acc-1", name="Wallet", user_id="u-1", current_balance=Decimal("7.25"))

    rebuilt = entities.Account(**local_record_to_fields("accounts", to_local_record(account)))

    assert rebuilt == account
