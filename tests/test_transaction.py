"""Tests for transaction and proxy payment commands."""

import re
from datetime import date
from decimal import Decimal

from debtbook.cli.main import cli
from debtbook.database.factories import create_sqlite_database


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def _created_id(output):
    return re.search(r"ID: ([^)]+)\)", output).group(1)


def _fresh(temp_db):
    return create_sqlite_database(temp_db.database_path)


def test_add_transaction_minimal(cli_runner, temp_db, sample_account):
    """Test adding a transaction with minimal fields."""
    result = _invoke(
        cli_runner, temp_db,
        "transaction", "add", "--account", "Wallet", "--type", "cashIn", "--amount", "50", "--date", "2025-03-14",
    )

    assert result.exit_code == 0
    assert "Added transaction" in result.output

    result = _invoke(cli_runner, temp_db, "account", "list")
    assert "50.00 USD" in result.output


def test_add_lend_with_contact(cli_runner, temp_db, sample_account, sample_contact):
    result = _invoke(
        cli_runner, temp_db,
        "transaction", "add", "--account", sample_account.id, "--type", "lend", "--amount", "$20",
        "--contact", "Bilal", "--due-date", "2025-07-01", "--purpose", "Lunch",
    )

    assert result.exit_code == 0
    db = _fresh(temp_db)
    txn = db.get_transaction(_created_id(result.output))
    assert txn.contact_id == sample_contact.id
    assert txn.amount == Decimal("20.00")
    assert txn.due_date == date(2025, 7, 1)
    assert db.get_contact(sample_contact.id).total_owed == Decimal("20.00")
    db.disconnect()


def test_add_transaction_invalid_amount(cli_runner, temp_db, sample_account):
    result = _invoke(
        cli_runner, temp_db, "transaction", "add", "--account", "Wallet", "--type", "cashIn", "--amount", "-5",
    )

    assert result.exit_code == 1
    assert "Amount must be a positive number" in result.output


def test_add_transaction_unknown_account(cli_runner, temp_db, sample_user):
    result = _invoke(
        cli_runner, temp_db, "transaction", "add", "--account", "Nope", "--type", "cashIn", "--amount", "5",
    )

    assert result.exit_code == 1
    assert "Account 'Nope' not found" in result.output


def test_add_transaction_invalid_type(cli_runner, temp_db, sample_account):
    result = _invoke(
        cli_runner, temp_db, "transaction", "add", "--account", "Wallet", "--type", "refund", "--amount", "5",
    )

    assert result.exit_code == 2


def test_list_transactions(cli_runner, temp_db, add_transaction):
    add_transaction("cashIn", "50", purpose="Salary", transaction_date=date(2025, 3, 1))
    add_transaction("cashOut", "20", purpose="Rent", is_recurring=True, recurring_pattern="monthly")

    result = _invoke(cli_runner, temp_db, "transaction", "list")

    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if "|" in line]
    assert "Rent [recurring monthly]" in lines[0]
    assert "Salary" in lines[1]


def test_list_transactions_date_filter(cli_runner, temp_db, add_transaction):
    add_transaction(purpose="February", transaction_date=date(2025, 2, 10))
    add_transaction(purpose="March", transaction_date=date(2025, 3, 10))

    result = _invoke(cli_runner, temp_db, "transaction", "list", "--start-date", "2025-03-01")

    assert "March" in result.output
    assert "February" not in result.output


def test_list_transactions_bad_date(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "transaction", "list", "--start-date", "not a date")

    assert result.exit_code == 1
    assert "Could not parse date" in result.output


def test_list_transactions_empty(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "transaction", "list")

    assert "No transactions found" in result.output


def test_update_transaction(cli_runner, temp_db, sample_account, add_transaction):
    txn_id = add_transaction("cashIn", "50")

    result = _invoke(cli_runner, temp_db, "transaction", "update", txn_id, "--amount", "75", "--purpose", "Gift")

    assert result.exit_code == 0
    db = _fresh(temp_db)
    assert db.get_transaction(txn_id).purpose == "Gift"
    assert db.get_account(sample_account.id).current_balance == Decimal("75")
    db.disconnect()


def test_update_nothing(cli_runner, temp_db, add_transaction):
    txn_id = add_transaction()

    result = _invoke(cli_runner, temp_db, "transaction", "update", txn_id)

    assert "Nothing to update" in result.output


def test_update_missing_transaction(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "transaction", "update", "nope", "--purpose", "x")

    assert result.exit_code == 1
    assert "Transaction nope not found" in result.output


def test_cancel_and_delete(cli_runner, temp_db, add_transaction):
    cancelled = add_transaction(purpose="Cancelled one")
    deleted = add_transaction(purpose="Deleted one")

    assert _invoke(cli_runner, temp_db, "transaction", "cancel", cancelled).exit_code == 0
    assert _invoke(cli_runner, temp_db, "transaction", "delete", deleted).exit_code == 0

    result = _invoke(cli_runner, temp_db, "transaction", "list", "--all")
    assert "Cancelled one [cancelled]" in result.output
    assert "Deleted one" not in result.output


def test_generate_occurrences(cli_runner, temp_db, add_transaction):
    parent_id = add_transaction(
        "cashOut", "20", transaction_date=date(2025, 1, 15), is_recurring=True, recurring_pattern="monthly"
    )

    result = _invoke(cli_runner, temp_db, "transaction", "generate", parent_id, "--through", "2025-03-20")

    assert result.exit_code == 0
    assert "Generated 3 occurrences" in result.output


def test_proxy_add_and_cancel(cli_runner, temp_db, sample_account, sample_contact):
    result = _invoke(
        cli_runner, temp_db,
        "proxy", "add", "--account", "Wallet", "--contact", "Bilal", "--amount", "30",
        "--purpose", "Electricity bill",
    )
    assert result.exit_code == 0
    assert "Recorded proxy payment" in result.output
    proxy_id = _created_id(result.output)

    result = _invoke(cli_runner, temp_db, "contact", "list")
    assert "owes you      30.00" in result.output

    result = _invoke(cli_runner, temp_db, "proxy", "cancel", proxy_id)
    assert result.exit_code == 0

    result = _invoke(cli_runner, temp_db, "contact", "list")
    assert "owes you       0.00" in result.output

    result = _invoke(cli_runner, temp_db, "proxy", "cancel", proxy_id)
    assert result.exit_code == 1
    assert "already cancelled" in result.output


def test_proxy_delete(cli_runner, temp_db, sample_account, sample_contact):
    result = _invoke(
        cli_runner, temp_db, "proxy", "add", "--account", "Wallet", "--contact", "Bilal", "--amount", "30",
    )
    proxy_id = _created_id(result.output)

    result = _invoke(cli_runner, temp_db, "proxy", "delete", proxy_id)

    assert result.exit_code == 0
    result = _invoke(cli_runner, temp_db, "transaction", "list", "--all")
    assert "No transactions found" in result.output
