"""Tests for user, account and contact commands."""

from debtbook.cli.main import cli
from debtbook.database.factories import create_sqlite_database


def _invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_commands_require_a_user(cli_runner, temp_db):
    """Test commands fail before 'user init'."""
    result = _invoke(cli_runner, temp_db, "account", "list")

    assert result.exit_code == 1
    assert "No user found" in result.output


def test_user_init(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "user", "init", "Ayesha", "--last-name", "Khan")

    assert result.exit_code == 0
    assert "Created user 'Ayesha'" in result.output

    result = _invoke(cli_runner, temp_db, "user", "show")
    assert "Ayesha Khan" in result.output
    assert "Tier:     free" in result.output
    assert "not linked" in result.output


def test_user_init_twice(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "user", "init", "Someone")

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_user_init_rejects_unknown_language(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "user", "init", "Ayesha", "--language", "xx")

    assert result.exit_code == 1
    assert "Invalid language 'xx'" in result.output


def test_user_upgrade_and_link(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "user", "upgrade")
    assert result.exit_code == 0
    assert "paid tier" in result.output

    result = _invoke(cli_runner, temp_db, "user", "link", "9b2f4c1e-5d7a-4e0b-8c3d-1f6a2b7c9d04")
    assert result.exit_code == 0

    result = _invoke(cli_runner, temp_db, "user", "show")
    assert "Tier:     paid" in result.output
    assert "9b2f4c1e-5d7a-4e0b-8c3d-1f6a2b7c9d04" in result.output


def test_account_create(cli_runner, temp_db, sample_user):
    """Test creating an account with an opening balance."""
    result = _invoke(
        cli_runner, temp_db, "account", "create", "Bank", "--currency", "PKR", "--initial", "2,500"
    )

    assert result.exit_code == 0
    assert "Created account 'Bank'" in result.output
    assert "ID:" in result.output

    result = _invoke(cli_runner, temp_db, "account", "list")
    assert "Bank" in result.output
    assert "2500.00 PKR" in result.output
    assert "pending" in result.output


def test_account_create_invalid_initial_amount(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "account", "create", "Bank", "--initial", "lots")

    assert result.exit_code == 1
    assert "Could not parse amount" in result.output


def test_account_create_duplicate(cli_runner, temp_db, sample_account):
    """Test creating duplicate account name fails."""
    result = _invoke(cli_runner, temp_db, "account", "create", "Wallet")

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_account_list_empty(cli_runner, temp_db, sample_user):
    """Test listing accounts when none exist."""
    result = _invoke(cli_runner, temp_db, "account", "list")

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_rename_by_name(cli_runner, temp_db, sample_account):
    result = _invoke(cli_runner, temp_db, "account", "rename", "Wallet", "Purse")

    assert result.exit_code == 0
    db = create_sqlite_database(temp_db.database_path)
    assert db.get_account(sample_account.id).name == "Purse"
    db.disconnect()


def test_account_rename_unknown(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "account", "rename", "Nope", "Purse")

    assert result.exit_code == 1
    assert "Account 'Nope' not found" in result.output


def test_account_delete_requires_confirmation(cli_runner, temp_db, sample_account):
    result = _invoke(cli_runner, temp_db, "account", "delete", "Wallet", input="n\n")

    assert "Deletion cancelled" in result.output
    result = _invoke(cli_runner, temp_db, "account", "list")
    assert "Wallet" in result.output


def test_account_delete_with_transactions(cli_runner, temp_db, sample_account, add_transaction):
    add_transaction()

    result = _invoke(cli_runner, temp_db, "account", "delete", "Wallet", "--yes")

    assert result.exit_code == 1
    assert "Cannot delete account" in result.output


def test_account_delete(cli_runner, temp_db, sample_account):
    result = _invoke(cli_runner, temp_db, "account", "delete", sample_account.id, "--yes")

    assert result.exit_code == 0
    assert "Deleted account 'Wallet'" in result.output


def test_contact_add_and_list(cli_runner, temp_db, sample_user):
    result = _invoke(cli_runner, temp_db, "contact", "add", "Bilal", "--phone", "+92 300 1234567")
    assert result.exit_code == 0
    assert "Added contact 'Bilal'" in result.output

    result = _invoke(cli_runner, temp_db, "contact", "list")
    assert "Bilal" in result.output
    assert "owes you       0.00" in result.output


def test_contact_ambiguous_name(cli_runner, temp_db, contact_service, sample_user, sample_contact):
    contact_service.create_contact(sample_user.id, "Bilal")

    result = _invoke(cli_runner, temp_db, "contact", "delete", "Bilal")

    assert result.exit_code == 1
    assert "Several contacts are named 'Bilal'" in result.output


def test_contact_delete(cli_runner, temp_db, sample_contact):
    result = _invoke(cli_runner, temp_db, "contact", "delete", "Bilal")

    assert result.exit_code == 0
    result = _invoke(cli_runner, temp_db, "contact", "list")
    assert "No contacts found" in result.output
