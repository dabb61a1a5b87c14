"""Main CLI entry point."""

import logging

import click
from debtbook.cli.error_handling import handle_store_error
from debtbook.database.factories import create_sqlite_database
from debtbook.domain.errors import StoreOpenError

# Import and register all commands at module level
from debtbook.cli.commands import (
    user,
    account,
    contact,
    transaction,
    proxy,
    category,
    budget,
    sync,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DEBTBOOK_DB_PATH environment variable)",
    envvar="DEBTBOOK_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Debtbook - offline-first debt and expense tracking.

    Record accounts, contacts, transactions and debts locally; paid users
    can sync them to the remote store when online.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            db = create_sqlite_database(database_path=db_path)
        except StoreOpenError as e:
            handle_store_error(ctx, e)
        db.connect()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
contact.register_commands(cli)
transaction.register_commands(cli)
proxy.register_commands(cli)
category.register_commands(cli)
budget.register_commands(cli)
sync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
