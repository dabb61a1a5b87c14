"""Account management commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import current_user_or_exit, resolve_account_or_exit
from debtbook.domain.account import AccountService
from debtbook.domain.errors import DomainError
from debtbook.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--currency", default="USD", show_default=True, help="Currency code")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(["cash_in_cash_out", "debit_credit", "receive_send_out", "borrow_lend"]),
    default="cash_in_cash_out",
    show_default=True,
    help="Account type",
)
@click.option("--initial", "initial_amount", help="Opening balance")
@click.option("--primary", is_flag=True, help="Mark as primary account")
@click.pass_context
def create_account(
    ctx, name: str, currency: str, account_type: str, initial_amount: str | None, primary: bool
):
    """Create a new account.

    Examples:
        debtbook account create "Wallet"
        debtbook account create "Bank" --currency PKR --type debit_credit --initial 2500
    """
    user = current_user_or_exit(ctx)
    service = AccountService(ctx.obj["db"])
    try:
        kwargs = {}
        if initial_amount is not None:
            kwargs["initial_amount"] = parse_amount(initial_amount)
        account_id = service.create_account(
            user.id,
            name,
            currency=currency,
            account_type=account_type,
            is_primary=primary,
            **kwargs,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    user = current_user_or_exit(ctx)
    accounts = AccountService(ctx.obj["db"]).list_accounts(user.id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        click.echo(
            f"{acc.id} | {acc.name:20s} | {acc.current_balance:>12.2f} {acc.currency} | {acc.sync_status}"
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_account(ctx, account: str, new_name: str) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.
    """
    user = current_user_or_exit(ctx)
    account_id = resolve_account_or_exit(ctx, user, account)
    try:
        AccountService(ctx.obj["db"]).rename_account(account_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account to '{new_name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. The account can only be deleted
    if no transactions refer to it.
    """
    user = current_user_or_exit(ctx)
    account_id = resolve_account_or_exit(ctx, user, account)
    service = AccountService(ctx.obj["db"])
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
