"""Transaction management commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import (
    current_user_or_exit,
    resolve_account_or_exit,
    resolve_contact_or_exit,
)
from debtbook.domain.entities import TRANSACTION_TYPES
from debtbook.domain.errors import DomainError
from debtbook.domain.transaction import RECURRENCE_STEPS, TransactionService
from debtbook.utils.amount_parser import parse_amount
from debtbook.utils.date_parser import parse_date

TYPE_CHOICE = click.Choice(sorted(TRANSACTION_TYPES))


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--type", "transaction_type", type=TYPE_CHOICE, required=True, help="Transaction type")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option("--date", default="today", show_default=True, help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--contact", help="Contact name or ID")
@click.option("--purpose", help="Short description")
@click.option("--remarks", help="Notes")
@click.option("--due-date", help="Repayment due date")
@click.option("--recurring", type=click.Choice(sorted(RECURRENCE_STEPS)), help="Make this a recurring template")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    transaction_type: str,
    amount: str,
    date: str,
    contact: str | None,
    purpose: str | None,
    remarks: str | None,
    due_date: str | None,
    recurring: str | None,
):
    """Add a transaction.

    Examples:
        debtbook transaction add --account Wallet --type cashIn --amount 50
        debtbook transaction add --account Wallet --type lend --amount 20 --contact Bilal --due-date 2025-07-01
        debtbook transaction add --account Bank --type cashOut --amount 900 --purpose Rent --recurring monthly
    """
    user = current_user_or_exit(ctx)
    account_id = resolve_account_or_exit(ctx, user, account)
    contact_id = resolve_contact_or_exit(ctx, user, contact) if contact else None

    try:
        txn_id = TransactionService(ctx.obj["db"]).create_transaction(
            user_id=user.id,
            account_id=account_id,
            transaction_type=transaction_type,
            amount=parse_amount(amount),
            transaction_date=parse_date(date),
            contact_id=contact_id,
            purpose=purpose,
            remarks=remarks,
            due_date=parse_date(due_date) if due_date else None,
            is_recurring=recurring is not None,
            recurring_pattern=recurring,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added transaction (ID: {txn_id})")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--contact", help="Contact name or ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--all", "include_cancelled", is_flag=True, help="Include cancelled transactions")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    contact: str | None,
    start_date: str | None,
    end_date: str | None,
    include_cancelled: bool,
):
    """List transactions, newest first."""
    user = current_user_or_exit(ctx)
    account_id = resolve_account_or_exit(ctx, user, account) if account else None
    contact_id = resolve_contact_or_exit(ctx, user, contact) if contact else None
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    transactions = TransactionService(ctx.obj["db"]).list_transactions(
        user.id,
        account_id=account_id,
        contact_id=contact_id,
        start_date=start,
        end_date=end,
        include_cancelled=include_cancelled,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        flags = []
        if txn.is_recurring:
            flags.append(f"recurring {txn.recurring_pattern}")
        if txn.on_behalf_of_contact_id:
            flags.append("on behalf")
        if txn.status != "active":
            flags.append(txn.status)
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"{txn.id} | {txn.transaction_date} | {txn.type:8s} | {txn.amount:>10.2f} | "
            f"{txn.purpose or ''}{suffix}"
        )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--amount", help="New amount")
@click.option("--type", "transaction_type", type=TYPE_CHOICE, help="New transaction type")
@click.option("--date", help="New transaction date")
@click.option("--purpose", help="New description")
@click.option("--remarks", help="New notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    amount: str | None,
    transaction_type: str | None,
    date: str | None,
    purpose: str | None,
    remarks: str | None,
):
    """Update a transaction.

    Updates only the fields that are provided.
    """
    changes = {}
    try:
        if amount is not None:
            changes["amount"] = parse_amount(amount)
        if date is not None:
            changes["transaction_date"] = parse_date(date)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if transaction_type is not None:
        changes["type"] = transaction_type
    if purpose is not None:
        changes["purpose"] = purpose
    if remarks is not None:
        changes["remarks"] = remarks
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        TransactionService(ctx.obj["db"]).update_transaction(transaction_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction and revert its balance effect."""
    try:
        TransactionService(ctx.obj["db"]).delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("cancel")
@click.argument("transaction_id")
@click.pass_context
def cancel_transaction(ctx, transaction_id: str):
    """Cancel a transaction, keeping it for the record."""
    try:
        TransactionService(ctx.obj["db"]).cancel_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Cancelled transaction {transaction_id}")


@transaction_group.command("generate")
@click.argument("transaction_id")
@click.option("--through", default="today", show_default=True, help="Generate occurrences due up to this date")
@click.pass_context
def generate_occurrences(ctx, transaction_id: str, through: str):
    """Create the due occurrences of a recurring transaction."""
    try:
        created = TransactionService(ctx.obj["db"]).generate_occurrences(transaction_id, parse_date(through))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Generated {len(created)} occurrence{'s' if len(created) != 1 else ''}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
