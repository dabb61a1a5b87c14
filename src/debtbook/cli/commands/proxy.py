"""Proxy payment commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import (
    current_user_or_exit,
    resolve_account_or_exit,
    resolve_contact_or_exit,
)
from debtbook.domain.errors import DomainError
from debtbook.domain.proxy_payment import ProxyPaymentService
from debtbook.utils.amount_parser import parse_amount
from debtbook.utils.date_parser import parse_date


@click.group()
def proxy_group():
    """Record payments made on behalf of a contact."""
    pass


@proxy_group.command("add")
@click.option("--account", required=True, help="Account the payment was made from")
@click.option("--contact", required=True, help="Contact the payment was made for")
@click.option("--amount", required=True, help="Amount paid")
@click.option("--date", default="today", show_default=True, help="Payment date")
@click.option("--purpose", help="Short description")
@click.pass_context
def add_proxy_payment(ctx, account: str, contact: str, amount: str, date: str, purpose: str | None):
    """Record a payment made on behalf of a contact.

    The contact then owes you the amount.

    Examples:
        debtbook proxy add --account Wallet --contact Bilal --amount 30 --purpose "Electricity bill"
    """
    user = current_user_or_exit(ctx)
    account_id = resolve_account_or_exit(ctx, user, account)
    contact_id = resolve_contact_or_exit(ctx, user, contact)
    try:
        proxy_id = ProxyPaymentService(ctx.obj["db"]).create_proxy_payment(
            user_id=user.id,
            account_id=account_id,
            on_behalf_of_contact_id=contact_id,
            amount=parse_amount(amount),
            transaction_date=parse_date(date),
            purpose=purpose,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded proxy payment (ID: {proxy_id})")


@proxy_group.command("delete")
@click.argument("proxy_id")
@click.pass_context
def delete_proxy_payment(ctx, proxy_id: str):
    """Delete a proxy payment and both of its transactions."""
    try:
        ProxyPaymentService(ctx.obj["db"]).delete_proxy_payment(proxy_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted proxy payment {proxy_id}")


@proxy_group.command("cancel")
@click.argument("proxy_id")
@click.pass_context
def cancel_proxy_payment(ctx, proxy_id: str):
    """Cancel a proxy payment and revert its balance change."""
    try:
        ProxyPaymentService(ctx.obj["db"]).cancel_proxy_payment(proxy_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Cancelled proxy payment {proxy_id}")


def register_commands(cli):
    """Register proxy payment commands with main CLI."""
    cli.add_command(proxy_group, name="proxy")
