"""CLI helpers for resolving the current user, accounts and contacts."""

from __future__ import annotations

import click

from debtbook.domain.account import AccountService
from debtbook.domain.contact import ContactService
from debtbook.domain.entities import User
from debtbook.domain.user import UserService
from debtbook.utils.resolver import resolve_account, resolve_contact


def current_user_or_exit(ctx: click.Context) -> User:
    """Return the device's user, or exit if none was created yet."""
    user = UserService(ctx.obj["db"]).get_current_user()
    if user is None:
        click.echo("Error: No user found. Run 'debtbook user init' first.", err=True)
        ctx.exit(1)
    return user


def resolve_account_or_exit(ctx: click.Context, user: User, account: str) -> str:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(AccountService(ctx.obj["db"]), user.id, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_contact_or_exit(ctx: click.Context, user: User, contact: str) -> str:
    """Resolve contact name or ID, or exit with a CLI error."""
    try:
        return resolve_contact(ContactService(ctx.obj["db"]), user.id, contact)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
