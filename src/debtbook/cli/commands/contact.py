"""Contact management commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import current_user_or_exit, resolve_contact_or_exit
from debtbook.domain.contact import ContactService
from debtbook.domain.errors import DomainError


@click.group()
def contact_group():
    """Manage contacts."""
    pass


@contact_group.command("add")
@click.argument("name")
@click.option("--phone", help="Phone number")
@click.option("--email", help="Email address")
@click.pass_context
def add_contact(ctx, name: str, phone: str | None, email: str | None):
    """Add a contact."""
    user = current_user_or_exit(ctx)
    try:
        contact_id = ContactService(ctx.obj["db"]).create_contact(user.id, name, phone=phone, email=email)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added contact '{name}' (ID: {contact_id})")


@contact_group.command("list")
@click.pass_context
def list_contacts(ctx):
    """List contacts with what they owe and are owed."""
    user = current_user_or_exit(ctx)
    contacts = ContactService(ctx.obj["db"]).list_contacts(user.id)
    if not contacts:
        click.echo("No contacts found.")
        return

    click.echo("\nContacts:")
    click.echo("-" * 78)
    for c in contacts:
        click.echo(f"{c.id} | {c.name:20s} | owes you {c.total_owed:>10.2f} | you owe {c.total_owing:>10.2f}")


@contact_group.command("delete")
@click.argument("contact", metavar="CONTACT")
@click.pass_context
def delete_contact(ctx, contact: str):
    """Delete a contact no transaction refers to.

    CONTACT can be a contact name or ID.
    """
    user = current_user_or_exit(ctx)
    contact_id = resolve_contact_or_exit(ctx, user, contact)
    try:
        ContactService(ctx.obj["db"]).delete_contact(contact_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted contact {contact_id}")


def register_commands(cli):
    """Register contact commands with main CLI."""
    cli.add_command(contact_group, name="contact")
