"""User profile commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import current_user_or_exit
from debtbook.domain.codelist import CodeListService
from debtbook.domain.entities import USER_FREE, USER_PAID
from debtbook.domain.errors import DomainError
from debtbook.domain.user import UserService
from debtbook.sync.errors import ConfigurationError, RemoteError


@click.group()
def user_group():
    """Manage the device owner's profile."""
    pass


@user_group.command("init")
@click.argument("first_name")
@click.option("--last-name", help="Last name")
@click.option("--email", help="Email address")
@click.option("--language", default="en", show_default=True, help="Language code")
@click.pass_context
def init_user(ctx, first_name: str, last_name: str | None, email: str | None, language: str):
    """Create the local user and seed reference data.

    Examples:
        debtbook user init Ayesha --last-name Khan --email ayesha@example.com
    """
    db = ctx.obj["db"]
    service = UserService(db)
    existing = service.get_current_user()
    if existing is not None:
        click.echo(f"Error: User '{existing.first_name}' already exists (ID: {existing.id})", err=True)
        ctx.exit(1)

    CodeListService(db).seed_defaults()
    try:
        user_id = service.create_user(first_name, last_name=last_name, email=email, language=language)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user '{first_name}' (ID: {user_id})")


@user_group.command("show")
@click.pass_context
def show_user(ctx):
    """Show the current user."""
    user = current_user_or_exit(ctx)
    name = " ".join(part for part in (user.first_name, user.last_name) if part)
    click.echo(f"ID:       {user.id}")
    click.echo(f"Name:     {name}")
    click.echo(f"Email:    {user.email or '-'}")
    click.echo(f"Tier:     {user.user_type}")
    click.echo(f"Language: {user.language}")
    click.echo(f"Remote:   {user.supabase_id or 'not linked'}")


def _set_tier(ctx, user_type: str) -> None:
    user = current_user_or_exit(ctx)
    try:
        UserService(ctx.obj["db"]).set_user_type(user.id, user_type)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"User is now on the {user_type} tier")


@user_group.command("upgrade")
@click.pass_context
def upgrade_user(ctx):
    """Move the user to the paid tier (enables sync)."""
    _set_tier(ctx, USER_PAID)


@user_group.command("downgrade")
@click.pass_context
def downgrade_user(ctx):
    """Move the user to the free tier (disables sync)."""
    _set_tier(ctx, USER_FREE)


@user_group.command("link")
@click.argument("supabase_id")
@click.pass_context
def link_user(ctx, supabase_id: str):
    """Link the local user to its remote user row.

    SUPABASE_ID is the remote user's identifier.
    """
    user = current_user_or_exit(ctx)
    try:
        UserService(ctx.obj["db"]).link_remote_user(user.id, supabase_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Linked user {user.id} to remote user {supabase_id}")


@user_group.command("login")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, help="Remote account password")
@click.pass_context
def login_user(ctx, email: str, password: str):
    """Sign in to the remote store and link the local user to that account.

    Requires DEBTBOOK_SUPABASE_URL and DEBTBOOK_SUPABASE_KEY.

    Examples:
        debtbook user login ayesha@example.com
    """
    from debtbook.sync.supabase_remote import create_supabase_remote

    user = current_user_or_exit(ctx)
    try:
        session = create_supabase_remote().sign_in(email, password)
    except ConfigurationError as e:
        handle_domain_error(ctx, e)
    except RemoteError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        UserService(ctx.obj["db"]).link_remote_user(user.id, session.user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Signed in as {email}; linked to remote user {session.user_id}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
