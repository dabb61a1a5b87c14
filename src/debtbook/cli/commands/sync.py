"""Sync commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import current_user_or_exit
from debtbook.domain.ledger import ChangeLedger
from debtbook.sync.engine import SyncEngine
from debtbook.sync.errors import ConfigurationError


@click.group()
def sync_group():
    """Synchronize local changes with the remote store."""
    pass


@sync_group.command("status")
@click.pass_context
def sync_status(ctx):
    """Show how many changes are waiting to be synced."""
    user = current_user_or_exit(ctx)
    counts = ChangeLedger(ctx.obj["db"]).summarize(user.id)
    click.echo(f"Pending:   {counts['pending']}")
    click.echo(f"Failed:    {counts['failed']}")
    click.echo(f"Completed: {counts['completed']}")
    if not user.is_entitled:
        click.echo("Sync is available on the paid tier ('debtbook user upgrade').")


@sync_group.command("run")
@click.option("--offline", is_flag=True, help="Treat the device as offline")
@click.pass_context
def run_sync(ctx, offline: bool):
    """Apply pending changes to the remote store.

    Requires DEBTBOOK_SUPABASE_URL and DEBTBOOK_SUPABASE_KEY.
    """
    from debtbook.sync.supabase_remote import check_connectivity, create_supabase_remote

    user = current_user_or_exit(ctx)
    try:
        remote = create_supabase_remote()
    except ConfigurationError as e:
        handle_domain_error(ctx, e)

    def is_online() -> bool:
        return not offline and check_connectivity(remote.url)

    def report(index: int, total: int, message: str) -> None:
        click.echo(f"[{index}/{total}] {message}")

    summary = SyncEngine(ctx.obj["db"], remote, is_online=is_online).reconcile(user.id, on_progress=report)
    click.echo(f"Synced {summary.success} of {summary.total} changes ({summary.failed} failed)")
    if summary.failed:
        ctx.exit(1)


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync_group, name="sync")
