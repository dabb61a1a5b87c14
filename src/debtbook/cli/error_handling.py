"""CLI error handling helpers."""

import logging

import click

from debtbook.domain.errors import DomainError, StoreError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain or configuration error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_store_error(ctx: click.Context, error: StoreError) -> None:
    """Render a local store failure and exit with failure.

    Reached when the store cannot be opened even after it was recreated;
    no command can run without it.
    """
    logger.error("Local store unavailable: %s", error)
    click.echo(f"Error: local store unavailable: {error}", err=True)
    ctx.exit(1)
