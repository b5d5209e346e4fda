"""CLI error handling helpers."""

import logging

import click

from hisab.domain.errors import DomainError, PropagationError, StoreError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print ``error`` to stderr and exit with status 1.

    Store failures leave the data unchanged because the whole operation
    rolls back, so the message says so.
    """
    if isinstance(error, PropagationError):
        logger.debug("Balance rebuild failed from %s", error.anchor, exc_info=error)
        click.echo(f"Error: {error}. No changes were saved; run 'hisab day recalc' to retry.", err=True)
    elif isinstance(error, StoreError):
        logger.debug("Store failure", exc_info=error)
        click.echo(f"Error: {error}. No changes were saved.", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
