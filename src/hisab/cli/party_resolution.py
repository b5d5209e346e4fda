"""CLI helpers for party resolution."""

from __future__ import annotations

import click

from hisab.domain.entities import Party
from hisab.domain.party import PartyService


def resolve_party_or_exit(ctx: click.Context, party_service: PartyService, party: str | int) -> Party:
    """Resolve party name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return party_service.resolve(party)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
