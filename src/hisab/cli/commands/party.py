"""Party management commands."""

import click
from hisab.cli.error_handling import handle_domain_error
from hisab.cli.party_resolution import resolve_party_or_exit
from hisab.domain.entities import PartyRole
from hisab.domain.errors import DomainError
from hisab.domain.facade import LedgerFacade
from hisab.utils.amount_parser import parse_amount
from hisab.utils.date_parser import parse_date

ROLE_CHOICE = click.Choice([role.value for role in PartyRole], case_sensitive=False)


@click.group()
def party_group():
    """Manage customers and suppliers."""
    pass


@party_group.command("add")
@click.argument("name", metavar="PARTY_NAME")
@click.option("--role", type=ROLE_CHOICE, default=PartyRole.CUSTOMER.value, show_default=True)
@click.option("--opening", help="Opening balance owed by the party (e.g., 1500 or -200)")
@click.option("--phone", help="Phone number")
@click.option("--notes", help="Free text notes")
@click.pass_context
def add_party(ctx, name: str, role: str, opening: str | None, phone: str | None, notes: str | None):
    """Add a new party.

    Examples:
        hisab party add "Ramesh"
        hisab party add "Dairy Supplier" --role SELLER --opening 2500
    """
    facade = LedgerFacade(ctx.obj["db"])

    opening_balance = 0
    if opening is not None:
        try:
            opening_balance = parse_amount(opening)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        party_id = facade.create_party(
            name, role=PartyRole(role.upper()), opening_balance=opening_balance, phone=phone, notes=notes
        )
        click.echo(f"Created party '{name.strip()}' (ID: {party_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@party_group.command("list")
@click.option("--role", type=ROLE_CHOICE, help="Only parties with this role")
@click.pass_context
def list_parties(ctx, role: str | None):
    """List all parties with their running balance."""
    facade = LedgerFacade(ctx.obj["db"])

    parties = facade.parties.list_parties(role=PartyRole(role.upper()) if role else None)
    if not parties:
        click.echo("No parties found.")
        return

    click.echo("\nParties:")
    click.echo("-" * 60)
    for p in parties:
        balance = facade.party_balance(p.id).balance
        click.echo(f"ID: {p.id:3d} | {p.name:20s} | {p.role.value:8s} | Balance: {balance:>12.2f}")


@party_group.command("rename")
@click.argument("party", metavar="PARTY")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_party(ctx, party: str, new_name: str) -> None:
    """Rename a party everywhere, including cash book lines.

    PARTY can be a party name or ID.

    Examples:
        hisab party rename "Ramesh" "Ramesh Kumar"
        hisab party rename 3 "Dairy Co"
    """
    facade = LedgerFacade(ctx.obj["db"])
    party_obj = resolve_party_or_exit(ctx, facade.parties, party)

    try:
        facade.rename_party(party_obj.id, new_name)
        click.echo(f"Renamed party '{party_obj.name}' to '{new_name.strip()}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@party_group.command("delete")
@click.argument("party", metavar="PARTY")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_party(ctx, party: str, yes: bool) -> None:
    """Delete a party and its ledger entries.

    Cash book lines recorded for the party are kept, so daily balances
    do not change.

    PARTY can be a party name or ID.
    """
    facade = LedgerFacade(ctx.obj["db"])
    party_obj = resolve_party_or_exit(ctx, facade.parties, party)

    if not yes and not click.confirm(
        f"Are you sure you want to delete party '{party_obj.name}' (ID: {party_obj.id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        facade.delete_party(party_obj.id)
        click.echo(f"Deleted party '{party_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@party_group.command("ledger")
@click.argument("party", metavar="PARTY")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def show_ledger(ctx, party: str, start_date: str | None, end_date: str | None) -> None:
    """Show a party's ledger entries and running balance.

    Examples:
        hisab party ledger "Ramesh"
        hisab party ledger 2 --start-date 2024-01-01
    """
    facade = LedgerFacade(ctx.obj["db"])
    party_obj = resolve_party_or_exit(ctx, facade.parties, party)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    entries = facade.ledger_entries_for_party(party_obj.id, start_date=start, end_date=end)
    balance = facade.party_balance(party_obj.id)

    click.echo(f"\nLedger for {party_obj.name} ({party_obj.role.value}):")
    click.echo("-" * 80)
    if not entries:
        click.echo("No ledger entries found.")
    for entry in entries:
        note = entry.note or ""
        click.echo(
            f"ID: {entry.id:4d} | {entry.date} | {entry.kind.value:8s} | "
            f"{entry.channel.value:6s} | {entry.amount:>12.2f} | {note}"
        )
    click.echo("-" * 80)
    click.echo(f"Opening: {balance.opening_balance:.2f}")
    click.echo(
        f"Received: {balance.total_debit:.2f} | Paid: {balance.total_credit:.2f} | "
        f"Purchases: {balance.total_purchase:.2f}"
    )
    click.echo(f"Balance: {balance.balance:.2f}")


def register_commands(cli):
    """Register party commands with main CLI."""
    cli.add_command(party_group, name="party")
