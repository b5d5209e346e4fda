"""Party transaction commands."""

import click
from hisab.cli.error_handling import handle_domain_error
from hisab.cli.party_resolution import resolve_party_or_exit
from hisab.domain.entities import LedgerEntryKind, PaymentChannel
from hisab.domain.errors import DomainError
from hisab.domain.facade import LedgerFacade
from hisab.utils.amount_parser import parse_amount
from hisab.utils.date_parser import parse_date, today

CHANNEL_CHOICE = click.Choice([c.value for c in PaymentChannel], case_sensitive=False)
KIND_CHOICE = click.Choice([k.value for k in LedgerEntryKind], case_sensitive=False)


@click.group()
def transaction_group():
    """Record and edit party transactions."""
    pass


def _record(ctx, kind: LedgerEntryKind, party: str, amount: str, date: str | None,
            channel: str, note: str | None, voice_note: str | None) -> None:
    facade = LedgerFacade(ctx.obj["db"])
    party_obj = resolve_party_or_exit(ctx, facade.parties, party)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_date = parse_date(date) if date else today()
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    record = {
        LedgerEntryKind.DEBIT: facade.add_receipt,
        LedgerEntryKind.CREDIT: facade.add_payment,
        LedgerEntryKind.PURCHASE: facade.add_purchase,
    }[kind]

    try:
        outcome = record(
            party_obj.id,
            txn_amount,
            txn_date,
            channel=PaymentChannel(channel.upper()),
            note=note,
            voice_note_path=voice_note,
        )
        click.echo(
            f"Recorded {kind.value.lower()} of {txn_amount:.2f} for '{party_obj.name}' on {txn_date} "
            f"(ID: {outcome.ledger_entry_id})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("receipt")
@click.argument("party", metavar="PARTY")
@click.argument("amount")
@click.option("--date", help="Date (YYYY-MM-DD or relative like 'today', 'yesterday'; defaults to today)")
@click.option("--channel", type=CHANNEL_CHOICE, default=PaymentChannel.CASH.value, show_default=True)
@click.option("--note", help="Note")
@click.option("--voice-note", type=click.Path(), help="Path to an attached recording")
@click.pass_context
def add_receipt(ctx, party, amount, date, channel, note, voice_note):
    """Record money received from a party.

    Examples:
        hisab txn receipt "Ramesh" 1500
        hisab txn receipt 2 2000 --channel BANK --date yesterday
    """
    _record(ctx, LedgerEntryKind.DEBIT, party, amount, date, channel, note, voice_note)


@transaction_group.command("payment")
@click.argument("party", metavar="PARTY")
@click.argument("amount")
@click.option("--date", help="Date (YYYY-MM-DD or relative like 'today', 'yesterday'; defaults to today)")
@click.option("--channel", type=CHANNEL_CHOICE, default=PaymentChannel.CASH.value, show_default=True)
@click.option("--note", help="Note")
@click.option("--voice-note", type=click.Path(), help="Path to an attached recording")
@click.pass_context
def add_payment(ctx, party, amount, date, channel, note, voice_note):
    """Record money paid to a party.

    Examples:
        hisab txn payment "Dairy Supplier" 12000 --channel BANK
    """
    _record(ctx, LedgerEntryKind.CREDIT, party, amount, date, channel, note, voice_note)


@transaction_group.command("purchase")
@click.argument("party", metavar="PARTY")
@click.argument("amount")
@click.option("--date", help="Date (YYYY-MM-DD or relative like 'today', 'yesterday'; defaults to today)")
@click.option("--channel", type=CHANNEL_CHOICE, default=PaymentChannel.CREDIT.value, show_default=True)
@click.option("--note", help="Note")
@click.option("--voice-note", type=click.Path(), help="Path to an attached recording")
@click.pass_context
def add_purchase(ctx, party, amount, date, channel, note, voice_note):
    """Record goods bought from a party.

    Purchases are added to the party's ledger and listed in the cash book
    but never change cash or bank balances.

    Examples:
        hisab txn purchase "Dairy Supplier" 45000 --note "buffalo"
    """
    _record(ctx, LedgerEntryKind.PURCHASE, party, amount, date, channel, note, voice_note)


@transaction_group.command("edit")
@click.argument("entry_id", type=int)
@click.option("--date", help="New date; moving an entry rebuilds both days")
@click.option("--amount", help="New amount")
@click.option("--kind", type=KIND_CHOICE, help="New kind")
@click.option("--channel", type=CHANNEL_CHOICE, help="New channel")
@click.option("--note", help="New note")
@click.pass_context
def edit_transaction(ctx, entry_id: int, date, amount, kind, channel, note) -> None:
    """Edit a party transaction and its cash book line.

    Updates only the fields that are provided.

    Examples:
        hisab txn edit 4 --amount 1750
        hisab txn edit 4 --date 2024-03-02
    """
    facade = LedgerFacade(ctx.obj["db"])

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        outcome = facade.edit_transaction(
            entry_id,
            amount=txn_amount,
            kind=LedgerEntryKind(kind.upper()) if kind else None,
            channel=PaymentChannel(channel.upper()) if channel else None,
            note=note,
            date=txn_date,
        )
        days = ", ".join(d.isoformat() for d in outcome.dirty_dates)
        click.echo(f"Updated transaction {entry_id} (balances rebuilt from {days})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_transaction(ctx, entry_id: int) -> None:
    """Delete a party transaction and its cash book line."""
    facade = LedgerFacade(ctx.obj["db"])

    try:
        facade.delete_transaction(entry_id)
        click.echo(f"Deleted transaction {entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="txn")
