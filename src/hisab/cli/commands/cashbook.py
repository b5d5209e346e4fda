"""Daily cash book commands."""

import click
from hisab.cli.error_handling import handle_domain_error
from hisab.domain.entities import Bucket, CashMode, PaymentChannel
from hisab.domain.errors import DomainError
from hisab.domain.facade import LedgerFacade
from hisab.utils.amount_parser import parse_amount
from hisab.utils.date_parser import parse_date, today

MODE_CHOICE = click.Choice([m.value for m in CashMode], case_sensitive=False)
MONEY_CHANNEL_CHOICE = click.Choice(
    [PaymentChannel.CASH.value, PaymentChannel.BANK.value], case_sensitive=False
)

SECTION_TITLES = {
    Bucket.MONEY_RECEIVED: "Money received",
    Bucket.DAILY_EXPENSE: "Daily expenses",
    Bucket.PURCHASE: "Purchases",
    Bucket.PAYMENT_GIVEN: "Payments given",
}


@click.group()
def cash_group():
    """Manage the daily cash book."""
    pass


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _parse_date_or_exit(ctx, date: str | None):
    if date is None:
        return today()
    try:
        return parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@cash_group.command("add")
@click.argument("mode", type=MODE_CHOICE)
@click.argument("amount")
@click.option("--date", help="Date (YYYY-MM-DD or relative like 'today'; defaults to today)")
@click.option("--party", "party_label", help="Name shown on the line")
@click.option("--note", help="Note")
@click.pass_context
def add_cash_entry(ctx, mode: str, amount: str, date: str | None, party_label: str | None, note: str | None):
    """Add a manual cash book line.

    MODE is one of CASH_IN, CASH_OUT, BANK_IN, BANK_OUT or PURCHASE.

    Examples:
        hisab cash add CASH_IN 500 --note "Milk sale"
        hisab cash add BANK_OUT 12000 --party "Landlord" --date 2024-03-01
    """
    facade = LedgerFacade(ctx.obj["db"])
    cash_amount = _parse_amount_or_exit(ctx, amount)
    cash_date = _parse_date_or_exit(ctx, date)

    try:
        outcome = facade.add_cash_entry(
            cash_date, CashMode(mode.upper()), cash_amount, party_label=party_label, note=note
        )
        click.echo(f"Added cash book entry {outcome.cash_entry_id} on {cash_date}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cash_group.command("expense")
@click.argument("amount")
@click.argument("note")
@click.option("--date", help="Date (YYYY-MM-DD or relative like 'today'; defaults to today)")
@click.option("--channel", type=MONEY_CHANNEL_CHOICE, default=PaymentChannel.CASH.value, show_default=True)
@click.pass_context
def add_expense(ctx, amount: str, note: str, date: str | None, channel: str):
    """Record a daily expense.

    Examples:
        hisab cash expense 250 "Tea and snacks"
        hisab cash expense 1800 "Electricity" --channel BANK
    """
    facade = LedgerFacade(ctx.obj["db"])
    cash_amount = _parse_amount_or_exit(ctx, amount)
    cash_date = _parse_date_or_exit(ctx, date)

    try:
        outcome = facade.add_expense(cash_date, cash_amount, note, channel=PaymentChannel(channel.upper()))
        click.echo(f"Added expense {outcome.cash_entry_id} on {cash_date}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cash_group.command("list")
@click.option("--date", help="Day to show (defaults to today)")
@click.pass_context
def list_cash_entries(ctx, date: str | None):
    """Show a day's cash book grouped into sections."""
    facade = LedgerFacade(ctx.obj["db"])
    cash_date = _parse_date_or_exit(ctx, date)

    sections = facade.day_sections(cash_date)
    if not any(sections.values()):
        click.echo(f"No cash book entries on {cash_date}.")
        return

    click.echo(f"\nCash book for {cash_date}:")
    for bucket, entries in sections.items():
        if not entries:
            continue
        click.echo(f"\n{SECTION_TITLES[bucket]}:")
        click.echo("-" * 70)
        for entry in entries:
            label = entry.party_label or ""
            note = entry.note or ""
            click.echo(
                f"ID: {entry.id:4d} | {entry.mode.value:8s} | {entry.amount:>12.2f} | {label:15s} | {note}"
            )


@cash_group.command("edit")
@click.argument("cash_entry_id", type=int)
@click.option("--date", help="New date")
@click.option("--amount", help="New amount")
@click.option("--channel", type=MONEY_CHANNEL_CHOICE, help="Move between cash and bank")
@click.option("--party", "party_label", help="New party label")
@click.option("--note", help="New note")
@click.pass_context
def edit_cash_entry(ctx, cash_entry_id: int, date, amount, channel, party_label, note) -> None:
    """Edit a cash book line.

    Lines mirrored from a party transaction update the transaction too.
    """
    facade = LedgerFacade(ctx.obj["db"])
    cash_amount = _parse_amount_or_exit(ctx, amount) if amount is not None else None
    cash_date = _parse_date_or_exit(ctx, date) if date is not None else None

    try:
        facade.edit_cash_entry(
            cash_entry_id,
            amount=cash_amount,
            channel=PaymentChannel(channel.upper()) if channel else None,
            party_label=party_label,
            note=note,
            date=cash_date,
        )
        click.echo(f"Updated cash book entry {cash_entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cash_group.command("delete")
@click.argument("cash_entry_id", type=int)
@click.pass_context
def delete_cash_entry(ctx, cash_entry_id: int) -> None:
    """Delete a cash book line and any party transaction it mirrors."""
    facade = LedgerFacade(ctx.obj["db"])

    try:
        facade.delete_cash_entry(cash_entry_id)
        click.echo(f"Deleted cash book entry {cash_entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register cash book commands with main CLI."""
    cli.add_command(cash_group, name="cash")
