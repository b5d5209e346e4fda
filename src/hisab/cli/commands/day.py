"""Daily balance commands."""

import click
from hisab.cli.error_handling import handle_domain_error
from hisab.domain.errors import DomainError
from hisab.domain.facade import LedgerFacade
from hisab.utils.amount_parser import parse_amount
from hisab.utils.date_parser import parse_date, today


@click.group()
def day_group():
    """Show and maintain daily opening and closing balances."""
    pass


def _parse_day_or_exit(ctx, day: str | None):
    if day is None:
        return today()
    try:
        return parse_date(day)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@day_group.command("show")
@click.argument("day", required=False)
@click.pass_context
def show_day(ctx, day: str | None):
    """Show the balance snapshot for DAY (defaults to today)."""
    facade = LedgerFacade(ctx.obj["db"])
    balance_date = _parse_day_or_exit(ctx, day)

    try:
        balance = facade.balance_for_date(balance_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    totals = facade.propagator.day_totals(balance_date)
    marker = " (manual)" if balance.opening_overridden else ""
    click.echo(f"\nBalances for {balance.date}:")
    click.echo("-" * 50)
    click.echo(f"{'':10s} {'Cash':>14s} {'Bank':>14s}")
    click.echo(f"{'Opening':10s} {balance.opening_cash:>14.2f} {balance.opening_bank:>14.2f}{marker}")
    click.echo(f"{'In':10s} {totals.cash_in:>14.2f} {totals.bank_in:>14.2f}")
    click.echo(f"{'Out':10s} {totals.cash_out:>14.2f} {totals.bank_out:>14.2f}")
    click.echo(f"{'Closing':10s} {balance.closing_cash:>14.2f} {balance.closing_bank:>14.2f}")


@day_group.command("open")
@click.argument("day")
@click.option("--cash", default="0", show_default=True, help="Opening cash")
@click.option("--bank", default="0", show_default=True, help="Opening bank balance")
@click.pass_context
def set_opening(ctx, day: str, cash: str, bank: str):
    """Set the opening balances of DAY and rebuild every later day.

    Examples:
        hisab day open 2024-01-01 --cash 5000 --bank 120000
    """
    facade = LedgerFacade(ctx.obj["db"])
    balance_date = _parse_day_or_exit(ctx, day)
    try:
        opening_cash = parse_amount(cash)
        opening_bank = parse_amount(bank)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        result = facade.set_opening(balance_date, opening_cash, opening_bank)
        click.echo(f"Opening set for {balance_date}; {len(result.days_written)} day(s) rebuilt")
    except DomainError as e:
        handle_domain_error(ctx, e)


@day_group.command("ensure")
@click.argument("day", required=False)
@click.pass_context
def ensure_day(ctx, day: str | None):
    """Create the snapshot for DAY (defaults to today) if it is missing."""
    facade = LedgerFacade(ctx.obj["db"])
    balance_date = _parse_day_or_exit(ctx, day)

    try:
        balance = facade.ensure_today(balance_date)
        click.echo(
            f"{balance.date}: opening cash {balance.opening_cash:.2f}, bank {balance.opening_bank:.2f}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@day_group.command("recalc")
@click.option("--from", "from_date", help="First day to rebuild (defaults to the earliest day)")
@click.pass_context
def recalculate(ctx, from_date: str | None):
    """Rebuild daily balances from the cash book."""
    facade = LedgerFacade(ctx.obj["db"])
    start = _parse_day_or_exit(ctx, from_date) if from_date is not None else None

    try:
        result = facade.recalculate(start)
        click.echo(f"Rebuilt {len(result.days_written)} day(s)")
    except DomainError as e:
        handle_domain_error(ctx, e)


@day_group.command("delete")
@click.argument("day")
@click.pass_context
def delete_day(ctx, day: str):
    """Delete the snapshot for DAY. Other days are left unchanged."""
    facade = LedgerFacade(ctx.obj["db"])
    balance_date = _parse_day_or_exit(ctx, day)

    try:
        facade.delete_daily_balance(balance_date)
        click.echo(f"Deleted balance for {balance_date}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register daily balance commands with main CLI."""
    cli.add_command(day_group, name="day")
