"""Backup and restore commands."""

import json

import click
from hisab.cli.error_handling import handle_domain_error
from hisab.domain.errors import DomainError
from hisab.domain.facade import LedgerFacade


@click.group()
def backup_group():
    """Export and restore all data as JSON."""
    pass


@backup_group.command("export")
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_backup(ctx, output: str):
    """Write every table to OUTPUT as JSON."""
    facade = LedgerFacade(ctx.obj["db"])

    snapshot = facade.export()
    with open(output, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, default=str)

    counts = ", ".join(f"{len(rows)} {name}" for name, rows in snapshot.items())
    click.echo(f"Exported {counts} to {output}")


@backup_group.command("restore")
@click.argument("input_file", metavar="INPUT", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def restore_backup(ctx, input_file: str, yes: bool):
    """Replace all data with the backup in INPUT and rebuild balances."""
    facade = LedgerFacade(ctx.obj["db"])

    try:
        with open(input_file, encoding="utf-8") as f:
            snapshot = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        click.echo(f"Error: Could not read backup: {e}", err=True)
        ctx.exit(1)

    if not isinstance(snapshot, dict):
        click.echo("Error: Backup file is not a table snapshot", err=True)
        ctx.exit(1)

    if not yes and not click.confirm("This replaces all existing data. Continue?"):
        click.echo("Restore cancelled.")
        return

    try:
        result = facade.restore(snapshot)
        click.echo(f"Restored backup; rebuilt {len(result.days_written)} day(s)")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
