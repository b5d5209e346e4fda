"""Main CLI entry point."""

import logging

import click
from hisab.database.factories import create_sqlite_database

# Import and register all commands at module level
from hisab.cli.commands import (
    party,
    transaction,
    cashbook,
    day,
    backup,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides HISAB_DB_PATH environment variable)",
    envvar="HISAB_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log sync and propagation steps")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Hisab - Party ledger and daily cash book.

    Record money received from and paid to parties, keep a daily cash and
    bank book, and carry opening and closing balances forward day by day.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
party.register_commands(cli)
transaction.register_commands(cli)
cashbook.register_commands(cli)
day.register_commands(cli)
backup.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
