"""CLI application for database digests."""

import typer

from dbhash.cli.commands.digest import compare_databases, hash_databases

app = typer.Typer(
    help="dbhash - storage-independent digests of SQLite databases",
    no_args_is_help=True,
)

app.command("hash")(hash_databases)
app.command("compare")(compare_databases)


if __name__ == "__main__":
    app()
