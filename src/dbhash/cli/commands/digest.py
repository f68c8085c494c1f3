"""Commands computing and comparing database digests."""

from pathlib import Path

import typer

from dbhash.cli.common.context import HashAppContext, build_hash_context
from dbhash.cli.common.exits import die, exit_from_exc
from dbhash.cli.common.options import (
    LikeOpt,
    SchemaOnlyOpt,
    VerboseOpt,
    WithoutSchemaOpt,
)
from dbhash.cli.common.output import out
from dbhash.core.errors import DbHashError
from dbhash.core.hashing import hash_database

DatabasesArg = typer.Argument(..., help="SQLite database file(s)", show_default=False)


def _digest_or_exit(appctx: HashAppContext, path: Path) -> bytes:
    """Hash one database, converting core failures into an error exit."""
    try:
        with out.status(f"Hashing {path}..."):
            return hash_database(path, appctx.pattern, appctx.selection)
    except DbHashError as exc:
        exit_from_exc(exc, message=f"{path}: {exc}")


def hash_databases(
    databases: list[Path] = DatabasesArg,
    like: str | None = LikeOpt,
    schema_only: bool = SchemaOnlyOpt,
    without_schema: bool = WithoutSchemaOpt,
    verbose: bool = VerboseOpt,
):
    """
    Print the digest of each database.
    """
    appctx = build_hash_context(
        like=like,
        schema_only=schema_only,
        without_schema=without_schema,
        verbose=verbose,
    )

    for path in databases:
        out.digest_line(_digest_or_exit(appctx, path), path)


def compare_databases(
    first: Path = typer.Argument(..., help="First database file", show_default=False),
    second: Path = typer.Argument(..., help="Second database file", show_default=False),
    like: str | None = LikeOpt,
    schema_only: bool = SchemaOnlyOpt,
    without_schema: bool = WithoutSchemaOpt,
    verbose: bool = VerboseOpt,
):
    """
    Compare the digests of two databases (exit code 1 when they differ).
    """
    appctx = build_hash_context(
        like=like,
        schema_only=schema_only,
        without_schema=without_schema,
        verbose=verbose,
    )

    results = [(path, _digest_or_exit(appctx, path)) for path in (first, second)]

    out.kv(
        {
            "pattern": appctx.pattern or "(all tables)",
            "selection": appctx.selection.value,
        }
    )
    out.compare_table(results)

    if results[0][1] != results[1][1]:
        die("Databases differ", code=1)
    out.success("Databases are equivalent")
