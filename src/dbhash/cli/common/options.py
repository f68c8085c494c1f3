"""Common CLI options for the CLI."""

import typer

LikeOpt = typer.Option(
    None,
    "--like",
    "-l",
    envvar="DBHASH_LIKE",
    help="Only hash tables whose name is LIKE this pattern (% and _ wildcards)",
)

SchemaOnlyOpt = typer.Option(
    False,
    "--schema-only",
    help="Hash the schema only, not the table content",
)

WithoutSchemaOpt = typer.Option(
    False,
    "--without-schema",
    help="Hash the table content only, not the schema",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every phase, table and schema object while hashing",
)
