"""Invocation context for the CLI."""

from dataclasses import dataclass

import typer

from dbhash.cli.common.logs import configure_logging
from dbhash.cli.common.output import out
from dbhash.core.models import Selection


@dataclass
class HashAppContext:
    """Resolved hashing options shared by the commands of one invocation."""

    pattern: str | None
    selection: Selection


def selection_from_flags(*, schema_only: bool, without_schema: bool) -> Selection:
    """
    Map the `--schema-only` / `--without-schema` flags onto a Selection.

    Raises:
        ValueError: If both flags are set.
    """
    if schema_only and without_schema:
        raise ValueError("--schema-only and --without-schema are mutually exclusive.")
    if schema_only:
        return Selection.SCHEMA_ONLY
    if without_schema:
        return Selection.CONTENT_ONLY
    return Selection.SCHEMA_AND_CONTENT


def build_hash_context(
    *,
    like: str | None,
    schema_only: bool,
    without_schema: bool,
    verbose: bool,
) -> HashAppContext:
    """Build the hashing context, exiting with code 2 on invalid flag combinations."""
    try:
        selection = selection_from_flags(
            schema_only=schema_only, without_schema=without_schema
        )
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(2) from exc

    configure_logging(verbose)
    return HashAppContext(pattern=like, selection=selection)
