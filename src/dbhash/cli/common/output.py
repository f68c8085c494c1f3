"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "err": "bold red",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with err_console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {escape(msg)}", soft_wrap=True)

    def error(self, msg: str) -> None:
        """Print an error message."""
        err_console.print(f"[err]✗[/] {escape(msg)}", soft_wrap=True)

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def digest_line(self, digest: bytes, path: Path | str) -> None:
        """Print `<hex digest>  <path>`, the plain format scripts can parse."""
        console.print(f"{digest.hex()}  {path}", markup=False, highlight=False, soft_wrap=True)

    def compare_table(
        self, results: Iterable[tuple[Path | str, bytes]], title: str = "Digests"
    ) -> None:
        """
        Render digests side by side.

        Expects tuples of (database path, digest).
        """
        rows = list(results)
        distinct = {digest for _, digest in rows}

        t = Table(title=title, show_lines=False)
        t.add_column("Database", style="meta")
        t.add_column("Digest", no_wrap=True)

        style = "ok" if len(distinct) == 1 else "err"
        for path, digest in rows:
            t.add_row(escape(str(path)), f"[{style}]{digest.hex()}[/{style}]")

        console.print(t)


out = Out()
