"""Main Typer application — imports and registers all CLI commands.

Entry point: ``depositgate`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from depositgate.cli.commands.serve import serve_cmd
from depositgate.cli.commands.validate import validate_cmd
from depositgate.config import settings
from depositgate.core.hasher import SUPPORTED_ALGORITHMS
from depositgate.log import configure_logging

app = typer.Typer(
    name="depositgate",
    help="Depositgate: validate archival deposit packages against their manifests.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level. Defaults to DEPOSITGATE_LOG_LEVEL.",
    ),
) -> None:
    configure_logging(log_level or settings.log_level)


# Register subcommands
app.command(name="validate", help="Validate a deposit package from local files.")(validate_cmd)
app.command(name="serve", help="Run the HTTP deposit API.")(serve_cmd)


@app.command(name="algorithms", help="List supported checksum algorithms.")
def algorithms_cmd() -> None:
    """List the checksum algorithms a manifest may name."""
    console = Console()
    table = Table(title="Supported Checksum Algorithms")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Manifest spelling", style="green")

    for normalized, name in sorted(SUPPORTED_ALGORITHMS.items(), key=lambda kv: kv[1]):
        table.add_row(name, normalized)

    console.print(table)
    console.print(
        "[dim]Names are matched ignoring case, dashes and underscores "
        "(e.g. SHA-256, sha_256, sha256).[/dim]"
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
