"""Main Typer application — registers all CLI commands.

Entry point: ``sigstage`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer

from sigstage.cli.commands.inspect_cmd import inspect_cmd
from sigstage.cli.commands.prepare import prepare_cmd
from sigstage.config import config

app = typer.Typer(
    name="sigstage",
    help="Sigstage: match Sigstore attestations to build artifacts and stage them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to SIGSTAGE_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging to stderr; stdout is reserved for results."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="prepare", help="Stage artifacts with their attestations.")(prepare_cmd)
app.command(name="inspect", help="Show the digests attested by each line.")(inspect_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
