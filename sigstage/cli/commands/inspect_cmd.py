"""``sigstage inspect FILE`` — show what each attestation line attests."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sigstage.core.extractor import (
    BundleFormatError,
    digests_from_bundle,
    parse_bundle,
)
from sigstage.core.reconciler import StagingError, iter_records, read_attestations

console = Console()
err_console = Console(stderr=True)


def inspect_cmd(
    attestations: Path = typer.Argument(
        ...,
        help="Merged attestation file, one Sigstore bundle per line.",
    ),
) -> None:
    """List the content variant and digests of every bundle in a file."""
    try:
        text = read_attestations(attestations)
    except StagingError as exc:
        err_console.print(f"[bold red]Cannot read attestations:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    table = Table(title=f"Attestations in {attestations}")
    table.add_column("Line", justify="right")
    table.add_column("Content", style="cyan")
    table.add_column("Media type")
    table.add_column("SHA-256", style="green")

    for line_number, line in iter_records(text):
        try:
            bundle = parse_bundle(line)
            digests = digests_from_bundle(bundle)
        except BundleFormatError as exc:
            err_console.print(
                f"[bold red]Line {line_number}:[/bold red] {escape(str(exc))}"
            )
            raise typer.Exit(code=1)
        table.add_row(
            str(line_number),
            bundle.content.kind.value,
            bundle.media_type,
            "\n".join(sorted(d.hex() for d in digests)),
        )

    if not table.rows:
        console.print("[dim]No attestations found.[/dim]")
        return
    console.print(table)
