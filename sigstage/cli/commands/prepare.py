"""``sigstage prepare`` — stage artifacts with their attestations.

Copies every artifact into a clean output directory and, when an
attestation file is given, writes ``<artifact>.sigstore.json`` next to each
one. Prints the output directory path to stdout on success.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from sigstage.config import config
from sigstage.core.manifest import ManifestError, collect_artifacts
from sigstage.core.reconciler import (
    Reconciler,
    StagingError,
    UnattestedArtifactsError,
)

err_console = Console(stderr=True)


def prepare_cmd(
    manifest: Optional[Path] = typer.Option(
        None,
        "--manifest",
        "-m",
        help="TOML manifest listing [[artifact]] name/path entries.",
    ),
    artifact: Optional[List[str]] = typer.Option(
        None,
        "--artifact",
        "-a",
        help="Artifact as NAME=PATH. May be repeated.",
    ),
    attestations: Optional[Path] = typer.Option(
        None,
        "--attestations",
        help="Merged attestation file, one Sigstore bundle per line.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Staging directory (recreated on every run).",
    ),
) -> None:
    """Stage artifacts and match each one to its attestation."""
    try:
        artifacts = collect_artifacts(manifest, artifact or [])
    except ManifestError as exc:
        err_console.print(f"[bold red]Invalid artifact list:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    reconciler = Reconciler(
        output or config.output_dir,
        attestation_suffix=config.attestation_suffix,
        hash_chunk_size=config.hash_chunk_size,
        reject_duplicate_digests=config.reject_duplicate_digests,
    )

    try:
        result = reconciler.reconcile_file(artifacts, attestations)
    except UnattestedArtifactsError as exc:
        err_console.print("[bold red]Some artifacts were not attested:[/bold red]")
        for name in exc.names:
            err_console.print(f"  [red]- {escape(name)}[/red]")
        raise typer.Exit(code=1)
    except StagingError as exc:
        err_console.print(f"[bold red]Staging failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    typer.echo(str(result.output_dir))
