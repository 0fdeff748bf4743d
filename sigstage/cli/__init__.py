"""Sigstage CLI — Typer-based command-line interface.

Provides the ``sigstage`` command with subcommands for staging artifacts
with their attestations and for inspecting a merged attestation file.

Human-facing output uses Rich; the staging path goes to plain stdout.
"""
