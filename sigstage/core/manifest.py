"""Artifact list loading — TOML manifests and inline ``NAME=PATH`` pairs.

Manifest layout::

    [[artifact]]
    name = "image-a"
    path = "target/image-a/build-image-a.zip"

Relative paths resolve against the directory containing the manifest.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from pathlib import Path

from sigstage.models.artifacts import Artifact


class ManifestError(ValueError):
    """Raised when an artifact manifest or inline pair is malformed."""


def load_manifest(path: Path) -> list[Artifact]:
    """Read a TOML manifest and return its artifacts in file order."""
    path = Path(path)
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except OSError as exc:
        raise ManifestError(f"failed to read manifest {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"manifest {path} is not valid TOML: {exc}") from exc

    entries = data.get("artifact")
    if not isinstance(entries, list) or not entries:
        raise ManifestError(f"manifest {path} has no [[artifact]] entries")

    base = path.parent
    artifacts: list[Artifact] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ManifestError(f"manifest {path}: artifact[{index}] is not a table")
        name = entry.get("name")
        file_path = entry.get("path")
        for key, value in (("name", name), ("path", file_path)):
            if not isinstance(value, str) or not value:
                raise ManifestError(
                    f"manifest {path}: artifact[{index}].{key} must be a non-empty string"
                )
        resolved = Path(file_path)
        if not resolved.is_absolute():
            resolved = base / resolved
        artifacts.append(Artifact(name=name, path=resolved))
    return artifacts


def parse_artifact_pair(value: str) -> Artifact:
    """Parse ``NAME=PATH`` into an :class:`Artifact`."""
    name, sep, file_path = value.partition("=")
    if not sep or not name or not file_path:
        raise ManifestError(f"expected NAME=PATH, got {value!r}")
    return Artifact(name=name, path=Path(file_path))


def collect_artifacts(
    manifest: Path | None = None, pairs: Iterable[str] = ()
) -> list[Artifact]:
    """Manifest entries first, then inline pairs, preserving order."""
    artifacts: list[Artifact] = []
    if manifest is not None:
        artifacts.extend(load_manifest(manifest))
    artifacts.extend(parse_artifact_pair(pair) for pair in pairs)
    return artifacts
