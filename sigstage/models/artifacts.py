"""Artifact models — inputs to and results of a staging run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Artifact(BaseModel):
    """A build output supplied by the upstream build configuration.

    ``name`` is the logical name used in reports; ``path`` points at the
    file on disk. The file is copied into the staging directory under its
    own basename.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path

    @property
    def file_name(self) -> str:
        """Basename the artifact is staged under."""
        return self.path.name


class StagedArtifact(BaseModel):
    """One artifact as it landed in the staging directory."""

    model_config = ConfigDict(frozen=True)

    name: str
    staged_path: Path
    digest: str  # "sha256:<hex>"
    attestation_path: Path | None = None
    attestation_line: int | None = None  # 1-based line in the attestation blob

    @property
    def is_attested(self) -> bool:
        return self.attestation_path is not None


class StagingResult(BaseModel):
    """Outcome of a successful staging run."""

    model_config = ConfigDict(frozen=True)

    output_dir: Path
    attested: bool  # whether attestation input was supplied
    artifacts: list[StagedArtifact]
