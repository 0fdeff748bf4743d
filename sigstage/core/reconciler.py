"""Reconciler — matches attestation bundles to artifacts and stages both.

Every artifact is copied into a fresh staging directory and hashed. When
attestation input is supplied, each non-blank line is one Sigstore bundle;
every digest it attests is looked up in the pending set (digest ->
artifact). A hit writes ``<file name><suffix>`` containing the exact line
and removes the artifact from the pending set. Digests that match nothing
are ignored, since bundles routinely attest artifacts outside this run.

Any artifact still pending at the end is a hard failure. The staging
directory is built next to the output path and renamed into place only
after full success, so a failed run leaves no output directory behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from pathlib import Path

from sigstage.core.extractor import BundleFormatError, extract_digests
from sigstage.core.hasher import DEFAULT_CHUNK_SIZE, content_address, sha256_file
from sigstage.models.artifacts import Artifact, StagedArtifact, StagingResult

logger = logging.getLogger(__name__)

DEFAULT_ATTESTATION_SUFFIX = ".sigstore.json"


class StagingError(RuntimeError):
    """Base class for every failure of a staging run."""


class ArtifactListError(StagingError):
    """Raised when the artifact list is empty or has colliding names."""


class StagingIOError(StagingError):
    """Raised when a filesystem operation fails; ``path`` is the culprit."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message} {path}")
        self.path = path


class AttestationInputError(StagingError):
    """Raised when the attestation blob is not UTF-8 text."""


class DuplicateArtifactDigestError(StagingError):
    """Raised when two artifacts have byte-identical content."""

    def __init__(self, first: str, second: str, digest: bytes) -> None:
        super().__init__(
            f"artifacts {first!r} and {second!r} have identical content "
            f"({content_address(digest)}); attestations cannot tell them apart"
        )
        self.names = (first, second)


class AttestationLineError(StagingError):
    """Raised when one line of the attestation blob cannot be decoded."""

    def __init__(self, line_number: int, error: BundleFormatError) -> None:
        super().__init__(f"attestation line {line_number}: {error}")
        self.line_number = line_number
        self.field = error.field


class UnattestedArtifactsError(StagingError):
    """Raised when some artifacts were not matched by any attestation."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"some artifacts were not attested: {names}")
        self.names = names


def iter_records(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` for every non-blank line of a blob.

    Lines are split on ``\\n`` and a trailing ``\\r`` is dropped; the rest
    of the line is returned untouched. Line numbers are 1-based.
    """
    for number, line in enumerate(text.split("\n"), start=1):
        line = line.removesuffix("\r")
        if not line.strip():
            continue
        yield number, line


def read_attestations(path: Path) -> str:
    """Read an attestation blob as UTF-8 without newline translation."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise StagingIOError("failed to read", Path(path)) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AttestationInputError(f"{path} is not valid UTF-8: {exc}") from exc


def check_artifacts(artifacts: Sequence[Artifact]) -> None:
    """Validate the artifact list before anything touches the disk."""
    if not artifacts:
        raise ArtifactListError("no artifacts to stage")
    names: set[str] = set()
    file_names: dict[str, str] = {}
    for artifact in artifacts:
        if artifact.name in names:
            raise ArtifactListError(f"duplicate artifact name: {artifact.name!r}")
        names.add(artifact.name)
        other = file_names.get(artifact.file_name)
        if other is not None:
            raise ArtifactListError(
                f"artifacts {other!r} and {artifact.name!r} share the "
                f"file name {artifact.file_name!r}"
            )
        file_names[artifact.file_name] = artifact.name


def _directory_mode() -> int:
    """Mode a plain mkdir would produce under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o777 & ~umask


class Reconciler:
    """Stages artifacts and matches them against attestation bundles.

    Parameters
    ----------
    output_dir:
        Staging directory. Deleted and recreated by every run.
    attestation_suffix:
        Suffix appended to an artifact's file name for its attestation.
    hash_chunk_size:
        Read size used while streaming artifacts through SHA-256.
    reject_duplicate_digests:
        Fail when two artifacts have identical content. When disabled the
        later artifact replaces the earlier one in the pending set.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        attestation_suffix: str = DEFAULT_ATTESTATION_SUFFIX,
        hash_chunk_size: int = DEFAULT_CHUNK_SIZE,
        reject_duplicate_digests: bool = True,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._suffix = attestation_suffix
        self._chunk_size = hash_chunk_size
        self._reject_duplicates = reject_duplicate_digests

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def reconcile(
        self,
        artifacts: Sequence[Artifact],
        attestations: str | None = None,
    ) -> StagingResult:
        """Stage ``artifacts`` and, if given, match ``attestations`` to them.

        ``attestations`` is the merged blob, one bundle per line. ``None``
        means attestation is disabled: artifacts are staged and nothing is
        matched.
        """
        check_artifacts(artifacts)
        logger.info(
            "Staging %d artifact(s) into %s (attestations: %s)",
            len(artifacts),
            self._output_dir,
            "yes" if attestations is not None else "no",
        )

        self._clear_output()
        staging = self._make_staging_dir()
        try:
            digests = self._stage_artifacts(artifacts, staging)
            matches: dict[str, tuple[Path, int]] = {}
            if attestations is not None:
                matches = self._match(artifacts, digests, attestations, staging)
            self._publish(staging)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        logger.info("Staged %d artifact(s) into %s", len(artifacts), self._output_dir)
        return StagingResult(
            output_dir=self._output_dir,
            attested=attestations is not None,
            artifacts=[
                self._result_entry(artifact, digests[artifact.name], matches)
                for artifact in artifacts
            ],
        )

    def reconcile_file(
        self,
        artifacts: Sequence[Artifact],
        attestations_path: Path | None = None,
    ) -> StagingResult:
        """Like :meth:`reconcile`, reading the blob from a file."""
        attestations = None
        if attestations_path is not None:
            attestations = read_attestations(attestations_path)
        return self.reconcile(artifacts, attestations)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _clear_output(self) -> None:
        target = self._output_dir
        if not target.exists() and not target.is_symlink():
            return
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise StagingIOError("failed to remove", target) from exc

    def _make_staging_dir(self) -> Path:
        parent = self._output_dir.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            return Path(
                tempfile.mkdtemp(prefix=f".{self._output_dir.name}-", dir=parent)
            )
        except OSError as exc:
            raise StagingIOError("failed to create directory in", parent) from exc

    def _publish(self, staging: Path) -> None:
        try:
            os.chmod(staging, _directory_mode())
            os.replace(staging, self._output_dir)
        except OSError as exc:
            raise StagingIOError(f"failed to move {staging} to", self._output_dir) from exc

    def _stage_artifacts(
        self, artifacts: Sequence[Artifact], staging: Path
    ) -> dict[str, bytes]:
        """Copy and hash every artifact; returns name -> raw digest."""
        digests: dict[str, bytes] = {}
        seen: dict[bytes, str] = {}
        for artifact in artifacts:
            dest = staging / artifact.file_name
            try:
                shutil.copyfile(artifact.path, dest)
            except OSError as exc:
                raise StagingIOError(
                    f"failed to copy to {dest} from", artifact.path
                ) from exc
            try:
                digest = sha256_file(artifact.path, self._chunk_size)
            except OSError as exc:
                raise StagingIOError("failed to hash", artifact.path) from exc

            if digest in seen and self._reject_duplicates:
                raise DuplicateArtifactDigestError(seen[digest], artifact.name, digest)
            seen[digest] = artifact.name
            digests[artifact.name] = digest
            logger.debug("%s: %s", artifact.name, content_address(digest))
        return digests

    def _match(
        self,
        artifacts: Sequence[Artifact],
        digests: dict[str, bytes],
        attestations: str,
        staging: Path,
    ) -> dict[str, tuple[Path, int]]:
        """Consume the blob; returns name -> (attestation path, line number)."""
        by_name = {artifact.name: artifact for artifact in artifacts}
        # Later artifacts win on duplicate digests, mirroring dict insertion
        pending: dict[bytes, Artifact] = {
            digest: by_name[name] for name, digest in digests.items()
        }
        matches: dict[str, tuple[Path, int]] = {}

        for line_number, line in iter_records(attestations):
            try:
                record_digests = extract_digests(line)
            except BundleFormatError as exc:
                raise AttestationLineError(line_number, exc) from exc

            for digest in record_digests:
                artifact = pending.pop(digest, None)
                if artifact is None:
                    logger.debug(
                        "line %d: ignoring unmatched digest %s",
                        line_number,
                        content_address(digest),
                    )
                    continue
                dest = staging / f"{artifact.file_name}{self._suffix}"
                try:
                    dest.write_bytes(line.encode("utf-8"))
                except OSError as exc:
                    raise StagingIOError("failed to write to", dest) from exc
                matches[artifact.name] = (
                    self._output_dir / dest.name,
                    line_number,
                )
                logger.info(
                    "attestation line %d matched artifact %s",
                    line_number,
                    artifact.name,
                )

        if pending:
            unmatched = {artifact.name for artifact in pending.values()}
            raise UnattestedArtifactsError(
                [a.name for a in artifacts if a.name in unmatched]
            )
        return matches

    def _result_entry(
        self,
        artifact: Artifact,
        digest: bytes,
        matches: dict[str, tuple[Path, int]],
    ) -> StagedArtifact:
        attestation_path, line_number = matches.get(artifact.name, (None, None))
        return StagedArtifact(
            name=artifact.name,
            staged_path=self._output_dir / artifact.file_name,
            digest=content_address(digest),
            attestation_path=attestation_path,
            attestation_line=line_number,
        )
