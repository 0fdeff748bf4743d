"""SHA-256 helpers for artifact content addressing.

Artifacts are identified by the SHA-256 of their full byte content. Raw
digest bytes are the matching key; the ``sha256:<hex>`` form is only used
for reporting.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_CHUNK_SIZE = 64 * 1024


def sha256_bytes(data: bytes) -> bytes:
    """Return the raw SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()


def sha256_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Stream a whole file through SHA-256 and return the raw digest.

    Raises ``OSError`` if the file cannot be opened or read.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    hasher = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.digest()


def content_address(digest: bytes) -> str:
    """Format a raw digest as ``sha256:<hex>``."""
    return f"sha256:{digest.hex()}"
