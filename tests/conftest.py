"""Shared test fixtures for Sigstage."""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from sigstage.core.reconciler import Reconciler
from sigstage.models.artifacts import Artifact

MEDIA_TYPE = "application/vnd.dev.sigstore.bundle.v0.3+json"
MEDIA_TYPE_ALT = "application/vnd.dev.sigstore.bundle+json;version=0.3"


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _verification_material() -> dict[str, Any]:
    return {
        "certificate": {"rawBytes": base64.b64encode(b"not-a-real-cert").decode()},
        "tlogEntries": [],
    }


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def output_dir(tmp_dir: Path) -> Path:
    """Staging directory path (not yet created)."""
    return tmp_dir / "out" / "prepared"


@pytest.fixture
def reconciler(output_dir: Path) -> Reconciler:
    """Provide a Reconciler writing into the test output directory."""
    return Reconciler(output_dir)


# ---------------------------------------------------------------------------
# Artifact and bundle factories — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_artifact(tmp_dir: Path) -> Callable[..., Artifact]:
    """Factory fixture: write a file under ``src/`` and return its Artifact."""

    def _factory(name: str, content: bytes, file_name: str | None = None) -> Artifact:
        src = tmp_dir / "src"
        src.mkdir(exist_ok=True)
        path = src / (file_name or f"{name}.bin")
        path.write_bytes(content)
        return Artifact(name=name, path=path)

    return _factory


@pytest.fixture
def make_message_signature_bundle() -> Callable[..., str]:
    """Factory fixture: a messageSignature bundle line for one digest."""

    def _factory(
        digest: bytes,
        *,
        media_type: str = MEDIA_TYPE,
        algorithm: str = "SHA2_256",
        encoded_digest: str | None = None,
        **overrides: Any,
    ) -> str:
        bundle: dict[str, Any] = {
            "mediaType": media_type,
            "verificationMaterial": _verification_material(),
            "messageSignature": {
                "messageDigest": {
                    "algorithm": algorithm,
                    "digest": encoded_digest
                    if encoded_digest is not None
                    else base64.b64encode(digest).decode(),
                },
                "signature": base64.b64encode(b"sig").decode(),
            },
        }
        bundle.update(overrides)
        return json.dumps(bundle)

    return _factory


@pytest.fixture
def make_statement() -> Callable[..., bytes]:
    """Factory fixture: an in-toto statement listing the given digests."""

    def _factory(
        digests: list[bytes],
        *,
        statement_type: str = "https://in-toto.io/Statement/v1",
    ) -> bytes:
        statement = {
            "_type": statement_type,
            "subject": [
                {"name": f"subject-{i}", "digest": {"sha256": d.hex()}}
                for i, d in enumerate(digests)
            ],
            "predicateType": "https://slsa.dev/provenance/v1",
            "predicate": {"buildDefinition": {"buildType": "test"}},
        }
        return json.dumps(statement).encode()

    return _factory


@pytest.fixture
def make_dsse_bundle(make_statement: Callable[..., bytes]) -> Callable[..., str]:
    """Factory fixture: a dsseEnvelope bundle line attesting ``digests``."""

    def _factory(
        digests: list[bytes],
        *,
        media_type: str = MEDIA_TYPE,
        payload_type: str = "application/vnd.in-toto+json",
        payload: bytes | None = None,
        encoded_payload: str | None = None,
        statement_type: str = "https://in-toto.io/Statement/v1",
    ) -> str:
        if payload is None:
            payload = make_statement(digests, statement_type=statement_type)
        bundle = {
            "mediaType": media_type,
            "verificationMaterial": _verification_material(),
            "dsseEnvelope": {
                "payload": encoded_payload
                if encoded_payload is not None
                else base64.b64encode(payload).decode(),
                "payloadType": payload_type,
                "signatures": [{"sig": base64.b64encode(b"sig").decode()}],
            },
        }
        return json.dumps(bundle)

    return _factory
