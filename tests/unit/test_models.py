"""Tests for the Pydantic models — immutability, aliases, variant selection."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sigstage.models.artifacts import Artifact, StagedArtifact
from sigstage.models.bundle import (
    ContentKind,
    DsseEnvelopeContent,
    InTotoStatement,
    MessageSignatureContent,
    SigstoreBundle,
    content_kind,
)

MEDIA_TYPE = "application/vnd.dev.sigstore.bundle.v0.3+json"


class TestArtifactModels:
    def test_file_name_is_basename(self):
        artifact = Artifact(name="image-a", path=Path("target/a/build-image-a.zip"))
        assert artifact.file_name == "build-image-a.zip"

    def test_artifact_is_frozen(self):
        artifact = Artifact(name="a", path=Path("a.bin"))
        with pytest.raises(ValidationError):
            artifact.name = "b"

    def test_staged_artifact_attested_flag(self):
        plain = StagedArtifact(name="a", staged_path=Path("out/a.bin"), digest="sha256:00")
        assert plain.is_attested is False
        attested = plain.model_copy(
            update={"attestation_path": Path("out/a.bin.sigstore.json")}
        )
        assert attested.is_attested is True


class TestContentKind:
    def test_message_signature_key(self):
        assert content_kind({"messageSignature": {}}) == "messageSignature"

    def test_dsse_envelope_key(self):
        assert content_kind({"dsseEnvelope": {}}) == "dsseEnvelope"

    def test_neither_or_both(self):
        assert content_kind({}) is None
        assert content_kind({"messageSignature": {}, "dsseEnvelope": {}}) is None

    def test_non_dict(self):
        assert content_kind("messageSignature") is None

    def test_model_instance(self):
        content = DsseEnvelopeContent.model_validate(
            {"dsseEnvelope": {"payload": "", "payloadType": "x"}}
        )
        assert content_kind(content) == ContentKind.DSSE_ENVELOPE.value


class TestSigstoreBundle:
    def test_field_presence_selects_variant(self):
        bundle = SigstoreBundle.model_validate({
            "mediaType": MEDIA_TYPE,
            "content": {
                "messageSignature": {
                    "messageDigest": {"algorithm": "SHA2_256", "digest": "AA=="},
                    "signature": "c2ln",
                },
                "verificationMaterial": {"ignored": True},
            },
        })
        assert isinstance(bundle.content, MessageSignatureContent)
        assert bundle.media_type == MEDIA_TYPE

    def test_missing_variant_fails(self):
        with pytest.raises(ValidationError):
            SigstoreBundle.model_validate({"mediaType": MEDIA_TYPE, "content": {}})


class TestInTotoStatement:
    def test_type_alias(self):
        statement = InTotoStatement.model_validate({
            "_type": "https://in-toto.io/Statement/v1",
            "subject": [{"name": "a", "digest": {"sha256": "00"}}],
            "predicateType": "https://slsa.dev/provenance/v1",
        })
        assert statement.statement_type == "https://in-toto.io/Statement/v1"
        assert statement.subject[0].digest.sha256 == "00"
        assert statement.predicate_type == "https://slsa.dev/provenance/v1"

    def test_subject_required(self):
        with pytest.raises(ValidationError):
            InTotoStatement.model_validate({"_type": "https://in-toto.io/Statement/v1"})
