"""Sigstage data models — all Pydantic v2, all frozen (immutable)."""

from sigstage.models.artifacts import Artifact, StagedArtifact, StagingResult
from sigstage.models.bundle import (
    IN_TOTO_PAYLOAD_TYPE,
    IN_TOTO_STATEMENT_TYPE,
    SHA256_ALGORITHM,
    SUPPORTED_MEDIA_TYPES,
    BundleContent,
    ContentKind,
    DsseEnvelope,
    DsseEnvelopeContent,
    InTotoStatement,
    InTotoSubject,
    MessageDigest,
    MessageSignature,
    MessageSignatureContent,
    SigstoreBundle,
)

__all__ = [
    # artifacts
    "Artifact",
    "StagedArtifact",
    "StagingResult",
    # bundle
    "SUPPORTED_MEDIA_TYPES",
    "SHA256_ALGORITHM",
    "IN_TOTO_PAYLOAD_TYPE",
    "IN_TOTO_STATEMENT_TYPE",
    "ContentKind",
    "BundleContent",
    "MessageDigest",
    "MessageSignature",
    "MessageSignatureContent",
    "DsseEnvelope",
    "DsseEnvelopeContent",
    "SigstoreBundle",
    "InTotoStatement",
    "InTotoSubject",
]
