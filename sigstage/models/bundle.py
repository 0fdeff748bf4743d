"""Sigstore bundle and in-toto statement wire models.

Only the fields needed to recover content digests are modelled; everything
else in a bundle (verification material, signatures, certificates) is
ignored. Signature and trust verification happen upstream.

A bundle carries exactly one of two content variants, told apart by which
key is present rather than by an explicit tag:

- ``messageSignature`` — a signature over a message digest, embedded as
  base64.
- ``dsseEnvelope`` — a DSSE envelope whose base64 payload is an in-toto
  statement listing one or more subjects with hex digests.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel

# Two spellings of the same bundle format/version
SUPPORTED_MEDIA_TYPES: frozenset[str] = frozenset({
    "application/vnd.dev.sigstore.bundle+json;version=0.3",
    "application/vnd.dev.sigstore.bundle.v0.3+json",
})
SHA256_ALGORITHM = "SHA2_256"
IN_TOTO_PAYLOAD_TYPE = "application/vnd.in-toto+json"
IN_TOTO_STATEMENT_TYPE = "https://in-toto.io/Statement/v1"


class _WireModel(BaseModel):
    """Frozen model reading camelCase keys, ignoring unknown fields."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class ContentKind(str, Enum):
    """The two bundle content variants, named by their JSON key."""

    MESSAGE_SIGNATURE = "messageSignature"
    DSSE_ENVELOPE = "dsseEnvelope"


# ---------------------------------------------------------------------------
# messageSignature variant
# ---------------------------------------------------------------------------


class MessageDigest(_WireModel):
    algorithm: str
    digest: str  # base64


class MessageSignature(_WireModel):
    message_digest: MessageDigest
    signature: str = ""


class MessageSignatureContent(_WireModel):
    kind: ClassVar[ContentKind] = ContentKind.MESSAGE_SIGNATURE
    message_signature: MessageSignature


# ---------------------------------------------------------------------------
# dsseEnvelope variant
# ---------------------------------------------------------------------------


class DsseEnvelope(_WireModel):
    payload: str  # base64
    payload_type: str


class DsseEnvelopeContent(_WireModel):
    kind: ClassVar[ContentKind] = ContentKind.DSSE_ENVELOPE
    dsse_envelope: DsseEnvelope


def content_kind(value: Any) -> str | None:
    """Pick the content variant from whichever key is present.

    Returns ``None`` (no match) when neither or both keys are present.
    """
    if isinstance(value, BaseModel):
        return value.kind.value if hasattr(value, "kind") else None
    if not isinstance(value, dict):
        return None
    present = [kind.value for kind in ContentKind if kind.value in value]
    if len(present) != 1:
        return None
    return present[0]


BundleContent = Annotated[
    Union[
        Annotated[MessageSignatureContent, Tag(ContentKind.MESSAGE_SIGNATURE.value)],
        Annotated[DsseEnvelopeContent, Tag(ContentKind.DSSE_ENVELOPE.value)],
    ],
    Discriminator(content_kind),
]


class SigstoreBundle(_WireModel):
    """A parsed bundle: its media type plus exactly one content variant."""

    media_type: str
    content: BundleContent


# ---------------------------------------------------------------------------
# in-toto statement (DSSE payload)
# ---------------------------------------------------------------------------


class InTotoDigest(_WireModel):
    sha256: str  # hex


class InTotoSubject(_WireModel):
    name: str = ""
    digest: InTotoDigest


class InTotoStatement(_WireModel):
    statement_type: str = Field(alias="_type")
    subject: list[InTotoSubject]
    predicate_type: str = ""
