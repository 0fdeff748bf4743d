"""Digest extractor — recovers attested content digests from one bundle.

A bundle is a single JSON object. Its media type is checked before anything
else is parsed; then the content variant is decoded:

- ``messageSignature``: the SHA2_256 message digest, base64-decoded.
- ``dsseEnvelope``: the in-toto statement in the base64 payload; every
  subject's hex SHA-256 digest is decoded.

Digests are returned as raw bytes so that values from both encodings
compare equal to digests computed from files on disk.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pydantic import ValidationError

from sigstage.models.bundle import (
    IN_TOTO_PAYLOAD_TYPE,
    IN_TOTO_STATEMENT_TYPE,
    SHA256_ALGORITHM,
    SUPPORTED_MEDIA_TYPES,
    DsseEnvelopeContent,
    InTotoStatement,
    MessageSignatureContent,
    SigstoreBundle,
)


class BundleFormatError(ValueError):
    """Raised when a bundle cannot be decoded into digests.

    ``field`` names the offending field (dotted JSON path) when known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


def _validation_field(exc: ValidationError, prefix: str = "") -> str:
    """Dotted location of the first validation error."""
    errors = exc.errors()
    if not errors:
        return prefix
    loc = ".".join(str(part) for part in errors[0]["loc"])
    return f"{prefix}.{loc}" if prefix and loc else (prefix or loc)


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BundleFormatError(f"{field} is not base64: {exc}", field=field) from exc


def _hexdecode(value: str, field: str) -> bytes:
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, ValueError) as exc:
        raise BundleFormatError(f"{field} is not hex: {exc}", field=field) from exc


# ------------------------------------------------------------------
# Parse
# ------------------------------------------------------------------


def parse_bundle(record: str | bytes) -> SigstoreBundle:
    """Parse one bundle record into a typed :class:`SigstoreBundle`.

    The media type is validated first; an unsupported media type is
    rejected without looking at the rest of the record.
    """
    try:
        data: Any = json.loads(record)
    except ValueError as exc:
        raise BundleFormatError(f"can't parse bundle: {exc}") from exc

    if not isinstance(data, dict):
        raise BundleFormatError(
            f"bundle must be a JSON object, got {type(data).__name__}"
        )

    media_type = data.get("mediaType")
    if not isinstance(media_type, str):
        raise BundleFormatError("bundle is missing mediaType", field="mediaType")
    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise BundleFormatError(
            f"unsupported sigstore media type: {media_type}", field="mediaType"
        )

    present = [key for key in ("messageSignature", "dsseEnvelope") if key in data]
    if not present:
        raise BundleFormatError(
            "bundle has neither messageSignature nor dsseEnvelope content"
        )
    if len(present) > 1:
        raise BundleFormatError(
            "bundle has both messageSignature and dsseEnvelope content"
        )

    try:
        return SigstoreBundle.model_validate(
            {"mediaType": media_type, "content": data}
        )
    except ValidationError as exc:
        # Drop the synthetic "content.<tag>" prefix from the location
        loc = _validation_field(exc).split(".")[2:]
        field = ".".join(loc) or present[0]
        raise BundleFormatError(
            f"invalid {present[0]} content at {field}: "
            f"{exc.errors()[0]['msg']}",
            field=field,
        ) from exc


def parse_statement(payload: bytes) -> InTotoStatement:
    """Parse and type-check a decoded DSSE payload as an in-toto statement."""
    try:
        statement = InTotoStatement.model_validate_json(payload)
    except ValidationError as exc:
        field = _validation_field(exc, "dsseEnvelope.payload")
        raise BundleFormatError(
            f"failed to parse dsse payload at {field}: {exc.errors()[0]['msg']}",
            field=field,
        ) from exc
    if statement.statement_type != IN_TOTO_STATEMENT_TYPE:
        raise BundleFormatError(
            f"unsupported in-toto type: {statement.statement_type}",
            field="dsseEnvelope.payload._type",
        )
    return statement


# ------------------------------------------------------------------
# Extract
# ------------------------------------------------------------------


def digests_from_bundle(bundle: SigstoreBundle) -> set[bytes]:
    """Decode the raw content digests attested by a parsed bundle."""
    content = bundle.content

    if isinstance(content, MessageSignatureContent):
        message_digest = content.message_signature.message_digest
        if message_digest.algorithm != SHA256_ALGORITHM:
            raise BundleFormatError(
                "unsupported message digest algorithm: "
                f"{message_digest.algorithm} (only {SHA256_ALGORITHM} is supported)",
                field="messageSignature.messageDigest.algorithm",
            )
        return {
            _b64decode(
                message_digest.digest, "messageSignature.messageDigest.digest"
            )
        }

    if isinstance(content, DsseEnvelopeContent):
        envelope = content.dsse_envelope
        if envelope.payload_type != IN_TOTO_PAYLOAD_TYPE:
            raise BundleFormatError(
                f"unsupported dsse payload type: {envelope.payload_type}",
                field="dsseEnvelope.payloadType",
            )
        statement = parse_statement(
            _b64decode(envelope.payload, "dsseEnvelope.payload")
        )
        digests: set[bytes] = set()
        for index, subject in enumerate(statement.subject):
            digests.add(
                _hexdecode(
                    subject.digest.sha256,
                    f"dsseEnvelope.payload.subject.{index}.digest.sha256",
                )
            )
        return digests

    raise BundleFormatError(f"unknown bundle content: {type(content).__name__}")


def extract_digests(record: str | bytes) -> set[bytes]:
    """Return every raw SHA-256 digest attested by one bundle record.

    Raises :class:`BundleFormatError` naming the offending field on any
    unsupported or malformed input.
    """
    return digests_from_bundle(parse_bundle(record))
