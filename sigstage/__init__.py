"""Sigstage: attestation-to-artifact matching and upload staging.

v0.1.0 — Sigstore bundle v0.3 support:
  - Message-signature bundles (base64 SHA2_256 message digest)
  - DSSE envelopes carrying in-toto Statement/v1 payloads (hex subjects)
  - Strict accounting: every staged artifact must be attested
  - Atomic staging directory (temp dir + rename on success)
"""

__version__ = "0.1.0"

from sigstage.core.extractor import extract_digests
from sigstage.core.reconciler import Reconciler

__all__ = ["Reconciler", "extract_digests", "__version__"]
