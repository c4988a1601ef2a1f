"""HMAC verification for Linear webhook deliveries.

Linear signs each delivery with HMAC-SHA256 over the raw request body and
sends the hex digest in the ``Linear-Signature`` header.
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "Linear-Signature"


def compute_signature(secret: str, body: bytes) -> str:
    """Return the hex HMAC-SHA256 digest of ``body`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Return True when ``signature`` matches ``body`` under ``secret``.

    A missing header never verifies. Comparison is constant time.

    Examples
    --------
    >>> sig = compute_signature("s3cret", b"{}")
    >>> verify_signature("s3cret", b"{}", sig)
    True
    >>> verify_signature("s3cret", b"{}", None)
    False

    """
    if not signature:
        return False
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected, signature.strip().lower())


__all__ = ["SIGNATURE_HEADER", "compute_signature", "verify_signature"]
