"""
Structural Fingerprint Accumulator.

A fingerprint summarizes the shape of a decomposed subtree: which codecs
fired, what identity each codec reported (JSON key names, HTTP header names),
and the fingerprints of the children they produced.

Every fold hashes the previous digest together with the new parts, so the
result is sensitive to order and to nesting:
    fold(fold(b"", a), b) != fold(fold(b"", b), a)

MD5 is used as a structural discriminator only. It is not a security
boundary and must not be treated as one.
"""

from __future__ import annotations

import hashlib


# =============================================================================
# CONSTANTS
# =============================================================================

# Fingerprint of a fragment that has not been decomposed, or that produced
# no accepted children.
EMPTY_FINGERPRINT = b""

# Width of every non-empty fingerprint, in bytes
FINGERPRINT_SIZE = hashlib.md5(usedforsecurity=False).digest_size


# =============================================================================
# FOLDING
# =============================================================================

def fold(existing: bytes, *parts: bytes) -> bytes:
    """
    Fold parts into an existing digest.

    The existing digest and every part are concatenated in argument order
    and hashed. The returned digest fully replaces ``existing``.
    """
    digest = hashlib.md5(usedforsecurity=False)
    digest.update(existing)
    for part in parts:
        digest.update(part)
    return digest.digest()


def chain(*parts: bytes) -> bytes:
    """
    Fold each part in turn, starting from an empty digest.

    Codecs use this to build identity bytes out of several names, one fold
    per name. Returns EMPTY_FINGERPRINT when no parts are given.
    """
    result = EMPTY_FINGERPRINT
    for part in parts:
        result = fold(result, part)
    return result


def format_fingerprint(fingerprint: bytes) -> str:
    """Render a fingerprint as lowercase hex ("-" when empty)."""
    if not fingerprint:
        return "-"
    return fingerprint.hex()
