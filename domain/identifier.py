"""
Derivation of short public identifiers from content digests.

An identifier is the first IDENTIFIER_LENGTH hex characters of the digest.
Seven characters carry 28 bits, so by the birthday bound a collision becomes
likely once a store holds a few tens of thousands of distinct blobs (about 50%
at 19,300). Collisions are resolved on write by the configured
CollisionPolicy, never silently ignored.
"""

import math
import string

from .hash_constants import DIGEST_LENGTH, IDENTIFIER_LENGTH

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def _is_lower_hex(value: str) -> bool:
    return all(c in _HEX_DIGITS for c in value)


def derive_identifier(digest: str) -> str:
    """Return the public identifier for a full hex digest."""
    if len(digest) != DIGEST_LENGTH or not _is_lower_hex(digest):
        raise ValueError(f"Not a {DIGEST_LENGTH}-character lowercase hex digest: {digest!r}")
    return digest[:IDENTIFIER_LENGTH]


def is_valid_identifier(value: str) -> bool:
    return len(value) == IDENTIFIER_LENGTH and _is_lower_hex(value)


def collision_probability(blob_count: int, length: int = IDENTIFIER_LENGTH) -> float:
    """
    Approximate probability that at least two of blob_count distinct blobs
    share an identifier of the given hex length.
    """
    if blob_count < 2:
        return 0.0
    space = 16 ** length
    return -math.expm1(-blob_count * (blob_count - 1) / (2 * space))
