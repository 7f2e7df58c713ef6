"""Content hashing for blobs."""

import hashlib
from typing import BinaryIO, Optional, Tuple

from .errors import PayloadTooLargeError
from .hash_constants import HASH_ALGORITHM, BLOCK_SIZE


def compute_digest(content: bytes) -> str:
    """
    Calculate the hash of a blob's content using the configured algorithm.

    Args:
        content: The blob content as bytes (may be empty)

    Returns:
        The lowercase hexadecimal digest
    """
    hasher = hashlib.new(HASH_ALGORITHM)

    # Process in blocks for memory efficiency
    for i in range(0, len(content), BLOCK_SIZE):
        hasher.update(content[i:i + BLOCK_SIZE])

    return hasher.hexdigest()


def compute_stream_digest(stream: BinaryIO, max_bytes: Optional[int] = None) -> Tuple[str, int]:
    """
    Calculate the digest of a binary stream, reading it to the end in blocks.

    Args:
        stream: Readable binary stream, consumed from its current position
        max_bytes: Upper bound on the number of bytes read, or None for no bound

    Returns:
        Tuple of (hex digest, number of bytes read)

    Raises:
        PayloadTooLargeError: If the stream holds more than max_bytes bytes
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    size = 0
    while True:
        chunk = stream.read(BLOCK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if max_bytes is not None and size > max_bytes:
            raise PayloadTooLargeError(max_bytes)
        hasher.update(chunk)
    return hasher.hexdigest(), size
