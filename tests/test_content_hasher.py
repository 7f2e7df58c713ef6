import hashlib
from io import BytesIO

import pytest

from domain.content_hasher import compute_digest, compute_stream_digest
from domain.errors import PayloadTooLargeError
from domain.hash_constants import BLOCK_SIZE

HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestComputeDigest:
    def test_known_vector(self):
        assert compute_digest(b"hello") == HELLO_SHA256

    def test_empty_input(self):
        assert compute_digest(b"") == EMPTY_SHA256

    def test_deterministic(self):
        content = b"some blob content" * 100
        assert compute_digest(content) == compute_digest(content)

    def test_different_content_different_digest(self):
        assert compute_digest(b"content1") != compute_digest(b"content2")

    def test_multi_block_content_matches_single_pass(self):
        # Spans several blocks with a partial last block
        content = bytes(range(256)) * ((BLOCK_SIZE * 3) // 256 + 7)
        assert compute_digest(content) == hashlib.sha256(content).hexdigest()

    def test_digest_is_lowercase_hex(self):
        digest = compute_digest(b"abc")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)


class TestComputeStreamDigest:
    def test_matches_bytes_digest(self):
        content = b"x" * (BLOCK_SIZE * 2 + 13)
        digest, size = compute_stream_digest(BytesIO(content))
        assert digest == compute_digest(content)
        assert size == len(content)

    def test_empty_stream(self):
        assert compute_stream_digest(BytesIO(b"")) == (EMPTY_SHA256, 0)

    def test_reads_from_current_position(self):
        stream = BytesIO(b"prefixhello")
        stream.seek(6)
        assert compute_stream_digest(stream) == (HELLO_SHA256, 5)

    def test_limit_exactly_reached_is_allowed(self):
        digest, size = compute_stream_digest(BytesIO(b"hello"), max_bytes=5)
        assert digest == HELLO_SHA256
        assert size == 5

    def test_limit_exceeded_raises(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            compute_stream_digest(BytesIO(b"hello"), max_bytes=4)
        assert exc_info.value.limit == 4
