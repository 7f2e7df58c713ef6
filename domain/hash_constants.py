"""Hash constants for the content-addressed blob store."""

HASH_ALGORITHM = "sha256"
BLOCK_SIZE = 8192  # 8KB block size for payload processing
DIGEST_LENGTH = 64  # hex characters in a sha256 digest
IDENTIFIER_LENGTH = 7  # hex characters kept from the digest (~28 bits)
EDGE_CACHE_MAX_AGE_SECONDS = 604800  # 7 days
EDGE_CACHE_CONTROL = (
    f"max-age={EDGE_CACHE_MAX_AGE_SECONDS}, "
    f"s-maxage={EDGE_CACHE_MAX_AGE_SECONDS}, immutable"
)
