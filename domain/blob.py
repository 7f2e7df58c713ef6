"""Domain model for stored blobs and their metadata."""

from dataclasses import dataclass

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class BlobMetadata:
    """Metadata kept next to the blob bytes in the backing store."""
    digest: str
    content_type: str


@dataclass(frozen=True)
class StoredEntry:
    """A blob as held by the backing store under its identifier."""
    identifier: str
    content: bytes
    metadata: BlobMetadata
