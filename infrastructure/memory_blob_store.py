import threading
from typing import BinaryIO, Dict, List, Optional, Tuple

from domain.blob import BlobMetadata, StoredEntry
from domain.blob_store import BlobStore
from domain.hash_constants import BLOCK_SIZE
from infrastructure.stored_metadata import dump_metadata, load_metadata


class MemoryBlobStore(BlobStore):
    """Process-local blob store. Puts are immediately visible to gets."""

    consistency = "immediate"

    def __init__(self):
        self._entries: Dict[str, Tuple[bytes, dict]] = {}
        self._lock = threading.Lock()

    def put(self, identifier: str, stream: BinaryIO, metadata: BlobMetadata) -> None:
        chunks = []
        while True:
            chunk = stream.read(BLOCK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)

        with self._lock:
            self._entries[identifier] = (b"".join(chunks), dump_metadata(metadata))

    def get_with_metadata(self, identifier: str) -> Optional[StoredEntry]:
        with self._lock:
            record = self._entries.get(identifier)
        if record is None:
            return None

        content, raw_metadata = record
        return StoredEntry(
            identifier=identifier,
            content=content,
            metadata=load_metadata(identifier, raw_metadata),
        )

    def list(self, prefix: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
        with self._lock:
            keys = sorted(self._entries)
        if prefix:
            keys = [key for key in keys if key.startswith(prefix)]
        if limit is not None:
            keys = keys[:limit]
        return keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
