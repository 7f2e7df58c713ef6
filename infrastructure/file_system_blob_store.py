import os
import json
import logging
import tempfile
from itertools import islice
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from domain.blob import BlobMetadata, StoredEntry
from domain.blob_store import BlobStore
from domain.errors import StoreUnavailableError
from domain.hash_constants import BLOCK_SIZE
from domain.identifier import is_valid_identifier
from infrastructure.stored_metadata import dump_metadata, load_metadata

logger = logging.getLogger(__name__)


class FileSystemBlobStore(BlobStore):
    """
    Blob store backed by a local directory.

    Layout: <root>/objects/<id[0:2]>/<id[2:4]>/<id> holds one record: the
    metadata as a single JSON line, then the raw blob bytes. A record is
    written to a temporary file and moved into place with one os.replace, so
    a reader sees either the old record or the new one, never new bytes
    paired with old metadata. Concurrent writers to the same identifier are
    not ordered; the last replace wins.
    """

    consistency = "immediate"

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.objects_dir = self.root_dir / "objects"
        self.objects_dir.mkdir(parents=True, exist_ok=True)

    def put(self, identifier: str, stream: BinaryIO, metadata: BlobMetadata) -> None:
        if not is_valid_identifier(identifier):
            raise ValueError(f"Invalid identifier: {identifier!r}")

        record_path = self._get_record_path(identifier)
        header = json.dumps(dump_metadata(metadata), sort_keys=True).encode("utf-8") + b"\n"
        tmp_path = None
        try:
            record_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._write_temp(record_path.parent, identifier, header, stream)
            os.replace(tmp_path, record_path)
        except OSError as e:
            logger.warning("Failed to write blob %s: %s", identifier, e)
            raise StoreUnavailableError(f"Failed to write blob {identifier}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def get_with_metadata(self, identifier: str) -> Optional[StoredEntry]:
        if not is_valid_identifier(identifier):
            return None

        record_path = self._get_record_path(identifier)
        if not record_path.is_file():
            return None

        try:
            with open(record_path, "rb") as f:
                header = f.readline()
                content = f.read()
            raw_metadata = json.loads(header)
        except ValueError as e:
            raise StoreUnavailableError(f"Corrupt metadata for blob {identifier}: {e}") from e
        except OSError as e:
            logger.warning("Failed to read blob %s: %s", identifier, e)
            raise StoreUnavailableError(f"Failed to read blob {identifier}: {e}") from e

        return StoredEntry(
            identifier=identifier,
            content=content,
            metadata=load_metadata(identifier, raw_metadata),
        )

    def list(self, prefix: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
        try:
            return list(islice(self._iter_identifiers(prefix or ""), limit))
        except OSError as e:
            raise StoreUnavailableError(f"Failed to list blobs: {e}") from e

    def _iter_identifiers(self, prefix: str) -> Iterator[str]:
        """Yield stored identifiers in sorted order, pruning fan-out directories that cannot match."""
        for first in self._sorted_entries(self.objects_dir, prefix[:2]):
            if not first.is_dir():
                continue
            for second in self._sorted_entries(first, prefix[2:4]):
                if not second.is_dir():
                    continue
                for record in self._sorted_entries(second, prefix):
                    if record.is_file() and is_valid_identifier(record.name):
                        yield record.name

    def _sorted_entries(self, directory: Path, prefix: str) -> List[os.DirEntry]:
        # Fan-out names are fixed-width hex, so per-level sorting gives a global order
        with os.scandir(directory) as entries:
            return sorted(
                (entry for entry in entries if entry.name.startswith(prefix)),
                key=lambda entry: entry.name
            )

    def _write_temp(self, directory: Path, identifier: str, header: bytes, stream: BinaryIO) -> str:
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{identifier}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(header)
                while True:
                    chunk = stream.read(BLOCK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
        except BaseException:
            os.unlink(tmp_path)
            raise
        return tmp_path

    def _get_record_path(self, identifier: str) -> Path:
        return self.objects_dir / identifier[:2] / identifier[2:4] / identifier
