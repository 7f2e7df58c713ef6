import logging
from typing import Optional

from domain.blob import BlobMetadata, DEFAULT_CONTENT_TYPE
from domain.blob_store import BlobStore
from domain.collision_policy import CollisionPolicy
from domain.content_hasher import compute_stream_digest
from domain.errors import IdentifierCollisionError, InvalidInputError
from domain.identifier import derive_identifier
from application.dtos import StoreBlobRequest, StoreBlobResponse

logger = logging.getLogger(__name__)


class StoreBlob:
    """Orchestrates storing an uploaded blob under its content identifier."""

    def __init__(
        self,
        blob_store: BlobStore,
        collision_policy: CollisionPolicy = CollisionPolicy.REJECT,
        max_upload_bytes: Optional[int] = None
    ):
        self.blob_store = blob_store
        self.collision_policy = collision_policy
        self.max_upload_bytes = max_upload_bytes

    def handle(self, request: StoreBlobRequest) -> StoreBlobResponse:
        """
        Hash the payload, derive its identifier and write it to the store.

        The payload stream is read once for hashing and rewound before the
        write, so the bytes are not buffered a second time.

        Raises:
            InvalidInputError: If no payload was supplied
            PayloadTooLargeError: If the payload exceeds max_upload_bytes
            IdentifierCollisionError: If the identifier holds a different blob
                and the policy is REJECT
            StoreUnavailableError: If the backing store fails
        """
        if request.stream is None:
            raise InvalidInputError("Invalid Parameters (data)")

        start = request.stream.tell()
        digest, size = compute_stream_digest(request.stream, self.max_upload_bytes)
        identifier = derive_identifier(digest)
        metadata = BlobMetadata(
            digest=digest,
            content_type=request.content_type or DEFAULT_CONTENT_TYPE
        )

        written = self._should_write(identifier, digest)
        if written:
            request.stream.seek(start)
            self.blob_store.put(identifier, request.stream, metadata)
            logger.info("Stored blob %s (%d bytes, %s)", identifier, size, metadata.content_type)

        return StoreBlobResponse(
            identifier=identifier,
            access_url=f"{request.base_url.rstrip('/')}/{identifier}",
            digest=digest,
            size=size,
            written=written
        )

    def _should_write(self, identifier: str, digest: str) -> bool:
        """Apply the collision policy against whatever the identifier holds now."""
        existing = self.blob_store.get_with_metadata(identifier)
        if existing is None:
            return True

        existing_digest = existing.metadata.digest
        if existing_digest == digest:
            if self.collision_policy == CollisionPolicy.REJECT:
                logger.debug("Blob %s already stored, skipping write", identifier)
                return False
            return True

        if self.collision_policy == CollisionPolicy.REJECT:
            raise IdentifierCollisionError(identifier, existing_digest, digest)

        logger.warning(
            "Overwriting blob %s: digest %s replaced by %s",
            identifier, existing_digest, digest
        )
        return True
