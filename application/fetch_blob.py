import logging
from typing import Optional

from domain.blob import DEFAULT_CONTENT_TYPE
from domain.blob_store import BlobStore
from domain.errors import NotFoundError
from domain.identifier import is_valid_identifier
from infrastructure.edge_cache import EdgeCache
from application.dtos import FetchBlobResponse

logger = logging.getLogger(__name__)


class FetchBlob:
    """Resolves an identifier to blob bytes, through the edge cache when one is configured."""

    def __init__(self, blob_store: BlobStore, edge_cache: Optional[EdgeCache] = None):
        self.blob_store = blob_store
        self.edge_cache = edge_cache

    def handle(self, identifier: str) -> FetchBlobResponse:
        # Malformed identifiers can never have been written
        if not is_valid_identifier(identifier):
            raise NotFoundError(identifier)

        if self.edge_cache is not None:
            cached = self.edge_cache.get(identifier)
            if cached is not None:
                logger.debug("Edge cache hit for %s", identifier)
                return FetchBlobResponse(
                    content=cached.content,
                    content_type=cached.content_type,
                    is_cache_hit=True
                )
            logger.debug("Edge cache miss for %s", identifier)

        entry = self.blob_store.get_with_metadata(identifier)
        if entry is None:
            raise NotFoundError(identifier)

        content_type = entry.metadata.content_type or DEFAULT_CONTENT_TYPE
        if self.edge_cache is not None:
            self.edge_cache.put(identifier, entry.content, content_type)

        return FetchBlobResponse(
            content=entry.content,
            content_type=content_type,
            is_cache_hit=False
        )
