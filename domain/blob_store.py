from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional

from .blob import BlobMetadata, StoredEntry


class BlobStore(ABC):
    """
    Abstract interface for the key-value store that holds blobs.

    Keys are blob identifiers, values are raw bytes, and each key carries a
    small metadata record. The store's consistency model is inherited from
    the backend and exposed through the ``consistency`` attribute:
    ``"immediate"`` means a completed put is visible to the next get,
    ``"eventual"`` means it may not be for some time.
    """

    consistency = "immediate"

    @abstractmethod
    def put(self, identifier: str, stream: BinaryIO, metadata: BlobMetadata) -> None:
        """
        Store the bytes read from a stream under an identifier.

        An existing entry under the same identifier is replaced.

        Args:
            identifier: The public identifier used as the key
            stream: Readable binary stream positioned at the start of the payload
            metadata: Digest and content type of the payload

        Raises:
            StoreUnavailableError: If the backend fails to write
        """
        pass

    @abstractmethod
    def get_with_metadata(self, identifier: str) -> Optional[StoredEntry]:
        """
        Retrieve the bytes and metadata stored under an identifier.

        Args:
            identifier: The public identifier

        Returns:
            The stored entry, or None if nothing is stored under the key

        Raises:
            StoreUnavailableError: If the backend fails to read, or holds
                metadata of an unexpected shape
        """
        pass

    @abstractmethod
    def list(self, prefix: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
        """
        List stored identifiers in sorted order.

        Args:
            prefix: Only return identifiers starting with this prefix
            limit: Maximum number of identifiers to return

        Raises:
            StoreUnavailableError: If the backend fails to list
        """
        pass
