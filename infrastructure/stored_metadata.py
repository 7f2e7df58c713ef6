"""Validation of metadata records at the backing-store boundary."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from domain.blob import BlobMetadata
from domain.errors import StoreUnavailableError


class StoredMetadata(BaseModel):
    """Wire shape of the metadata kept next to each blob: {shasum, type}."""
    model_config = ConfigDict(extra="ignore")

    shasum: str = Field(..., pattern=r"^[0-9a-f]{64}$", description="Full sha256 digest of the blob")
    type: str = Field(..., description="Content type supplied at upload")

    @classmethod
    def from_domain(cls, metadata: BlobMetadata) -> "StoredMetadata":
        return cls(shasum=metadata.digest, type=metadata.content_type)

    def to_domain(self) -> BlobMetadata:
        return BlobMetadata(digest=self.shasum, content_type=self.type)


def dump_metadata(metadata: BlobMetadata) -> dict:
    return StoredMetadata.from_domain(metadata).model_dump()


def load_metadata(identifier: str, raw: Any) -> BlobMetadata:
    """
    Validate a raw metadata record read from the backend.

    The record must have the expected shape and its digest must start with
    the identifier it is stored under; anything else means the backend holds
    corrupt data and is reported as StoreUnavailableError.
    """
    try:
        metadata = StoredMetadata.model_validate(raw).to_domain()
    except ValidationError as e:
        raise StoreUnavailableError(f"Malformed metadata stored under {identifier}: {e}") from e

    if not metadata.digest.startswith(identifier):
        raise StoreUnavailableError(
            f"Metadata digest {metadata.digest} does not match identifier {identifier}"
        )
    return metadata
