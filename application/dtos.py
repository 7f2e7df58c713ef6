from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class StoreBlobRequest:
    stream: Optional[BinaryIO]
    content_type: Optional[str]
    base_url: str


@dataclass
class StoreBlobResponse:
    identifier: str
    access_url: str
    digest: str
    size: int
    written: bool


@dataclass
class FetchBlobResponse:
    content: bytes
    content_type: str
    is_cache_hit: bool
