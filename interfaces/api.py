import logging
from typing import Optional, Union
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from application.dtos import StoreBlobRequest
from application.fetch_blob import FetchBlob
from application.store_blob import StoreBlob
from domain.blob_store import BlobStore
from domain.collision_policy import CollisionPolicy
from domain.errors import (
    IdentifierCollisionError,
    InvalidInputError,
    NotFoundError,
    PayloadTooLargeError,
    StoreUnavailableError,
)
from domain.hash_constants import EDGE_CACHE_CONTROL
from infrastructure.edge_cache import EdgeCache

logger = logging.getLogger(__name__)

GREETING = "Hello World!"
UPLOAD_FIELD = "data"
NOT_FOUND_MESSAGE = "This key don't exist on KV namespace (KV_KEY_DONT_EXIST)"
INVALID_PARAMETERS_MESSAGE = "Invalid Parameters (data)"
PAYLOAD_TOO_LARGE_MESSAGE = "Payload Too Large (data)"
STORE_UNAVAILABLE_MESSAGE = "Backing store unavailable"

DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024


class Config:
    def __init__(
        self,
        base_url: Optional[str] = None,
        collision_policy: Union[CollisionPolicy, str] = CollisionPolicy.REJECT,
        legacy_status_codes: bool = False,
        edge_cache_enabled: bool = True,
        edge_cache_max_entries: int = 1024,
        max_upload_bytes: Optional[int] = DEFAULT_MAX_UPLOAD_BYTES,
        gzip_minimum_size: int = 1000
    ):
        self.base_url = base_url.rstrip('/') if base_url else None
        self.collision_policy = CollisionPolicy(collision_policy)
        self.legacy_status_codes = legacy_status_codes
        self.edge_cache_enabled = edge_cache_enabled
        self.edge_cache_max_entries = edge_cache_max_entries
        self.max_upload_bytes = max_upload_bytes
        self.gzip_minimum_size = gzip_minimum_size


class ResourceMetadataDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource_id: str = Field(..., alias="resourceId", description="Short public identifier")
    resource_shasum: str = Field(..., alias="resourceShasum", description="Full sha256 digest")


class StoreBlobResponseDTO(BaseModel):
    """Response body of a successful upload."""
    model_config = ConfigDict(populate_by_name=True)

    access_url: str = Field(..., alias="accessUrl", description="URL the blob can be fetched from")
    metadata: ResourceMetadataDTO


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_edge_cache(request: Request) -> Optional[EdgeCache]:
    return request.app.state.edge_cache


router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def index():
    return GREETING


@router.get("/health")
async def health_check(blob_store: BlobStore = Depends(get_blob_store)):
    """Health check endpoint. Probes the backing store with a one-key listing."""
    body = {
        "store": type(blob_store).__name__,
        "consistency": blob_store.consistency,
    }
    try:
        await run_in_threadpool(blob_store.list, None, 1)
    except StoreUnavailableError as e:
        logger.warning("Health probe failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", **body})
    return {"status": "healthy", **body}


@router.put("/", status_code=201, response_model=StoreBlobResponseDTO)
async def store_blob(
    request: Request,
    config: Config = Depends(get_config),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """
    Store the file sent in the multipart field ``data``.

    Only the first ``data`` part is used; a part that is not a file counts as
    missing. Returns the identifier, its digest and the URL the blob can be
    fetched from.
    """
    handler = StoreBlob(
        blob_store=blob_store,
        collision_policy=config.collision_policy,
        max_upload_bytes=config.max_upload_bytes
    )

    try:
        async with request.form() as form:
            data = form.getlist(UPLOAD_FIELD)[:1]
            upload = data[0] if data and isinstance(data[0], UploadFile) else None
            store_request = StoreBlobRequest(
                stream=upload.file if upload is not None else None,
                content_type=upload.content_type if upload is not None else None,
                base_url=config.base_url or str(request.base_url)
            )
            response = await run_in_threadpool(handler.handle, store_request)
    except StarletteHTTPException as e:
        # Raised by the form parser for a malformed multipart body
        logger.debug("Unreadable upload form: %s", e.detail)
        return PlainTextResponse(INVALID_PARAMETERS_MESSAGE, status_code=400)
    except PayloadTooLargeError:
        return PlainTextResponse(PAYLOAD_TOO_LARGE_MESSAGE, status_code=413)
    except InvalidInputError:
        return PlainTextResponse(INVALID_PARAMETERS_MESSAGE, status_code=400)
    except IdentifierCollisionError as e:
        logger.warning("Rejected upload: %s", e)
        return PlainTextResponse(str(e), status_code=409)
    except StoreUnavailableError as e:
        logger.warning("Upload failed: %s", e)
        return PlainTextResponse(STORE_UNAVAILABLE_MESSAGE, status_code=503)

    body = StoreBlobResponseDTO(
        access_url=response.access_url,
        metadata=ResourceMetadataDTO(
            resource_id=response.identifier,
            resource_shasum=response.digest
        )
    )
    return JSONResponse(status_code=201, content=body.model_dump(by_alias=True))


@router.get("/{identifier}")
async def fetch_blob(
    identifier: str,
    config: Config = Depends(get_config),
    blob_store: BlobStore = Depends(get_blob_store),
    edge_cache: Optional[EdgeCache] = Depends(get_edge_cache)
):
    """Return the bytes stored under an identifier with their stored content type."""
    handler = FetchBlob(blob_store=blob_store, edge_cache=edge_cache)

    try:
        response = await run_in_threadpool(handler.handle, identifier)
    except NotFoundError:
        status_code = 400 if config.legacy_status_codes else 404
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=status_code)
    except StoreUnavailableError as e:
        logger.warning("Fetch of %s failed: %s", identifier, e)
        return PlainTextResponse(STORE_UNAVAILABLE_MESSAGE, status_code=503)

    # Content-Type passed as a header so the stored value is sent verbatim
    return Response(
        content=response.content,
        headers={
            "Content-Type": response.content_type,
            "Cache-Control": EDGE_CACHE_CONTROL,
        }
    )


def create_app(
    config: Config,
    blob_store: BlobStore,
    edge_cache: Optional[EdgeCache] = None
) -> FastAPI:
    """Build the FastAPI application around an injected blob store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Serving blobs from %s (%s consistency, collision policy %s, edge cache %s)",
            type(blob_store).__name__,
            blob_store.consistency,
            config.collision_policy.value,
            "on" if app.state.edge_cache is not None else "off"
        )
        yield

    app = FastAPI(
        title="shortblob",
        description="Content-addressed blob store",
        version="1.0.0",
        lifespan=lifespan
    )

    if edge_cache is None and config.edge_cache_enabled:
        edge_cache = EdgeCache(max_entries=config.edge_cache_max_entries)

    app.state.config = config
    app.state.blob_store = blob_store
    app.state.edge_cache = edge_cache if config.edge_cache_enabled else None

    app.add_middleware(GZipMiddleware, minimum_size=config.gzip_minimum_size)
    app.include_router(router)
    return app
