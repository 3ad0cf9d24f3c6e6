from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from src.application.dtos.common_dto import ErrorResponse
from src.application.dtos.media_dto import (
    DeleteMediaResponse,
    ListMediaResponse,
    MediaCheckResponse,
    MediaRecordResponse,
)
from src.application.use_cases.audit_media import AuditMediaUseCase
from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.application.use_cases.delete_media import DeleteMediaUseCase
from src.application.use_cases.upload_image import UploadImageUseCase
from src.domain.exceptions import FileTooLargeError
from src.domain.services.transcoder import ensure_allowed_mime
from src.infrastructure.api.dependencies import get_builder, get_media_repo, get_settings, get_storage
from src.infrastructure.config import MediaSettings
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.base import StorageBackend

_READ_CHUNK = 1024 * 1024


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read the upload in chunks, giving up as soon as it grows past ``max_bytes``."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_READ_CHUNK)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise FileTooLargeError(file.size or total, max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


router = APIRouter(
    prefix="/media",
    tags=["Media Library"],
    responses={
        404: {"description": "Not Found - Media record does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "",
    response_model=MediaRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Image",
    description="""
    Upload an image to the media library.

    **Supported formats**: JPEG, PNG, WEBP
    **Maximum file size**: `MEDIA_MAX_UPLOAD_BYTES` (10MB by default)

    The original is stored untouched and three derivatives are generated:
    - **large**: fits 1920x1920 (omitted when the image is already smaller)
    - **medium**: short side scaled to 500 (never enlarged)
    - **thumb**: fits 150x150 (omitted when the image is already smaller)
    """,
    response_description="The created media record with derivative URLs",
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - File could not be decoded as an image"},
        413: {"model": ErrorResponse, "description": "Payload Too Large - File size exceeds limit"},
        415: {"model": ErrorResponse, "description": "Unsupported Media Type - Not JPEG, PNG or WEBP"},
    },
)
async def upload_media(
    file: UploadFile = File(..., description="Image file to upload"),
    alt_text: str | None = Form(None, description="Alternative text"),
    caption: str | None = Form(None, description="Caption"),
    settings: MediaSettings = Depends(get_settings),
    builder: DerivativeSetBuilder = Depends(get_builder),
    media: MediaRepository = Depends(get_media_repo),
):
    """Upload one image and build its derivative set."""
    # type is rejected before any byte is read
    ensure_allowed_mime(file.content_type)
    data = await read_upload(file, settings.max_upload_bytes)
    uc = UploadImageUseCase(builder=builder, media_repo=media, max_upload_bytes=settings.max_upload_bytes)
    entity = uc.execute(data, file.filename or "", file.content_type, alt_text=alt_text, caption=caption)
    return MediaRecordResponse.from_entity(entity)


@router.get(
    "",
    response_model=ListMediaResponse,
    summary="List Media",
    description="Paginated media library, newest first.",
)
async def list_media(
    media: MediaRepository = Depends(get_media_repo),
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int = Query(20, ge=1, le=100, description="Records per page (1-100)"),
):
    items = media.list_recent(limit=page_size, offset=(page - 1) * page_size)
    return ListMediaResponse(
        media=[MediaRecordResponse.from_entity(it) for it in items],
        total=media.count(),
        page=page,
        page_size=page_size,
    )


@router.get(
    "/check",
    response_model=MediaCheckResponse,
    summary="Check Media Files",
    description="""
    Report, for every media record, whether its original and each derivative
    file still exist in storage. Read-only; use `cleanup-broken` to act on it.
    """,
)
async def check_media(
    media: MediaRepository = Depends(get_media_repo),
    storage: StorageBackend = Depends(get_storage),
):
    return AuditMediaUseCase(media_repo=media, storage=storage).execute()


@router.get(
    "/{media_id}",
    response_model=MediaRecordResponse,
    summary="Get Media Record",
)
async def get_media(media_id: str, media: MediaRepository = Depends(get_media_repo)):
    entity = media.get(media_id)
    if entity is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return MediaRecordResponse.from_entity(entity)


@router.delete(
    "/{media_id}",
    response_model=DeleteMediaResponse,
    summary="Delete Media",
    description="""
    Delete a media record, then its original and derivative files.

    File removal is best effort: a file that is already gone does not fail the
    request. Content rows that still point at the image are not touched.
    """,
)
async def delete_media(
    media_id: str,
    media: MediaRepository = Depends(get_media_repo),
    storage: StorageBackend = Depends(get_storage),
):
    deleted = DeleteMediaUseCase(media_repo=media, storage=storage).execute(media_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return DeleteMediaResponse(ok=True, files_deleted=deleted)
