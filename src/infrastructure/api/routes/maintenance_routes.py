from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends

from src.application.dtos.job_dto import (
    CleanupReportResponse,
    JobReportResponse,
    LegacyCleanupReportResponse,
)
from src.application.use_cases.backfill_content_images import BackfillContentImagesUseCase
from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.application.use_cases.cleanup_broken_media import CleanupBrokenMediaUseCase
from src.application.use_cases.cleanup_legacy_files import CleanupLegacyFilesUseCase
from src.application.use_cases.fix_media_dimensions import FixMediaDimensionsUseCase
from src.application.use_cases.reprocess_all_media import ReprocessAllMediaUseCase
from src.domain.entities.content import ContentKind
from src.infrastructure.api.dependencies import (
    get_builder,
    get_content_repo,
    get_locator,
    get_media_repo,
    get_settings,
)
from src.infrastructure.config import MediaSettings
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.legacy_locator import LegacyImageLocator

router = APIRouter(
    tags=["Media Maintenance"],
    responses={422: {"description": "Validation Error - Invalid request format"}},
)


class ContentPath(str, Enum):
    """URL segment of each content kind."""

    PRODUCTS = "products"
    HERO_SLIDES = "hero-slides"
    NEWS = "news"
    PAGES = "pages"

    @property
    def kind(self) -> ContentKind:
        return ContentKind[self.name]


@router.post(
    "/media/fix-dimensions",
    response_model=JobReportResponse,
    summary="Fix Missing Dimensions",
    description="Read width and height from the stored original of every record that lacks them.",
)
async def fix_dimensions(
    settings: MediaSettings = Depends(get_settings),
    builder: DerivativeSetBuilder = Depends(get_builder),
    media: MediaRepository = Depends(get_media_repo),
):
    uc = FixMediaDimensionsUseCase(
        media_repo=media, storage=builder.storage, transcoder=builder.transcoder, workers=settings.job_workers
    )
    report = uc.execute()
    return JobReportResponse(message=report.message, report=report)


@router.post(
    "/media/cleanup-broken",
    response_model=CleanupReportResponse,
    summary="Remove Broken Media",
    description="""
    Delete every media record whose original file is gone, together with its
    remaining derivative files and the content references pointing at it.
    """,
)
async def cleanup_broken(
    settings: MediaSettings = Depends(get_settings),
    builder: DerivativeSetBuilder = Depends(get_builder),
    media: MediaRepository = Depends(get_media_repo),
    content: ContentImageRepository = Depends(get_content_repo),
):
    uc = CleanupBrokenMediaUseCase(
        media_repo=media, content_repo=content, storage=builder.storage, workers=settings.job_workers
    )
    report = uc.execute()
    return CleanupReportResponse(message=report.message, report=report)


@router.post(
    "/media/reprocess-all",
    response_model=JobReportResponse,
    summary="Reprocess All Media",
    description="Regenerate the large, medium and thumb derivatives of every record from its original.",
)
async def reprocess_all(
    settings: MediaSettings = Depends(get_settings),
    builder: DerivativeSetBuilder = Depends(get_builder),
    media: MediaRepository = Depends(get_media_repo),
):
    report = ReprocessAllMediaUseCase(media_repo=media, builder=builder, workers=settings.job_workers).execute()
    return JobReportResponse(message=report.message, report=report)


@router.post(
    "/products/cleanup-old-images",
    response_model=LegacyCleanupReportResponse,
    summary="Delete Unreferenced Legacy Images",
    description="""
    Delete image files in the legacy directories that no content row references.
    Files under the upload tree are never touched.
    """,
)
async def cleanup_old_images(
    settings: MediaSettings = Depends(get_settings),
    locator: LegacyImageLocator = Depends(get_locator),
    content: ContentImageRepository = Depends(get_content_repo),
):
    uc = CleanupLegacyFilesUseCase(content_repo=content, locator=locator, upload_root=settings.upload_root)
    report = uc.execute()
    return LegacyCleanupReportResponse(message=report.message, report=report)


@router.post(
    "/{content}/migrate-images",
    response_model=JobReportResponse,
    summary="Migrate Content Images",
    description="""
    Move the images of products, hero slides, news articles or pages onto the
    media library layout.

    Rows without an image or already pointing at a library original are
    skipped. For the rest the best surviving legacy file is found (largest
    size variant), derivatives are built, a media record is created and the row
    is updated to the new URL. Safe to run repeatedly.
    """,
)
async def migrate_images(
    content: ContentPath,
    settings: MediaSettings = Depends(get_settings),
    builder: DerivativeSetBuilder = Depends(get_builder),
    locator: LegacyImageLocator = Depends(get_locator),
    media: MediaRepository = Depends(get_media_repo),
    content_repo: ContentImageRepository = Depends(get_content_repo),
):
    uc = BackfillContentImagesUseCase(
        content_repo=content_repo,
        media_repo=media,
        builder=builder,
        locator=locator,
        workers=settings.job_workers,
    )
    report = uc.execute(content.kind)
    return JobReportResponse(message=report.message, report=report)
