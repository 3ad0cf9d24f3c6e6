from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath

from loguru import logger

from src.application.dtos.job_dto import JobReport
from src.application.use_cases.batch_runner import PROCESSED, SKIPPED, ItemFailed, run_batch
from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.application.use_cases.media_files import is_canonical_url, unique_filename
from src.domain.entities.content import ContentImageRef, ContentKind
from src.domain.entities.media import DEFAULT_EXTENSIONS
from src.domain.services.transcoder import ensure_allowed_mime
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.legacy_locator import LegacyImageLocator


@dataclass
class BackfillContentImagesUseCase:
    """
    Move the images of one content kind onto the canonical derivative layout.

    Per row: no image or already canonical -> skipped; otherwise the best
    surviving legacy file is built into a derivative set and the row is pointed
    at the new original URL before its media record is created. Running it
    again only touches rows that still need it.
    """

    content_repo: ContentImageRepository
    media_repo: MediaRepository
    builder: DerivativeSetBuilder
    locator: LegacyImageLocator
    workers: int = 1

    def execute(self, kind: ContentKind) -> JobReport:
        refs = self.content_repo.list_refs(kind)
        logger.info("Backfilling {} {} image references", len(refs), kind.value)
        report = run_batch(refs, self._backfill_one, ContentImageRef.describe, JobReport(), self.workers)
        logger.info("Backfill {}: {}", kind.value, report.message)
        return report

    def _backfill_one(self, ref: ContentImageRef) -> Mapping[str, int]:
        if not ref.url or is_canonical_url(self.builder.storage, ref.url):
            return SKIPPED

        source = self.locator.locate(ref.url)
        if source is None:
            raise ItemFailed(f"Image not found: {ref.url}")
        logger.info("Found image: {} -> {}", ref.url, source)

        data = source.read_bytes()
        info = self.builder.transcoder.probe(data)
        mime = ensure_allowed_mime(info.mime_type)

        legacy_name = PurePosixPath(self.locator.normalize(ref.url)).name
        fallback = f"{ref.kind.value}-{ref.row_id}.{DEFAULT_EXTENSIONS[mime]}"
        filename = unique_filename(legacy_name, fallback=fallback)
        derivatives = self.builder.build(data, filename, mime)
        # row before record; a failed create points the row back at its legacy URL
        self.content_repo.update_url(ref.kind, ref.row_id, derivatives.original.url)
        try:
            self.media_repo.create(**derivatives.to_record(), alt_text=ref.label)
        except Exception:
            self.content_repo.update_url(ref.kind, ref.row_id, ref.url)
            raise
        return PROCESSED
