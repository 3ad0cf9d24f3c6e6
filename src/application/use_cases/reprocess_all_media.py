from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.application.dtos.job_dto import JobReport
from src.application.use_cases.batch_runner import PROCESSED, ItemFailed, run_batch
from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.application.use_cases.media_files import delete_urls_quietly
from src.domain.entities.media import DerivativeEntry, MediaRecordEntity
from src.domain.services.transcoder import ensure_allowed_mime
from src.infrastructure.database.repositories.media_repository import MediaRepository


@dataclass
class ReprocessAllMediaUseCase:
    """Regenerate large/medium/thumb for every record from its stored original (after a size policy change)."""

    media_repo: MediaRepository
    builder: DerivativeSetBuilder
    workers: int = 1

    def execute(self) -> JobReport:
        records = self.media_repo.list_recent()
        return run_batch(records, self._reprocess_one, lambda m: m.filename, JobReport(), self.workers)

    def _reprocess_one(self, record: MediaRecordEntity) -> Mapping[str, int]:
        storage = self.builder.storage
        path = storage.path_from_url(record.url)
        if not path or not storage.exists(path):
            raise ItemFailed("Original file not found")
        data = storage.read(path)
        mime = ensure_allowed_mime(record.mime_type or self.builder.transcoder.probe(data).mime_type)

        original = DerivativeEntry(path=path, url=record.url, width=0, height=0, size=len(data))
        derivatives = self.builder.rebuild(data, original, mime)

        self.media_repo.update_derivatives(
            record.id,
            url_large=derivatives.large.url if derivatives.large else None,
            url_medium=derivatives.medium.url if derivatives.medium else None,
            url_thumb=derivatives.thumb.url if derivatives.thumb else None,
            width=derivatives.original.width,
            height=derivatives.original.height,
        )

        # only once the record points at the new set; a failed update keeps the old files
        fresh = {entry.url for _, entry in derivatives.entries()}
        delete_urls_quietly(storage, [u for u in record.derivative_urls() if u not in fresh])
        return PROCESSED
