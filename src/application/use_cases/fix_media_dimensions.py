from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.application.dtos.job_dto import JobReport
from src.application.use_cases.batch_runner import PROCESSED, ItemFailed, run_batch
from src.domain.entities.media import MediaRecordEntity
from src.domain.services.transcoder import TranscoderService
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.base import StorageBackend


@dataclass
class FixMediaDimensionsUseCase:
    """Fill in width/height for media records that lack them, reading the stored original."""

    media_repo: MediaRepository
    storage: StorageBackend
    transcoder: TranscoderService
    workers: int = 1

    def execute(self) -> JobReport:
        records = self.media_repo.list_missing_dimensions()
        return run_batch(records, self._fix_one, lambda m: m.filename, JobReport(), self.workers)

    def _fix_one(self, record: MediaRecordEntity) -> Mapping[str, int]:
        path = self.storage.path_from_url(record.url)
        if not path or not self.storage.exists(path):
            raise ItemFailed("File not found")
        info = self.transcoder.probe(self.storage.read(path))
        if info.width <= 0 or info.height <= 0:
            raise ItemFailed("Could not read dimensions")
        self.media_repo.update_dimensions(record.id, info.width, info.height)
        return PROCESSED
