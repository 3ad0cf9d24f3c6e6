from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from loguru import logger

from src.application.dtos.job_dto import CleanupReport
from src.application.use_cases.batch_runner import ItemFailed, run_batch
from src.application.use_cases.media_files import delete_urls_quietly
from src.domain.entities.media import MediaRecordEntity
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.base import StorageBackend


@dataclass
class CleanupBrokenMediaUseCase:
    """
    Remove media records whose original file no longer exists.

    For each broken record: drop content references to the image, delete
    whatever derivative files are left, then delete the record. Records with an
    original in place are left alone.
    """

    media_repo: MediaRepository
    content_repo: ContentImageRepository
    storage: StorageBackend
    workers: int = 1

    def execute(self) -> CleanupReport:
        records = self.media_repo.list_recent()
        report = run_batch(records, self._check_one, lambda m: m.filename, CleanupReport(), self.workers)
        logger.info("Cleanup: {}", report.message)
        return report

    def _check_one(self, record: MediaRecordEntity) -> Mapping[str, int]:
        path = self.storage.path_from_url(record.url)
        if not path:
            # could be a record from another backend; never delete what we cannot check
            raise ItemFailed(f"URL is not served by the {self.storage.name} storage backend")
        if self.storage.exists(path):
            return {"checked": 1, "skipped": 1}

        logger.warning("Original missing for media {} ({}), removing", record.id, record.url)
        references = self.content_repo.delete_references(record.url)
        delete_urls_quietly(self.storage, record.urls())
        self.media_repo.delete(record.id)
        return {"checked": 1, "broken": 1, "removed": 1, "processed": 1, "references_removed": references}
