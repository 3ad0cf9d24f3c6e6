from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from src.application.use_cases.media_files import delete_urls_quietly
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.base import StorageBackend


@dataclass
class DeleteMediaUseCase:
    media_repo: MediaRepository
    storage: StorageBackend

    def execute(self, media_id: str) -> int | None:
        """Delete the record, then its files. Returns files removed, or None if the record is unknown."""
        record = self.media_repo.get(media_id)
        if record is None:
            return None
        self.media_repo.delete(record.id)
        deleted = delete_urls_quietly(self.storage, record.urls())
        logger.info("Deleted media {} and {} stored files", record.id, deleted)
        return deleted
