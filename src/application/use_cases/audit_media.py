from __future__ import annotations

from dataclasses import dataclass

from src.application.dtos.media_dto import MediaCheckItem, MediaCheckResponse
from src.domain.entities.media import MediaRecordEntity
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.storage.base import StorageBackend


@dataclass
class AuditMediaUseCase:
    """Report, per media record, whether each referenced file is still in storage. Changes nothing."""

    media_repo: MediaRepository
    storage: StorageBackend

    def execute(self) -> MediaCheckResponse:
        items = [self._check(record) for record in self.media_repo.list_recent()]
        complete = sum(1 for item in items if item.complete)
        return MediaCheckResponse(total=len(items), complete=complete, missing=len(items) - complete, items=items)

    def _check(self, record: MediaRecordEntity) -> MediaCheckItem:
        return MediaCheckItem(
            id=record.id,
            filename=record.filename,
            original=bool(self._exists(record.url)),
            large=self._exists(record.url_large),
            medium=self._exists(record.url_medium),
            thumb=self._exists(record.url_thumb),
        )

    def _exists(self, url: str | None) -> bool | None:
        if not url:
            return None
        path = self.storage.path_from_url(url)
        return bool(path) and self.storage.exists(path)
