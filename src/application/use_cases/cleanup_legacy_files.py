from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from src.application.dtos.job_dto import LegacyCleanupReport
from src.application.use_cases.batch_runner import run_batch
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.storage.legacy_locator import LegacyImageLocator

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")


@dataclass
class CleanupLegacyFilesUseCase:
    """
    Delete image files in the legacy directories that no content row references.

    Only the top level of each legacy directory is scanned, and anything under
    the canonical upload tree is left alone. A file counts as referenced when a
    content URL equals its path (with or without the public prefix) or mentions
    its filename.
    """

    content_repo: ContentImageRepository
    locator: LegacyImageLocator
    upload_root: Path

    def execute(self) -> LegacyCleanupReport:
        references = self.content_repo.referenced_urls()
        files = list(self._legacy_files())
        logger.info("Checking {} legacy image files against {} references", len(files), len(references))
        report = run_batch(
            files,
            lambda path: self._cleanup_one(path, references),
            lambda path: path.name,
            LegacyCleanupReport(),
        )
        logger.info("Legacy cleanup: {}", report.message)
        return report

    def _legacy_files(self) -> Iterable[Path]:
        upload_root = self.upload_root.resolve()
        for directory in self.locator.legacy_directories():
            if directory == upload_root or upload_root in directory.parents:
                continue
            for path in sorted(directory.iterdir()):
                if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS:
                    yield path

    def _cleanup_one(self, path: Path, references: set[str]) -> Mapping[str, int]:
        if self.locator.reference_forms(path) & references or any(path.name in url for url in references):
            return {"checked": 1, "skipped": 1}
        path.unlink()
        logger.info("Deleted unreferenced legacy image {}", path)
        return {"checked": 1, "deleted": 1, "processed": 1}
