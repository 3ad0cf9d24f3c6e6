from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.application.use_cases.media_files import unique_filename
from src.domain.entities.media import ALLOWED_MIME_TYPES, DEFAULT_EXTENSIONS, MediaRecordEntity, SourceImage
from src.domain.exceptions import ContentTypeMismatchError, FileTooLargeError, ImageDecodeError
from src.domain.services.transcoder import ensure_allowed_mime
from src.infrastructure.database.repositories.media_repository import MediaRepository


@dataclass
class UploadImageUseCase:
    builder: DerivativeSetBuilder
    media_repo: MediaRepository
    max_upload_bytes: int = 10 * 1024 * 1024

    def validate(self, mime_type: str | None, size: int) -> str:
        """Reject by type first, then by size. Returns the normalised mime type."""
        mime = ensure_allowed_mime(mime_type)
        if size > self.max_upload_bytes:
            raise FileTooLargeError(size, self.max_upload_bytes)
        if size == 0:
            raise ImageDecodeError("Empty file")
        return mime

    def check_content(self, data: bytes, mime_type: str) -> None:
        """The decoded format must be the declared one; derivatives are encoded as the declared type."""
        detected = self.builder.transcoder.probe(data).mime_type
        if detected != mime_type:
            raise ContentTypeMismatchError(mime_type, detected or "unknown", ALLOWED_MIME_TYPES)

    def execute(
        self,
        data: bytes,
        filename: str,
        mime_type: str | None,
        *,
        alt_text: str | None = None,
        caption: str | None = None,
    ) -> MediaRecordEntity:
        """
        Validate, build every derivative and record the result.

        The record is only created once the whole derivative set exists.
        """
        source = SourceImage(data=data, mime_type=self.validate(mime_type, len(data)), filename=filename)
        self.check_content(source.data, source.mime_type)
        fallback = f"upload.{DEFAULT_EXTENSIONS[source.mime_type]}"
        stored_name = unique_filename(source.filename, fallback=fallback)
        derivatives = self.builder.build(source.data, stored_name, source.mime_type)
        entity = self.media_repo.create(**derivatives.to_record(), alt_text=alt_text, caption=caption)
        logger.info("Uploaded {} as media {} ({}x{})", filename, entity.id, entity.width, entity.height)
        return entity
