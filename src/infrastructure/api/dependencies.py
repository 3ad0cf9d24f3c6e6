from __future__ import annotations

from fastapi import Depends

from src.application.use_cases.build_derivatives import DerivativeSetBuilder
from src.domain.services.size_policy import SizePolicy
from src.domain.services.transcoder import TranscoderService
from src.infrastructure.config import MediaSettings
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.database.repositories.media_repository import MediaRepository
from src.infrastructure.database.supabase_client import get_supabase_client
from src.infrastructure.storage.base import StorageBackend
from src.infrastructure.storage.factory import create_storage_backend
from src.infrastructure.storage.legacy_locator import LegacyImageLocator


def get_settings() -> MediaSettings:
    return MediaSettings.from_env()


def get_storage(settings: MediaSettings = Depends(get_settings)) -> StorageBackend:
    return create_storage_backend(settings, get_supabase_client())


def get_transcoder() -> TranscoderService:
    return TranscoderService()


def get_builder(
    storage: StorageBackend = Depends(get_storage),
    transcoder: TranscoderService = Depends(get_transcoder),
) -> DerivativeSetBuilder:
    return DerivativeSetBuilder(storage=storage, policy=SizePolicy(), transcoder=transcoder)


def get_locator(settings: MediaSettings = Depends(get_settings)) -> LegacyImageLocator:
    return LegacyImageLocator(
        settings.legacy_root, prefix=settings.legacy_prefix, legacy_dirs=settings.legacy_dirs
    )


def get_media_repo() -> MediaRepository:
    return MediaRepository(get_supabase_client())


def get_content_repo() -> ContentImageRepository:
    return ContentImageRepository(get_supabase_client())
