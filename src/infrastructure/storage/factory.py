from __future__ import annotations

from loguru import logger
from supabase import Client

from src.infrastructure.config import FILESYSTEM_BACKEND, SUPABASE_BACKEND, MediaSettings
from src.infrastructure.storage.base import StorageBackend
from src.infrastructure.storage.filesystem_storage import FilesystemStorage
from src.infrastructure.storage.supabase_storage import SupabaseStorage


def create_storage_backend(settings: MediaSettings, client: Client | None = None) -> StorageBackend:
    """Pick the backend named by ``settings.storage_backend``.

    The object storage backend falls back to the local tree when Supabase is
    disabled or not configured, so a dev box behaves the same either way.
    """
    backend = settings.storage_backend
    if backend == SUPABASE_BACKEND:
        if client is not None and not settings.supabase_disabled:
            return SupabaseStorage(client, settings.bucket, upsert=True)
        logger.warning("Supabase storage unavailable, using local files under {}", settings.upload_root)
        backend = FILESYSTEM_BACKEND
    if backend == FILESYSTEM_BACKEND:
        return FilesystemStorage(settings.upload_root, settings.url_prefix)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
