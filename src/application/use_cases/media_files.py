from __future__ import annotations

import re
import time
import uuid
from collections.abc import Iterable

from loguru import logger

from src.domain.entities.media import Tier
from src.domain.exceptions import StorageError
from src.infrastructure.storage.base import StorageBackend

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def unique_filename(name: str, fallback: str = "image.jpg") -> str:
    """``My Photo.JPG`` -> ``1718000000000_3fa2c1_My_Photo.JPG``."""
    sanitized = _UNSAFE_CHARS.sub("_", name or "") or fallback
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}_{sanitized}"


def is_canonical_url(storage: StorageBackend, url: str | None) -> bool:
    """True when ``url`` already points at an original written by this pipeline."""
    path = storage.path_from_url(url or "")
    return bool(path) and path.startswith(f"{Tier.ORIGINAL.value}/")


def delete_urls_quietly(storage: StorageBackend, urls: Iterable[str | None]) -> int:
    """Best-effort removal of stored files by URL; returns how many were deleted."""
    deleted = 0
    for url in urls:
        path = storage.path_from_url(url or "")
        if not path:
            continue
        try:
            if storage.delete(path):
                deleted += 1
        except StorageError as exc:
            logger.warning("Could not delete {}: {}", path, exc)
    return deleted
