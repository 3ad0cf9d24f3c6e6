from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

JPEG = "image/jpeg"
PNG = "image/png"
WEBP = "image/webp"
ALLOWED_MIME_TYPES: tuple[str, ...] = (JPEG, PNG, WEBP)
# extension used when a filename carries none
DEFAULT_EXTENSIONS: dict[str, str] = {JPEG: "jpg", PNG: "png", WEBP: "webp"}


class Tier(str, Enum):
    ORIGINAL = "original"
    LARGE = "large"
    MEDIUM = "medium"
    THUMB = "thumb"


# Order in which derivatives are produced; original is never resized.
DERIVATIVE_TIERS: tuple[Tier, ...] = (Tier.LARGE, Tier.MEDIUM, Tier.THUMB)


class ResizeStrategy(str, Enum):
    ORIGINAL = "original"  # stored as uploaded
    BOUNDING_BOX = "bounding-box"
    SHORT_SIDE_SCALE = "short-side-scale"


@dataclass(frozen=True)
class SizeRule:
    tier: Tier
    strategy: ResizeStrategy
    quality: int
    max_width: int = 0
    max_height: int = 0
    short_side: int = 0

    @classmethod
    def bounding_box(cls, tier: Tier, max_width: int, max_height: int, quality: int) -> SizeRule:
        return cls(tier, ResizeStrategy.BOUNDING_BOX, quality, max_width=max_width, max_height=max_height)

    @classmethod
    def short_side_scale(cls, tier: Tier, short_side: int, quality: int) -> SizeRule:
        return cls(tier, ResizeStrategy.SHORT_SIDE_SCALE, quality, short_side=short_side)

    @classmethod
    def original(cls) -> SizeRule:
        return cls(Tier.ORIGINAL, ResizeStrategy.ORIGINAL, quality=100)


@dataclass(frozen=True)
class SourceImage:
    data: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DerivativeEntry:
    path: str  # storage path, e.g. large/1700000000000_photo_large.jpg
    url: str
    width: int
    height: int
    size: int  # bytes


@dataclass(frozen=True)
class DerivativeSet:
    filename: str
    mime_type: str
    original: DerivativeEntry
    large: DerivativeEntry | None = None
    medium: DerivativeEntry | None = None
    thumb: DerivativeEntry | None = None

    def get(self, tier: Tier) -> DerivativeEntry | None:
        return getattr(self, tier.value)

    def entries(self) -> list[tuple[Tier, DerivativeEntry]]:
        out = [(Tier.ORIGINAL, self.original)]
        for tier in DERIVATIVE_TIERS:
            entry = self.get(tier)
            if entry is not None:
                out.append((tier, entry))
        return out

    def to_record(self) -> dict[str, Any]:
        """Plain fields a caller persists as a media record."""
        return {
            "filename": self.filename,
            "url": self.original.url,
            "url_large": self.large.url if self.large else None,
            "url_medium": self.medium.url if self.medium else None,
            "url_thumb": self.thumb.url if self.thumb else None,
            "mime_type": self.mime_type,
            "size": self.original.size,
            "width": self.original.width,
            "height": self.original.height,
        }


@dataclass(frozen=True)
class MediaRecordEntity:
    id: str
    filename: str
    url: str
    mime_type: str
    created_at: datetime
    url_large: str | None = None
    url_medium: str | None = None
    url_thumb: str | None = None
    size: int | None = None
    width: int | None = None
    height: int | None = None
    alt_text: str | None = None
    caption: str | None = None

    @property
    def has_dimensions(self) -> bool:
        return bool(self.width) and bool(self.height)

    def urls(self) -> list[str]:
        return [u for u in (self.url, self.url_large, self.url_medium, self.url_thumb) if u]

    def derivative_urls(self) -> list[str]:
        return [u for u in (self.url_large, self.url_medium, self.url_thumb) if u]
