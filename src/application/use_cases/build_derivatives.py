from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger
from PIL import Image

from src.domain.entities.media import (
    DEFAULT_EXTENSIONS,
    DERIVATIVE_TIERS,
    DerivativeEntry,
    DerivativeSet,
    ResizeStrategy,
    Tier,
)
from src.domain.exceptions import DerivativeBuildError, MediaError
from src.domain.services.size_policy import SizePolicy
from src.domain.services.transcoder import TranscoderService, ensure_allowed_mime
from src.infrastructure.storage.base import StorageBackend


def split_filename(filename: str, default_ext: str = "jpg") -> tuple[str, str]:
    """``photo.final.JPG`` -> (``photo.final``, ``jpg``); a bare name gets ``default_ext``."""
    base, dot, ext = filename.rpartition(".")
    if not dot or not base:
        return filename, default_ext
    return base, ext.lower()


def derivative_path(filename: str, tier: Tier, mime_type: str | None = None) -> str:
    """Canonical storage path of ``tier`` for ``filename``; reconstructible from the name alone."""
    if tier is Tier.ORIGINAL:
        return f"{Tier.ORIGINAL.value}/{filename}"
    base, ext = split_filename(filename, DEFAULT_EXTENSIONS.get(mime_type or "", "jpg"))
    return f"{tier.value}/{base}_{tier.value}.{ext}"


@dataclass
class DerivativeSetBuilder:
    """Turn one source image into {original, large, medium, thumb} in a storage backend.

    Bounding-box tiers are omitted when they would not shrink the image. The
    short-side tier (medium) is always produced. If any tier fails the whole set
    is abandoned; an original already written stays in storage.
    """

    storage: StorageBackend
    policy: SizePolicy = field(default_factory=SizePolicy)
    transcoder: TranscoderService = field(default_factory=TranscoderService)

    def build(self, data: bytes, filename: str, mime_type: str) -> DerivativeSet:
        mime = ensure_allowed_mime(mime_type)
        img = self.transcoder.decode(data)
        width, height = img.size
        logger.debug("Building derivatives for {} ({}x{}, {})", filename, width, height, mime)

        original_path = derivative_path(filename, Tier.ORIGINAL)
        url = self.storage.put(original_path, data, mime)
        original = DerivativeEntry(
            path=original_path, url=url, width=width, height=height, size=len(data)
        )
        return self._build_tiers(img, filename, mime, original)

    def rebuild(self, data: bytes, original: DerivativeEntry, mime_type: str) -> DerivativeSet:
        """Regenerate the tiers against an original that is already stored; it is not rewritten."""
        mime = ensure_allowed_mime(mime_type)
        img = self.transcoder.decode(data)
        width, height = img.size
        filename = original.path.rpartition("/")[2]
        current = DerivativeEntry(
            path=original.path, url=original.url, width=width, height=height, size=len(data)
        )
        return self._build_tiers(img, filename, mime, current)

    def _build_tiers(
        self, img: Image.Image, filename: str, mime: str, original: DerivativeEntry
    ) -> DerivativeSet:
        entries: dict[str, DerivativeEntry] = {}
        for tier in DERIVATIVE_TIERS:
            rule = self.policy.rule_for(tier)
            target = self.policy.target_dimensions(rule, original.width, original.height)
            if target is None and rule.strategy is ResizeStrategy.BOUNDING_BOX:
                logger.debug("Skipping {} for {}: already inside the box", tier.value, filename)
                continue
            try:
                result = self.transcoder.resize(img, mime, rule)
                path = derivative_path(filename, tier, mime)
                url = self.storage.put(path, result.data, mime)
            except (MediaError, OSError) as exc:
                # Pillow encoder failures surface as OSError
                logger.error("Derivative {} failed for {}: {}", tier.value, filename, exc)
                raise DerivativeBuildError(tier.value, exc) from exc
            entries[tier.value] = DerivativeEntry(
                path=path, url=url, width=result.width, height=result.height, size=result.size
            )
        return DerivativeSet(filename=filename, mime_type=mime, original=original, **entries)
