from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from src.domain.entities.media import ALLOWED_MIME_TYPES, JPEG, PNG, WEBP, SizeRule
from src.domain.exceptions import ImageDecodeError, UnsupportedMediaTypeError
from src.domain.services.size_policy import SizePolicy

_FORMATS = {JPEG: "JPEG", PNG: "PNG", WEBP: "WEBP"}
# Pillow opens multi-picture camera JPEGs as MPO
_MIME_ALIASES = {"image/jpg": JPEG, "image/pjpeg": JPEG, "image/mpo": JPEG}
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    mime_type: str | None  # None when Pillow knows the format but it has no mime


@dataclass(frozen=True)
class TranscodeResult:
    data: bytes
    width: int
    height: int
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


def normalize_mime(mime_type: str | None) -> str:
    mime = (mime_type or "").split(";")[0].strip().lower()
    return _MIME_ALIASES.get(mime, mime)


def ensure_allowed_mime(mime_type: str | None) -> str:
    mime = normalize_mime(mime_type)
    if mime not in ALLOWED_MIME_TYPES:
        raise UnsupportedMediaTypeError(mime or "unknown", ALLOWED_MIME_TYPES)
    return mime


class TranscoderService:
    """Pillow based resize + re-encode. Output format always equals the input format."""

    @staticmethod
    def decode(data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            img.load()
        except _DECODE_ERRORS as exc:
            raise ImageDecodeError(f"Invalid image file: {exc}") from exc
        return img

    @staticmethod
    def probe(data: bytes) -> ImageInfo:
        """Read intrinsic dimensions without decoding pixel data."""
        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                mime = Image.MIME.get(img.format or "")
        except _DECODE_ERRORS as exc:
            raise ImageDecodeError(f"Invalid image file: {exc}") from exc
        return ImageInfo(width=width, height=height, mime_type=normalize_mime(mime) or None)

    def transcode(self, data: bytes, mime_type: str, rule: SizeRule) -> TranscodeResult:
        mime = ensure_allowed_mime(mime_type)
        img = self.decode(data)
        return self.resize(img, mime, rule)

    def resize(self, img: Image.Image, mime_type: str, rule: SizeRule) -> TranscodeResult:
        """Resize an already decoded image per ``rule``; keeps the size when the rule would enlarge."""
        mime = ensure_allowed_mime(mime_type)
        width, height = img.size
        target = SizePolicy.target_dimensions(rule, width, height) or (width, height)
        return self.encode(img, mime, target, rule.quality)

    @staticmethod
    def encode(img: Image.Image, mime_type: str, size: tuple[int, int], quality: int) -> TranscodeResult:
        work = img
        if work.mode in ("1", "P"):
            # palette resize falls back to nearest-neighbour
            work = work.convert("RGBA" if work.mode == "P" else "L")
        if work.size != size:
            work = work.resize(size, Image.Resampling.LANCZOS)

        fmt = _FORMATS[mime_type]
        buf = BytesIO()
        if fmt == "JPEG":
            if work.mode not in ("RGB", "L", "CMYK"):
                work = work.convert("RGB")
            work.save(buf, format=fmt, quality=quality, optimize=True, progressive=True)
        elif fmt == "PNG":
            # lossless; quality does not apply
            work.save(buf, format=fmt, optimize=True)
        else:
            work.save(buf, format=fmt, quality=quality)
        out_w, out_h = work.size
        return TranscodeResult(data=buf.getvalue(), width=out_w, height=out_h, mime_type=mime_type)
