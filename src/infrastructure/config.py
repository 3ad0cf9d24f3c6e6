from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

FILESYSTEM_BACKEND = "filesystem"
SUPABASE_BACKEND = "supabase"


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip().strip("/") for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class MediaSettings:
    """Runtime settings for the media pipeline, read from the environment."""

    storage_backend: str = FILESYSTEM_BACKEND
    # filesystem backend: <public_dir>/<upload_subdir>/{original,large,medium,thumb}
    public_dir: Path = Path("public")
    upload_subdir: str = "uploads/images"
    url_prefix: str = "/uploads/images"
    # object storage backend
    bucket: str = "media-library"
    supabase_disabled: bool = False
    # legacy lookup
    legacy_root: Path = Path(".")
    legacy_prefix: str = "public"
    legacy_dirs: tuple[str, ...] = field(default_factory=lambda: ("public/images",))
    # upload limits / jobs
    max_upload_bytes: int = 10 * 1024 * 1024
    job_workers: int = 1

    @property
    def upload_root(self) -> Path:
        return self.public_dir / self.upload_subdir

    @classmethod
    def from_env(cls) -> MediaSettings:
        return cls(
            storage_backend=os.getenv("MEDIA_STORAGE_BACKEND", FILESYSTEM_BACKEND).lower(),
            public_dir=Path(os.getenv("MEDIA_PUBLIC_DIR", "public")),
            upload_subdir=os.getenv("MEDIA_UPLOAD_SUBDIR", "uploads/images").strip("/"),
            url_prefix="/" + os.getenv("MEDIA_URL_PREFIX", "/uploads/images").strip("/"),
            bucket=os.getenv("SUPABASE_STORAGE_BUCKET", "media-library"),
            supabase_disabled=os.getenv("SUPABASE_DISABLED", "0") == "1",
            legacy_root=Path(os.getenv("MEDIA_LEGACY_ROOT", ".")),
            legacy_prefix=os.getenv("MEDIA_LEGACY_PREFIX", "public").strip("/"),
            legacy_dirs=_env_list("MEDIA_LEGACY_DIRS", "public/images"),
            max_upload_bytes=int(os.getenv("MEDIA_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            job_workers=max(1, int(os.getenv("MEDIA_JOB_WORKERS", "1"))),
        )
