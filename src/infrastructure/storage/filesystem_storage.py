from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

from src.domain.exceptions import StorageError


class FilesystemStorage:
    """Local directory tree served under a fixed URL prefix.

    ``<base_dir>/original/a.jpg`` is served as ``<url_prefix>/original/a.jpg``.
    Tier directories are created on first write.
    """

    name = "filesystem"

    def __init__(self, base_dir: Path | str, url_prefix: str = "/uploads/images") -> None:
        self.base_dir = Path(base_dir)
        self.url_prefix = "/" + url_prefix.strip("/")

    def _full_path(self, path: str) -> Path:
        rel = path.strip().lstrip("/")
        if not rel:
            raise StorageError("Empty storage path")
        base = self.base_dir.resolve()
        full = (base / rel).resolve()
        if full != base and base not in full.parents:
            raise StorageError(f"Storage path escapes base directory: {path}")
        return full

    def put(self, path: str, data: bytes, content_type: str) -> str:
        full = self._full_path(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Storage upload failed: {exc}") from exc
        return self.public_url(path)

    def read(self, path: str) -> bytes:
        full = self._full_path(path)
        try:
            return full.read_bytes()
        except OSError as exc:
            raise StorageError(f"Storage read failed: {exc}") from exc

    def delete(self, path: str) -> bool:
        full = self._full_path(path)
        try:
            full.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Storage delete failed: {exc}") from exc
        return True

    def exists(self, path: str) -> bool:
        try:
            return self._full_path(path).is_file()
        except StorageError:
            return False

    def public_url(self, path: str) -> str:
        return f"{self.url_prefix}/{path.lstrip('/')}"

    def path_from_url(self, url: str) -> str | None:
        if not url:
            return None
        url_path = unquote(urlparse(url).path)
        prefix = self.url_prefix + "/"
        if not url_path.startswith(prefix):
            return None
        rel = url_path[len(prefix):]
        return rel or None
