from __future__ import annotations

from supabase import Client

from src.domain.exceptions import StorageError


class SupabaseStorage:
    """Storage adapter for a Supabase Storage bucket.

    Keys are tier-prefixed (``large/<filename>``) and URLs come from the bucket's
    public URL. Overwriting an existing key only happens when ``upsert`` is set.
    """

    name = "supabase"

    def __init__(self, client: Client, bucket: str, *, upsert: bool = True) -> None:
        self.client = client
        self.bucket = bucket
        self.upsert = upsert

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def put(self, path: str, data: bytes, content_type: str) -> str:
        try:
            self._bucket().upload(
                path=path,
                file=data,
                file_options={
                    "content-type": content_type,
                    "upsert": "true" if self.upsert else "false",
                },
            )
        except Exception as exc:
            raise StorageError(f"Storage upload failed: {exc}") from exc
        return self.public_url(path)

    def read(self, path: str) -> bytes:
        try:
            return self._bucket().download(path)
        except Exception as exc:
            raise StorageError(f"Storage download failed: {exc}") from exc

    def delete(self, path: str) -> bool:
        try:
            removed = self._bucket().remove([path])
        except Exception as exc:
            raise StorageError(f"Storage delete failed: {exc}") from exc
        # remove() answers with the objects it actually deleted
        return bool(removed)

    def exists(self, path: str) -> bool:
        folder, _, name = path.rpartition("/")
        try:
            items = self._bucket().list(folder, {"search": name, "limit": 100})
        except Exception as exc:
            raise StorageError(f"Storage list failed: {exc}") from exc
        return any(item.get("name") == name for item in items or [])

    def public_url(self, path: str) -> str:
        url = str(self._bucket().get_public_url(path))
        return url.rstrip("?")

    def path_from_url(self, url: str) -> str | None:
        if not url:
            return None
        base = self.public_url("").rstrip("/") + "/"
        clean = url.split("?", 1)[0]
        if not clean.startswith(base):
            return None
        rel = clean[len(base):]
        return rel or None
