from __future__ import annotations

import itertools
import os
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from supabase import Client

from src.domain.entities.media import MediaRecordEntity
from src.infrastructure.database.postgres_client import get_postgres_client

# module-level in-memory store for disabled mode
_MEM_MEDIA: dict[str, MediaRecordEntity] = {}
_MEM_IDS = itertools.count(1)

_COLUMNS = (
    "id, filename, url, url_large, url_medium, url_thumb, mime_type, size, "
    "width, height, alt_text, caption, created_at"
)


class MediaRepository:
    """``media_files`` table: one row per uploaded image and its derivative URLs."""

    def __init__(self, client: Client | None, store: dict[str, MediaRecordEntity] | None = None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        self._mem = _MEM_MEDIA if store is None else store

    @property
    def _in_memory(self) -> bool:
        return not (self.use_local_db and self.pg_client) and (self.disabled or self.client is None)

    def _row_to_entity(self, row: dict) -> MediaRecordEntity:
        # PostgreSQL returns datetime objects, Supabase returns ISO strings
        created_at = row.get("created_at") or datetime.now(UTC)
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return MediaRecordEntity(
            id=str(row["id"]),
            filename=row["filename"],
            url=row["url"],
            mime_type=row.get("mime_type") or "image/jpeg",
            created_at=created_at,
            url_large=row.get("url_large"),
            url_medium=row.get("url_medium"),
            url_thumb=row.get("url_thumb"),
            size=row.get("size"),
            width=row.get("width"),
            height=row.get("height"),
            alt_text=row.get("alt_text"),
            caption=row.get("caption"),
        )

    def create(
        self,
        filename: str,
        url: str,
        mime_type: str,
        url_large: str | None = None,
        url_medium: str | None = None,
        url_thumb: str | None = None,
        size: int | None = None,
        width: int | None = None,
        height: int | None = None,
        alt_text: str | None = None,
        caption: str | None = None,
    ) -> MediaRecordEntity:
        now = datetime.now(UTC)
        fields: dict[str, Any] = {
            "filename": filename,
            "url": url,
            "url_large": url_large,
            "url_medium": url_medium,
            "url_thumb": url_thumb,
            "mime_type": mime_type,
            "size": size,
            "width": width,
            "height": height,
            "alt_text": alt_text,
            "caption": caption,
        }

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            names = ", ".join([*fields, "created_at"])
            marks = ", ".join(["%s"] * (len(fields) + 1))
            try:
                row = self.pg_client.insert_returning(
                    f"INSERT INTO media_files ({names}) VALUES ({marks}) RETURNING {_COLUMNS}",
                    (*fields.values(), now),
                )
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert media failed: {exc}") from exc
            return self._row_to_entity(row)

        # In-memory mode
        if self._in_memory:
            entity = MediaRecordEntity(id=str(next(_MEM_IDS)), created_at=now, **fields)
            self._mem[entity.id] = entity
            return entity

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("media_files").insert({**fields, "created_at": now.isoformat()}).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:
            raise RuntimeError(f"DB insert media failed: {exc}") from exc

    def get(self, media_id: str) -> MediaRecordEntity | None:
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one(f"SELECT {_COLUMNS} FROM media_files WHERE id = %s", (media_id,))
            return self._row_to_entity(row) if row else None

        if self._in_memory:
            return self._mem.get(str(media_id))

        try:  # pragma: no cover - network
            res = self.client.table("media_files").select("*").eq("id", media_id).limit(1).execute()
            rows = res.data or []
            return self._row_to_entity(rows[0]) if rows else None
        except Exception as exc:
            raise RuntimeError(f"DB get media failed: {exc}") from exc

    def list_recent(self, limit: int | None = None, offset: int = 0) -> list[MediaRecordEntity]:
        """Newest first."""
        if self.use_local_db and self.pg_client:
            query = f"SELECT {_COLUMNS} FROM media_files ORDER BY created_at DESC, id DESC"
            params: tuple = ()
            if limit is not None:
                query += " LIMIT %s OFFSET %s"
                params = (limit, offset)
            return [self._row_to_entity(r) for r in self.pg_client.fetch_all(query, params)]

        if self._in_memory:
            items = sorted(self._mem.values(), key=lambda m: (m.created_at, int(m.id) if m.id.isdigit() else 0), reverse=True)
            end = None if limit is None else offset + limit
            return items[offset:end]

        try:  # pragma: no cover - network
            q = self.client.table("media_files").select("*").order("created_at", desc=True)
            if limit is not None:
                q = q.range(offset, offset + limit - 1)
            return [self._row_to_entity(r) for r in (q.execute().data or [])]
        except Exception as exc:
            raise RuntimeError(f"DB list media failed: {exc}") from exc

    def count(self) -> int:
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one("SELECT COUNT(*) AS count FROM media_files")
            return int(row["count"]) if row else 0

        if self._in_memory:
            return len(self._mem)

        try:  # pragma: no cover - network
            res = self.client.table("media_files").select("id", count="exact").limit(1).execute()
            return int(res.count or 0)
        except Exception as exc:
            raise RuntimeError(f"DB count media failed: {exc}") from exc

    def list_missing_dimensions(self) -> list[MediaRecordEntity]:
        if self.use_local_db and self.pg_client:
            rows = self.pg_client.fetch_all(
                f"SELECT {_COLUMNS} FROM media_files "
                "WHERE width IS NULL OR height IS NULL OR width = 0 OR height = 0"
            )
            return [self._row_to_entity(r) for r in rows]
        return [m for m in self.list_recent() if not m.has_dimensions]

    def update_dimensions(self, media_id: str, width: int, height: int) -> bool:
        return self._update(media_id, {"width": width, "height": height})

    def update_derivatives(
        self,
        media_id: str,
        url_large: str | None,
        url_medium: str | None,
        url_thumb: str | None,
        width: int,
        height: int,
    ) -> bool:
        return self._update(
            media_id,
            {
                "url_large": url_large,
                "url_medium": url_medium,
                "url_thumb": url_thumb,
                "width": width,
                "height": height,
            },
        )

    def _update(self, media_id: str, fields: dict[str, Any]) -> bool:
        if self.use_local_db and self.pg_client:
            assignments = ", ".join(f"{name} = %s" for name in fields)
            affected = self.pg_client.execute(
                f"UPDATE media_files SET {assignments} WHERE id = %s", (*fields.values(), media_id)
            )
            return affected > 0

        if self._in_memory:
            current = self._mem.get(str(media_id))
            if current is None:
                return False
            self._mem[current.id] = replace(current, **fields)
            return True

        try:  # pragma: no cover - network
            res = self.client.table("media_files").update(fields).eq("id", media_id).execute()
            return bool(res.data)
        except Exception as exc:
            raise RuntimeError(f"DB update media failed: {exc}") from exc

    def delete(self, media_id: str) -> bool:
        if self.use_local_db and self.pg_client:
            return self.pg_client.execute("DELETE FROM media_files WHERE id = %s", (media_id,)) > 0

        if self._in_memory:
            return self._mem.pop(str(media_id), None) is not None

        try:  # pragma: no cover - network
            res = self.client.table("media_files").delete().eq("id", media_id).execute()
            return bool(res.data)
        except Exception as exc:
            raise RuntimeError(f"DB delete media failed: {exc}") from exc
