from __future__ import annotations

import os
from typing import Any

from supabase import Client

from src.domain.entities.content import CONTENT_SOURCES, ContentImageRef, ContentKind, ContentSource
from src.infrastructure.database.postgres_client import get_postgres_client

# module-level in-memory store for disabled mode: kind -> row id -> row
_MEM_CONTENT: dict[ContentKind, dict[str, dict[str, Any]]] = {kind: {} for kind in ContentKind}

# join-table rows are removed outright; other kinds just lose their image
_DELETE_ROW_KINDS = frozenset({ContentKind.PRODUCTS})


class ContentImageRepository:
    """Image references held by content rows (products, hero slides, news, pages).

    Only the image column is read or written; the rest of each row belongs to
    the content CRUD layer.
    """

    def __init__(
        self,
        client: Client | None,
        store: dict[ContentKind, dict[str, dict[str, Any]]] | None = None,
    ) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        self._mem = _MEM_CONTENT if store is None else store

    @property
    def _in_memory(self) -> bool:
        return not (self.use_local_db and self.pg_client) and (self.disabled or self.client is None)

    def _row_to_ref(self, source: ContentSource, row: dict[str, Any]) -> ContentImageRef:
        label = row.get(source.label_column) if source.label_column else None
        return ContentImageRef(
            kind=source.kind,
            row_id=str(row[source.id_column]),
            url=row.get(source.image_column) or None,
            label=label or None,
        )

    def add(self, kind: ContentKind, row_id: str, url: str | None, label: str | None = None) -> ContentImageRef:
        """Insert a row into the in-memory store (local development and tests)."""
        if not self._in_memory:
            raise RuntimeError("Content rows are owned by the content CRUD layer")
        source = CONTENT_SOURCES[kind]
        row: dict[str, Any] = {source.id_column: str(row_id), source.image_column: url}
        if source.label_column:
            row[source.label_column] = label
        self._mem.setdefault(kind, {})[str(row_id)] = row
        return self._row_to_ref(source, row)

    def list_refs(self, kind: ContentKind) -> list[ContentImageRef]:
        source = CONTENT_SOURCES[kind]
        columns = [source.id_column, source.image_column]
        if source.label_column:
            columns.append(source.label_column)

        if self.use_local_db and self.pg_client:
            rows = self.pg_client.fetch_all(
                f"SELECT {', '.join(columns)} FROM {source.table} ORDER BY {source.id_column}"
            )
            return [self._row_to_ref(source, r) for r in rows]

        if self._in_memory:
            return [self._row_to_ref(source, r) for r in self._mem.get(kind, {}).values()]

        try:  # pragma: no cover - network
            res = self.client.table(source.table).select(",".join(columns)).order(source.id_column).execute()
            return [self._row_to_ref(source, r) for r in (res.data or [])]
        except Exception as exc:
            raise RuntimeError(f"DB list {source.table} failed: {exc}") from exc

    def get(self, kind: ContentKind, row_id: str) -> ContentImageRef | None:
        return next((r for r in self.list_refs(kind) if r.row_id == str(row_id)), None)

    def update_url(self, kind: ContentKind, row_id: str, url: str) -> bool:
        source = CONTENT_SOURCES[kind]

        if self.use_local_db and self.pg_client:
            affected = self.pg_client.execute(
                f"UPDATE {source.table} SET {source.image_column} = %s WHERE {source.id_column} = %s",
                (url, row_id),
            )
            return affected > 0

        if self._in_memory:
            row = self._mem.get(kind, {}).get(str(row_id))
            if row is None:
                return False
            row[source.image_column] = url
            return True

        try:  # pragma: no cover - network
            res = (
                self.client.table(source.table)
                .update({source.image_column: url})
                .eq(source.id_column, row_id)
                .execute()
            )
            return bool(res.data)
        except Exception as exc:
            raise RuntimeError(f"DB update {source.table} failed: {exc}") from exc

    def delete_references(self, url: str) -> int:
        """Drop every content reference to ``url``; returns how many rows changed."""
        return sum(self._delete_references(CONTENT_SOURCES[kind], url) for kind in ContentKind)

    def _delete_references(self, source: ContentSource, url: str) -> int:
        remove_row = source.kind in _DELETE_ROW_KINDS

        if self.use_local_db and self.pg_client:
            if remove_row:
                query = f"DELETE FROM {source.table} WHERE {source.image_column} = %s"
            else:
                query = f"UPDATE {source.table} SET {source.image_column} = NULL WHERE {source.image_column} = %s"
            return self.pg_client.execute(query, (url,))

        if self._in_memory:
            rows = self._mem.get(source.kind, {})
            matching = [rid for rid, row in rows.items() if row.get(source.image_column) == url]
            for rid in matching:
                if remove_row:
                    del rows[rid]
                else:
                    rows[rid][source.image_column] = None
            return len(matching)

        try:  # pragma: no cover - network
            table = self.client.table(source.table)
            q = table.delete() if remove_row else table.update({source.image_column: None})
            res = q.eq(source.image_column, url).execute()
            return len(res.data or [])
        except Exception as exc:
            raise RuntimeError(f"DB cleanup {source.table} failed: {exc}") from exc

    def referenced_urls(self) -> set[str]:
        urls: set[str] = set()
        for kind in ContentKind:
            urls.update(ref.url for ref in self.list_refs(kind) if ref.url)
        return urls
