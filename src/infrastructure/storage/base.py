from __future__ import annotations

from typing import Protocol


class StorageBackend(Protocol):
    """What the pipeline needs from a place that stores files and serves them by URL.

    Paths are backend-relative and tier-prefixed (``large/<filename>``). The URL
    returned by ``put`` is stable and public; ``path_from_url`` is its inverse and
    returns None for URLs this backend does not serve.
    """

    name: str

    def put(self, path: str, data: bytes, content_type: str) -> str: ...

    def read(self, path: str) -> bytes: ...

    def delete(self, path: str) -> bool: ...

    def exists(self, path: str) -> bool: ...

    def public_url(self, path: str) -> str: ...

    def path_from_url(self, url: str) -> str | None: ...
