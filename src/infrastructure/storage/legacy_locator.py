from __future__ import annotations

import re
import stat
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from loguru import logger

# Suffixes written by the old upload code, largest first. Any new legacy naming
# convention has to be added here; the locator does not parse arbitrary sizes.
LEGACY_SUFFIXES: tuple[str, ...] = (
    "",
    "-1920x1920",
    "-1024x1024",
    "-800x800",
    "-400x400",
    "-300x300",
    "-150x150",
)

_SUFFIXED_NAME = re.compile(r"^(.+?)(?:-\d+x\d+)*(\.(?:jpg|jpeg|png|webp))$", re.IGNORECASE)


class LegacyImageLocator:
    """Find the best surviving file for an image referenced by a historical URL.

    Lookup order:
    1. the literal reference, with and without the legacy base prefix;
    2. for ``name[-WxH].ext`` references, every known suffix of ``name.ext`` in
       every candidate directory; the largest file on disk wins;
    3. for any other name, the same filename in the candidate directories.

    Read-only. Returns None when nothing is found.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        prefix: str = "public",
        legacy_dirs: Iterable[str] = ("public/images",),
        suffixes: Iterable[str] = LEGACY_SUFFIXES,
    ) -> None:
        self.root = Path(root).resolve()
        self.prefix = prefix.strip("/")
        self.legacy_dirs = tuple(d.strip("/") for d in legacy_dirs)
        self.suffixes = tuple(suffixes)

    @staticmethod
    def normalize(reference: str | None) -> str:
        if not reference:
            return ""
        ref = reference.strip()
        parsed = urlparse(ref)
        path = parsed.path if (parsed.scheme or parsed.netloc) else ref.split("?", 1)[0]
        path = unquote(path).replace("\\", "/").lstrip("/")
        parts = [p for p in PurePosixPath(path).parts if p not in ("", ".")]
        return "/".join(parts)

    def locate(self, reference: str | None) -> Path | None:
        rel = self.normalize(reference)
        if not rel:
            return None

        for candidate in self._variants(rel):
            full = self._inside_root(candidate)
            if full is not None and full.is_file():
                logger.debug("Legacy image {} found at {}", reference, full)
                return full

        directory, _, filename = rel.rpartition("/")
        dirs = self._candidate_dirs(directory)
        match = _SUFFIXED_NAME.match(filename)
        if match is None:
            for d in dirs:
                path = d / filename
                if path.is_file():
                    return path
            return None

        base_name, extension = match.group(1), match.group(2)
        largest: Path | None = None
        largest_size = 0
        for d in dirs:
            for suffix in self.suffixes:
                path = d / f"{base_name}{suffix}{extension}"
                try:
                    st = path.stat()
                except OSError:
                    continue
                if stat.S_ISREG(st.st_mode) and st.st_size > largest_size:
                    largest, largest_size = path, st.st_size
        if largest is not None:
            logger.debug("Legacy image {} resolved to {} ({} bytes)", reference, largest, largest_size)
        return largest

    def legacy_directories(self) -> list[Path]:
        """Configured legacy directories that exist inside the root."""
        dirs: list[Path] = []
        for rel in self.legacy_dirs:
            full = self._inside_root(rel)
            if full is not None and full.is_dir():
                dirs.append(full)
        return dirs

    def reference_forms(self, path: Path) -> set[str]:
        """URLs a content row may use for ``path``: ``/public/images/a.jpg`` and ``/images/a.jpg``."""
        rel = path.resolve().relative_to(self.root).as_posix()
        forms = {f"/{rel}"}
        if self.prefix and rel.startswith(self.prefix + "/"):
            forms.add(f"/{rel[len(self.prefix) + 1:]}")
        return forms

    # --------- helpers ---------
    def _variants(self, rel: str) -> list[str]:
        variants = [rel]
        if self.prefix:
            variants.append(f"{self.prefix}/{rel}" if rel else self.prefix)
            if rel == self.prefix:
                variants.append("")
            elif rel.startswith(self.prefix + "/"):
                variants.append(rel[len(self.prefix) + 1:])
        seen: list[str] = []
        for v in variants:
            if v not in seen:
                seen.append(v)
        return seen

    def _candidate_dirs(self, directory: str) -> list[Path]:
        dirs: list[Path] = []
        for rel in [*self._variants(directory), *self.legacy_dirs]:
            full = self._inside_root(rel)
            if full is not None and full.is_dir() and full not in dirs:
                dirs.append(full)
        return dirs

    def _inside_root(self, rel: str) -> Path | None:
        full = (self.root / rel).resolve() if rel else self.root
        if full != self.root and self.root not in full.parents:
            return None
        return full
