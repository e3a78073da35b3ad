"""Filename-keyed source archive cache backed by HTTP/file fetches."""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.error import URLError
from urllib.request import urlopen

from ffbuild.errors import FetchError, ValidationError
from ffbuild.models import CacheEntry

_CHUNK_SIZE = 1 << 16


@dataclass(slots=True)
class SourceCache:
    """Cache of downloaded archives, one file per canonical archive name."""

    root: Path
    opener: Callable[[str], Any] = field(default=urlopen)
    fetch_count: int = field(default=0, init=False)

    def get(self, locator: str, filename: str, *, force_refresh: bool = False) -> Path:
        """Return the cached path for *filename*, fetching it when forced or absent."""
        if not filename or Path(filename).name != filename:
            raise ValidationError(
                "Cache filenames must be plain file names.",
                context={"operation": "fetch", "filename": filename},
            )
        self.root.mkdir(parents=True, exist_ok=True)
        cached = self.root / filename
        if cached.exists() and not force_refresh:
            return cached
        self._download(locator, cached)
        return cached

    def entry(self, filename: str) -> CacheEntry | None:
        cached = self.root / filename
        if not cached.exists():
            return None
        return CacheEntry(filename=filename, path=cached, sha256=file_sha256(cached))

    def stage(self, cached: Path, work_dir: Path) -> Path:
        """Copy a cache entry into *work_dir*, leaving the entry untouched."""
        work_dir.mkdir(parents=True, exist_ok=True)
        staged = work_dir / cached.name
        shutil.copyfile(cached, staged)
        return staged

    def _download(self, locator: str, destination: Path) -> None:
        self.fetch_count += 1
        fd, temp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=str(self.root))
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                try:
                    with self.opener(locator) as response:  # noqa: S310 - sources are pinned by version
                        status = getattr(response, "status", None)
                        if status is not None and not 200 <= status < 300:
                            raise FetchError(
                                "Download returned a non-success status.",
                                context={
                                    "operation": "fetch",
                                    "url": locator,
                                    "status": str(status),
                                },
                            )
                        while chunk := response.read(_CHUNK_SIZE):
                            handle.write(chunk)
                except (URLError, OSError, ValueError) as exc:
                    raise FetchError(
                        "Download failed.",
                        hint="Check the network connection and the version override for this library.",
                        context={"operation": "fetch", "url": locator, "error": str(exc)},
                    ) from exc
            os.replace(temp_path, destination)
        finally:
            if temp_path.exists():
                temp_path.unlink()


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
