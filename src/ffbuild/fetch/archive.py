"""Source archive extraction."""

from __future__ import annotations

import lzma
import tarfile
import zlib
from pathlib import Path

from ffbuild.errors import FetchError


def extract(archive: Path, destination: Path) -> Path:
    """Unpack a gzip/xz/bzip2 tarball into *destination*."""
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:*") as tf:
            tf.extractall(path=destination, filter="data")
    except (tarfile.TarError, EOFError, OSError, lzma.LZMAError, zlib.error) as exc:
        raise FetchError(
            "Source archive could not be extracted.",
            hint="The cached archive is treated as authoritative; rerun with --force-download.",
            context={"operation": "extract", "archive": str(archive), "error": str(exc)},
        ) from exc
    return destination
