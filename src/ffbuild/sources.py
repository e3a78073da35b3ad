"""Source preparation: cached fetch, extraction, checkout, and patching."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .errors import FetchError
from .fetch import SourceCache, checkout_latest, extract
from .models import LibraryDescriptor
from .observability import StructuredLogger
from .patches import apply_patches
from .runner import CommandRunner


@dataclass(frozen=True, slots=True)
class PreparedSource:
    library: str
    path: Path
    identity: str


@dataclass(slots=True)
class SourcePreparer:
    """Makes each library's source tree available in the working directory.

    Forced refreshes apply once per library per run; the second architecture
    reuses the tree prepared for the first.
    """

    cache: SourceCache
    work_dir: Path
    runner: CommandRunner
    logger: StructuredLogger
    force_refresh: bool = False
    refresh_git_sources: bool = False
    log_dir: Path | None = None
    _prepared: dict[str, PreparedSource] = field(default_factory=dict, init=False, repr=False)

    def prepare(self, library: LibraryDescriptor) -> PreparedSource:
        prepared = self._prepared.get(library.name)
        if prepared is None:
            if library.source_kind == "git":
                prepared = self._prepare_git(library)
            else:
                prepared = self._prepare_archive(library)
            self._prepared[library.name] = prepared
        patched = apply_patches(prepared.path, library.patches)
        if patched:
            self._log(library, f"Patched {len(patched)} file(s) in {library.name}.")
        return prepared

    def _prepare_archive(self, library: LibraryDescriptor) -> PreparedSource:
        source = self.work_dir / library.source_dirname
        archive = library.archive_name
        if self.force_refresh or not source.exists():
            cached_before = (self.cache.root / archive).exists()
            if self.force_refresh:
                self._log(library, f"Force downloading {archive}...")
            elif cached_before:
                self._log(library, f"Using cached {archive}")
            else:
                self._log(library, f"Downloading {archive}...")
            cached = self.cache.get(library.source_url, archive, force_refresh=self.force_refresh)
            if source.exists():
                shutil.rmtree(source)
            self._unpack(library, cached, source)
        entry = self.cache.entry(archive)
        identity = f"sha256:{entry.sha256}" if entry is not None else f"tree:{library.version}"
        return PreparedSource(library=library.name, path=source, identity=identity)

    def _unpack(self, library: LibraryDescriptor, cached: Path, source: Path) -> None:
        """Extract *cached* beside *source* and move the tree into place only when complete."""
        staged = self.cache.stage(cached, self.work_dir)
        temp_root = Path(tempfile.mkdtemp(prefix=f".{source.name}-", dir=str(self.work_dir)))
        try:
            extract(staged, temp_root)
            unpacked = temp_root / source.name
            if not unpacked.is_dir():
                raise FetchError(
                    "Source archive did not unpack to the expected directory.",
                    hint="Check the archive layout for this version.",
                    context={
                        "operation": "extract",
                        "library": library.name,
                        "archive": library.archive_name,
                        "expected": str(source),
                    },
                )
            shutil.move(str(unpacked), source)
        finally:
            staged.unlink(missing_ok=True)
            shutil.rmtree(temp_root, ignore_errors=True)

    def _prepare_git(self, library: LibraryDescriptor) -> PreparedSource:
        destination = self.work_dir / library.source_dirname
        refresh = self.force_refresh and self.refresh_git_sources
        if destination.exists() and self.force_refresh and not refresh:
            self._log(
                library,
                f"Keeping existing {library.name} checkout (set FFBUILD_REFRESH_GIT_SOURCES=1 to re-clone).",
                level="warning",
            )
        log_path = self.log_dir / f"{library.name}-clone.log" if self.log_dir else None
        checkout = checkout_latest(
            library.source_url,
            destination,
            runner=self.runner,
            refresh=refresh,
            log_path=log_path,
        )
        if checkout.cloned:
            self._log(library, f"Cloned {library.name} at {checkout.commit[:12]}")
        return PreparedSource(library=library.name, path=checkout.path, identity=f"git:{checkout.commit}")

    def _log(self, library: LibraryDescriptor, message: str, *, level: str = "info") -> None:
        self.logger.log(
            operation="prepare_source",
            library=library.name,
            arch=None,
            step="fetch",
            message=message,
            level=level,
        )
