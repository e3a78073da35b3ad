"""End-to-end run: host check, per-arch libraries, FFmpeg, universal merge."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.request import urlopen

from .builders import default_builders
from .catalog import default_catalog, ffmpeg_descriptor
from .config import BuildSettings
from .driver import ArchitectureBuildDriver
from .ffmpeg import FFmpegBuildStep
from .fetch import SourceCache
from .manifest import BuildManifest
from .merge import UniversalMerger
from .models import LATEST, LibraryDescriptor, OutputArtifact, PipelineResult
from .observability import StructuredLogger
from .pipeline import Pipeline
from .runner import CommandRunner, SubprocessRunner
from .sources import SourcePreparer
from .toolchain import HostToolchain

RUN_LOG = "ffbuild.jsonl"


@dataclass(frozen=True, slots=True)
class BuildReport:
    artifacts: tuple[OutputArtifact, ...]
    pipelines: dict[str, PipelineResult]
    manifest_paths: tuple[Path, ...]


@dataclass(slots=True)
class UniversalBuild:
    """Wires one full run from resolved settings.

    The catalog and FFmpeg descriptor default to the built-in ones with the
    settings' version overrides applied.
    """

    settings: BuildSettings
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    opener: Callable[[str], Any] = field(default=urlopen)
    which: Callable[[str], str | None] = field(default=shutil.which)
    catalog: tuple[LibraryDescriptor, ...] | None = None
    ffmpeg: LibraryDescriptor | None = None
    lipo: str = "lipo"

    def run(self) -> BuildReport:
        layout = self.settings.layout
        try:
            return self._run()
        finally:
            self.logger.to_json_lines(layout.log_dir / RUN_LOG)

    def _run(self) -> BuildReport:
        settings = self.settings
        layout = settings.layout
        catalog = self.catalog if self.catalog is not None else default_catalog(settings.versions)
        ffmpeg = self.ffmpeg if self.ffmpeg is not None else ffmpeg_descriptor(settings.versions)
        self._report_versions(ffmpeg, catalog)

        toolchain = HostToolchain(runner=self.runner, logger=self.logger, which=self.which)
        toolchain.check()
        layout.ensure()

        preparer = SourcePreparer(
            cache=SourceCache(layout.cache_dir, opener=self.opener),
            work_dir=layout.work_dir,
            runner=self.runner,
            logger=self.logger,
            force_refresh=settings.force_refresh,
            refresh_git_sources=settings.refresh_git_sources,
            log_dir=layout.log_dir,
        )
        pipeline = Pipeline(
            libraries=catalog,
            builders=default_builders(ensure_meson=toolchain.ensure_meson),
            preparer=preparer,
            runner=self.runner,
            logger=self.logger,
            work_dir=layout.work_dir,
            log_dir=layout.log_dir,
            jobs=settings.jobs,
        )
        targets = settings.targets()
        pipelines = ArchitectureBuildDriver(pipeline).run(targets)

        FFmpegBuildStep(
            descriptor=ffmpeg,
            libraries=pipeline.order(),
            preparer=preparer,
            runner=self.runner,
            logger=self.logger,
            work_dir=layout.work_dir,
            log_dir=layout.log_dir,
            jobs=settings.jobs,
        ).run(targets)

        merger = UniversalMerger(
            runner=self.runner,
            logger=self.logger,
            output_dir=layout.output_dir,
            lipo=self.lipo,
            expected_architectures=settings.architectures,
        )
        artifacts = merger.merge(targets)

        manifest = BuildManifest.from_run(
            versions=settings.versions,
            min_os_version=settings.min_os_version,
            artifacts=artifacts,
            pipelines=pipelines,
        )
        manifest_paths = manifest.write(layout.output_dir)

        self._log("Build complete!", operation="complete")
        self._log(f"Universal binaries are located in: {layout.output_dir}", operation="complete")
        self._log(f"Build logs are located in: {layout.log_dir}", operation="complete")
        self._show_version(layout.output_dir / "ffmpeg")
        return BuildReport(
            artifacts=artifacts,
            pipelines=pipelines,
            manifest_paths=manifest_paths,
        )

    def _report_versions(
        self, ffmpeg: LibraryDescriptor, catalog: tuple[LibraryDescriptor, ...]
    ) -> None:
        versions = {
            library.name: "latest from git" if library.version == LATEST else library.version
            for library in (ffmpeg, *catalog)
        }
        glib = self.settings.versions.get("GLIB_VERSION")
        if glib:
            versions["glib"] = f"{glib} (not built)"
        width = max(len(name) for name in versions) + 2
        lines = [f"  {name + ':':<{width}}{version}" for name, version in versions.items()]
        self._log(
            "Building with the following versions:\n" + "\n".join(lines),
            operation="versions",
            extra={"versions": versions},
        )

    def _show_version(self, binary: Path) -> None:
        result = self.runner.run([str(binary), "-version"])
        if result.ok and result.output.strip():
            self._log(result.output.strip().splitlines()[0], operation="version")
        else:
            self._log(
                f"Could not run {binary.name} -version on this host",
                operation="version",
                level="warning",
            )

    def _log(
        self,
        message: str,
        *,
        operation: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.logger.log(
            operation=operation,
            library=None,
            arch=None,
            step=None,
            message=message,
            level=level,
            extra=extra,
        )
