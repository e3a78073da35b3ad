"""Per-architecture FFmpeg configure, compile, and install."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .builders import BuildContext, run_step
from .builders.autotools import CONFIGURED_STAMP
from .builders.base import make_jobs
from .models import TOOLS, ArchitectureTarget, LibraryDescriptor
from .observability import StructuredLogger
from .runner import CommandRunner
from .sources import SourcePreparer

BASE_FLAGS: tuple[str, ...] = (
    "--enable-gpl",
    "--enable-nonfree",
    "--enable-version3",
    "--enable-static",
    "--disable-shared",
)
PLATFORM_FLAGS: tuple[str, ...] = (
    "--enable-videotoolbox",
    "--enable-audiotoolbox",
)
EXTRA_LIBS: tuple[str, ...] = (
    "-lpthread",
    "-lm",
    "-lz",
    "-liconv",
    "-framework CoreFoundation",
    "-framework CoreMedia",
    "-framework CoreVideo",
    "-framework VideoToolbox",
    "-framework AudioToolbox",
)
_CROSS_FLAGS: dict[str, tuple[str, ...]] = {
    "arm64": ("--enable-cross-compile", "--target-os=darwin"),
}


def configure_command(
    target: ArchitectureTarget, libraries: Sequence[LibraryDescriptor]
) -> list[str]:
    """Return the FFmpeg configure invocation for *target*.

    Feature flags come from the enabled libraries, in build order, so a
    disabled library never reaches the command line.
    """
    prefix = target.prefix
    flags = " ".join(target.compiler_flags)
    features = [flag for library in libraries if library.enabled for flag in library.ffmpeg_flags]
    return [
        "./configure",
        f"--prefix={prefix}",
        f"--arch={target.identifier}",
        *_CROSS_FLAGS.get(target.identifier, ()),
        *BASE_FLAGS,
        *features,
        *PLATFORM_FLAGS,
        "--pkg-config-flags=--static",
        f"--extra-cflags={flags} -I{prefix / 'include'}",
        f"--extra-ldflags={flags} -L{prefix / 'lib'}",
        f"--extra-libs={' '.join(EXTRA_LIBS)}",
    ]


@dataclass(slots=True)
class FFmpegBuildStep:
    """Builds FFmpeg against each architecture's codec prefix."""

    descriptor: LibraryDescriptor
    libraries: tuple[LibraryDescriptor, ...]
    preparer: SourcePreparer
    runner: CommandRunner
    logger: StructuredLogger
    work_dir: Path
    log_dir: Path
    jobs: int = 1
    base_env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    def run(self, targets: Sequence[ArchitectureTarget]) -> dict[str, Path]:
        """Build every target in order and return each one's bin directory."""
        return {target.identifier: self.build(target) for target in targets}

    def build(self, target: ArchitectureTarget) -> Path:
        name = self.descriptor.name
        source = self.preparer.prepare(self.descriptor).path
        context = BuildContext(
            target=target,
            work_dir=self.work_dir,
            source_dir=source,
            log_dir=self.log_dir,
            runner=self.runner,
            jobs=self.jobs,
            base_env=self.base_env,
        )
        self.logger.log(
            operation="ffmpeg_build",
            library=name,
            arch=target.identifier,
            step="build",
            message=f"Building FFmpeg for {target.identifier}...",
        )

        stamp = source / CONFIGURED_STAMP
        if stamp.exists():
            # Objects from an interrupted build may belong to the other architecture.
            run_step(
                context,
                library=name,
                step="clean",
                argv=["make", "distclean"],
                cwd=source,
                log_name="preclean",
            )
            stamp.unlink()

        run_step(
            context,
            library=name,
            step="configure",
            argv=configure_command(target, self.libraries),
            cwd=source,
        )
        stamp.touch()
        run_step(context, library=name, step="compile", argv=["make", make_jobs(context)], cwd=source)
        run_step(context, library=name, step="install", argv=["make", "install"], cwd=source)
        run_step(context, library=name, step="clean", argv=["make", "distclean"], cwd=source)
        stamp.unlink(missing_ok=True)

        bin_dir = target.prefix / "bin"
        self.logger.log(
            operation="ffmpeg_complete",
            library=name,
            arch=target.identifier,
            step="build",
            message=f"FFmpeg installed for {target.identifier}",
            extra={"tools": [str(bin_dir / tool) for tool in TOOLS]},
        )
        return bin_dir
