"""Core typed dataclasses for library descriptors, targets, and build results."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

from .patches import SourcePatch

Arch = Literal["arm64", "x86_64"]
BuildSystem = Literal["autotools", "cmake", "meson"]
SourceKind = Literal["archive", "git"]

LATEST = "latest"
"""Version marker for libraries tracked at the tip of their repository."""

DEFAULT_MIN_OS_VERSION = "11.0"
ARCHITECTURES: tuple[Arch, ...] = ("arm64", "x86_64")
TOOLS: tuple[str, ...] = ("ffmpeg", "ffprobe")

_HOST_TRIPLES: dict[str, str] = {
    "arm64": "aarch64-apple-darwin",
    "x86_64": "x86_64-apple-darwin",
}
_CPU_FAMILIES: dict[str, str] = {
    "arm64": "aarch64",
    "x86_64": "x86_64",
}


@dataclass(frozen=True, slots=True)
class LibraryDescriptor:
    """Static description of one third-party library and how to build it."""

    name: str
    version: str
    url: str
    build_system: BuildSystem
    archive: str = ""
    source_dir: str = ""
    source_kind: SourceKind = "archive"
    version_env: str | None = None
    requires: tuple[str, ...] = ()
    configure_args: tuple[str, ...] = ()
    arch_configure_args: tuple[tuple[str, tuple[str, ...]], ...] = ()
    static_flags: tuple[str, ...] = ("--disable-shared", "--enable-static")
    host_flag: bool = True
    pre_configure: tuple[tuple[str, ...], ...] = ()
    patches: tuple[SourcePatch, ...] = ()
    build_subdir: str = "build_dir"
    cmake_source: str = ".."
    ffmpeg_flags: tuple[str, ...] = ()
    enabled: bool = True

    def with_version(self, version: str) -> LibraryDescriptor:
        return replace(self, version=version)

    def render(self, template: str) -> str:
        return template.format(
            name=self.name,
            version=self.version,
            version_underscored=self.version.replace(".", "_"),
        )

    @property
    def source_url(self) -> str:
        return self.render(self.url)

    @property
    def archive_name(self) -> str:
        return self.render(self.archive)

    @property
    def source_dirname(self) -> str:
        if self.source_dir:
            return self.render(self.source_dir)
        return f"{self.name}-{self.version}"

    def args_for(self, arch: str) -> tuple[str, ...]:
        return (*self.configure_args, *dict(self.arch_configure_args).get(arch, ()))


@dataclass(frozen=True, slots=True)
class ArchitectureTarget:
    """One of the two fixed compilation targets of a run."""

    identifier: Arch
    prefix: Path
    min_os_version: str = DEFAULT_MIN_OS_VERSION

    @property
    def host_triple(self) -> str:
        return _HOST_TRIPLES[self.identifier]

    @property
    def cpu_family(self) -> str:
        return _CPU_FAMILIES[self.identifier]

    @property
    def compiler_flags(self) -> tuple[str, ...]:
        return ("-arch", self.identifier, f"-mmacosx-version-min={self.min_os_version}")

    @property
    def pkg_config_path(self) -> Path:
        return self.prefix / "lib" / "pkgconfig"

    def toolchain_env(self) -> dict[str, str]:
        """Return the toolchain variables every native build step sees."""
        flags = " ".join(self.compiler_flags)
        return {
            "CFLAGS": flags,
            "CXXFLAGS": flags,
            "LDFLAGS": flags,
            "MACOSX_DEPLOYMENT_TARGET": self.min_os_version,
            "PKG_CONFIG_PATH": str(self.pkg_config_path),
            "PKG_CONFIG_LIBDIR": str(self.pkg_config_path),
        }


@dataclass(frozen=True, slots=True)
class CacheEntry:
    filename: str
    path: Path
    sha256: str


@dataclass(frozen=True, slots=True)
class BuildResult:
    library: str
    arch: str
    prefix: Path
    fingerprint: str
    skipped: bool = False


@dataclass(slots=True)
class PipelineResult:
    arch: str
    prefix: Path
    results: list[BuildResult] = field(default_factory=list)

    @property
    def built(self) -> tuple[str, ...]:
        return tuple(item.library for item in self.results if not item.skipped)

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(item.library for item in self.results if item.skipped)


@dataclass(frozen=True, slots=True)
class OutputArtifact:
    tool: str
    path: Path
    architectures: tuple[str, ...]
    sha256: str
