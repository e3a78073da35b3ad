"""Environment-driven configuration: library versions, settings, and layout."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ValidationError
from .models import DEFAULT_MIN_OS_VERSION, ArchitectureTarget, Arch

DEFAULT_VERSIONS: dict[str, str] = {
    "FFMPEG_VERSION": "8.0",
    "X265_VERSION": "3.6",
    "LIBVPX_VERSION": "1.15.2",
    "OPUS_VERSION": "1.5.2",
    "LAME_VERSION": "3.100",
    "FDK_AAC_VERSION": "2.0.3",
    "OGG_VERSION": "1.3.6",
    "VORBIS_VERSION": "1.3.7",
    "AOM_VERSION": "3.13.1",
    "FREETYPE_VERSION": "2.14.1",
    "FONTCONFIG_VERSION": "2.16.0",
    "LIBASS_VERSION": "0.17.4",
    "FRIBIDI_VERSION": "1.0.16",
    "HARFBUZZ_VERSION": "10.1.0",
    "LIBUNIBREAK_VERSION": "6.1",
    "GLIB_VERSION": "2.82.4",
    "WEBP_VERSION": "1.6.0",
    "DAV1D_VERSION": "1.5.0",
    "THEORA_VERSION": "1.2.0",
    "SOXR_VERSION": "0.1.3",
    "LIBBLURAY_VERSION": "1.3.4",
    "SPEEX_VERSION": "1.2.1",
    "SNAPPY_VERSION": "1.2.1",
    "OPENJPEG_VERSION": "2.5.4",
    "ZIMG_VERSION": "3.0.5",
    "ZLIB_VERSION": "1.3.1",
    "BROTLI_VERSION": "1.1.0",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def resolve_versions(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return every version variable, overridden verbatim where set and non-empty."""
    source = os.environ if environ is None else environ
    return {name: source.get(name) or default for name, default in DEFAULT_VERSIONS.items()}


@dataclass(frozen=True, slots=True)
class BuildLayout:
    """Directory layout of one build root."""

    root: Path

    @property
    def work_dir(self) -> Path:
        return self.root / "build"

    @property
    def output_dir(self) -> Path:
        return self.root / "output"

    @property
    def cache_dir(self) -> Path:
        return self.root / ".source-cache"

    @property
    def log_dir(self) -> Path:
        return self.root / "logs"

    def prefix_for(self, arch: str) -> Path:
        return self.work_dir / f"install-{arch}"

    def ensure(self) -> None:
        for path in (self.work_dir, self.output_dir, self.cache_dir, self.log_dir):
            path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True, slots=True)
class BuildSettings:
    """Resolved configuration of one run."""

    layout: BuildLayout
    versions: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_VERSIONS))
    force_refresh: bool = False
    refresh_git_sources: bool = False
    jobs: int = 1
    min_os_version: str = DEFAULT_MIN_OS_VERSION
    architectures: tuple[Arch, ...] = ("arm64", "x86_64")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        force_refresh: bool = False,
        root: str | Path | None = None,
    ) -> BuildSettings:
        source = os.environ if environ is None else environ
        root_path = Path(root) if root is not None else Path(source.get("FFBUILD_ROOT") or Path.cwd())
        return cls(
            layout=BuildLayout(root_path.resolve()),
            versions=resolve_versions(source),
            force_refresh=force_refresh,
            refresh_git_sources=_parse_bool(source, "FFBUILD_REFRESH_GIT_SOURCES"),
            jobs=_parse_jobs(source),
            min_os_version=source.get("FFBUILD_MIN_MACOS") or DEFAULT_MIN_OS_VERSION,
        )

    def targets(self) -> tuple[ArchitectureTarget, ...]:
        return tuple(
            ArchitectureTarget(
                identifier=arch,
                prefix=self.layout.prefix_for(arch),
                min_os_version=self.min_os_version,
            )
            for arch in self.architectures
        )


def _parse_bool(environ: Mapping[str, str], name: str) -> bool:
    raw = environ.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValidationError(
        f"Invalid boolean value for {name}.",
        hint="Use one of 1/0, true/false, yes/no, on/off.",
        context={"variable": name, "value": raw},
    )


def _parse_jobs(environ: Mapping[str, str]) -> int:
    raw = environ.get("FFBUILD_JOBS", "").strip()
    if not raw:
        return os.cpu_count() or 1
    try:
        jobs = int(raw)
    except ValueError as exc:
        raise ValidationError(
            "FFBUILD_JOBS must be an integer.",
            context={"variable": "FFBUILD_JOBS", "value": raw},
        ) from exc
    if jobs < 1:
        raise ValidationError(
            "FFBUILD_JOBS must be at least 1.",
            context={"variable": "FFBUILD_JOBS", "value": raw},
        )
    return jobs
