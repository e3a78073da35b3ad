"""Shared test fixtures."""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from ffbuild.models import LibraryDescriptor
from ffbuild.observability import StructuredLogger
from ffbuild.runner import CommandResult


@dataclass(frozen=True)
class RecordedCall:
    argv: tuple[str, ...]
    cwd: Path | None
    env: dict[str, str]


@dataclass
class RecordingRunner:
    """Stands in for native tools: records each call and fakes its side effects."""

    lipo_architectures: tuple[str, ...] = ("arm64", "x86_64")
    calls: list[RecordedCall] = field(default_factory=list)
    failures: list[tuple[Callable[[RecordedCall], bool], int]] = field(default_factory=list)
    last_prefix: Path | None = None

    def fail_when(self, predicate: Callable[[RecordedCall], bool], returncode: int = 1) -> None:
        self.failures.append((predicate, returncode))

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        log_path: Path | None = None,
    ) -> CommandResult:
        call = RecordedCall(argv=tuple(argv), cwd=cwd, env=dict(env or {}))
        self.calls.append(call)
        returncode = next((code for predicate, code in self.failures if predicate(call)), 0)
        output = f"simulated failure: {' '.join(call.argv)}\n" if returncode else self._simulate(call)
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.write_text(output, encoding="utf-8")
        return CommandResult(argv=call.argv, returncode=returncode, output=output, log_path=log_path)

    def commands(self, program: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.argv[0] == program]

    def _simulate(self, call: RecordedCall) -> str:
        argv = call.argv
        for arg in argv:
            if arg.startswith("--prefix="):
                self.last_prefix = Path(arg.split("=", 1)[1])

        if argv[:2] == ("git", "clone"):
            checkout = Path(argv[-1])
            checkout.mkdir(parents=True)
            (checkout / "configure").write_text("#!/bin/sh\n", encoding="utf-8")
        elif argv[:2] == ("git", "rev-parse"):
            return "f" * 40 + "\n"
        elif argv[:2] == ("lipo", "-create"):
            marker = argv.index("-output")
            Path(argv[marker + 1]).write_bytes(
                b"".join(Path(item).read_bytes() for item in argv[2:marker])
            )
        elif argv[:2] == ("lipo", "-archs"):
            return " ".join(self.lipo_architectures) + "\n"
        elif argv == ("make", "install") and _is_ffmpeg_tree(call.cwd) and self.last_prefix:
            bin_dir = self.last_prefix / "bin"
            bin_dir.mkdir(parents=True, exist_ok=True)
            for tool in ("ffmpeg", "ffprobe"):
                (bin_dir / tool).write_bytes(f"{tool}:{self.last_prefix.name}\n".encode())
        elif argv[1:] == ("-version",):
            return "ffmpeg version 8.0 Copyright (c) 2000-2025 the FFmpeg developers\n"
        return ""


def _is_ffmpeg_tree(cwd: Path | None) -> bool:
    return cwd is not None and cwd.name.startswith("ffmpeg-")


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger()


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Write ``<name>-<version>.tar.gz`` with a single top-level directory."""

    def _make(name: str, version: str = "1.0", files: Mapping[str, str] | None = None) -> Path:
        dist = tmp_path / "dist"
        dist.mkdir(exist_ok=True)
        archive = dist / f"{name}-{version}.tar.gz"
        contents = files if files is not None else {"configure": "#!/bin/sh\n"}
        with tarfile.open(archive, "w:gz") as tf:
            for relative, text in contents.items():
                payload = text.encode("utf-8")
                info = tarfile.TarInfo(f"{name}-{version}/{relative}")
                info.size = len(payload)
                info.mode = 0o755
                tf.addfile(info, io.BytesIO(payload))
        return archive

    return _make


@pytest.fixture
def library_factory(make_archive: Callable[..., Path]) -> Callable[..., LibraryDescriptor]:
    """Build a descriptor backed by a local ``file://`` archive."""

    def _make(
        name: str,
        *,
        version: str = "1.0",
        build_system: str = "autotools",
        requires: Sequence[str] = (),
        files: Mapping[str, str] | None = None,
        **kwargs: object,
    ) -> LibraryDescriptor:
        archive = make_archive(name, version, files)
        return LibraryDescriptor(
            name=name,
            version=version,
            url=archive.as_uri(),
            archive=archive.name,
            build_system=build_system,  # type: ignore[arg-type]
            requires=tuple(requires),
            **kwargs,  # type: ignore[arg-type]
        )

    return _make
