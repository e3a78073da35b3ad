"""Command-line entry point.

Usage:
    ffbuild
    ffbuild --force-download
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import NoReturn, TextIO

from .config import DEFAULT_VERSIONS, BuildSettings
from .errors import FfbuildError
from .observability import StructuredLogger
from .orchestrator import UniversalBuild


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.exit(2, f"{self.prog}: {message}\nRun '{self.prog} --help' for usage information.\n")


def _epilog() -> str:
    width = max(len(name) for name in DEFAULT_VERSIONS) + 2
    versions = "\n".join(
        f"  {name:<{width}}(default: {value})" for name, value in DEFAULT_VERSIONS.items()
    )
    return (
        "Environment variables (library versions):\n"
        f"{versions}\n\n"
        "Environment variables (build settings):\n"
        "  FFBUILD_ROOT                 working root (default: current directory)\n"
        "  FFBUILD_JOBS                 parallel native jobs (default: CPU count)\n"
        "  FFBUILD_REFRESH_GIT_SOURCES  re-clone git sources on --force-download\n"
        "  FFBUILD_MIN_MACOS            minimum macOS version (default: 11.0)\n\n"
        "Example:\n"
        "  FFMPEG_VERSION=7.1 X265_VERSION=3.5 ffbuild --force-download"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="ffbuild",
        description="Build universal (arm64 + x86_64) static FFmpeg binaries for macOS.",
        epilog=_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--force-download",
        action="store_true",
        help="Re-download all sources even if they are cached",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
    build_factory: Callable[..., UniversalBuild] = UniversalBuild,
) -> int:
    args = build_parser().parse_args(argv)
    logger = StructuredLogger(echo=stream if stream is not None else sys.stdout)
    try:
        settings = BuildSettings.from_env(environ, force_refresh=args.force_download)
        if args.force_download:
            logger.log(
                operation="cli",
                library=None,
                arch=None,
                step=None,
                message="Force download enabled - will re-download all sources",
                level="warning",
            )
        build_factory(settings, logger=logger).run()
    except FfbuildError as exc:
        logger.log(
            operation="fatal",
            library=exc.library,
            arch=exc.arch,
            step=None,
            message=str(exc),
            level="error",
            extra=exc.to_dict(),
        )
        return 1
    logger.log(
        operation="cli",
        library=None,
        arch=None,
        step=None,
        message="Build finished successfully!",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
