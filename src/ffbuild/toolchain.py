"""Host build-tool checks backed by Homebrew."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .errors import ToolchainError
from .observability import StructuredLogger
from .runner import CommandRunner

REQUIRED_PACKAGES: tuple[str, ...] = (
    "nasm",
    "pkg-config",
    "cmake",
    "autoconf",
    "automake",
    "libtool",
    "yasm",
)
MESON_TOOLS: tuple[str, ...] = ("meson", "ninja")


@dataclass(slots=True)
class HostToolchain:
    runner: CommandRunner
    logger: StructuredLogger
    brew: str = "brew"
    which: Callable[[str], str | None] = field(default=shutil.which)
    _meson_ready: bool = field(default=False, init=False, repr=False)

    def check(self, packages: Sequence[str] = REQUIRED_PACKAGES) -> tuple[str, ...]:
        """Verify the package manager exists and install missing packages.

        Returns the packages that had to be installed.
        """
        self._log("Checking dependencies...")
        if self.which(self.brew) is None:
            raise ToolchainError(
                "Homebrew is not installed.",
                hint="Install it manually from https://brew.sh and rerun.",
                context={"operation": "check_dependencies", "tool": self.brew},
            )
        missing = tuple(
            package
            for package in packages
            if not self.runner.run([self.brew, "list", package]).ok
        )
        if not missing:
            self._log("All dependencies are installed")
            return ()
        self._log(f"Installing missing dependencies: {' '.join(missing)}")
        self._install(missing)
        return missing

    def ensure_meson(self) -> None:
        """Install meson and ninja on demand for the builders that need them."""
        if self._meson_ready:
            return
        missing = tuple(tool for tool in MESON_TOOLS if self.which(tool) is None)
        if missing:
            self._log(
                "meson and ninja are required. Installing via brew...",
                level="warning",
            )
            self._install(MESON_TOOLS)
        self._meson_ready = True

    def _install(self, packages: Sequence[str]) -> None:
        result = self.runner.run([self.brew, "install", *packages])
        if not result.ok:
            raise ToolchainError(
                "Package installation failed.",
                hint="Install the packages manually with brew and rerun.",
                context={
                    "operation": "brew_install",
                    "packages": " ".join(packages),
                    "returncode": str(result.returncode),
                    "output": result.tail(),
                },
            )

    def _log(self, message: str, *, level: str = "info") -> None:
        self.logger.log(
            operation="toolchain",
            library=None,
            arch=None,
            step="dependencies",
            message=message,
            level=level,
        )
