"""Meson + ninja builder with per-architecture cross files."""

from __future__ import annotations

import shutil
import textwrap
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ffbuild.builders.base import BuildContext, make_jobs, run_step
from ffbuild.models import ArchitectureTarget, LibraryDescriptor

_CROSS_FILE_TPL = textwrap.dedent(
    """\
    [binaries]
    c = 'clang'
    cpp = 'clang++'
    ar = 'ar'
    strip = 'strip'
    pkg-config = 'pkg-config'

    [built-in options]
    c_args = [{flags}]
    cpp_args = [{flags}]
    c_link_args = [{flags}]
    cpp_link_args = [{flags}]

    [properties]
    pkg_config_libdir = '{pkg_config_libdir}'

    [host_machine]
    system = 'darwin'
    cpu_family = '{cpu_family}'
    cpu = '{cpu}'
    endian = 'little'
    """
)


def render_cross_file(target: ArchitectureTarget) -> str:
    return _CROSS_FILE_TPL.format(
        flags=", ".join(f"'{flag}'" for flag in target.compiler_flags),
        pkg_config_libdir=target.pkg_config_path,
        cpu_family=target.cpu_family,
        cpu=target.identifier,
    )


def cross_file_path(library: str, context: BuildContext) -> Path:
    return context.work_dir / f"meson-{library}-{context.arch}.txt"


def write_cross_file(library: str, context: BuildContext) -> Path:
    """Write the meson cross file for *library* on the context architecture."""
    path = cross_file_path(library, context)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_cross_file(context.target), encoding="utf-8")
    return path


@dataclass(slots=True)
class MesonBuilder:
    name: str = "meson"
    meson: str = "meson"
    ninja: str = "ninja"
    ensure_tools: Callable[[], None] | None = None

    def build(self, library: LibraryDescriptor, context: BuildContext) -> None:
        if self.ensure_tools is not None:
            self.ensure_tools()

        build_dir = context.source_dir / "build"
        if build_dir.exists():
            shutil.rmtree(build_dir)
        write_cross_file(library.name, context)

        run_step(
            context,
            library=library.name,
            step="configure",
            argv=self.configure_command(library, context),
            cwd=context.source_dir,
        )
        run_step(
            context,
            library=library.name,
            step="compile",
            argv=(self.ninja, make_jobs(context), "-C", "build"),
            cwd=context.source_dir,
        )
        run_step(
            context,
            library=library.name,
            step="install",
            argv=(self.ninja, "-C", "build", "install"),
            cwd=context.source_dir,
        )
        shutil.rmtree(build_dir, ignore_errors=True)

    def configure_command(
        self, library: LibraryDescriptor, context: BuildContext
    ) -> tuple[str, ...]:
        return (
            self.meson,
            "setup",
            "build",
            f"--prefix={context.prefix}",
            "--libdir=lib",
            "--default-library=static",
            f"--cross-file={cross_file_path(library.name, context)}",
            *library.args_for(context.arch),
        )
