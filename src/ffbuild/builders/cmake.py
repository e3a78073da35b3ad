"""CMake builder (out-of-tree, Unix Makefiles generator)."""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from ffbuild.builders.base import BuildContext, make_jobs, run_step
from ffbuild.models import LibraryDescriptor

POLICY_VERSION_MINIMUM = "3.5"


@dataclass(slots=True)
class CMakeBuilder:
    name: str = "cmake"
    tool: str = "cmake"
    make: str = "make"

    def build(self, library: LibraryDescriptor, context: BuildContext) -> None:
        build_dir = context.source_dir / library.build_subdir
        if build_dir.exists():
            shutil.rmtree(build_dir)
        build_dir.mkdir(parents=True)

        run_step(
            context,
            library=library.name,
            step="configure",
            argv=self.configure_command(library, context),
            cwd=build_dir,
        )
        run_step(
            context,
            library=library.name,
            step="compile",
            argv=(self.make, make_jobs(context)),
            cwd=build_dir,
        )
        run_step(
            context,
            library=library.name,
            step="install",
            argv=(self.make, "install"),
            cwd=build_dir,
        )
        shutil.rmtree(build_dir)

    def configure_command(
        self, library: LibraryDescriptor, context: BuildContext
    ) -> tuple[str, ...]:
        target = context.target
        return (
            self.tool,
            "-G",
            "Unix Makefiles",
            f"-DCMAKE_INSTALL_PREFIX={context.prefix}",
            "-DBUILD_SHARED_LIBS=OFF",
            "-DCMAKE_POSITION_INDEPENDENT_CODE=ON",
            f"-DCMAKE_OSX_ARCHITECTURES={target.identifier}",
            f"-DCMAKE_OSX_DEPLOYMENT_TARGET={target.min_os_version}",
            f"-DCMAKE_POLICY_VERSION_MINIMUM={POLICY_VERSION_MINIMUM}",
            *library.args_for(context.arch),
            library.cmake_source,
        )
