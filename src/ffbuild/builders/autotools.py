"""Autotools-style (./configure + make) builder."""

from __future__ import annotations

from dataclasses import dataclass

from ffbuild.builders.base import BuildContext, make_jobs, run_step
from ffbuild.models import LibraryDescriptor

CONFIGURED_STAMP = ".ffbuild-configured"


@dataclass(slots=True)
class AutotoolsBuilder:
    name: str = "autotools"
    make: str = "make"

    def build(self, library: LibraryDescriptor, context: BuildContext) -> None:
        source = context.source_dir
        stamp = source / CONFIGURED_STAMP

        # A stamp left behind means an earlier run died between configure and clean.
        if stamp.exists():
            run_step(
                context,
                library=library.name,
                step="clean",
                argv=(self.make, "clean"),
                cwd=source,
                log_name="preclean",
            )
            stamp.unlink()

        for index, command in enumerate(library.pre_configure):
            run_step(
                context,
                library=library.name,
                step="bootstrap",
                argv=command,
                cwd=source,
                log_name=f"bootstrap-{index}",
            )

        run_step(
            context,
            library=library.name,
            step="configure",
            argv=self.configure_command(library, context),
            cwd=source,
        )
        stamp.write_text(context.arch + "\n", encoding="utf-8")
        run_step(
            context,
            library=library.name,
            step="compile",
            argv=(self.make, make_jobs(context)),
            cwd=source,
        )
        run_step(
            context,
            library=library.name,
            step="install",
            argv=(self.make, "install"),
            cwd=source,
        )
        run_step(
            context,
            library=library.name,
            step="clean",
            argv=(self.make, "clean"),
            cwd=source,
        )
        stamp.unlink(missing_ok=True)

    def configure_command(
        self, library: LibraryDescriptor, context: BuildContext
    ) -> tuple[str, ...]:
        argv = ["./configure", f"--prefix={context.prefix}", *library.static_flags]
        if library.host_flag:
            argv.append(f"--host={context.target.host_triple}")
        argv.extend(library.args_for(context.arch))
        return tuple(argv)
