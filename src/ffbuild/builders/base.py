"""Typed interfaces for native build-system builders."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ffbuild.errors import CompileError, ConfigureError, InstallError, StepError
from ffbuild.models import ArchitectureTarget, LibraryDescriptor
from ffbuild.runner import CommandResult, CommandRunner

_STEP_ERRORS: dict[str, type[StepError]] = {
    "bootstrap": ConfigureError,
    "configure": ConfigureError,
    "compile": CompileError,
    "clean": CompileError,
    "install": InstallError,
}


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Everything one (library, architecture) build may read; never mutated."""

    target: ArchitectureTarget
    work_dir: Path
    source_dir: Path
    log_dir: Path
    runner: CommandRunner
    jobs: int = 1
    base_env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    @property
    def arch(self) -> str:
        return self.target.identifier

    @property
    def prefix(self) -> Path:
        return self.target.prefix

    def environment(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        env = dict(self.base_env)
        # Inherited pkg-config paths would leak host or other-arch packages.
        env.pop("PKG_CONFIG_PATH", None)
        env.pop("PKG_CONFIG_LIBDIR", None)
        env.update(self.target.toolchain_env())
        if extra:
            env.update(extra)
        return env

    def log_path(self, library: str, step: str) -> Path:
        return self.log_dir / self.arch / f"{library}-{step}.log"


class Builder(Protocol):
    name: str

    def build(self, library: LibraryDescriptor, context: BuildContext) -> None:
        """Configure, compile, install, and clean *library* for one architecture."""

    def configure_command(
        self, library: LibraryDescriptor, context: BuildContext
    ) -> tuple[str, ...]:
        """Return the configure invocation; it is part of the completion fingerprint."""


def run_step(
    context: BuildContext,
    *,
    library: str,
    step: str,
    argv: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    log_name: str | None = None,
) -> CommandResult:
    """Run one native build step and raise a typed error if it fails."""
    result = context.runner.run(
        argv,
        cwd=cwd,
        env=context.environment(env),
        log_path=context.log_path(library, log_name or step),
    )
    if result.ok:
        return result
    error_cls = _STEP_ERRORS.get(step, CompileError)
    raise error_cls(
        f"{library} {step} failed for {context.arch}.",
        library=library,
        arch=context.arch,
        hint="Inspect the step log for the native build-system output.",
        context={
            "step": step,
            "command": " ".join(argv),
            "returncode": str(result.returncode),
            "log": str(result.log_path) if result.log_path else "",
            "output": result.tail(),
        },
    )


def make_jobs(context: BuildContext) -> str:
    return f"-j{context.jobs}"
