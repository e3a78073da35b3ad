"""Dependency-ordered build of every catalog library for one architecture."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .builders import Builder, BuildContext
from .cache import BuildFingerprintInput, CompletionStore, fingerprint
from .errors import FfbuildError, ValidationError
from .graph import resolve_order
from .models import ArchitectureTarget, BuildResult, LibraryDescriptor, PipelineResult
from .observability import StructuredLogger
from .runner import CommandRunner
from .sources import PreparedSource, SourcePreparer


@dataclass(slots=True)
class Pipeline:
    libraries: tuple[LibraryDescriptor, ...]
    builders: Mapping[str, Builder]
    preparer: SourcePreparer
    runner: CommandRunner
    logger: StructuredLogger
    work_dir: Path
    log_dir: Path
    jobs: int = 1
    base_env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    skip_completed: bool = True

    def order(self) -> tuple[LibraryDescriptor, ...]:
        return resolve_order(self.libraries)

    def run(self, target: ArchitectureTarget) -> PipelineResult:
        """Build every enabled library for *target*; the first failure aborts."""
        ordered = self.order()
        target.prefix.mkdir(parents=True, exist_ok=True)
        store = CompletionStore(target.prefix)
        fingerprints: dict[str, str] = {}
        result = PipelineResult(arch=target.identifier, prefix=target.prefix)
        self._log(
            operation="pipeline_start",
            library=None,
            arch=target.identifier,
            message=f"Building all codec libraries for {target.identifier}...",
        )
        for library in ordered:
            build_result = self._build_one(library, target, store, fingerprints)
            fingerprints[library.name] = build_result.fingerprint
            result.results.append(build_result)
        self._log(
            operation="pipeline_complete",
            library=None,
            arch=target.identifier,
            message=f"Codec libraries ready for {target.identifier}",
            extra={"built": list(result.built), "skipped": list(result.skipped)},
        )
        return result

    def _build_one(
        self,
        library: LibraryDescriptor,
        target: ArchitectureTarget,
        store: CompletionStore,
        fingerprints: Mapping[str, str],
    ) -> BuildResult:
        builder = self.builders.get(library.build_system)
        if builder is None:
            raise ValidationError(
                "No builder registered for build system.",
                context={"library": library.name, "build_system": library.build_system},
            )
        prepared = self.preparer.prepare(library)
        context = BuildContext(
            target=target,
            work_dir=self.work_dir,
            source_dir=prepared.path,
            log_dir=self.log_dir,
            runner=self.runner,
            jobs=self.jobs,
            base_env=self.base_env,
        )
        inputs = _fingerprint_input(library, builder, context, prepared, fingerprints)
        key = fingerprint(inputs)

        if self.skip_completed and store.is_complete(inputs):
            self._log(
                operation="library_skip",
                library=library.name,
                arch=target.identifier,
                message=f"{library.name} already built for {target.identifier}, skipping",
            )
            return BuildResult(
                library=library.name,
                arch=target.identifier,
                prefix=target.prefix,
                fingerprint=key,
                skipped=True,
            )

        store.invalidate(library.name)
        self._log(
            operation="library_build",
            library=library.name,
            arch=target.identifier,
            message=f"Building {library.name} for {target.identifier}...",
        )
        try:
            builder.build(library, context)
        except FfbuildError as exc:
            self._log(
                operation="library_failed",
                library=library.name,
                arch=target.identifier,
                message=f"{library.name} build failed for {target.identifier}",
                level="error",
                extra={"code": exc.code},
            )
            raise
        store.mark_complete(inputs)
        return BuildResult(
            library=library.name,
            arch=target.identifier,
            prefix=target.prefix,
            fingerprint=key,
        )

    def _log(
        self,
        *,
        operation: str,
        library: str | None,
        arch: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, object] | None = None,
    ) -> None:
        self.logger.log(
            operation=operation,
            library=library,
            arch=arch,
            step="build",
            message=message,
            level=level,
            extra=extra,
        )


def _fingerprint_input(
    library: LibraryDescriptor,
    builder: Builder,
    context: BuildContext,
    prepared: PreparedSource,
    fingerprints: Mapping[str, str],
) -> BuildFingerprintInput:
    target = context.target
    return BuildFingerprintInput(
        library=library.name,
        version=library.version,
        build_system=library.build_system,
        source_identity=prepared.identity,
        arch=target.identifier,
        compiler_flags=target.compiler_flags,
        configure_args=(
            *builder.configure_command(library, context),
            *(" ".join(command) for command in library.pre_configure),
        ),
        patches=tuple(
            _canonical_patch(patch.to_payload()) for patch in library.patches
        ),
        dependencies=tuple(
            f"{name}:{fingerprints.get(name, '')}" for name in sorted(library.requires)
        ),
        min_os_version=target.min_os_version,
    )


def _canonical_patch(payload: dict[str, object]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))
