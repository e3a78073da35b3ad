"""Universal binary creation and architecture verification."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import MergeError, VerificationError
from .fetch import file_sha256
from .models import ARCHITECTURES, TOOLS, ArchitectureTarget, OutputArtifact
from .observability import StructuredLogger
from .runner import CommandRunner


@dataclass(slots=True)
class UniversalMerger:
    runner: CommandRunner
    logger: StructuredLogger
    output_dir: Path
    lipo: str = "lipo"
    tools: tuple[str, ...] = TOOLS
    expected_architectures: tuple[str, ...] = ARCHITECTURES

    def merge(self, targets: Sequence[ArchitectureTarget]) -> tuple[OutputArtifact, ...]:
        self._log("Creating universal binaries...")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        artifacts = tuple(self._merge_tool(tool, targets) for tool in self.tools)
        self._log("Universal binaries verified")
        return artifacts

    def _merge_tool(self, tool: str, targets: Sequence[ArchitectureTarget]) -> OutputArtifact:
        inputs = [target.prefix / "bin" / tool for target in targets]
        missing = [str(path) for path in inputs if not path.is_file()]
        if missing:
            raise MergeError(
                f"Per-architecture {tool} binary is missing.",
                hint="Rebuild FFmpeg for the listed architectures.",
                context={"tool": tool, "missing": ", ".join(missing)},
            )

        output = self.output_dir / tool
        staging = self.output_dir / f".{tool}.tmp"
        result = self.runner.run(
            [self.lipo, "-create", *(str(path) for path in inputs), "-output", str(staging)]
        )
        if not result.ok:
            staging.unlink(missing_ok=True)
            raise MergeError(
                f"lipo could not merge {tool}.",
                context={
                    "tool": tool,
                    "returncode": str(result.returncode),
                    "output": result.tail(),
                },
            )
        staging.chmod(0o755)
        os.replace(staging, output)

        architectures = self._introspect(tool, output)
        self._log(f"{tool} architectures: {' '.join(architectures)}")
        if set(architectures) != set(self.expected_architectures):
            raise VerificationError(
                f"Universal {tool} does not contain the expected architectures.",
                hint="Check that each per-architecture build targeted its own CPU.",
                context={
                    "tool": tool,
                    "expected": " ".join(sorted(self.expected_architectures)),
                    "actual": " ".join(architectures),
                },
            )
        return OutputArtifact(
            tool=tool,
            path=output,
            architectures=architectures,
            sha256=file_sha256(output),
        )

    def _introspect(self, tool: str, path: Path) -> tuple[str, ...]:
        result = self.runner.run([self.lipo, "-archs", str(path)])
        if not result.ok:
            raise VerificationError(
                f"lipo could not inspect {tool}.",
                context={
                    "tool": tool,
                    "returncode": str(result.returncode),
                    "output": result.tail(),
                },
            )
        return tuple(sorted(result.output.split()))

    def _log(self, message: str) -> None:
        self.logger.log(
            operation="merge",
            library=None,
            arch=None,
            step="merge",
            message=message,
        )
