"""Native command execution with per-command log capture."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

TAIL_LINES = 50


@dataclass(frozen=True, slots=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    output: str = ""
    log_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = TAIL_LINES) -> str:
        return "\n".join(self.output.strip().splitlines()[-lines:])


class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        log_path: Path | None = None,
    ) -> CommandResult:
        """Run *argv* to completion and return its exit status and combined output."""


@dataclass(slots=True)
class SubprocessRunner:
    """Runs commands on the host, merging stderr into stdout."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        log_path: Path | None = None,
    ) -> CommandResult:
        command = tuple(argv)
        try:
            completed = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd is not None else None,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            # Commands that cannot start report like a shell would.
            returncode = 127 if isinstance(exc, FileNotFoundError) else 126
            output = f"{exc}\n"
        else:
            returncode = completed.returncode
            output = completed.stdout or ""
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.write_text(
                f"$ {' '.join(command)}\n{output}",
                encoding="utf-8",
            )
        return CommandResult(
            argv=command,
            returncode=returncode,
            output=output,
            log_path=log_path,
        )
