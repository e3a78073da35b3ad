"""Structured logging and console status helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
NC = "\033[0m"

_CONSOLE_PREFIXES = {
    "info": f"{GREEN}==>{NC} ",
    "warning": f"{YELLOW}WARNING:{NC} ",
    "error": f"{RED}ERROR:{NC} ",
}


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)
    echo: TextIO | None = None

    def log(
        self,
        *,
        operation: str,
        library: str | None,
        arch: str | None,
        step: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "library": library,
            "arch": arch,
            "step": step,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        if self.echo is not None:
            self.echo.write(_CONSOLE_PREFIXES.get(level, "") + message + "\n")
            self.echo.flush()

    def records_for_arch(self, arch: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("arch") == arch]

    def records_for_library(self, library: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("library") == library]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
