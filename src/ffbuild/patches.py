"""Declarative source patches applied over pristine copies of upstream files.

A patch never edits a file that may already carry an earlier application.
The first application saves the upstream file as ``<name>.orig``; every
application after that reads from the ``.orig`` copy, transforms it in
memory, and overwrites the working file.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from pathlib import Path

PRISTINE_SUFFIX = ".orig"


@dataclass(frozen=True, slots=True)
class SourcePatch:
    """A pure text transformation of one file inside a source tree."""

    path: str
    drop_lines_containing: tuple[str, ...] = ()
    substitutions: tuple[tuple[str, str], ...] = ()

    def transform(self, text: str) -> str:
        lines = text.splitlines(keepends=True)
        kept = [
            line
            for line in lines
            if not any(marker in line for marker in self.drop_lines_containing)
        ]
        result = "".join(kept)
        for pattern, replacement in self.substitutions:
            result = re.sub(pattern, replacement, result)
        return result

    def to_payload(self) -> dict[str, object]:
        return {
            "path": self.path,
            "drop_lines_containing": list(self.drop_lines_containing),
            "substitutions": [list(item) for item in self.substitutions],
        }


def pristine_path(path: Path) -> Path:
    return path.with_name(path.name + PRISTINE_SUFFIX)


def apply_patch(source_root: Path, patch: SourcePatch) -> Path | None:
    """Apply *patch* under *source_root*; return the patched file or None if absent."""
    target = source_root / patch.path
    backup = pristine_path(target)
    if not backup.exists():
        if not target.exists():
            return None
        shutil.copy2(target, backup)
    original = backup.read_text(encoding="utf-8", errors="surrogateescape")
    target.write_text(
        patch.transform(original),
        encoding="utf-8",
        errors="surrogateescape",
    )
    return target


def apply_patches(source_root: Path, patches: tuple[SourcePatch, ...]) -> list[Path]:
    patched: list[Path] = []
    for patch in patches:
        result = apply_patch(source_root, patch)
        if result is not None:
            patched.append(result)
    return patched


__all__ = ["PRISTINE_SUFFIX", "SourcePatch", "apply_patch", "apply_patches", "pristine_path"]
