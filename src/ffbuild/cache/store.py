"""Per-(library, architecture) completion markers with manifest verification."""

from __future__ import annotations

import json
import os
from pathlib import Path

from ffbuild.cache.keys import (
    BuildFingerprintInput,
    _to_payload,
    fingerprint,
    payload_fingerprint,
)
from ffbuild.errors import ReproducibilityError

MARKER_DIRNAME = ".ffbuild"


class CompletionStore:
    """Markers live inside an install prefix, so they share its isolation."""

    def __init__(self, prefix: str | Path) -> None:
        self.root = Path(prefix) / MARKER_DIRNAME

    def marker_path(self, library: str) -> Path:
        return self.root / f"{library}.json"

    def is_complete(self, inputs: BuildFingerprintInput) -> bool:
        path = self.marker_path(inputs.library)
        if not path.exists():
            return False

        manifest = self._read_manifest(path)
        recorded_inputs = manifest.get("inputs")
        recorded_key = manifest.get("fingerprint")
        if not isinstance(recorded_inputs, dict) or not isinstance(recorded_key, str):
            raise ReproducibilityError(
                "Completion marker has invalid structure.",
                hint="Delete the marker to force a rebuild of this library.",
                context={"operation": "marker_load", "path": str(path)},
            )
        if recorded_key != payload_fingerprint(recorded_inputs):
            raise ReproducibilityError(
                "Completion marker fingerprint does not match its recorded inputs.",
                hint="Delete the marker to force a rebuild of this library.",
                context={"operation": "marker_load", "path": str(path)},
            )
        return recorded_key == fingerprint(inputs)

    def mark_complete(self, inputs: BuildFingerprintInput) -> str:
        key = fingerprint(inputs)
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.marker_path(inputs.library)
        manifest = {
            "library": inputs.library,
            "fingerprint": key,
            "inputs": _to_payload(inputs),
        }
        temp_path = path.with_suffix(".tmp")
        temp_path.write_text(
            json.dumps(manifest, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        os.replace(temp_path, path)
        return key

    def invalidate(self, library: str) -> None:
        self.marker_path(library).unlink(missing_ok=True)

    def _read_manifest(self, path: Path) -> dict[str, object]:
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ReproducibilityError(
                "Completion marker is not valid JSON.",
                hint="Delete the marker to force a rebuild of this library.",
                context={"operation": "marker_load", "path": str(path)},
            ) from exc
        if not isinstance(parsed, dict):
            raise ReproducibilityError(
                "Completion marker has invalid structure.",
                hint="Delete the marker to force a rebuild of this library.",
                context={"operation": "marker_load", "path": str(path)},
            )
        return parsed

