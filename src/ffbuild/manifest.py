"""Build manifest model and export helpers."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from .models import OutputArtifact, PipelineResult

MANIFEST_JSON = "ffbuild-manifest.json"
MANIFEST_CBOR = "ffbuild-manifest.cbor"


@dataclass(frozen=True, slots=True)
class BuildManifest:
    """What a successful run produced and which inputs produced it."""

    versions: dict[str, str] = field(default_factory=dict)
    min_os_version: str = ""
    artifacts: dict[str, dict[str, object]] = field(default_factory=dict)
    libraries: dict[str, dict[str, str]] = field(default_factory=dict)
    schema_version: int = 1

    @classmethod
    def from_run(
        cls,
        *,
        versions: Mapping[str, str],
        min_os_version: str,
        artifacts: Sequence[OutputArtifact],
        pipelines: Mapping[str, PipelineResult],
    ) -> BuildManifest:
        return cls(
            versions=dict(versions),
            min_os_version=min_os_version,
            artifacts={
                artifact.tool: {
                    "path": artifact.path.name,
                    "sha256": artifact.sha256,
                    "architectures": list(artifact.architectures),
                }
                for artifact in artifacts
            },
            libraries={
                arch: {item.library: item.fingerprint for item in result.results}
                for arch, result in pipelines.items()
            },
        )

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def write(self, directory: Path) -> tuple[Path, Path]:
        json_path = directory / MANIFEST_JSON
        cbor_path = directory / MANIFEST_CBOR
        self.to_json(json_path)
        self.to_cbor(cbor_path)
        return json_path, cbor_path

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "min_os_version": self.min_os_version,
            "versions": dict(sorted(self.versions.items())),
            "artifacts": {tool: self.artifacts[tool] for tool in sorted(self.artifacts)},
            "libraries": {
                arch: dict(sorted(entries.items()))
                for arch, entries in sorted(self.libraries.items())
            },
        }
