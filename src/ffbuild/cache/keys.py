"""Build fingerprint derivation."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class BuildFingerprintInput:
    library: str
    version: str
    build_system: str
    source_identity: str
    arch: str
    compiler_flags: tuple[str, ...] = ()
    configure_args: tuple[str, ...] = ()
    patches: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    min_os_version: str = ""


def fingerprint(inputs: BuildFingerprintInput) -> str:
    return payload_fingerprint(_to_payload(inputs))


def payload_fingerprint(payload: dict[str, Any]) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _to_payload(inputs: BuildFingerprintInput) -> dict[str, Any]:
    return {
        "library": inputs.library,
        "version": inputs.version,
        "build_system": inputs.build_system,
        "source_identity": inputs.source_identity,
        "arch": inputs.arch,
        "compiler_flags": list(inputs.compiler_flags),
        "configure_args": list(inputs.configure_args),
        "patches": list(inputs.patches),
        "dependencies": list(inputs.dependencies),
        "min_os_version": inputs.min_os_version,
    }
