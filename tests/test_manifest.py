import json
from pathlib import Path

import cbor2

from ffbuild.manifest import MANIFEST_CBOR, MANIFEST_JSON, BuildManifest
from ffbuild.models import BuildResult, OutputArtifact, PipelineResult


def _manifest(tmp_path: Path) -> BuildManifest:
    pipeline = PipelineResult(arch="arm64", prefix=tmp_path / "install-arm64")
    pipeline.results.append(
        BuildResult(library="zlib", arch="arm64", prefix=pipeline.prefix, fingerprint="f1")
    )
    return BuildManifest.from_run(
        versions={"ZLIB_VERSION": "1.3.1", "FFMPEG_VERSION": "8.0"},
        min_os_version="11.0",
        artifacts=(
            OutputArtifact(
                tool="ffmpeg",
                path=tmp_path / "output" / "ffmpeg",
                architectures=("arm64", "x86_64"),
                sha256="ab" * 32,
            ),
        ),
        pipelines={"arm64": pipeline},
    )


def test_manifest_exports_json_and_canonical_cbor(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path)

    payload = json.loads(manifest.to_json())
    decoded = cbor2.loads(manifest.to_cbor())

    assert payload == decoded
    assert payload["artifacts"]["ffmpeg"] == {
        "path": "ffmpeg",
        "sha256": "ab" * 32,
        "architectures": ["arm64", "x86_64"],
    }
    assert payload["libraries"] == {"arm64": {"zlib": "f1"}}
    assert list(payload["versions"]) == ["FFMPEG_VERSION", "ZLIB_VERSION"]


def test_manifest_encoding_is_deterministic(tmp_path: Path) -> None:
    assert _manifest(tmp_path).to_cbor() == _manifest(tmp_path).to_cbor()
    assert _manifest(tmp_path).to_json() == _manifest(tmp_path).to_json()


def test_manifest_writes_both_files(tmp_path: Path) -> None:
    json_path, cbor_path = _manifest(tmp_path).write(tmp_path)

    assert json_path == tmp_path / MANIFEST_JSON
    assert cbor_path == tmp_path / MANIFEST_CBOR
    assert cbor2.loads(cbor_path.read_bytes())["schema_version"] == 1
