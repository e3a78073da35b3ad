import json
from dataclasses import replace
from pathlib import Path

import pytest

from ffbuild.cache import BuildFingerprintInput, CompletionStore, fingerprint
from ffbuild.errors import ReproducibilityError

BASE = BuildFingerprintInput(
    library="opus",
    version="1.5.2",
    build_system="autotools",
    source_identity="sha256:abc",
    arch="arm64",
    compiler_flags=("-arch", "arm64", "-mmacosx-version-min=11.0"),
    configure_args=("--disable-shared", "--enable-static"),
    dependencies=(),
    min_os_version="11.0",
)


@pytest.mark.parametrize(
    "changes",
    [
        {"version": "1.5.3"},
        {"source_identity": "sha256:def"},
        {"arch": "x86_64"},
        {"configure_args": ("--enable-static",)},
        {"patches": ('{"path":"configure"}',)},
        {"dependencies": ("libogg:123",)},
        {"min_os_version": "12.0"},
    ],
)
def test_fingerprint_covers_every_build_input(changes: dict[str, object]) -> None:
    assert fingerprint(BASE) != fingerprint(replace(BASE, **changes))


def test_marker_round_trip_skips_identical_inputs(tmp_path: Path) -> None:
    store = CompletionStore(tmp_path / "install-arm64")

    assert store.is_complete(BASE) is False
    key = store.mark_complete(BASE)

    assert key == fingerprint(BASE)
    assert store.is_complete(BASE) is True
    assert store.is_complete(replace(BASE, version="1.5.3")) is False
    assert store.marker_path("opus") == tmp_path / "install-arm64" / ".ffbuild" / "opus.json"


def test_invalidate_removes_marker(tmp_path: Path) -> None:
    store = CompletionStore(tmp_path / "prefix")
    store.mark_complete(BASE)

    store.invalidate("opus")
    store.invalidate("opus")

    assert store.is_complete(BASE) is False


def test_tampered_marker_is_rejected(tmp_path: Path) -> None:
    store = CompletionStore(tmp_path / "prefix")
    store.mark_complete(BASE)
    path = store.marker_path("opus")
    manifest = json.loads(path.read_text(encoding="utf-8"))
    manifest["inputs"]["version"] = "9.9"
    path.write_text(json.dumps(manifest), encoding="utf-8")

    with pytest.raises(ReproducibilityError):
        store.is_complete(BASE)


def test_unreadable_marker_is_rejected(tmp_path: Path) -> None:
    store = CompletionStore(tmp_path / "prefix")
    store.root.mkdir(parents=True)
    store.marker_path("opus").write_text("{not json", encoding="utf-8")

    with pytest.raises(ReproducibilityError) as excinfo:
        store.is_complete(BASE)

    assert excinfo.value.hint is not None
