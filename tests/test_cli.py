import functools
import io
import json
from collections import Counter
from pathlib import Path
from urllib.request import urlopen

import pytest

from ffbuild.cli import main
from ffbuild.orchestrator import RUN_LOG, UniversalBuild


def _which(name: str) -> str:
    return f"/opt/homebrew/bin/{name}"


@pytest.fixture
def project(tmp_path: Path, runner, library_factory):
    """A two-library catalog plus FFmpeg, all served from local archives."""
    fetched: list[str] = []

    def opener(locator: str):
        fetched.append(locator.rsplit("/", 1)[1])
        return urlopen(locator)

    catalog = (library_factory("a"), library_factory("b", requires=("a",)))
    factory = functools.partial(
        UniversalBuild,
        runner=runner,
        opener=opener,
        which=_which,
        catalog=catalog,
        ffmpeg=library_factory("ffmpeg", version="8.0"),
    )
    environ = {"FFBUILD_ROOT": str(tmp_path / "root"), "FFBUILD_JOBS": "2"}
    return factory, environ, fetched, tmp_path / "root"


@pytest.mark.parametrize("argument", ["--bogus", "--force", "--forc", "--f", "-f"])
def test_unknown_argument_exits_with_usage_hint(argument: str, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([argument])

    assert excinfo.value.code == 2
    assert "ffbuild --help" in capsys.readouterr().err


def test_help_lists_every_version_variable(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])

    out = capsys.readouterr().out
    assert excinfo.value.code == 0
    assert "--force-download" in out
    assert "FFMPEG_VERSION" in out
    assert "(default: 3.6)" in out
    assert "BROTLI_VERSION" in out


def test_full_run_produces_universal_binaries(project, runner) -> None:
    factory, environ, _, root = project
    stream = io.StringIO()

    status = main([], environ=environ, stream=stream, build_factory=factory)

    assert status == 0
    assert (root / "output" / "ffmpeg").read_bytes() == b"ffmpeg:install-arm64\nffmpeg:install-x86_64\n"
    assert (root / "output" / "ffprobe").is_file()
    manifest = json.loads((root / "output" / "ffbuild-manifest.json").read_text(encoding="utf-8"))
    assert sorted(manifest["libraries"]) == ["arm64", "x86_64"]
    assert manifest["artifacts"]["ffprobe"]["architectures"] == ["arm64", "x86_64"]
    assert (root / "logs" / RUN_LOG).is_file()
    assert "Build finished successfully!" in stream.getvalue()
    assert "ffmpeg version 8.0" in stream.getvalue()
    assert ("brew", "list", "nasm") in [call.argv for call in runner.calls]


def test_fetch_counts_across_three_runs(project) -> None:
    factory, environ, fetched, _ = project
    per_run: list[Counter[str]] = []

    for argv in ([], [], ["--force-download"]):
        before = len(fetched)
        assert main(argv, environ=environ, stream=io.StringIO(), build_factory=factory) == 0
        per_run.append(Counter(fetched[before:]))

    archives = {"a-1.0.tar.gz", "b-1.0.tar.gz", "ffmpeg-8.0.tar.gz"}
    assert per_run[0] == Counter(archives)
    assert per_run[1] == Counter()
    assert per_run[2] == Counter(archives)


def test_configure_failure_on_second_architecture(project, runner) -> None:
    factory, environ, _, root = project
    runner.fail_when(
        lambda call: call.argv[0] == "./configure"
        and call.cwd.name == "b-1.0"
        and "--host=x86_64-apple-darwin" in call.argv
    )
    stream = io.StringIO()

    status = main([], environ=environ, stream=stream, build_factory=factory)

    assert status == 1
    assert "ERROR:" in stream.getvalue()
    assert "b configure failed for x86_64." in stream.getvalue()
    assert sorted(path.name for path in (root / "build" / "install-arm64" / ".ffbuild").iterdir()) == [
        "a.json",
        "b.json",
    ]
    assert runner.commands("lipo") == []
    assert not (root / "output" / "ffmpeg").exists()
    records = [json.loads(line) for line in (root / "logs" / RUN_LOG).read_text(encoding="utf-8").splitlines()]
    assert records[-1]["operation"] == "library_failed"
    assert records[-1]["arch"] == "x86_64"


def test_invalid_setting_exits_with_error(tmp_path: Path) -> None:
    stream = io.StringIO()

    status = main([], environ={"FFBUILD_ROOT": str(tmp_path), "FFBUILD_JOBS": "zero"}, stream=stream)

    assert status == 1
    assert "FFBUILD_JOBS must be an integer." in stream.getvalue()
