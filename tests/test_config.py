from pathlib import Path

import pytest

from ffbuild.config import DEFAULT_VERSIONS, BuildLayout, BuildSettings, resolve_versions
from ffbuild.errors import ValidationError


def test_versions_default_when_unset_or_empty() -> None:
    versions = resolve_versions({"FFMPEG_VERSION": "", "X265_VERSION": "3.5"})

    assert len(versions) == 27
    assert versions["FFMPEG_VERSION"] == DEFAULT_VERSIONS["FFMPEG_VERSION"] == "8.0"
    assert versions["X265_VERSION"] == "3.5"
    assert versions["GLIB_VERSION"] == "2.82.4"


def test_version_overrides_are_taken_verbatim() -> None:
    assert resolve_versions({"OPUS_VERSION": " 1.6-rc1"})["OPUS_VERSION"] == " 1.6-rc1"


def test_layout_paths(tmp_path: Path) -> None:
    layout = BuildLayout(tmp_path)
    layout.ensure()

    assert layout.prefix_for("arm64") == tmp_path / "build" / "install-arm64"
    assert layout.cache_dir == tmp_path / ".source-cache"
    assert all(path.is_dir() for path in (layout.work_dir, layout.output_dir, layout.cache_dir, layout.log_dir))


def test_settings_from_environment(tmp_path: Path) -> None:
    settings = BuildSettings.from_env(
        {
            "FFBUILD_ROOT": str(tmp_path),
            "FFBUILD_JOBS": "3",
            "FFBUILD_REFRESH_GIT_SOURCES": "yes",
            "FFBUILD_MIN_MACOS": "12.0",
        },
        force_refresh=True,
    )

    assert settings.layout.root == tmp_path.resolve()
    assert settings.jobs == 3
    assert settings.refresh_git_sources is True
    assert settings.force_refresh is True
    arm64, x86_64 = settings.targets()
    assert arm64.identifier == "arm64"
    assert x86_64.prefix == tmp_path.resolve() / "build" / "install-x86_64"
    assert x86_64.compiler_flags == ("-arch", "x86_64", "-mmacosx-version-min=12.0")


def test_settings_defaults(tmp_path: Path) -> None:
    settings = BuildSettings.from_env({}, root=tmp_path)

    assert settings.jobs >= 1
    assert settings.refresh_git_sources is False
    assert settings.min_os_version == "11.0"
    assert settings.architectures == ("arm64", "x86_64")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("FFBUILD_JOBS", "many"),
        ("FFBUILD_JOBS", "0"),
        ("FFBUILD_REFRESH_GIT_SOURCES", "maybe"),
    ],
)
def test_invalid_settings_are_rejected(tmp_path: Path, name: str, value: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        BuildSettings.from_env({name: value}, root=tmp_path)

    assert excinfo.value.context["variable"] == name
