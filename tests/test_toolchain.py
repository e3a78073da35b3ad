import pytest

from ffbuild.errors import ToolchainError
from ffbuild.toolchain import REQUIRED_PACKAGES, HostToolchain


def _which(*present: str):
    return lambda name: f"/opt/homebrew/bin/{name}" if name in present else None


def test_missing_package_manager_is_fatal(runner, logger) -> None:
    toolchain = HostToolchain(runner=runner, logger=logger, which=_which())

    with pytest.raises(ToolchainError) as excinfo:
        toolchain.check()

    assert "https://brew.sh" in str(excinfo.value)
    assert runner.calls == []


def test_missing_packages_are_installed_in_one_call(runner, logger) -> None:
    runner.fail_when(lambda call: call.argv in {("brew", "list", "nasm"), ("brew", "list", "yasm")})
    toolchain = HostToolchain(runner=runner, logger=logger, which=_which("brew"))

    missing = toolchain.check()

    assert missing == ("nasm", "yasm")
    assert [call.argv[1] for call in runner.calls].count("list") == len(REQUIRED_PACKAGES)
    assert runner.calls[-1].argv == ("brew", "install", "nasm", "yasm")


def test_failed_install_is_fatal(runner, logger) -> None:
    runner.fail_when(lambda call: call.argv[:2] in {("brew", "list"), ("brew", "install")})
    toolchain = HostToolchain(runner=runner, logger=logger, which=_which("brew"))

    with pytest.raises(ToolchainError) as excinfo:
        toolchain.check()

    assert excinfo.value.context["operation"] == "brew_install"


def test_meson_tools_are_installed_once_when_absent(runner, logger) -> None:
    toolchain = HostToolchain(runner=runner, logger=logger, which=_which("brew", "ninja"))

    toolchain.ensure_meson()
    toolchain.ensure_meson()

    assert [call.argv for call in runner.calls] == [("brew", "install", "meson", "ninja")]
    assert logger.records[0]["level"] == "warning"


def test_meson_tools_present_means_no_install(runner, logger) -> None:
    toolchain = HostToolchain(runner=runner, logger=logger, which=_which("brew", "meson", "ninja"))

    toolchain.ensure_meson()

    assert runner.calls == []
