from pathlib import Path

import pytest

from ffbuild.builders import BuildContext, run_step
from ffbuild.errors import ConfigureError
from ffbuild.models import ArchitectureTarget
from ffbuild.runner import SubprocessRunner


def test_output_merges_stderr_and_is_logged(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "echo.log"

    result = SubprocessRunner().run(["sh", "-c", "echo out; echo err >&2; exit 3"], log_path=log_path)

    assert result.returncode == 3
    assert result.output.split() == ["out", "err"]
    assert log_path.read_text(encoding="utf-8").startswith("$ sh -c")


def test_missing_program_reports_127_and_still_writes_log(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "missing.log"

    result = SubprocessRunner().run([str(tmp_path / "no-such-tool")], log_path=log_path)

    assert result.returncode == 127
    assert result.log_path == log_path
    assert "no-such-tool" in log_path.read_text(encoding="utf-8")


def test_non_executable_configure_becomes_configure_error(tmp_path: Path) -> None:
    source = tmp_path / "work" / "opus-1.0"
    source.mkdir(parents=True)
    configure = source / "configure"
    configure.write_text("#!/bin/sh\n", encoding="utf-8")
    configure.chmod(0o644)
    context = BuildContext(
        target=ArchitectureTarget("x86_64", tmp_path / "work" / "install-x86_64"),
        work_dir=tmp_path / "work",
        source_dir=source,
        log_dir=tmp_path / "logs",
        runner=SubprocessRunner(),
        base_env={"PATH": "/usr/bin:/bin"},
    )

    with pytest.raises(ConfigureError) as excinfo:
        run_step(context, library="opus", step="configure", argv=("./configure",), cwd=source)

    assert (excinfo.value.library, excinfo.value.arch) == ("opus", "x86_64")
    assert excinfo.value.context["returncode"] == "126"
    assert Path(excinfo.value.context["log"]).is_file()
