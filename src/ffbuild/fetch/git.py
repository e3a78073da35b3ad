"""Shallow git checkout for libraries without versioned releases."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ffbuild.errors import FetchError
from ffbuild.runner import CommandRunner


@dataclass(frozen=True, slots=True)
class GitCheckout:
    path: Path
    commit: str
    cloned: bool


def checkout_latest(
    repo: str,
    destination: Path,
    *,
    runner: CommandRunner,
    refresh: bool = False,
    env: Mapping[str, str] | None = None,
    log_path: Path | None = None,
) -> GitCheckout:
    """Clone the tip of *repo* into *destination* unless a checkout already exists.

    An existing checkout is kept as-is; it is replaced only when *refresh* is set.
    """
    if destination.exists() and not refresh:
        return GitCheckout(
            path=destination,
            commit=_head_commit(destination, runner=runner, env=env),
            cloned=False,
        )

    destination.parent.mkdir(parents=True, exist_ok=True)
    temp_root = Path(tempfile.mkdtemp(prefix=f".{destination.name}-", dir=str(destination.parent)))
    clone_path = temp_root / destination.name
    try:
        result = runner.run(
            ["git", "clone", "--quiet", "--depth", "1", repo, str(clone_path)],
            cwd=destination.parent,
            env=env,
            log_path=log_path,
        )
        if not result.ok:
            raise FetchError(
                "Git clone failed.",
                hint="Check the network connection and the repository URL.",
                context={
                    "operation": "git_clone",
                    "repo": repo,
                    "returncode": str(result.returncode),
                    "output": result.tail(),
                },
            )
        if destination.exists():
            shutil.rmtree(destination)
        shutil.move(str(clone_path), destination)
    finally:
        shutil.rmtree(temp_root, ignore_errors=True)

    return GitCheckout(
        path=destination,
        commit=_head_commit(destination, runner=runner, env=env),
        cloned=True,
    )


def _head_commit(path: Path, *, runner: CommandRunner, env: Mapping[str, str] | None) -> str:
    result = runner.run(["git", "rev-parse", "HEAD"], cwd=path, env=env)
    if not result.ok:
        raise FetchError(
            "Existing checkout is not a valid git repository.",
            hint="Remove the checkout directory and rerun.",
            context={"operation": "git_rev_parse", "path": str(path), "output": result.tail()},
        )
    return result.output.strip()
