"""Builder contracts and native build-system implementations."""

from collections.abc import Callable

from .autotools import AutotoolsBuilder
from .base import Builder, BuildContext, run_step
from .cmake import CMakeBuilder
from .meson import MesonBuilder, render_cross_file, write_cross_file


def default_builders(ensure_meson: Callable[[], None] | None = None) -> dict[str, Builder]:
    return {
        "autotools": AutotoolsBuilder(),
        "cmake": CMakeBuilder(),
        "meson": MesonBuilder(ensure_tools=ensure_meson),
    }


__all__ = [
    "AutotoolsBuilder",
    "BuildContext",
    "Builder",
    "CMakeBuilder",
    "MesonBuilder",
    "default_builders",
    "render_cross_file",
    "run_step",
    "write_cross_file",
]
