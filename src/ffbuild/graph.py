"""Dependency ordering for library descriptors."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import DependencyError
from .models import LibraryDescriptor


def resolve_order(libraries: Iterable[LibraryDescriptor]) -> tuple[LibraryDescriptor, ...]:
    """Topologically sort enabled *libraries* so every library follows its requirements.

    Ties are broken by declaration order, so a catalog that is already in a
    valid order comes back unchanged.
    """
    declared = list(libraries)
    by_name: dict[str, LibraryDescriptor] = {}
    for library in declared:
        if library.name in by_name:
            raise DependencyError(
                "Library declared more than once.",
                context={"library": library.name},
            )
        by_name[library.name] = library

    enabled = [library for library in declared if library.enabled]
    position = {library.name: index for index, library in enumerate(enabled)}
    for library in enabled:
        for requirement in library.requires:
            if requirement not in by_name:
                raise DependencyError(
                    "Library requires an unknown library.",
                    hint="Declare the missing library in the catalog or drop the requirement.",
                    context={"library": library.name, "requires": requirement},
                )
            if requirement not in position:
                raise DependencyError(
                    "Library requires a disabled library.",
                    hint="Enable the required library or drop the requirement.",
                    context={"library": library.name, "requires": requirement},
                )

    remaining = {library.name: set(library.requires) for library in enabled}
    ordered: list[LibraryDescriptor] = []
    while remaining:
        ready = sorted(
            (name for name, requirements in remaining.items() if not requirements),
            key=position.__getitem__,
        )
        if not ready:
            raise DependencyError(
                "Library dependencies contain a cycle.",
                hint="Remove one of the requirements forming the cycle.",
                context={"cycle": " -> ".join(_find_cycle(remaining))},
            )
        name = ready[0]
        ordered.append(by_name[name])
        del remaining[name]
        for requirements in remaining.values():
            requirements.discard(name)
    return tuple(ordered)


def _find_cycle(remaining: dict[str, set[str]]) -> list[str]:
    start = min(remaining)
    path: list[str] = []
    seen: dict[str, int] = {}
    node = start
    while node not in seen:
        seen[node] = len(path)
        path.append(node)
        node = min(remaining[node])
    return [*path[seen[node] :], node]
