"""Run-scoped cache of property names known to exist remotely."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable


class PropertyCache:
    """Maps object type -> set of property names confirmed present remotely.

    Each object type is loaded at most once, on first lookup, from the full
    remote listing. Names created during the run are added with ``add``.
    Never shared between runs.
    """

    def __init__(self) -> None:
        self._known: dict[str, set[str]] = {}

    def is_loaded(self, object_type: str) -> bool:
        return object_type in self._known

    def load(self, object_type: str, names: Iterable[str]) -> None:
        self._known[object_type] = set(names)

    def add(self, object_type: str, name: str) -> None:
        self._known.setdefault(object_type, set()).add(name)

    async def contains(
        self,
        object_type: str,
        name: str,
        loader: Callable[[str], Awaitable[list[str]]],
    ) -> bool:
        """Return True if name is known for object_type, loading it first if needed."""
        if not self.is_loaded(object_type):
            self.load(object_type, await loader(object_type))
        return name in self._known[object_type]
