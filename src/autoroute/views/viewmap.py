"""ViewMap — controller route to view-key, fixed after registration."""

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from autoroute._types import RoutePath, ViewKey


class ViewMap(Mapping[RoutePath, ViewKey]):
    """Immutable mapping of controller routes to resolved view-keys.

    Also remembers which routes ended their template fallback walk without
    finding a file; rendering one of those raises ``ViewNotFound``.

    Safe for concurrent reads: nothing mutates it after construction.
    """

    __slots__ = ("_entries", "_missing")

    def __init__(
        self,
        entries: Mapping[RoutePath, ViewKey] | None = None,
        missing: Iterable[RoutePath] = (),
    ) -> None:
        self._entries: Mapping[RoutePath, ViewKey] = MappingProxyType(dict(entries or {}))
        self._missing: frozenset[RoutePath] = frozenset(missing)

    def __getitem__(self, route: RoutePath) -> ViewKey:
        return self._entries[route]

    def __iter__(self) -> Iterator[RoutePath]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def missing(self) -> frozenset[RoutePath]:
        """Routes whose view-key names no existing template."""
        return self._missing

    def has_template(self, route: RoutePath) -> bool:
        return route in self._entries and route not in self._missing

    def __repr__(self) -> str:
        return f"ViewMap({dict(self._entries)!r}, missing={sorted(self._missing)!r})"
