"""Action vocabulary and the route table built by the registrar.

The action vocabulary is a static table — every controller is checked
against it once at registration time:

    action   method  path            id-to-state
    index    GET     <route>         no
    create   POST    <route>         no
    select   GET     <route>/{id}    yes
    update   POST    <route>/{id}    yes
    edit     GET     <route>/{id}/edit    yes
    save     POST    <route>/{id}/edit    yes
    delete   GET     <route>/{id}/delete  yes

Names outside the vocabulary are never routed.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from autoroute._types import ActionFunc, ActionName, HttpMethod, MiddlewareFunc, RoutePath
from autoroute.paths import join_route

logger = logging.getLogger("autoroute.registrar")


@dataclass(frozen=True, slots=True)
class ActionSpec:
    """How one action name maps onto HTTP.

    Attributes:
        name: Action name exported by the controller module.
        method: HTTP method the action answers.
        suffix: Path appended to the controller route (chirp pattern syntax).
        uses_id: Prepend the id-to-state middleware to the chain.

    """

    name: ActionName
    method: HttpMethod
    suffix: str
    uses_id: bool

    def path_for(self, route: RoutePath) -> RoutePath:
        """Full chirp path pattern for this action under *route*."""
        return join_route(route, self.suffix)


ACTIONS: tuple[ActionSpec, ...] = (
    ActionSpec("index", "GET", "", uses_id=False),
    ActionSpec("create", "POST", "", uses_id=False),
    ActionSpec("select", "GET", "{id}", uses_id=True),
    ActionSpec("update", "POST", "{id}", uses_id=True),
    ActionSpec("edit", "GET", "{id}/edit", uses_id=True),
    ActionSpec("save", "POST", "{id}/edit", uses_id=True),
    ActionSpec("delete", "GET", "{id}/delete", uses_id=True),
)

ACTION_NAMES: frozenset[str] = frozenset(spec.name for spec in ACTIONS)


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A single registered route ready for chirp registration.

    Attributes:
        method: HTTP method (``GET`` or ``POST``).
        path: chirp path pattern (e.g. ``/posts/{id}/edit``).
        middleware: Ordered chain run before the action.
        action: The controller action (last link of the chain).
        action_name: Vocabulary name of the action.
        route: Controller route the entry belongs to (its ViewMap key).
        source: Filesystem path of the controller module.

    """

    method: HttpMethod
    path: RoutePath
    middleware: tuple[MiddlewareFunc, ...]
    action: ActionFunc
    action_name: ActionName
    route: RoutePath
    source: Path

    @property
    def key(self) -> tuple[str, str]:
        return (self.method, self.path)

    @property
    def name(self) -> str:
        """Route name for chirp URL generation (e.g. ``posts:select``)."""
        base = self.route.strip("/").replace("/", ".") or "root"
        return f"{base}:{self.action_name}"


class RouteTable:
    """Ordered route entries, at most one per ``(method, path)`` pair.

    Registering a pair twice replaces the earlier entry in place (last
    registration wins) and logs a warning naming both sources.
    """

    __slots__ = ("_entries", "_index")

    def __init__(self) -> None:
        self._entries: list[RouteEntry] = []
        self._index: dict[tuple[str, str], int] = {}

    def add(self, entry: RouteEntry) -> RouteEntry | None:
        """Add *entry*; return the entry it replaced, if any."""
        slot = self._index.get(entry.key)
        if slot is None:
            self._index[entry.key] = len(self._entries)
            self._entries.append(entry)
            return None

        previous = self._entries[slot]
        logger.warning(
            "Route collision %s %s: %s:%s replaces %s:%s",
            entry.method, entry.path,
            entry.source, entry.action_name,
            previous.source, previous.action_name,
        )
        self._entries[slot] = entry
        return previous

    def get(self, method: str, path: RoutePath) -> RouteEntry | None:
        slot = self._index.get((method.upper(), path))
        return None if slot is None else self._entries[slot]

    def for_route(self, route: RoutePath) -> list[RouteEntry]:
        """All entries registered for one controller route."""
        return [e for e in self._entries if e.route == route]

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index
