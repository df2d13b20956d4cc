"""Registrar — walk the autoroute root and build the route table.

The walk is depth-first.  Each directory listing is classified, sorted by
kind, then processed in order::

    0  directories        recurse
    1  named controllers  admin/help.py  -> /admin/help
    2  index controllers  admin/index.py -> /admin

Ignored entries:

- files that are not ``.py``
- template companion scripts (``help.html.py`` next to ``help.html``)
- names starting with ``_`` or ``.`` (``__init__.py``, ``__pycache__``)

Every controller that exports at least one action from the vocabulary
gets a ViewMap entry: its view-key walked up the tree until a template
file exists (see ``autoroute.paths``).

Errors never abort the walk.  A controller that fails to import is
logged and skipped; a directory that cannot be listed is logged and its
subtree skipped.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path, PurePosixPath
from types import ModuleType

from autoroute._errors import ControllerLoadError
from autoroute._types import MiddlewareFunc, RoutePath, ViewKey
from autoroute.config import AutorouteConfig
from autoroute.observability.events import (
    ControllerRegistered,
    ControllerSkipped,
    DirectorySkipped,
    RegistrationEvent,
    RouteCollision,
    now_ns,
)
from autoroute.observability.log import NO_ACTIONS, EventLog
from autoroute.paths import controller_route, resolve_view_key
from autoroute.routes.chain import id_to_state
from autoroute.routes.loader import ControllerLoader
from autoroute.routes.table import ACTIONS, RouteEntry, RouteTable
from autoroute.views.viewmap import ViewMap

logger = logging.getLogger("autoroute.registrar")

CONTROLLER_SUFFIX = ".py"
INDEX_CONTROLLER = "index" + CONTROLLER_SUFFIX


class EntryKind(IntEnum):
    """Classification of one directory entry; the value is its sort rank."""

    IGNORED = -1
    DIRECTORY = 0
    NAMED_CONTROLLER = 1
    INDEX_CONTROLLER = 2


@dataclass(frozen=True, slots=True)
class FileEntry:
    """One filesystem item seen during the walk."""

    name: str
    path: Path
    kind: EntryKind


def classify(path: Path, companion_suffix: str) -> EntryKind:
    """Classify *path* for the walk.

    Raises:
        OSError: If the entry cannot be stat'ed.

    """
    name = path.name
    if name.startswith(("_", ".")):
        return EntryKind.IGNORED
    if path.is_dir():
        return EntryKind.DIRECTORY
    if name == INDEX_CONTROLLER:
        return EntryKind.INDEX_CONTROLLER
    if name.endswith(CONTROLLER_SUFFIX) and not name.endswith(companion_suffix):
        return EntryKind.NAMED_CONTROLLER
    return EntryKind.IGNORED


def controller_middleware(module: ModuleType) -> tuple[MiddlewareFunc, ...]:
    """Normalize a controller's ``middleware`` export to a tuple.

    Raises:
        ControllerLoadError: If the export is not callable or a sequence
            of callables.

    """
    declared = getattr(module, "middleware", None)
    if declared is None:
        return ()
    items = (declared,) if callable(declared) else declared
    try:
        chain = tuple(items)
    except TypeError:
        chain = None
    if chain is None or not all(callable(mw) for mw in chain):
        msg = (
            f"Controller {module.__file__}: 'middleware' must be a callable "
            f"or a sequence of callables, got {type(declared).__name__}"
        )
        raise ControllerLoadError(msg)
    return chain


@dataclass(slots=True)
class _Run:
    """Mutable state of one registrar run."""

    loader: ControllerLoader
    table: RouteTable = field(default_factory=RouteTable)
    views: dict[RoutePath, ViewKey] = field(default_factory=dict)
    missing: set[RoutePath] = field(default_factory=set)
    visited: set[Path] = field(default_factory=set)


class Registrar:
    """Builds a RouteTable and ViewMap from the autoroute root.

    Runs synchronously, once per startup.  Re-running against an unchanged
    tree yields the same table and map.

    Args:
        config: Autoroute configuration (root and template extension).
        event_log: Optional log that receives registration events.

    """

    __slots__ = ("_config", "_event_log")

    def __init__(self, config: AutorouteConfig, *, event_log: EventLog | None = None) -> None:
        self._config = config
        self._event_log = event_log

    @property
    def config(self) -> AutorouteConfig:
        return self._config

    def register(self) -> tuple[RouteTable, ViewMap]:
        """Walk the root, reusing controller modules already imported."""
        return self._run(reload=False)

    def reload(self) -> tuple[RouteTable, ViewMap]:
        """Walk the root, executing every controller module again."""
        return self._run(reload=True)

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _run(self, *, reload: bool) -> tuple[RouteTable, ViewMap]:
        root = self._config.root
        logger.debug("Registering controllers and views at %s", root)
        run = _Run(loader=ControllerLoader(root, reload=reload))

        if not root.is_dir():
            logger.warning("Autoroute root %s is not a directory", root)
            self._record(DirectorySkipped(
                path=str(root), reason="not a directory", timestamp_ns=now_ns(),
            ))
        else:
            self._walk(run, PurePosixPath())

        return run.table, ViewMap(run.views, run.missing)

    def _walk(self, run: _Run, rel: PurePosixPath) -> None:
        directory = self._config.root / rel
        try:
            resolved = directory.resolve()
            if resolved in run.visited:
                logger.debug("Skipping %s: already visited as %s", directory, resolved)
                return
            run.visited.add(resolved)

            entries = [
                FileEntry(item.name, item, classify(item, self._config.companion_suffix))
                for item in sorted(directory.iterdir())
            ]
        except OSError as exc:
            logger.warning("Skipping directory %s: %s", directory, exc)
            self._record(DirectorySkipped(
                path=str(directory), reason=str(exc), timestamp_ns=now_ns(),
            ))
            return

        entries = [e for e in entries if e.kind is not EntryKind.IGNORED]
        entries.sort(key=lambda e: e.kind)

        for entry in entries:
            if entry.kind is EntryKind.DIRECTORY:
                self._walk(run, rel / entry.name)
            else:
                self._register_controller(run, entry, rel)

    # ------------------------------------------------------------------
    # Controllers
    # ------------------------------------------------------------------

    def _register_controller(self, run: _Run, entry: FileEntry, rel: PurePosixPath) -> None:
        is_index = entry.kind is EntryKind.INDEX_CONTROLLER
        stem = entry.name.removesuffix(CONTROLLER_SUFFIX)
        route, initial_key = controller_route(rel, stem, is_index=is_index)

        try:
            module = run.loader.load(entry.path)
            middleware = controller_middleware(module)
        except ControllerLoadError as exc:
            logger.warning("Skipping controller %s: %s", entry.path, exc)
            self._record(ControllerSkipped(
                source=str(entry.path), reason=str(exc), timestamp_ns=now_ns(),
            ))
            return

        actions = [
            (spec, getattr(module, spec.name))
            for spec in ACTIONS
            if callable(getattr(module, spec.name, None))
        ]
        if not actions:
            logger.debug("No actions exported by %s", entry.path)
            self._record(ControllerSkipped(
                source=str(entry.path), reason=NO_ACTIONS, timestamp_ns=now_ns(),
            ))
            return

        view_key, found = resolve_view_key(self._config.root, initial_key, self._config.ext)
        run.views[route] = view_key
        if found:
            run.missing.discard(route)
        else:
            run.missing.add(route)
        logger.debug(
            "%s -> %s%s%s", route, view_key, self._config.ext, "" if found else " (missing)",
        )

        for spec, action in actions:
            chain = ((id_to_state,) if spec.uses_id else ()) + middleware
            route_entry = RouteEntry(
                method=spec.method,
                path=spec.path_for(route),
                middleware=chain,
                action=action,
                action_name=spec.name,
                route=route,
                source=entry.path,
            )
            previous = run.table.add(route_entry)
            if previous is not None:
                self._record(RouteCollision(
                    method=route_entry.method,
                    path=route_entry.path,
                    source=str(route_entry.source),
                    previous_source=str(previous.source),
                    timestamp_ns=now_ns(),
                ))
            logger.debug(
                "Registered %s %s -> %s:%s",
                route_entry.method, route_entry.path, entry.path.name, spec.name,
            )

        self._record(ControllerRegistered(
            source=str(entry.path),
            route=route,
            view_key=view_key,
            template_found=found,
            actions=tuple(spec.name for spec, _ in actions),
            timestamp_ns=now_ns(),
        ))

    def _record(self, event: RegistrationEvent) -> None:
        if self._event_log is not None:
            self._event_log.append(event)


def register(
    config: AutorouteConfig,
    *,
    event_log: EventLog | None = None,
) -> tuple[RouteTable, ViewMap]:
    """Build the route table and view map for *config* (cold load)."""
    return Registrar(config, event_log=event_log).register()
