"""Autorouter — convention-based routes and views for a chirp App.

Autorouter ties the registrar and the dispatcher to a chirp ``App``.  The
public functions (autorouter, create_app, serve) are the primary entry
points.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from autoroute._errors import ConfigError
from autoroute.config import AutorouteConfig
from autoroute.config_loader import load_config
from autoroute.observability.log import EventLog
from autoroute.routes.chain import build_handler
from autoroute.routes.registrar import Registrar
from autoroute.routes.table import RouteTable
from autoroute.views.dispatcher import Dispatcher
from autoroute.views.viewmap import ViewMap

if TYPE_CHECKING:
    from chirp import App

logger = logging.getLogger("autoroute.app")

# Every method gets the standalone fallback so unknown paths answer 404,
# not 405.
STANDALONE_METHODS: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
STANDALONE_PATH = "/{path:path}"
STANDALONE_NAME = "autoroute:standalone"


class Autorouter:
    """Routes and views derived from one autoroute root.

    Registration runs on construction.  ``register()`` re-runs it against
    the current tree, ``reload()`` also executes every controller module
    again.  Both are only allowed before ``mount()``; chirp freezes its
    routes on the first request.

    Args:
        config: Autoroute configuration.  Defaults to the working directory.
        event_log: Log receiving registration events (a fresh one if omitted).

    """

    __slots__ = ("_app", "_config", "_dispatcher", "_events", "_registrar", "_routes", "_views")

    def __init__(
        self,
        config: AutorouteConfig | None = None,
        *,
        event_log: EventLog | None = None,
    ) -> None:
        self._config = config or AutorouteConfig()
        self._events = event_log if event_log is not None else EventLog()
        self._registrar = Registrar(self._config, event_log=self._events)
        self._app: App | None = None
        self._routes, self._views = self._registrar.register()
        self._dispatcher = Dispatcher(self._config, self._views)

    @property
    def config(self) -> AutorouteConfig:
        return self._config

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def views(self) -> ViewMap:
        return self._views

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def app(self) -> App | None:
        """The chirp App this router is mounted on, if any."""
        return self._app

    def register(self) -> tuple[RouteTable, ViewMap]:
        """Re-run registration, reusing controller modules already imported.

        Raises:
            ConfigError: If the router is already mounted.

        """
        self._check_unmounted("register")
        return self._replace(*self._registrar.register())

    def reload(self) -> tuple[RouteTable, ViewMap]:
        """Re-run registration, executing every controller module again.

        Raises:
            ConfigError: If the router is already mounted.

        """
        self._check_unmounted("reload")
        return self._replace(*self._registrar.reload())

    def _check_unmounted(self, action: str) -> None:
        if self._app is not None:
            msg = f"Cannot {action} an Autorouter after it has been mounted on an App."
            raise ConfigError(msg)

    def _replace(self, routes: RouteTable, views: ViewMap) -> tuple[RouteTable, ViewMap]:
        self._routes, self._views = routes, views
        self._dispatcher = Dispatcher(self._config, views)
        return routes, views

    def mount(self, app: App) -> None:
        """Register every route with *app*, then the standalone fallback.

        Raises:
            ConfigError: If the router is already mounted.

        """
        if self._app is not None:
            msg = "Autorouter is already mounted on an App."
            raise ConfigError(msg)

        app_config = app.config
        template_dirs = [app_config.template_dir, *getattr(app_config, "component_dirs", ())]
        self._dispatcher.bind_templates([d for d in template_dirs if d])

        for entry in self._routes:
            handler = build_handler(entry, self._dispatcher.bound)
            app.route(entry.path, methods=[entry.method], name=entry.name)(handler)

        if self._config.enable_standalone:
            app.route(
                STANDALONE_PATH,
                methods=list(STANDALONE_METHODS),
                name=STANDALONE_NAME,
            )(self._dispatcher.standalone_handler)

        self._app = app
        logger.debug("Mounted %d routes from %s", len(self._routes), self._config.root)


def autorouter(app: App | None = None, root: str | Path = ".", **settings: object) -> Autorouter:
    """Build an Autorouter for *root* and mount it.

    When *app* is omitted a chirp App is created whose ``template_dir`` is
    the autoroute root.

    Args:
        app: chirp App to mount on.
        root: Directory holding controllers and templates.
        **settings: Override AutorouteConfig fields (``ext``,
            ``enable_standalone``, ...).

    """
    router, _ = _mounted(app, root, settings)
    return router


def create_app(root: str | Path = ".", **settings: object) -> App:
    """Create a chirp App serving *root* by convention."""
    _, app = _mounted(None, root, settings)
    return app


def _mounted(
    app: App | None, root: str | Path, settings: dict[str, object],
) -> tuple[Autorouter, App]:
    config = load_config(Path(root), **settings)
    router = Autorouter(config)
    if app is None:
        app = _create_chirp_app(config)
    router.mount(app)
    return router, app


def _create_chirp_app(config: AutorouteConfig) -> App:
    from chirp import App, AppConfig

    return App(config=AppConfig(
        template_dir=config.root,
        debug=config.debug,
        host=config.host,
        port=config.port,
    ))


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Run *root* as a live chirp server.

    Args:
        root: Directory holding controllers and templates.
        **kwargs: Override AutorouteConfig fields.

    """
    from autoroute.banner import print_banner

    t0 = time.perf_counter()
    router, app = _mounted(None, root, kwargs)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(router, mode="serve", load_ms=load_ms)

    app.run(host=router.config.host, port=router.config.port)
