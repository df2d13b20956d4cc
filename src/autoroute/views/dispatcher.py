"""Dispatcher — view lookup for controllers and standalone templates.

The dispatcher reads the ViewMap captured at registration and never
touches the filesystem for controller views.  Standalone views (a
template with no controller) are probed per request, at most twice::

    GET /admin/help.html  -> admin/help.html exists  -> view-key /admin/help
    GET /admin/help       -> admin/help.html exists  -> view-key /admin/help

View-keys become chirp ``Template`` names relative to the App's template
directory, so the autoroute root must live inside it.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from itertools import chain
from pathlib import Path, PurePosixPath
from typing import Any

import anyio
from chirp.context import g
from chirp.errors import NotFound
from chirp.http.request import Request
from chirp.templating.returns import Template

from autoroute._errors import RenderBackendMissing, ViewNotFound
from autoroute._types import RoutePath, ViewKey
from autoroute.config import AutorouteConfig
from autoroute.paths import fallback_routes
from autoroute.views.viewmap import ViewMap

logger = logging.getLogger("autoroute.views")

_dispatcher_var: ContextVar["Dispatcher"] = ContextVar("autoroute_dispatcher")

_UNMOUNTED = "Autorouter is not mounted on a chirp App; call Autorouter.mount(app) first."


def request_state() -> dict[str, Any]:
    """Copy of everything stored on ``g`` for the current request."""
    # g only exposes get() and `in`; its per-request dict is the state.
    return dict(g._get_dict())


class Dispatcher:
    """Resolves view-keys for requests and renders them as chirp Templates.

    Args:
        config: Autoroute configuration.
        views: The ViewMap built by the registrar.

    """

    __slots__ = ("_backend_error", "_config", "_template_prefix", "_views")

    def __init__(self, config: AutorouteConfig, views: ViewMap) -> None:
        self._config = config
        self._views = views
        self._template_prefix = ""
        self._backend_error: str | None = _UNMOUNTED

    @property
    def views(self) -> ViewMap:
        return self._views

    # ------------------------------------------------------------------
    # Template backend
    # ------------------------------------------------------------------

    def bind_templates(self, template_dirs: Sequence[str | Path]) -> None:
        """Locate the autoroute root inside one of the App's template dirs.

        Does not raise: a root outside every directory is reported by the
        first ``view()`` call that needs a template name.
        """
        root = self._config.root.resolve()
        for directory in template_dirs:
            base = Path(directory).resolve()
            if root.is_relative_to(base):
                relative = root.relative_to(base).as_posix()
                self._template_prefix = "" if relative == "." else relative + "/"
                self._backend_error = None
                logger.debug("Templates for %s resolve under %s", root, base)
                return

        dirs = ", ".join(str(d) for d in template_dirs) or "none"
        self._backend_error = (
            f"Autoroute root {root} is not inside the App's template directories "
            f"({dirs}). Set AppConfig(template_dir=...) to the root or a parent of it."
        )

    def template_name(self, key: ViewKey) -> str:
        """Template name for *key*, relative to the App's template directory.

        Raises:
            RenderBackendMissing: If no usable template directory is bound.

        """
        if self._backend_error is not None:
            raise RenderBackendMissing(self._backend_error)
        name = key.lstrip("/")
        if not name.endswith(self._config.ext):
            name += self._config.ext
        return self._template_prefix + name

    # ------------------------------------------------------------------
    # Controller views
    # ------------------------------------------------------------------

    def lookup_route(self, path: RoutePath) -> RoutePath | None:
        """Find the ViewMap route for *path*, walking up on a miss."""
        candidates = [path]
        stripped = path.rstrip("/") or "/"
        if stripped != path:
            candidates.append(stripped)

        for candidate in chain(candidates, fallback_routes(path)):
            if candidate in self._views:
                if candidate != path:
                    logger.debug("View fallback %s -> %s", path, candidate)
                return candidate
        return None

    def resolve_view(self, path: RoutePath, explicit: ViewKey | None = None) -> ViewKey:
        """Return the view-key for a request path.

        An explicit view name is used verbatim.

        Raises:
            ViewNotFound: If no route up the tree has a view, or the one
                found has no template file.

        """
        if explicit:
            return explicit

        route = self.lookup_route(path)
        if route is None:
            msg = f"View not found for path: {path}"
            raise ViewNotFound(msg)

        key = self._views[route]
        if route in self._views.missing:
            msg = (
                f"View not found for path: {path} "
                f"(no template {key}{self._config.ext} or ancestor index under "
                f"{self._config.root})"
            )
            raise ViewNotFound(msg)
        return key

    def view(self, request: Request, name: ViewKey | None = None, /, **context: Any) -> Template:
        """Build the chirp Template for *request*.

        The template context is the request state (everything middleware
        stored on ``g``, ``id`` included) with *context* laid over it.
        """
        if self._backend_error is not None:
            raise RenderBackendMissing(self._backend_error)

        key = self.resolve_view(request.path, name)
        template = self.template_name(key)
        logger.debug("%s -> view %s", request.path, template)
        return Template(template, **{**request_state(), **context})

    @contextmanager
    def bound(self) -> Iterator["Dispatcher"]:
        """Make this dispatcher the one ``autoroute.view()`` uses."""
        token = _dispatcher_var.set(self)
        try:
            yield self
        finally:
            _dispatcher_var.reset(token)

    # ------------------------------------------------------------------
    # Standalone views
    # ------------------------------------------------------------------

    async def standalone_view(self, path: RoutePath) -> ViewKey | None:
        """Resolve an unmatched request path to a bare template, or ``None``.

        Not cached: templates added while the app runs are served.
        """
        relative = path.lstrip("/")
        if not relative or ".." in PurePosixPath(relative).parts:
            return None

        root = self._config.root
        ext = self._config.ext

        if path.endswith(ext) and await anyio.Path(root / relative).is_file():
            logger.debug("Standalone %s", path)
            return path[: -len(ext)]

        if await anyio.Path(root / (relative + ext)).is_file():
            logger.debug("Standalone %s%s", path, ext)
            return path

        return None

    async def standalone_handler(self, request: Request) -> Template:
        """chirp handler for the catch-all route: render a bare template or 404."""
        key = await self.standalone_view(request.path)
        if key is None:
            raise NotFound(f"No route or template matches {request.path!r}")
        return Template(self.template_name(key))


def current_dispatcher() -> Dispatcher | None:
    """The dispatcher bound to the running autorouted handler, if any."""
    return _dispatcher_var.get(None)


def view(request: Request, name: ViewKey | None = None, /, **context: Any) -> Template:
    """Render the view for *request* from inside a controller action.

    Usage::

        from autoroute import view

        def select(request, id):
            return view(request, post=load_post(id))

    Raises:
        RenderBackendMissing: If called outside an autorouted handler, or
            the Autorouter's root is not inside the App's template dir.
        ViewNotFound: If no template resolves for the request path.

    """
    dispatcher = _dispatcher_var.get(None)
    if dispatcher is None:
        msg = "autoroute.view() called outside an autorouted controller action."
        raise RenderBackendMissing(msg)
    return dispatcher.view(request, name, **context)
