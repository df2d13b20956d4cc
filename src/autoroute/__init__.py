"""Autoroute — convention-based routes and views for chirp.

Lay out a directory of controller modules and templates; autoroute turns
the tree into chirp routes, per-controller middleware chains, and a
route-to-template map.  No route is declared by hand.

Quick start::

    import autoroute

    app = autoroute.create_app("site/")
    app.run()

Controllers export actions from a fixed vocabulary::

    # site/posts.py -> /posts, /posts/{id}, /posts/{id}/edit, ...
    from autoroute import view

    def index(request):
        return view(request, posts=all_posts())

    def select(request, id: int):
        return view(request, post=get_post(id))

Mount on an existing chirp App::

    from chirp import App, AppConfig

    app = App(config=AppConfig(template_dir="site"))
    autoroute.autorouter(app, "site/")

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "AutorouteConfig",
    "AutorouteError",
    "Autorouter",
    "ConfigError",
    "ControllerLoadError",
    "RenderBackendMissing",
    "ViewNotFound",
    "__version__",
    "autorouter",
    "create_app",
    "id_to_state",
    "serve",
    "view",
]

_LAZY: dict[str, str] = {
    "AutorouteConfig": "autoroute.config",
    "AutorouteError": "autoroute._errors",
    "ConfigError": "autoroute._errors",
    "ControllerLoadError": "autoroute._errors",
    "RenderBackendMissing": "autoroute._errors",
    "ViewNotFound": "autoroute._errors",
    "Autorouter": "autoroute.app",
    "autorouter": "autoroute.app",
    "create_app": "autoroute.app",
    "serve": "autoroute.app",
    "id_to_state": "autoroute.routes.chain",
    "view": "autoroute.views.dispatcher",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import autoroute`` fast; chirp is only imported once a name
    that needs it is accessed.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
