"""Path normalization and fallback walks.

Two walks share the same shape: drop the last path segment and try again.

- ``fallback_view_key`` steps a view-key toward the nearest ancestor
  template, alternating between ``<dir>/index`` and ``<dir>``::

      /admin/reports/daily -> /admin/reports/index -> /admin/reports
      -> /admin/index -> /admin -> /index -> ""

- ``fallback_routes`` steps a request path toward the nearest registered
  controller route::

      /posts/123/edit -> /posts/123 -> /posts -> /

Both are pure string functions; only ``resolve_view_key`` touches the
filesystem.
"""

from collections.abc import Iterator
from pathlib import Path, PurePath

from autoroute._types import RoutePath, ViewKey

INDEX_KEY: ViewKey = "/index"


def normalize_rel(rel: str | PurePath) -> str:
    """Normalize a relative directory path to forward slashes, no edge slashes.

    ``admin\\reports`` -> ``admin/reports``; ``""`` and ``"."`` -> ``""``.
    """
    text = str(rel).replace("\\", "/").strip("/")
    if text == ".":
        return ""
    return text


def base_route(rel: str | PurePath) -> RoutePath:
    """Route of a directory: ``/`` + its normalized relative path."""
    return "/" + normalize_rel(rel)


def join_route(route: RoutePath, suffix: str) -> RoutePath:
    """Append *suffix* segments to *route* without doubling the root slash.

    ``join_route("/", "{id}")`` -> ``/{id}``;
    ``join_route("/posts", "{id}/edit")`` -> ``/posts/{id}/edit``.
    """
    suffix = suffix.strip("/")
    if not suffix:
        return route
    if route == "/":
        return "/" + suffix
    return route.rstrip("/") + "/" + suffix


def controller_route(
    rel: str | PurePath,
    stem: str,
    *,
    is_index: bool,
) -> tuple[RoutePath, ViewKey]:
    """Derive the route and the initial view-key for one controller file.

    ``index`` controllers take the directory route and the view-key
    ``<route>/index``; named controllers append their stem to both.
    """
    route = base_route(rel)
    if is_index:
        return route, join_route(route, "index")
    route = join_route(route, stem)
    return route, route


def fallback_view_key(key: ViewKey) -> ViewKey:
    """One step of the template fallback walk.

    A key already ending in ``/index`` loses its last segment; any other
    key has its last segment replaced by ``index``.  Returns ``""`` once
    nothing is left to strip.
    """
    cut = key.rfind("/")
    if cut < 0:
        return ""
    parent = key[:cut]
    if key.endswith(INDEX_KEY):
        return parent
    return parent + INDEX_KEY


def template_path(root: Path, key: ViewKey, ext: str) -> Path:
    """Filesystem location of the template named by *key*."""
    return root / (key.lstrip("/") + ext)


def resolve_view_key(root: Path, key: ViewKey, ext: str) -> tuple[ViewKey, bool]:
    """Walk *key* up the tree until a template file exists.

    Returns ``(view_key, found)``.  When the walk is exhausted the key is
    ``/index`` and *found* is False; callers still record the key so that
    a missing template surfaces at render time.
    """
    seen: set[ViewKey] = set()
    while key and key not in seen:
        if template_path(root, key, ext).is_file():
            return key, True
        seen.add(key)
        key = fallback_view_key(key)
    return INDEX_KEY, False


def fallback_routes(path: RoutePath) -> Iterator[RoutePath]:
    """Yield ancestor routes of a request path, nearest first, ending at ``/``.

    The path itself is not yielded.  A trailing slash is ignored, so
    ``/posts/`` falls back to ``/`` just like ``/posts``.
    """
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"
    while path != "/":
        cut = path.rfind("/")
        if cut <= 0:
            yield "/"
            return
        path = path[:cut]
        yield path
