"""Per-route middleware chains.

Each registered route runs its own chain, innermost last::

    [id_to_state] + controller.middleware + [action]

Middleware has the chirp shape ``async (request, next) -> response`` and
must ``await next(request)`` to continue.  ``next`` returns whatever the
action returned; chirp negotiates that value into a response once the
chain unwinds.

Actions may be ``def`` or ``async def``.  Arguments are bound from the
request once per call:

- a parameter named ``request`` (or annotated ``Request``) gets the request
- a parameter named after a path parameter gets its value, converted by
  the annotation when it is a plain type (``id: int``)
- otherwise the first positional parameter gets the request

"""

import inspect
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from chirp.context import g
from chirp.http.request import Request

from autoroute._types import ActionFunc, MiddlewareFunc
from autoroute.routes.table import RouteEntry

type Next = Callable[[Request], Awaitable[Any]]


async def invoke(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def id_to_state(request: Request, next: Next) -> Any:
    """Copy the ``id`` path parameter into request state (``g.id``).

    A no-op when the route has no ``id`` parameter.
    """
    value = request.path_params.get("id")
    if value is not None:
        g.id = value
    return await next(request)


@dataclass(frozen=True, slots=True)
class _Binding:
    name: str
    from_request: bool
    convert: type | None = None


_PARAM_RE = re.compile(r"\{(\w+)(?::\w+)?\}")


def path_param_names(path: str) -> frozenset[str]:
    """Names of the ``{param}`` segments in a chirp path pattern."""
    return frozenset(_PARAM_RE.findall(path))


def plan_arguments(
    action: ActionFunc,
    path_params: frozenset[str] = frozenset(),
) -> tuple[_Binding, ...]:
    """Inspect *action* once and describe how to call it."""
    try:
        sig = inspect.signature(action)
    except (TypeError, ValueError):
        return ()

    params = [
        p for p in sig.parameters.values()
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    bindings: list[_Binding] = []
    for param in params:
        if param.name == "request" or param.annotation is Request:
            bindings.append(_Binding(param.name, from_request=True))
        else:
            annotation = param.annotation
            convert = annotation if annotation in (int, float, str) else None
            bindings.append(_Binding(param.name, from_request=False, convert=convert))

    if bindings and not any(b.from_request for b in bindings):
        first = params[0]
        if first.kind is not first.KEYWORD_ONLY and first.name not in path_params:
            bindings[0] = _Binding(first.name, from_request=True)

    return tuple(bindings)


def bind_arguments(plan: tuple[_Binding, ...], request: Request) -> dict[str, Any]:
    """Build keyword arguments for one call from *plan*."""
    kwargs: dict[str, Any] = {}
    for binding in plan:
        if binding.from_request:
            kwargs[binding.name] = request
        elif binding.name in request.path_params:
            value: Any = request.path_params[binding.name]
            if binding.convert is not None:
                try:
                    value = binding.convert(value)
                except (TypeError, ValueError):
                    pass
            kwargs[binding.name] = value
    return kwargs


def _link(middleware: MiddlewareFunc, inner: Next) -> Next:
    async def call(request: Request) -> Any:
        return await invoke(middleware, request, inner)

    return call


def compose(
    middleware: tuple[MiddlewareFunc, ...],
    action: ActionFunc,
    path_params: frozenset[str] = frozenset(),
) -> Next:
    """Fold *middleware* around *action* into one ``(request) -> result`` callable."""
    plan = plan_arguments(action, path_params)

    async def terminal(request: Request) -> Any:
        return await invoke(action, **bind_arguments(plan, request))

    handler: Next = terminal
    for mw in reversed(middleware):
        handler = _link(mw, handler)
    return handler


def build_handler(
    entry: RouteEntry,
    bind: Callable[[], Any] | None = None,
) -> Callable[[Request], Awaitable[Any]]:
    """Build the chirp route handler for *entry*.

    Args:
        entry: The route table entry.
        bind: Optional context-manager factory entered around every call
            (the dispatcher uses it to make ``view()`` available).

    """
    chain = compose(entry.middleware, entry.action, path_param_names(entry.path))

    async def route_handler(request: Request) -> Any:
        if bind is None:
            return await chain(request)
        with bind():
            return await chain(request)

    route_handler.__name__ = entry.action_name
    route_handler.__qualname__ = f"{entry.name}"
    return route_handler
