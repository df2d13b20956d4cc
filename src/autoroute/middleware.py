"""Optional controller middleware.

``request_data`` merges every request source into one flat mapping at
``g.data`` so actions can read parameters without caring where they
came from.  Precedence, lowest to highest::

    body (form or JSON object)  <  query string  <  path parameters

Path parameters are only known once a route has matched, so add it to a
controller's ``middleware`` rather than to the App::

    from autoroute.middleware import request_data

    middleware = [request_data]
"""

import json
from typing import Any

from chirp.context import g
from chirp.http.request import Request

from autoroute.routes.chain import Next

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _body_data(request: Request) -> dict[str, Any]:
    content_type = request.content_type or ""
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return dict(payload) if isinstance(payload, dict) else {}
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return {key: form[key] for key in form}
    return {}


async def request_data(request: Request, next: Next) -> Any:
    """Store body, query, and path parameters merged into ``g.data``."""
    data: dict[str, Any] = {}
    if request.method not in ("GET", "HEAD"):
        data.update(await _body_data(request))
    data.update({key: request.query[key] for key in request.query})
    data.update(request.path_params)
    g.data = data
    return await next(request)
