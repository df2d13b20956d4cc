"""Admin area — no admin template, so the root index.html renders."""

from autoroute import view


async def middleware(request, next):
    if request.query.get("token") != "demo":
        return ("Forbidden", 403)
    return await next(request)


def index(request):
    return view(request, title="Admin")
