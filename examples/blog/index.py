"""Home page — GET /."""

from autoroute import view


def index(request):
    return view(request, title="Blog")
