"""Views — route-to-template map and per-request view resolution."""

from autoroute.views.dispatcher import Dispatcher, current_dispatcher, view
from autoroute.views.viewmap import ViewMap

__all__ = ["Dispatcher", "ViewMap", "current_dispatcher", "view"]
