"""Route registration — walk a directory tree, build chirp routes."""

from autoroute.routes.chain import build_handler, id_to_state
from autoroute.routes.loader import ControllerLoader
from autoroute.routes.registrar import Registrar, register
from autoroute.routes.table import ACTIONS, ActionSpec, RouteEntry, RouteTable

__all__ = [
    "ACTIONS",
    "ActionSpec",
    "ControllerLoader",
    "Registrar",
    "RouteEntry",
    "RouteTable",
    "build_handler",
    "id_to_state",
    "register",
]
