"""Registration observability — what the registrar did, and why.

Quick Start:
    >>> from autoroute.observability import EventLog, ControllerSkipped
    >>> log = EventLog()
    >>> # Pass the log to a Registrar; inspect it after registration
    >>> skipped = log.query(event_type=ControllerSkipped)

"""

from autoroute.observability.events import (
    ControllerRegistered,
    ControllerSkipped,
    DirectorySkipped,
    RegistrationEvent,
    RouteCollision,
    now_ns,
)
from autoroute.observability.log import EventLog

__all__ = [
    "ControllerRegistered",
    "ControllerSkipped",
    "DirectorySkipped",
    "EventLog",
    "RegistrationEvent",
    "RouteCollision",
    "now_ns",
]
