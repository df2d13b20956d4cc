"""Registration events.

Every registrar run records what it did: which controllers produced
routes, which files or directories were skipped, and which routes
replaced an earlier registration.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass


def now_ns() -> int:
    """Monotonic nanosecond timestamp for event ordering."""
    return time.monotonic_ns()


@dataclass(frozen=True, slots=True)
class ControllerRegistered:
    """A controller module produced at least one route.

    Attributes:
        source: Controller file path.
        route: Controller route (ViewMap key).
        view_key: Resolved view-key for the route.
        template_found: Whether the fallback walk found a template file.
        actions: Action names that were registered, in vocabulary order.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    source: str
    route: str
    view_key: str
    template_found: bool
    actions: tuple[str, ...]
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ControllerSkipped:
    """A controller module failed to load, or exported no actions.

    Attributes:
        source: Controller file path.
        reason: Error message, or ``"no actions"``.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    source: str
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class DirectorySkipped:
    """A directory could not be listed; its subtree was skipped.

    Attributes:
        path: Directory path.
        reason: Error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RouteCollision:
    """A route replaced an earlier registration for the same method and path.

    Attributes:
        method: HTTP method.
        path: chirp path pattern.
        source: Controller that won (registered last).
        previous_source: Controller that was replaced.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    method: str
    path: str
    source: str
    previous_source: str
    timestamp_ns: int


type RegistrationEvent = ControllerRegistered | ControllerSkipped | DirectorySkipped | RouteCollision
