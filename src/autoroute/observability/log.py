"""Event log: what one or more registrar runs recorded.

A bounded ring buffer of ``RegistrationEvent`` objects.  Queries filter by
event type, timestamp, and a substring of the file or route an event is
about.  ``problems()`` collects the events worth showing a developer at
startup (failed imports, unreadable directories, route collisions).

Thread Safety:
    Every method takes the internal ``threading.Lock``; readers work on
    a snapshot.

"""

import threading
from collections import Counter, deque
from collections.abc import Iterable
from typing import Any

from autoroute.observability.events import (
    ControllerSkipped,
    DirectorySkipped,
    RegistrationEvent,
    RouteCollision,
)

NO_ACTIONS = "no actions"

_LOCATION_FIELDS = ("source", "path", "route")


def _location(event: RegistrationEvent) -> str:
    """Every file or route an event refers to, space separated."""
    return " ".join(str(getattr(event, name, "")) for name in _LOCATION_FIELDS)


def is_problem(event: RegistrationEvent) -> bool:
    """True for events a developer should be told about."""
    match event:
        case ControllerSkipped(reason=reason):
            return reason != NO_ACTIONS
        case DirectorySkipped() | RouteCollision():
            return True
    return False


class EventLog:
    """Ring buffer of registration events.

    Once *max_events* are stored, each append drops the oldest event.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[RegistrationEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: RegistrationEvent) -> None:
        with self._lock:
            self._events.append(event)

    def append_many(self, events: Iterable[RegistrationEvent]) -> None:
        with self._lock:
            self._events.extend(events)

    def _snapshot(self) -> list[RegistrationEvent]:
        with self._lock:
            return list(self._events)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[RegistrationEvent]:
        """Matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Keep only events stamped at or after this time.
            path: Keep only events whose source file, directory, or route
                contains this substring.
            limit: Stop after this many matches.

        """
        matches: list[RegistrationEvent] = []
        for event in reversed(self._snapshot()):
            if len(matches) == limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _location(event):
                continue
            matches.append(event)
        return matches

    def problems(self) -> list[RegistrationEvent]:
        """Skipped controllers and directories plus collisions, oldest first.

        Controllers skipped only because they export no actions are left
        out; helper modules next to controllers are normal.
        """
        return [event for event in self._snapshot() if is_problem(event)]

    def recent(self, n: int = 20) -> list[RegistrationEvent]:
        """The *n* newest events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event; return how many there were."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Event counts, overall and per event class."""
        events = self._snapshot()
        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(Counter(type(event).__name__ for event in events)),
            "problems": sum(1 for event in events if is_problem(event)),
        }
