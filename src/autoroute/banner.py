"""Startup banner and route listing — terminal output for the CLI.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from autoroute.observability.events import ControllerSkipped, DirectorySkipped, RouteCollision

if TYPE_CHECKING:
    from autoroute.app import Autorouter


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""

_METHOD_COLORS: dict[str, str] = {
    "GET": _GREEN,
    "POST": _YELLOW,
}


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def collect_warnings(router: Autorouter) -> list[str]:
    """Human-readable warnings from the router's registration events."""
    warnings: list[str] = []
    for event in router.events.problems():
        match event:
            case ControllerSkipped():
                warnings.append(f"skipped {event.source}: {event.reason}")
            case DirectorySkipped():
                warnings.append(f"skipped directory {event.path}: {event.reason}")
            case RouteCollision():
                warnings.append(
                    f"{event.method} {event.path}: {event.source} replaces {event.previous_source}"
                )
    for route in sorted(router.views.missing):
        warnings.append(f"no template for {route}")
    return warnings


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def format_routes(router: Autorouter) -> list[str]:
    """One line per route: method, path, controller file and action."""
    root = router.config.root
    entries = list(router.routes)
    width = max((len(e.path) for e in entries), default=0)
    lines: list[str] = []
    for entry in entries:
        try:
            source = entry.source.relative_to(root).as_posix()
        except ValueError:
            source = str(entry.source)
        color = _METHOD_COLORS.get(entry.method, "")
        lines.append(
            f"  {color}{entry.method:<5}{_RESET} {entry.path:<{width}}  "
            f"{_DIM}{source}:{entry.action_name}{_RESET}"
        )
    return lines


def format_views(router: Autorouter) -> list[str]:
    """One line per ViewMap entry: route and template."""
    ext = router.config.ext
    views = router.views
    width = max((len(route) for route in views), default=0)
    lines: list[str] = []
    for route in sorted(views):
        marker = "" if views.has_template(route) else f"  {_YELLOW}(missing){_RESET}"
        lines.append(f"  {route:<{width}}  {_DIM}->{_RESET} {views[route]}{ext}{marker}")
    return lines


def print_routes(router: Autorouter) -> None:
    """Print the route table and view map to stdout."""
    lines = ["Routes:", *format_routes(router), "", "Views:", *format_views(router)]
    if router.config.enable_standalone:
        lines.extend(["", f"  {_DIM}standalone templates ({router.config.ext}) enabled{_RESET}"])
    print("\n".join(lines))


def print_banner(
    router: Autorouter,
    mode: str,
    *,
    load_ms: float = 0.0,
) -> None:
    """Print the autoroute startup banner to stderr.

    Args:
        router: The mounted Autorouter.
        mode: Run mode label (``"serve"``).
        load_ms: Time spent registering, in milliseconds.

    """
    from autoroute import __version__

    config = router.config
    header = f"  {_BOLD}autoroute{_RESET} {_DIM}v{__version__}{_RESET}  {_CYAN}[{mode}]{_RESET}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    controllers = len(router.views)
    lines.append(
        f"  {_DIM}├─{_RESET} {_plural(len(router.routes), 'route')} from "
        f"{_plural(controllers, 'controller')}{timing}"
    )
    lines.append(f"  {_DIM}├─{_RESET} root: {_DIM}{config.root}{_RESET}")
    standalone = "on" if config.enable_standalone else "off"
    lines.append(f"  {_DIM}└─{_RESET} templates: {config.ext}, standalone {standalone}")

    url = f"http://{config.host}:{config.port}"
    lines.append("")
    lines.append(f"  {_clickable_url(url)}")

    warnings = collect_warnings(router)
    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
