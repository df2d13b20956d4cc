"""Autoroute configuration.

AutorouteConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AutorouteConfig:
    """Configuration for an Autorouter.

    Attributes:
        root: Directory holding controllers and templates.  Always resolved
              to an absolute path on construction.
        ext: Template file extension, including the leading dot.
        enable_standalone: Serve bare template files for unmatched paths.
        host: Bind address for ``autoroute serve``.
        port: Bind port for ``autoroute serve``.
        debug: Run the chirp App in debug mode.

    """

    root: Path = field(default_factory=Path.cwd)
    ext: str = ".html"
    enable_standalone: bool = True
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    def __post_init__(self) -> None:
        root = Path(self.root)
        if not root.is_absolute():
            root = root.resolve()
        object.__setattr__(self, "root", root)

        ext = self.ext or ".html"
        if not ext.startswith("."):
            ext = "." + ext
        object.__setattr__(self, "ext", ext)

    @property
    def companion_suffix(self) -> str:
        """Suffix of a template's companion script (e.g. ``.html.py``)."""
        return self.ext + ".py"
