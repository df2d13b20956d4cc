"""Autoroute error hierarchy.

All autoroute-specific errors inherit from AutorouteError for easy catching.
"""


class AutorouteError(Exception):
    """Base error for all autoroute operations."""


class ConfigError(AutorouteError):
    """Invalid or missing configuration."""


class ControllerLoadError(AutorouteError):
    """A controller module failed to import or execute.

    Raised by the controller loader.  The registrar catches it, logs it,
    and skips the file; startup continues with the remaining controllers.
    """


class ViewNotFound(AutorouteError):  # noqa: N818
    """No template could be resolved for a request path."""


class RenderBackendMissing(AutorouteError):  # noqa: N818
    """``view()`` was called but no template rendering is wired up.

    Detected lazily, on the first view lookup that needs it.
    """
