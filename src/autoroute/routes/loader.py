"""Controller loader — import controller modules from the autoroute root.

Controllers are imported with ``importlib.util.spec_from_file_location``
under a dotted name derived from their position in the tree::

    root/index.py              -> autoroute_controllers.index
    root/admin/reports/daily.py -> autoroute_controllers.admin.reports.daily

Every prefix of that name is registered in ``sys.modules`` as a namespace
package whose ``__path__`` is the matching directory, so controllers can
import each other and underscore helpers the walk ignores::

    from autoroute_controllers.admin._permissions import require_admin

A cold load reuses a module that is already there; a forced reload
executes the file again.
"""

import importlib.machinery
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from autoroute._errors import ControllerLoadError

MODULE_PREFIX = "autoroute_controllers"


def _module_part(name: str) -> str:
    return name.replace(".", "_").replace("-", "_")


def module_name_for(py_file: Path, root: Path) -> str:
    """Dotted module name for a controller file below *root*."""
    relative = py_file.relative_to(root).with_suffix("")
    return MODULE_PREFIX + "." + ".".join(_module_part(part) for part in relative.parts)


def ensure_package(name: str, directory: Path) -> ModuleType:
    """Return the namespace package *name*, adding *directory* to its path."""
    package = sys.modules.get(name)
    if package is None:
        spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
        package = importlib.util.module_from_spec(spec)
        sys.modules[name] = package
    location = str(directory)
    if location not in package.__path__:
        package.__path__.append(location)
    return package


class ControllerLoader:
    """Loads controller modules for one root directory.

    Args:
        root: Directory the controllers live under.
        reload: Execute every module again, even if it was loaded before.

    """

    __slots__ = ("_reload", "_root")

    def __init__(self, root: Path, *, reload: bool = False) -> None:
        self._root = root
        self._reload = reload

    @property
    def reload(self) -> bool:
        return self._reload

    def _parent_package(self, py_file: Path) -> ModuleType:
        name = MODULE_PREFIX
        directory = self._root
        package = ensure_package(name, directory)
        for part in py_file.relative_to(self._root).parent.parts:
            child_name = f"{name}.{_module_part(part)}"
            directory = directory / part
            child = ensure_package(child_name, directory)
            setattr(package, _module_part(part), child)
            name, package = child_name, child
        return package

    def load(self, py_file: Path) -> ModuleType:
        """Import *py_file* and return the module.

        Raises:
            ControllerLoadError: If the file cannot be imported or raises
                while executing.

        """
        module_name = module_name_for(py_file, self._root)

        if not self._reload:
            cached = sys.modules.get(module_name)
            if cached is not None and getattr(cached, "__file__", None) == str(py_file):
                return cached

        spec = importlib.util.spec_from_file_location(module_name, py_file)
        if spec is None or spec.loader is None:
            msg = f"Cannot import controller {py_file}"
            raise ControllerLoadError(msg)

        parent = self._parent_package(py_file)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            msg = f"Failed to load controller {py_file}: {exc}"
            raise ControllerLoadError(msg) from exc

        setattr(parent, module_name.rpartition(".")[2], module)
        return module
