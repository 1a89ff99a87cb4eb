"""Python module loader implementation."""

import importlib.machinery
import importlib.util
import inspect
import os
import sys
import weakref
from importlib.machinery import ModuleSpec
from pathlib import Path
from types import ModuleType
from typing import Any

from evalbridge.core.exceptions import ResolutionError
from evalbridge.utils.hashing import module_name_for_path

EXPORT_ATTRIBUTE = "default"


class _FreshSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that always compiles from source.

    Bytecode caches are keyed on mtime and size, which misses edits made
    within the same second that keep the file size.
    """

    def get_code(self, fullname: str) -> Any:
        source = self.get_data(self.path)
        return self.source_to_code(source, self.path)


class PythonModuleLoader:
    """Loader that evaluates Python modules from source on every call.

    Identifiers ending in ".py" or containing a path separator are file
    paths (any suffix is read as Python source); anything else is a
    dotted module name. A module object is built and executed fresh for
    each evaluation and is not left in sys.modules afterwards.

    The value of a module is its ``default`` attribute when present,
    otherwise a mapping of its exported names.
    """

    def __init__(self, root_dir: Path | str | None = None) -> None:
        """Initialize the loader.

        Args:
            root_dir: Base directory for relative file paths. Defaults to
                the current working directory at resolution time.
        """
        self._root_dir = Path(root_dir) if root_dir is not None else None
        self._created: "weakref.WeakSet[ModuleType]" = weakref.WeakSet()

    @property
    def root_dir(self) -> Path:
        """Return the base directory for relative file paths."""
        return self._root_dir if self._root_dir is not None else Path.cwd()

    def evict(self, identifier: str) -> None:
        """Drop the module from sys.modules and refresh finder caches.

        Args:
            identifier: The module identifier.
        """
        if self._is_path(identifier):
            sys.modules.pop(module_name_for_path(self._to_path(identifier)), None)
        else:
            sys.modules.pop(identifier, None)
        importlib.invalidate_caches()

    def evaluate(self, identifier: str) -> tuple[Any, str | None]:
        """Resolve and evaluate a module from source.

        Args:
            identifier: The module identifier.

        Returns:
            The module's value and the path it was loaded from.

        Raises:
            ResolutionError: If the module cannot be found or raises
                while being evaluated.
        """
        spec = self._find_spec(identifier)
        module = self._execute(identifier, spec)
        return self._export(module), spec.origin

    def _is_path(self, identifier: str) -> bool:
        if identifier.endswith(".py") or os.sep in identifier:
            return True
        return os.altsep is not None and os.altsep in identifier

    def _to_path(self, identifier: str) -> Path:
        path = Path(identifier).expanduser()
        if not path.is_absolute():
            path = self.root_dir / path
        return path.resolve()

    def _find_spec(self, identifier: str) -> ModuleSpec:
        if self._is_path(identifier):
            path = self._to_path(identifier)
            if not path.is_file():
                raise ResolutionError(identifier, f"no such file: {path}")
            name = module_name_for_path(path)
            return self._file_spec(name, str(path))

        try:
            spec = importlib.util.find_spec(identifier)
        except (ImportError, ValueError) as e:
            raise ResolutionError(identifier, str(e)) from e
        if spec is None or spec.loader is None:
            raise ResolutionError(identifier, "no module with that name")

        if spec.has_location and spec.origin and spec.origin.endswith(".py"):
            return self._file_spec(
                spec.name,
                spec.origin,
                spec.submodule_search_locations,
            )
        return spec

    def _file_spec(
        self,
        name: str,
        origin: str,
        search_locations: list[str] | None = None,
    ) -> ModuleSpec:
        spec = importlib.util.spec_from_file_location(
            name,
            origin,
            loader=_FreshSourceLoader(name, origin),
            submodule_search_locations=search_locations,
        )
        if spec is None:
            raise ResolutionError(origin, "cannot build a module spec")
        return spec

    def _execute(self, identifier: str, spec: ModuleSpec) -> ModuleType:
        loader = spec.loader
        if loader is None:
            raise ResolutionError(identifier, "module has no loader")
        module = importlib.util.module_from_spec(spec)
        self._created.add(module)

        # Some stdlib helpers (dataclasses, typing) look the module up
        # while it executes, so it is registered for the duration only.
        previous = sys.modules.get(spec.name)
        sys.modules[spec.name] = module
        try:
            loader.exec_module(module)
        except (Exception, SystemExit) as e:
            raise ResolutionError(identifier, f"{type(e).__name__}: {e}") from e
        finally:
            # An overlapping evaluation may have replaced the entry; only
            # the evaluation that owns it restores what was there before.
            if sys.modules.get(spec.name) is module:
                if previous is None or previous in self._created:
                    sys.modules.pop(spec.name, None)
                else:
                    sys.modules[spec.name] = previous

        return module

    def _export(self, module: ModuleType) -> Any:
        if hasattr(module, EXPORT_ATTRIBUTE):
            return getattr(module, EXPORT_ATTRIBUTE)

        explicit = getattr(module, "__all__", None)
        if explicit is not None:
            return {name: getattr(module, name) for name in explicit}

        return {
            name: value
            for name, value in vars(module).items()
            if not name.startswith("_") and not _is_code_object(value)
        }


def _is_code_object(value: Any) -> bool:
    return inspect.ismodule(value) or inspect.isclass(value) or inspect.isroutine(value)
