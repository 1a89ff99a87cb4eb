"""Module loaders."""

from evalbridge.infrastructure.loaders.python import PythonModuleLoader

__all__ = ["PythonModuleLoader"]
