"""Resolve installable modules from locators.

``Registry.install`` hands string and path locators to ``load_modules``:

- a ``.py`` file path loads that file
- a directory path loads every ``*.py`` file directly inside it, sorted by
  name, except the package index ``__init__.py``
- anything else is imported as a dotted module name

Loaded modules are returned as-is; the Registry installs each one through
its ``install`` function.
"""

import importlib
import importlib.util
import os
import sys
from pathlib import Path
from types import ModuleType

from loguru import logger

from scopewire.constants import INDEX_MODULE
from scopewire.exceptions import ModuleLoadError


def _module_name_for(path: Path) -> str:
    # Unique per file so two "plugin.py" in different directories do not collide
    return f"scopewire_installed_{abs(hash(str(path.resolve())))}_{path.stem}"


def load_file(path: str | os.PathLike[str]) -> ModuleType:
    """Load a single Python source file as a module.

    Raises:
        ModuleLoadError: If the file does not exist or fails to import
    """
    path = Path(path)
    if not path.is_file():
        raise ModuleLoadError(str(path), "file not found")

    module_name = _module_name_for(path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(str(path), "not a loadable Python module")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[module_name]
        raise ModuleLoadError(str(path), f"{type(e).__name__}: {e}") from e

    logger.debug(f"Loaded module {path}")
    return module


def load_directory(path: str | os.PathLike[str]) -> list[ModuleType]:
    """Load every module directly inside ``path``, skipping the index module."""
    directory = Path(path)
    files = sorted(p for p in directory.glob("*.py") if p.is_file() and p.name != INDEX_MODULE)
    logger.debug(f"Loading {len(files)} modules from {directory}")
    return [load_file(p) for p in files]


def load_modules(locator: str | os.PathLike[str]) -> list[ModuleType]:
    """Resolve ``locator`` into a list of modules.

    Raises:
        ModuleLoadError: If nothing loadable is found
    """
    path = Path(locator)
    if path.is_dir():
        return load_directory(path)
    if path.is_file():
        return [load_file(path)]

    name = os.fspath(locator)
    if path.suffix == ".py" or os.sep in name:
        raise ModuleLoadError(name, "file not found")

    try:
        module = importlib.import_module(name)
    except ImportError as e:
        raise ModuleLoadError(name, str(e)) from e

    logger.debug(f"Imported module {name}")
    return [module]
