"""Module loading — file paths and import strings to values.

Python source files are executed with ``importlib`` and cached in
``sys.modules`` under a name derived from their absolute path, so loading
the same file twice returns the same module object.  ``.json`` files are
parsed into plain data.  Any failure is raised as ``LoadError`` with the
original exception chained.
"""

import hashlib
import importlib
import importlib.machinery
import importlib.util
import json
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from pregister.errors import LoadError

logger = logging.getLogger("pregister.loader")

# Regex matching dotted Python import strings (``pkg.module``)
_IMPORT_STRING_RE = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")

_PYTHON_SUFFIXES = frozenset(importlib.machinery.all_suffixes())


def load_file(path: Path) -> Any:
    """Load the value a file provides.

    Args:
        path: Absolute path, as returned by ``clean_file()``.

    Raises:
        LoadError: If the file type is unsupported or loading raised.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        return _load_json(path)
    if suffix in _PYTHON_SUFFIXES:
        return _load_python(path)
    raise LoadError(path, f"unsupported file type {suffix or path.name!r}")


def module_name_for(path: Path) -> str:
    """The ``sys.modules`` name a loaded file is cached under."""
    stem = re.sub(r"\W", "_", path.stem)
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    return f"_pregister_{stem}_{digest}"


def _load_python(path: Path) -> ModuleType:
    name = module_name_for(path)
    cached = sys.modules.get(name)
    if cached is not None:
        return cached

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise LoadError(path, "not a loadable module")

    module = importlib.util.module_from_spec(spec)
    # Registered before execution so dataclasses and pickling can find it
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(name, None)
        raise LoadError(path, f"{type(exc).__name__}: {exc}") from exc

    logger.debug("Loaded %s as %s", path, name)
    return module


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise LoadError(path, f"{type(exc).__name__}: {exc}") from exc


def is_importable(target: str) -> bool:
    """Whether ``target`` is an import string that resolves to a module.

    Glob patterns and file paths never match the import string syntax,
    so they are rejected without touching the import system.
    """
    if not _IMPORT_STRING_RE.match(target):
        return False
    try:
        return importlib.util.find_spec(target) is not None
    except (ImportError, ValueError):
        return False


def import_string(target: str) -> ModuleType:
    """Import a module by its dotted name.

    Raises:
        LoadError: If the import raised.
    """
    try:
        return importlib.import_module(target)
    except Exception as exc:
        raise LoadError(target, f"{type(exc).__name__}: {exc}") from exc


def pick_export(value: Any, export: str | None, origin: str | Path) -> Any:
    """Return ``value.<export>``, or ``value`` itself when no export is set.

    Raises:
        LoadError: If the attribute does not exist.
    """
    if export is None:
        return value
    try:
        return getattr(value, export)
    except AttributeError as exc:
        raise LoadError(origin, f"no attribute {export!r}") from exc
