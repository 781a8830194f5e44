"""Pregister — a namespace registry for modules discovered by glob pattern.

Files are loaded and stored in a tree addressed by dotted keys, so code
can look modules up by a logical path instead of a file path.

Basic usage::

    from pregister import Registry

    registry = Registry()
    registry.require("service", "service/**/*.py")

    db = registry.resolve("service.db")

Running files instead of storing them::

    registry.call("migrations/*.py", Options(args=[engine]))
"""

__version__ = "0.1.0-dev"
__all__ = [
    "MISSING",
    "BatchError",
    "BatchResult",
    "Branch",
    "DuplicateModule",
    "EmptyNamespace",
    "InvocationError",
    "LoadError",
    "NamespaceTree",
    "NotFound",
    "Options",
    "Outcome",
    "PregisterError",
    "Registry",
    "ResolveError",
    "camelize",
    "clean_file",
    "file2namespace",
]

# name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "Registry": "pregister.registry",
    "Options": "pregister.config",
    "BatchResult": "pregister.batch",
    "Outcome": "pregister.batch",
    "Branch": "pregister.tree",
    "MISSING": "pregister.tree",
    "NamespaceTree": "pregister.tree",
    "camelize": "pregister.namespace",
    "file2namespace": "pregister.namespace",
    "clean_file": "pregister.paths",
    "BatchError": "pregister.errors",
    "DuplicateModule": "pregister.errors",
    "EmptyNamespace": "pregister.errors",
    "InvocationError": "pregister.errors",
    "LoadError": "pregister.errors",
    "NotFound": "pregister.errors",
    "PregisterError": "pregister.errors",
    "ResolveError": "pregister.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pregister`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
