"""Registry — the public service object.

A ``Registry`` owns one namespace tree and exposes the operations callers
use to fill and query it::

    from pregister import Options, Registry

    registry = Registry(Options(cwd="app"))

    registry.require("service", "service/**/*.py")       # glob → load → insert
    registry.require("settings", "app.settings")         # import string
    registry.require("clock", SystemClock())             # ready-made value
    registry.register("db", engine, Options(singleton=Session))

    registry.resolve("service.db")
    registry.resolve("service.cache", default=None)
    registry.resolve()                                    # the whole tree

    registry.call("migrations/*.py", Options(args=[engine]))

Each instance is isolated; hold a reference to the registry you fill
instead of relying on a module-level global.
"""

import logging
import os
from collections.abc import Callable
from typing import Any, TypeAlias

from pregister.batch import BatchResult, acall_batch, aload_batch, call_batch, load_batch
from pregister.config import Options
from pregister.errors import EmptyNamespace
from pregister.loader import import_string, is_importable, pick_export
from pregister.namespace import file2namespace
from pregister.tree import MISSING, Branch, NamespaceTree

logger = logging.getLogger("pregister.registry")

Completion: TypeAlias = Callable[[BatchResult], Any]


class Registry:
    """A namespace tree of loaded modules and registered values.

    ``options`` are defaults merged under the options of every call.
    """

    __slots__ = ("_tree", "options")

    file2namespace = staticmethod(file2namespace)

    def __init__(self, options: Options | None = None) -> None:
        self.options = options or Options()
        self._tree = NamespaceTree()

    @property
    def tree(self) -> Branch:
        """The current root branch."""
        return self._tree.root

    # -- registration --

    def require(
        self,
        namespace: str,
        target: Any,
        options: Options | None = None,
        done: Completion | None = None,
    ) -> BatchResult | None:
        """Load ``target`` and register it under ``namespace``.

        ``target`` is one of:

        - a ready-made value (anything but ``str``): registered as-is;
        - an importable module name (``"app.settings"``): imported and
          registered;
        - a glob pattern (``"service/**/*.py"``): every matching file is
          loaded and registered under the key ``file2namespace()``
          derives for it.

        The first two register synchronously and return ``None``; errors
        propagate.  A glob returns the ``BatchResult`` (also passed to
        ``done``); per-file errors are logged and recorded, never raised.

        Raises:
            EmptyNamespace: If ``namespace`` is empty.
            DuplicateModule: If a direct registration collides.
            LoadError: If an import string fails to import.
        """
        if not namespace:
            raise EmptyNamespace()
        opts = self.options.merge(options)

        if not isinstance(target, str | os.PathLike):
            self._insert(namespace, target, opts)
            return None

        pattern = os.fspath(target)
        if is_importable(pattern):
            module = import_string(pattern)
            self._insert(namespace, pick_export(module, opts.export, pattern), opts, origin=pattern)
            return None

        result = load_batch(self._tree, namespace, pattern, opts)
        _report(result, "require", pattern)
        if done is not None:
            done(result)
        return result

    async def arequire(
        self,
        namespace: str,
        target: Any,
        options: Options | None = None,
        done: Completion | None = None,
    ) -> BatchResult | None:
        """Async ``require``: glob matches are loaded as concurrent tasks."""
        if not namespace:
            raise EmptyNamespace()
        opts = self.options.merge(options)

        if not isinstance(target, str | os.PathLike) or is_importable(os.fspath(target)):
            return self.require(namespace, target, options, done)

        pattern = os.fspath(target)
        result = await aload_batch(self._tree, namespace, pattern, opts)
        _report(result, "require", pattern)
        if done is not None:
            done(result)
        return result

    def register(self, namespace: str, value: Any, options: Options | None = None) -> Any:
        """Insert ``value`` under ``namespace`` and return what was stored.

        With ``Options(singleton=fn)`` the stored value is ``fn(value)``.

        Raises:
            EmptyNamespace: If ``namespace`` is empty.
            DuplicateModule: If the key is already taken.
        """
        return self._insert(namespace, value, self.options.merge(options))

    def _insert(self, namespace: str, value: Any, options: Options, origin: str | None = None) -> Any:
        return self._tree.insert(namespace, value, singleton=options.singleton, origin=origin)

    # -- lookup --

    def resolve(self, namespace: str | None = None, default: Any = MISSING) -> Any:
        """Return what is stored under ``namespace``.

        An omitted namespace returns the whole tree; an intermediate
        namespace returns its ``Branch``.

        Raises:
            ResolveError: If nothing is stored there and no default is given.
        """
        return self._tree.lookup(namespace, default)

    def remove(self, namespace: str) -> None:
        """Delete the value or subtree under ``namespace``.

        Raises:
            NotFound: If ``namespace`` is not registered.
        """
        self._tree.remove(namespace)

    def reset(self) -> None:
        """Drop everything.  Branches returned earlier keep their contents."""
        self._tree.reset()

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._tree

    # -- invocation --

    def call(
        self,
        pattern: str,
        options: Options | None = None,
        done: Completion | None = None,
    ) -> BatchResult:
        """Load every file matching ``pattern`` and run it; the tree is untouched."""
        result = call_batch(pattern, self.options.merge(options))
        _report(result, "call", pattern)
        if done is not None:
            done(result)
        return result

    async def acall(
        self,
        pattern: str,
        options: Options | None = None,
        done: Completion | None = None,
    ) -> BatchResult:
        """Async ``call``: files run as concurrent tasks, coroutines are awaited."""
        result = await acall_batch(pattern, self.options.merge(options))
        _report(result, "call", pattern)
        if done is not None:
            done(result)
        return result


def _report(result: BatchResult, operation: str, pattern: str) -> None:
    if result:
        logger.debug("%s %r: %d file(s) done", operation, pattern, len(result))
    else:
        logger.warning(
            "%s %r: %d of %d file(s) failed",
            operation,
            pattern,
            len(result.failures),
            len(result),
        )
