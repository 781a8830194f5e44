"""Namespace tree — the mapping structure behind a registry.

A rooted tree of ``Branch`` nodes keyed by single namespace segments.
Every child is either another ``Branch`` or a ``Leaf`` holding a stored
value::

    tree = NamespaceTree()
    tree.insert("service.db", db_module)
    tree.insert("service.send-mail", mailer)

    tree.lookup("service.db")           # db_module
    tree.lookup("service.sendMail")     # mailer
    tree.lookup("service")              # Branch(['db', 'sendMail'])

Policies:
    - Inserting an existing leaf key raises ``DuplicateModule`` and keeps
      the original entry.  So does turning a leaf into a branch (or a
      branch into a leaf).
    - Lookup misses raise ``ResolveError`` unless a default is given.
    - Removing a missing key raises ``NotFound``.
    - ``reset()`` swaps in a fresh root.  Branches handed out earlier stay
      intact but are no longer reachable from the tree.

Thread safety:
    Every operation holds one re-entrant lock, so a singleton transform
    may register other values while its own insert is in progress.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pregister.errors import DuplicateModule, NotFound, ResolveError
from pregister.namespace import camelize, split_namespace

logger = logging.getLogger("pregister.registry")


class _Missing:
    """Sentinel type for "no default given"."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class Leaf:
    """A stored value and the file it was loaded from (if any)."""

    value: Any
    origin: str | None = None


class Branch(Mapping[str, Any]):
    """An intermediate node: a read-only mapping of segment to child.

    Indexing returns a child ``Branch`` or the unwrapped leaf value.
    Only ``NamespaceTree`` mutates branches.
    """

    __slots__ = ("_children",)

    def __init__(self) -> None:
        self._children: dict[str, Branch | Leaf] = {}

    def __getitem__(self, key: str) -> Any:
        node = self._children[key]
        if isinstance(node, Leaf):
            return node.value
        return node

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"Branch({sorted(self._children)!r})"

    def node(self, key: str) -> Branch | Leaf:
        """Return the raw child node (``Leaf`` rather than its value)."""
        return self._children[key]

    def leaves(self, prefix: str = "") -> Iterator[tuple[str, Leaf]]:
        """Yield ``(namespace, leaf)`` pairs for every leaf under this branch."""
        for key, node in self._children.items():
            namespace = f"{prefix}.{key}" if prefix else key
            if isinstance(node, Leaf):
                yield namespace, node
            else:
                yield from node.leaves(namespace)

    def to_dict(self) -> dict[str, Any]:
        """Plain nested ``dict`` snapshot of this branch."""
        return {
            key: node.to_dict() if isinstance(node, Branch) else node.value
            for key, node in self._children.items()
        }


class NamespaceTree:
    """The mutable tree of registered values."""

    __slots__ = ("_lock", "_root")

    def __init__(self) -> None:
        self._root = Branch()
        self._lock = threading.RLock()

    @property
    def root(self) -> Branch:
        return self._root

    def insert(
        self,
        namespace: str,
        value: Any,
        *,
        singleton: Callable[[Any], Any] | None = None,
        origin: str | None = None,
    ) -> Any:
        """Store ``value`` under ``namespace`` and return what was stored.

        Intermediate branches are created as needed.  The leaf segment is
        camel-cased (``my-module`` → ``myModule``).  When ``singleton`` is
        given, the stored value is ``singleton(value)``.

        Raises:
            EmptyNamespace: If ``namespace`` is empty.
            DuplicateModule: If the leaf key is taken, or a path segment
                is already a leaf.
        """
        path, key = split_namespace(namespace)

        with self._lock:
            # Nothing is written until the checks and the transform pass,
            # so a failed insert leaves no empty branches behind.
            self._check_free(namespace, path, key)
            stored = singleton(value) if singleton is not None else value
            # The transform may have registered values of its own.
            self._check_free(namespace, path, key)

            scope = self._root
            for segment in path:
                node = scope._children.get(segment)
                if node is None:
                    node = scope._children[segment] = Branch()
                scope = node
            scope._children[key] = Leaf(stored, origin)

        logger.debug("Registered %s (key %r, origin %s)", namespace, key, origin)
        return stored

    def lookup(self, namespace: str | None = None, default: Any = MISSING) -> Any:
        """Return the value (or branch) stored under ``namespace``.

        An empty or omitted namespace returns the root branch.

        Raises:
            ResolveError: If any segment is missing and no default is given.
        """
        if not namespace:
            return self._root

        with self._lock:
            node = self._find(namespace)

        if node is None:
            if default is MISSING:
                raise ResolveError(namespace)
            return default
        if isinstance(node, Leaf):
            return node.value
        return node

    def remove(self, namespace: str) -> None:
        """Delete the leaf or subtree stored under ``namespace``.

        Raises:
            EmptyNamespace: If ``namespace`` is empty.
            NotFound: If ``namespace`` is not in the tree.
        """
        path, key = split_namespace(namespace)

        with self._lock:
            parent = self._walk(path)
            if parent is None:
                raise NotFound(namespace)
            # Same key matching as lookup: raw segment first, then camel-cased.
            raw = namespace.rsplit(".", 1)[-1]
            if raw in parent._children:
                key = raw
            elif key not in parent._children:
                raise NotFound(namespace)
            del parent._children[key]

        logger.debug("Removed %s", namespace)

    def reset(self) -> None:
        """Replace the whole tree with an empty root."""
        with self._lock:
            self._root = Branch()
        logger.debug("Registry reset")

    def __contains__(self, namespace: object) -> bool:
        if not isinstance(namespace, str) or not namespace:
            return False
        with self._lock:
            return self._find(namespace) is not None

    # -- internals --

    def _find(self, namespace: str) -> Branch | Leaf | None:
        segments = namespace.split(".")
        if not all(segments):
            return None
        *path, key = segments
        parent = self._walk(path)
        if parent is None:
            return None
        # Stored keys are camel-cased; a raw key wins if it exists as-is.
        node = parent._children.get(key)
        if node is None:
            node = parent._children.get(camelize(key))
        return node

    def _check_free(self, namespace: str, path: list[str], key: str) -> None:
        """Raise ``DuplicateModule`` if ``namespace`` can not take a new leaf."""
        scope = self._root
        for segment in path:
            node = scope._children.get(segment)
            if node is None:
                return
            if isinstance(node, Leaf):
                raise DuplicateModule(namespace, f"segment {segment!r} is a registered module")
            scope = node
        if key in scope._children:
            raise DuplicateModule(namespace)

    def _walk(self, path: list[str]) -> Branch | None:
        scope = self._root
        for segment in path:
            node = scope._children.get(segment)
            if not isinstance(node, Branch):
                return None
            scope = node
        return scope
