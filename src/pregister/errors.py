"""Pregister exception hierarchy.

Shared across the tree, the loader, the batch runners and the registry
so every module raises and catches the same types.

Programmer errors (``EmptyNamespace``, ``ResolveError``, ``NotFound``,
``DuplicateModule`` on a direct registration) propagate to the caller.
``LoadError`` and ``InvocationError`` raised while processing a batch are
logged and recorded in the batch result instead.
"""

from collections.abc import Sequence
from pathlib import Path


class PregisterError(Exception):
    """Base for all pregister-specific errors."""


class EmptyNamespace(PregisterError, ValueError):  # noqa: N818 — mirrors the registry vocabulary
    """Raised when a namespace (or one of its segments) is empty."""

    def __init__(self, namespace: str | None = None) -> None:
        self.namespace = namespace
        if namespace:
            super().__init__(f"Namespace contains an empty segment: {namespace!r}")
        else:
            super().__init__("Namespace can not be empty")


class DuplicateModule(PregisterError):  # noqa: N818 — mirrors the registry vocabulary
    """Raised when a leaf key is already taken in the tree.

    Also raised when a namespace would turn an existing leaf into a
    branch (or a branch into a leaf).  The existing entry is never
    touched.
    """

    def __init__(self, namespace: str, detail: str = "") -> None:
        self.namespace = namespace
        self.detail = detail or "module already registered"
        super().__init__(f"{namespace}: {self.detail}")


class ResolveError(PregisterError, LookupError):
    """Raised when a namespace lookup misses and no default was given."""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        super().__init__(f"Unable to resolve namespace: {namespace!r}")


class NotFound(ResolveError):  # noqa: N818 — conventional name
    """Raised by ``remove()`` when the namespace is not in the tree."""


class LoadError(PregisterError):
    """Loading a matched file (or importable module) failed.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, file: str | Path, reason: str = "") -> None:
        self.file = str(file)
        self.reason = reason
        message = f"Error loading {self.file}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvocationError(PregisterError):
    """The invoke hook, the args wrapper or the loaded callable failed."""

    def __init__(self, file: str | Path, reason: str = "") -> None:
        self.file = str(file)
        self.reason = reason
        message = f"Error invoking {self.file}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BatchError(PregisterError):
    """One or more files in a batch failed.

    Raised by ``BatchResult.raise_for_errors()``; ``errors`` keeps every
    per-file error in processing order.
    """

    def __init__(self, errors: Sequence[Exception]) -> None:
        self.errors = tuple(errors)
        count = len(self.errors)
        noun = "file" if count == 1 else "files"
        first = f" (first: {self.errors[0]})" if self.errors else ""
        super().__init__(f"{count} {noun} failed{first}")
