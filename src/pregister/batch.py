"""Batch loading and invocation over glob matches.

Both runners process every matched file independently and never abort:
a file that fails to load, register or run is logged and recorded, and
the batch moves on.  The outcome of each file ends up in a
``BatchResult``::

    result = load_batch(tree, "service", "service/**/*.py")
    if not result:
        for outcome in result.failures:
            print(outcome.file, outcome.error)

The sync runners process files in sorted order.  The async runners
schedule one task per file in an ``anyio`` task group, so files finish in
no particular order; the result still lists them in match order.
"""

import glob
import inspect
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio

from pregister._internal.invoke import invoke
from pregister.config import Options
from pregister.errors import BatchError, InvocationError, LoadError, PregisterError
from pregister.loader import load_file, pick_export
from pregister.namespace import file2namespace
from pregister.paths import clean_file
from pregister.tree import NamespaceTree

logger = logging.getLogger("pregister.batch")

# Attribute called when the loaded value itself is not callable (a module)
ENTRY_POINT = "main"


@dataclass(frozen=True, slots=True)
class Outcome:
    """What happened to one matched file.

    ``namespace`` is the derived key (``None`` for invocations).
    ``error`` is ``None`` on success.
    """

    file: str
    namespace: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Per-file outcomes of a batch, in match order.

    The result is falsy when any file failed::

        result = registry.require("jobs", "jobs/*.py")
        if not result:
            log.warning("%d jobs failed", len(result.failures))
    """

    outcomes: tuple[Outcome, ...] = ()

    @property
    def ok(self) -> bool:
        """True if every file succeeded (also for an empty batch)."""
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failures(self) -> tuple[Outcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)

    @property
    def errors(self) -> tuple[Exception, ...]:
        return tuple(outcome.error for outcome in self.outcomes if outcome.error is not None)

    @property
    def first_error(self) -> Exception | None:
        errors = self.errors
        return errors[0] if errors else None

    @property
    def namespaces(self) -> tuple[str, ...]:
        """Keys registered by this batch."""
        return tuple(
            outcome.namespace
            for outcome in self.outcomes
            if outcome.ok and outcome.namespace is not None
        )

    def raise_for_errors(self) -> None:
        """Raise ``BatchError`` carrying every per-file error, if any."""
        errors = self.errors
        if errors:
            raise BatchError(errors)

    def __bool__(self) -> bool:
        return self.ok

    def __len__(self) -> int:
        return len(self.outcomes)


def match_files(pattern: str, cwd: str | os.PathLike[str] | None = None) -> list[str]:
    """Files matching ``pattern``, relative to ``cwd`` unless the pattern is absolute.

    ``**`` matches across directories.  Directories and hidden files are
    skipped.  The list is sorted.
    """
    root = os.fspath(cwd) if cwd is not None else None
    return sorted(
        match
        for match in glob.iglob(pattern, root_dir=root, recursive=True)
        if not os.path.isdir(os.path.join(root or os.curdir, match))
    )


# -- loading ------------------------------------------------------------------


def load_batch(
    tree: NamespaceTree,
    namespace: str,
    pattern: str,
    options: Options | None = None,
) -> BatchResult:
    """Load every file matching ``pattern`` and insert it into ``tree``."""
    options = options or Options()
    files = match_files(pattern, options.cwd)
    logger.debug("REQUIRE %s: %d file(s) for %r", namespace, len(files), pattern)
    return BatchResult(tuple(_register_file(tree, namespace, file, options) for file in files))


async def aload_batch(
    tree: NamespaceTree,
    namespace: str,
    pattern: str,
    options: Options | None = None,
) -> BatchResult:
    """Async ``load_batch``: one task per file in a task group."""
    options = options or Options()
    files = match_files(pattern, options.cwd)
    logger.debug("REQUIRE %s: %d file(s) for %r", namespace, len(files), pattern)
    outcomes: list[Outcome | None] = [None] * len(files)

    async def _run(index: int, file: str) -> None:
        outcomes[index] = _register_file(tree, namespace, file, options)
        await anyio.sleep(0)

    async with anyio.create_task_group() as tg:
        for index, file in enumerate(files):
            tg.start_soon(_run, index, file)

    return BatchResult(tuple(outcome for outcome in outcomes if outcome is not None))


def _register_file(tree: NamespaceTree, namespace: str, file: str, options: Options) -> Outcome:
    key = file2namespace(file, namespace)
    path = clean_file(file, options.cwd)

    try:
        value = pick_export(load_file(path), options.export, path)
        tree.insert(key, value, singleton=options.singleton, origin=str(path))
    except PregisterError as exc:
        logger.error("Error registering %s from %s: %s", key, path, exc, exc_info=exc)
        return Outcome(file, key, exc)
    except Exception as exc:
        # A raising singleton transform
        error = LoadError(path, f"{type(exc).__name__}: {exc}")
        error.__cause__ = exc
        logger.error("Error registering %s from %s: %s", key, path, error, exc_info=exc)
        return Outcome(file, key, error)

    return Outcome(file, key)


# -- invocation ---------------------------------------------------------------


class _Signal:
    """Per-file completion signal handed to an ``args`` wrapper.

    Call it once when the file's work is done, optionally with the
    exception that ended it.  Later calls are ignored.
    """

    __slots__ = ("called", "error", "on_done")

    def __init__(self, on_done: Callable[[], None] | None = None) -> None:
        self.called = False
        self.error: Exception | None = None
        self.on_done = on_done

    def __call__(self, error: Exception | None = None) -> None:
        if self.called:
            return
        self.called = True
        self.error = error
        if self.on_done is not None:
            self.on_done()


def call_batch(pattern: str, options: Options | None = None) -> BatchResult:
    """Load every file matching ``pattern`` and run it.

    Per file, in order of preference: ``options.invoke(value)``, the
    ``options.args`` wrapper ``args(value, done)``, or calling the value
    (its ``main`` attribute for modules) with ``options.args``.
    """
    options = options or Options()
    files = match_files(pattern, options.cwd)
    logger.debug("CALL %d file(s) for %r", len(files), pattern)
    return BatchResult(tuple(_call_file(file, options) for file in files))


async def acall_batch(pattern: str, options: Options | None = None) -> BatchResult:
    """Async ``call_batch``.

    Coroutine results are awaited.  With an ``args`` wrapper, a file only
    completes once its ``done`` signal is called.
    """
    options = options or Options()
    files = match_files(pattern, options.cwd)
    logger.debug("CALL %d file(s) for %r", len(files), pattern)
    outcomes: list[Outcome | None] = [None] * len(files)

    async def _run(index: int, file: str) -> None:
        outcomes[index] = await _acall_file(file, options)

    async with anyio.create_task_group() as tg:
        for index, file in enumerate(files):
            tg.start_soon(_run, index, file)

    return BatchResult(tuple(outcome for outcome in outcomes if outcome is not None))


def _call_file(file: str, options: Options) -> Outcome:
    path = clean_file(file, options.cwd)
    logger.debug("CALL - %s", path)

    try:
        value = pick_export(load_file(path), options.export, path)
    except LoadError as exc:
        logger.error("Error on load: %s", exc, exc_info=exc)
        return Outcome(file, error=exc)

    try:
        if options.invoke is not None:
            _not_awaitable(options.invoke(value))
        elif callable(options.args):
            done = _Signal()
            _not_awaitable(options.args(value, done))
            if done.error is not None:
                raise done.error
        else:
            entry = _entry_point(value)
            if entry is None:
                logger.debug("Nothing to call in %s", path)
            else:
                _not_awaitable(entry(*(options.args or ())))
    except Exception as exc:
        return _invocation_failed(file, path, exc)

    return Outcome(file)


def _not_awaitable(result: Any) -> None:
    """Reject a coroutine returned to the sync invoker; it would never run."""
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise TypeError("got an awaitable, use acall for async entry points")


async def _acall_file(file: str, options: Options) -> Outcome:
    path = clean_file(file, options.cwd)
    logger.debug("CALL - %s", path)

    try:
        value = pick_export(load_file(path), options.export, path)
    except LoadError as exc:
        logger.error("Error on load: %s", exc, exc_info=exc)
        return Outcome(file, error=exc)

    try:
        if options.invoke is not None:
            await invoke(options.invoke, value)
        elif callable(options.args):
            finished = anyio.Event()
            done = _Signal(finished.set)
            await invoke(options.args, value, done)
            await finished.wait()
            if done.error is not None:
                raise done.error
        else:
            entry = _entry_point(value)
            if entry is None:
                logger.debug("Nothing to call in %s", path)
            else:
                await invoke(entry, *(options.args or ()))
    except Exception as exc:
        return _invocation_failed(file, path, exc)

    return Outcome(file)


def _entry_point(value: Any) -> Callable[..., Any] | None:
    if callable(value):
        return value
    entry = getattr(value, ENTRY_POINT, None)
    return entry if callable(entry) else None


def _invocation_failed(file: str, path: Path, exc: Exception) -> Outcome:
    error = InvocationError(path, f"{type(exc).__name__}: {exc}")
    error.__cause__ = exc
    logger.error("Error on invoke: %s", error, exc_info=exc)
    return Outcome(file, error=error)
