"""Namespace key derivation — file identifiers to dotted registry keys.

Pure string processing, no filesystem access.  ``file2namespace`` turns
a file matched by a glob into the key it is registered under::

    file2namespace("service/db/index.py", "service")       # "service.db"
    file2namespace("root/service/db.py", "service.db")     # "service.db"
    file2namespace("handlers/send-mail.py", "jobs")        # "jobs.handlers.send-mail"

The leaf segment is camel-cased later, on insert (``camelize``), so the
last example is stored as ``jobs.handlers.sendMail``.
"""

import importlib.machinery
import os
import re

from pregister.errors import EmptyNamespace

# Tail segments naming a directory's default module
DEFAULT_MODULE_NAMES = frozenset({"index", "__init__"})

# Suffixes the loader knows how to turn into a value
MODULE_SUFFIXES = frozenset({*importlib.machinery.all_suffixes(), ".json"})

_SEPARATORS = tuple(sep for sep in {"/", os.sep, os.altsep} if sep)

_EXTENSION_RE = re.compile(r"^\.\w+$")
_DOTS_RE = re.compile(r"\.{2,}")
_HYPHEN_RE = re.compile(r"-([a-z])")


def camelize(segment: str) -> str:
    """Rewrite a hyphenated segment as a camel-case key.

    Only a hyphen followed by a lowercase letter is folded:
    ``"my-module"`` becomes ``"myModule"``, ``"my-Module"`` and
    ``"my_module"`` are left alone.
    """
    return _HYPHEN_RE.sub(lambda match: match.group(1).upper(), segment)


def split_namespace(namespace: str | None) -> tuple[list[str], str]:
    """Split a namespace into its path segments and its normalized leaf key.

    Raises:
        EmptyNamespace: If the namespace is empty or has an empty segment.
    """
    if not namespace:
        raise EmptyNamespace()
    segments = namespace.split(".")
    if not all(segments):
        raise EmptyNamespace(namespace)
    *path, leaf = segments
    return path, camelize(leaf)


def file2namespace(file: str | os.PathLike[str], namespace: str) -> str:
    """Derive the registry key for ``file`` under ``namespace``.

    Steps, in order:

    1. Path separators become dots.
    2. The file extension is cut.
    3. A trailing ``index`` (or ``__init__``) segment is dropped.
    4. If the namespace occurs in the path (case-insensitive, last
       occurrence wins), everything up to and including it is replaced
       by the namespace as given.
    5. Otherwise the namespace is prepended; leading path segments that
       repeat the namespace's trailing segments are folded into it.
    6. Stray dots are trimmed and runs of dots collapsed.

    A separator-free string that already starts with the namespace is a
    derived key; its last segment is only cut when it is a loadable
    module suffix, so deriving from a derived key returns it unchanged.

    Raises:
        EmptyNamespace: If ``namespace`` is empty.
    """
    if not namespace:
        raise EmptyNamespace()

    raw = os.fspath(file)
    dotted = raw
    for sep in _SEPARATORS:
        dotted = dotted.replace(sep, ".")

    if _has_extension(raw, namespace):
        dotted = dotted.rsplit(".", 1)[0]

    segments = dotted.split(".")
    if segments[-1] in DEFAULT_MODULE_NAMES:
        segments.pop()
    dotted = ".".join(segments)

    # Greedy prefix: the match ending furthest right, overlaps included
    match = re.search(r"(?s).*" + re.escape(namespace), dotted, re.IGNORECASE)
    if match:
        dotted = namespace + dotted[match.end() :]
    else:
        dotted = _prepend(namespace, dotted)

    return _DOTS_RE.sub(".", dotted).strip(".")


def _has_extension(raw: str, namespace: str) -> bool:
    """Whether the last dot-segment of ``raw`` is a file extension."""
    basename = raw
    for sep in _SEPARATORS:
        basename = basename.rsplit(sep, 1)[-1]
    suffix = os.path.splitext(basename)[1]
    if not _EXTENSION_RE.match(suffix):
        return False

    is_key = basename == raw and (raw == namespace or raw.startswith(namespace + "."))
    if is_key:
        return suffix.lower() in MODULE_SUFFIXES
    return True


def _prepend(namespace: str, dotted: str) -> str:
    """Prefix ``dotted`` with ``namespace`` without repeating shared segments."""
    head = namespace.split(".")
    tail = [segment for segment in dotted.split(".") if segment]

    overlap = 0
    for size in range(min(len(head), len(tail)), 0, -1):
        if [s.lower() for s in head[-size:]] == [s.lower() for s in tail[:size]]:
            overlap = size
            break

    return ".".join([*head, *tail[overlap:]])
