"""Registration options.

Options is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.  A ``Registry`` holds default options that are
merged with the options passed to each call.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

# Signature of the per-file completion signal handed to an ``args`` wrapper.
Done: TypeAlias = Callable[..., None]

# ``args`` is either positional arguments or a wrapper ``(value, done)``.
Args: TypeAlias = Sequence[Any] | Callable[[Any, Done], Any]


@dataclass(frozen=True, slots=True)
class Options:
    """Options recognised by every registry operation.

    All fields default to "not set".  Override what you need::

        options = Options(cwd="app", singleton=lambda mod: mod.Service())
    """

    # Base directory for globbing and for resolving relative file names.
    # None means the process working directory at call time.
    cwd: str | Path | None = None

    # Applied once to the loaded value; the result is what gets stored.
    singleton: Callable[[Any], Any] | None = None

    # Invocation path only: positional arguments, or a wrapper (value, done).
    args: Args | None = None

    # Invocation path only: replaces calling the loaded value directly.
    invoke: Callable[[Any], Any] | None = None

    # Attribute to take from a loaded module instead of the module itself.
    export: str | None = None

    def replace(self, **changes: Any) -> Options:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def merge(self, other: Options | None) -> Options:
        """Overlay the fields ``other`` sets on top of these options."""
        if other is None:
            return self
        changes = {
            field.name: getattr(other, field.name)
            for field in dataclasses.fields(other)
            if getattr(other, field.name) is not None
        }
        return dataclasses.replace(self, **changes) if changes else self
