"""Path normalization for loading and diagnostics.

Normalized paths are only ever used to load files and to report errors.
Namespace keys are derived from the identifier as matched by the glob,
never from the normalized path.
"""

import os
from pathlib import Path


def clean_file(file: str | os.PathLike[str], cwd: str | os.PathLike[str] | None = None) -> Path:
    """Turn a file identifier into an absolute, normalized path.

    Relative identifiers are joined to ``cwd`` (the process working
    directory when omitted).  Pure string manipulation: symlinks are not
    followed and the file does not need to exist.  Idempotent —
    ``clean_file(clean_file(f, cwd), cwd) == clean_file(f, cwd)``.
    """
    raw = os.fspath(file)
    if not os.path.isabs(raw):
        base = os.fspath(cwd) if cwd is not None else os.getcwd()
        raw = os.path.join(os.path.abspath(base), raw)
    return Path(os.path.normpath(raw))
