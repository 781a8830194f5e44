"""``pregister call`` — run every file matching a pattern.

Each file's entry point (``main`` unless ``--export`` names another
attribute) is called with the positional string arguments.  Exits with
code 1 if any file failed to load or raised.
"""

import argparse
import sys

from pregister.config import Options
from pregister.registry import Registry


def run_call(args: argparse.Namespace) -> None:
    """Invoke the files matching ``args.pattern``."""
    registry = Registry(Options(cwd=args.cwd))
    result = registry.call(args.pattern, Options(args=tuple(args.args), export=args.export))

    print(f"{len(result)} file(s), {len(result.failures)} failed")
    if not result:
        for outcome in result.failures:
            print(f"Error: {outcome.error}", file=sys.stderr)
        raise SystemExit(1)
