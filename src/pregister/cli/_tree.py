"""``pregister key`` and ``pregister tree`` — show how files map to keys.

``key`` prints the key a single file would be registered under.
``tree`` loads a pattern into a fresh registry and prints every
registered key with the file it came from.  Exits with code 1 if any
file failed to load.
"""

import argparse
import sys

from pregister.config import Options
from pregister.errors import EmptyNamespace
from pregister.namespace import file2namespace
from pregister.registry import Registry


def run_key(args: argparse.Namespace) -> None:
    """Print ``file2namespace(args.file, args.namespace)``."""
    try:
        print(file2namespace(args.file, args.namespace))
    except EmptyNamespace as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def run_tree(args: argparse.Namespace) -> None:
    """Load ``args.pattern`` under ``args.namespace`` and print the result table."""
    registry = Registry(Options(cwd=args.cwd, export=args.export))
    try:
        result = registry.require(args.namespace, args.pattern)
    except EmptyNamespace as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows = [(namespace, leaf.origin or repr(leaf.value)) for namespace, leaf in registry.tree.leaves()]
    if rows:
        width = max(9, *(len(row[0]) for row in rows))  # "NAMESPACE" header
        fmt = f"{{:<{width}}}  {{}}"
        print(fmt.format("NAMESPACE", "ORIGIN"))
        print("-" * min(width + 2 + max(len(row[1]) for row in rows), 80))
        for namespace, origin in rows:
            print(fmt.format(namespace, origin))
    else:
        print("Nothing registered.")

    if result is not None and not result:
        for outcome in result.failures:
            print(f"Error: {outcome.error}", file=sys.stderr)
        raise SystemExit(1)
