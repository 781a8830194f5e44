"""Pregister CLI — inspect derived keys, loaded trees, and run file batches.

Entry point registered as ``pregister`` in ``pyproject.toml``::

    [project.scripts]
    pregister = "pregister.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``pregister`` command."""
    parser = argparse.ArgumentParser(
        prog="pregister",
        description="Pregister — load files into a namespace tree by glob pattern.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log registry events to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- pregister key ----------------------------------------------------
    key_parser = subparsers.add_parser("key", help="Print the key a file registers under")
    key_parser.add_argument("file", help="File path as matched by a glob")
    key_parser.add_argument("namespace", help="Namespace prefix (e.g. service.db)")

    # -- pregister tree ---------------------------------------------------
    tree_parser = subparsers.add_parser("tree", help="Load a pattern and list the registered keys")
    tree_parser.add_argument("namespace", help="Namespace prefix (e.g. service)")
    tree_parser.add_argument("pattern", help="Glob pattern (e.g. 'service/**/*.py')")
    tree_parser.add_argument("--cwd", default=None, help="Directory the pattern is relative to")
    tree_parser.add_argument("--export", default=None, help="Module attribute to register")

    # -- pregister call ---------------------------------------------------
    call_parser = subparsers.add_parser("call", help="Load and run every file matching a pattern")
    call_parser.add_argument("pattern", help="Glob pattern (e.g. 'tasks/*.py')")
    call_parser.add_argument("args", nargs="*", help="String arguments passed to each entry point")
    call_parser.add_argument("--cwd", default=None, help="Directory the pattern is relative to")
    call_parser.add_argument(
        "--export",
        default=None,
        help="Module attribute to call (default: main)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if args.command == "key":
        from pregister.cli._tree import run_key

        run_key(args)
    elif args.command == "tree":
        from pregister.cli._tree import run_tree

        run_tree(args)
    elif args.command == "call":
        from pregister.cli._call import run_call

        run_call(args)
