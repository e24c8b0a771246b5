#!/usr/bin/env python3
"""Command-line entry point for depcriteria.

Resolves the imports of one JavaScript/TypeScript file and prints the
criteria a build graph generator needs to declare them, as a JSON array.

Example:
    $ REPO=/my/repo depcriteria src/app.ts
    $ depcriteria /my/repo/src/app.ts --repo /my/repo --pretty
    $ depcriteria src/app.ts --include-source
"""

import argparse
import json
import logging
import sys

from . import __version__
from .colors import ColorFormatter, get_colors
from .config import REPO_ENV_VAR, Settings
from .errors import DepCriteriaError, MissingArgument
from .pipeline import DependencyCriteriaResolver

logger = logging.getLogger("depcriteria")


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Add depcriteria arguments to a parser."""
    parser.add_argument("file", nargs="?", help="Source file to analyze")
    parser.add_argument(
        "--repo",
        help=f"Repository root (default: ${REPO_ENV_VAR})",
    )
    parser.add_argument(
        "--tsconfig",
        help="Alias configuration file (default: <repo>/tsconfig.json)",
    )
    parser.add_argument(
        "--include-source",
        action="store_true",
        help="Also emit the criteria of the analyzed file itself",
    )
    parser.add_argument(
        "--pretty", action="store_true", help="Pretty-print JSON (default: compact)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution details")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")


def setup_logging(verbose: bool, no_color: bool) -> None:
    """Send log records to stderr; stdout is reserved for the JSON result."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(get_colors(no_color)))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def run(args: argparse.Namespace) -> int:
    """Run a resolution and print the result.

    Returns:
        Process exit status.
    """
    c = get_colors(args.no_color)

    try:
        if not args.file:
            raise MissingArgument("A file is required")

        settings = Settings.from_env(repo_root=args.repo, tsconfig_path=args.tsconfig)
        resolver = DependencyCriteriaResolver(settings)
        criteria = resolver.resolve(args.file, include_source=args.include_source)
    except DepCriteriaError as e:
        print(c.error(f"Error: {e}"), file=sys.stderr)
        return 1

    output = [item.to_dict() for item in criteria]
    indent = 2 if args.pretty else None
    print(json.dumps(output, indent=indent))
    return 0


def main():
    """Command-line interface for depcriteria.

    Usage:
        depcriteria FILE [--repo REPO] [--tsconfig PATH] [--include-source] [--pretty]
    """
    parser = argparse.ArgumentParser(
        prog="depcriteria",
        description="Resolve a JS/TS file's imports into build dependency criteria",
        epilog="Example: REPO=/my/repo depcriteria src/app.ts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    add_arguments(parser)

    args = parser.parse_args()
    setup_logging(args.verbose, args.no_color)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
