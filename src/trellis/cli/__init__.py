"""Trellis CLI — validate, inspect and serve route trees.

Entry point registered as ``trellis`` in ``pyproject.toml``::

    [project.scripts]
    trellis = "trellis.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``trellis`` command."""
    parser = argparse.ArgumentParser(
        prog="trellis",
        description="Trellis — declarative route trees for HTTP engines.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=("debug", "info", "warning", "error"),
        help="Logging level (default: warning; run uses the engine's config.log_level)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- trellis check ----------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Resolve a route tree and print it")
    check_parser.add_argument("target", help="Import string (e.g. myapp:root)")

    # -- trellis routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the routes a tree registers")
    routes_parser.add_argument("target", help="Import string (e.g. myapp:root)")

    # -- trellis run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an engine or route tree")
    run_parser.add_argument("target", help="Import string (e.g. myapp:engine)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument("--reload", action="store_true", help="Restart on file changes")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=(args.log_level or "warning").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        from trellis.cli._check import run_check

        run_check(args)
    elif args.command == "routes":
        from trellis.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from trellis.cli._run import run_server

        run_server(args)
