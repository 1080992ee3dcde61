"""``trellis run`` — serve an engine or a route tree.

A ``Router`` (or definition) is mounted onto a fresh ``Engine`` first;
resolve or apply failures abort startup with status 1.
"""

import argparse
import logging
import sys

from trellis.cli._resolve import load_target
from trellis.engine import Engine
from trellis.errors import TrellisError
from trellis.server.serve import run_server as serve


def run_server(args: argparse.Namespace) -> None:
    target = load_target(args.target)

    if isinstance(target, Engine):
        engine = target
        app_path: str | None = args.target
    else:
        engine = Engine()
        app_path = None
        try:
            target.apply(engine)
        except TrellisError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc

    log_level = args.log_level or engine.config.log_level
    logging.getLogger("trellis").setLevel(log_level.upper())

    try:
        engine.freeze()
        serve(
            engine,
            args.host or engine.config.host,
            args.port or engine.config.port,
            workers=engine.config.workers,
            reload=args.reload or engine.config.debug,
            app_path=app_path,
            log_level=log_level,
        )
    except TrellisError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
