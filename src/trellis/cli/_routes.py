"""``trellis routes`` — list the endpoints a tree registers.

Applies the tree to a fresh ``Engine`` (or uses the given engine) and
prints METHOD, PATH and the handler chain of every endpoint.
"""

import argparse
import sys

from trellis.cli._resolve import load_target
from trellis.engine import Engine
from trellis.errors import TrellisError


def run_routes(args: argparse.Namespace) -> None:
    target = load_target(args.target)

    if isinstance(target, Engine):
        engine = target
    else:
        engine = Engine()
        try:
            target.apply(engine)
        except TrellisError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc

    endpoints = sorted(engine.routes, key=lambda e: (e.path, e.method))
    if not endpoints:
        print("No routes registered.")
        return

    rows = [(e.method, e.path, " -> ".join(e.handler_names)) for e in endpoints]
    max_method = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLERS"))
    sep_len = max_method + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
