"""``trellis check`` — resolve a route tree and print its outline.

Exits 0 when the whole tree resolves, 1 with the positional error
message otherwise. Nothing is registered anywhere.
"""

import argparse
import sys

from trellis.cli._resolve import load_target
from trellis.engine import Engine
from trellis.tree.definitions import RouterDefinition, describe_tree
from trellis.tree.errors import RouteTreeError


def run_check(args: argparse.Namespace) -> None:
    target = load_target(args.target)

    if isinstance(target, Engine):
        print(f"{args.target} is an Engine; check expects a Route or Router.", file=sys.stderr)
        raise SystemExit(1)

    try:
        definition = target if not hasattr(target, "resolve") else target.resolve()
    except RouteTreeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(describe_tree(definition))
    if isinstance(definition, RouterDefinition):
        nodes = list(definition.walk())
        routers = sum(1 for _, node in nodes if isinstance(node, RouterDefinition))
        print(f"\nOK: {len(nodes) - routers} routes in {routers} routers")
    else:
        print("\nOK: 1 route")
