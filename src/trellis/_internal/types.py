"""Shared type aliases used across trellis modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Request handler — called with the per-request Context, sync or async
Handler: TypeAlias = Callable[..., Any]

# Ordered handler chain, ancestors first
HandlerChain: TypeAlias = tuple[Handler, ...]
