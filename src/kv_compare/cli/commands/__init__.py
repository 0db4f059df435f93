"""CLI command handlers."""

from __future__ import annotations

__all__ = [
    "run_compare",
    "run_list",
]

from kv_compare.core.lazy import make_getattr

__getattr__ = make_getattr(
    __name__,
    {
        "run_compare": "kv_compare.cli.commands.compare",
        "run_list": "kv_compare.cli.commands.inventory",
    },
)
