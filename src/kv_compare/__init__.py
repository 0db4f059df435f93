"""
kv_compare - Azure Key Vault secret inventory and comparison

Lists the secrets of a vault and compares two vaults (for example dev and
stage), reporting secrets that match, differ, or exist on one side only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["__version__", "main"]

if TYPE_CHECKING:
    from kv_compare.cli.main import main
    from kv_compare.core.version import __version__


def __getattr__(name: str) -> Any:
    if name == "__version__":
        from kv_compare.core.version import __version__

        return __version__
    if name == "main":
        from kv_compare.cli.main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
