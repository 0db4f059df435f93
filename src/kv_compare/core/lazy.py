"""Lazy attribute resolution for package ``__init__`` modules.

Keeps ``import kv_compare`` cheap: the Azure SDK and tqdm are only imported
when a name that needs them is first accessed.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping


def make_getattr(package: str, exports: Mapping[str, str]) -> Callable[[str], object]:
    """
    Build a module-level ``__getattr__`` that imports exports on first access.

    Args:
        package: Name of the package installing the hook (for error messages).
        exports: Mapping of exported name -> dotted module path that defines it.
    """
    targets = dict(exports)

    def __getattr__(name: str) -> object:
        module_path = targets.get(name)
        if module_path is None:
            raise AttributeError(f"module {package!r} has no attribute {name!r}")
        return getattr(importlib.import_module(module_path), name)

    return __getattr__
