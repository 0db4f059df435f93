"""Version information for kv_compare."""

__version__ = "1.2.0"
