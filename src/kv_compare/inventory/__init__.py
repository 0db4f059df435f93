"""Inventory module - per-store snapshot of secret names and value outcomes."""

from kv_compare.inventory.models import Inventory, SecretRecord, SecretValue, ValueState

__all__ = [
    "Inventory",
    "SecretRecord",
    "SecretValue",
    "ValueState",
]
