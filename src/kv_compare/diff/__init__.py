"""Diff module - secret inventory comparison."""

from kv_compare.diff.comparator import SecretComparator, compare_inventories
from kv_compare.diff.formatting import format_value
from kv_compare.diff.models import ComparisonResult, ComparisonSummary, SecretDiff, VerdictType

__all__ = [
    "ComparisonResult",
    "ComparisonSummary",
    "SecretComparator",
    "SecretDiff",
    "VerdictType",
    "compare_inventories",
    "format_value",
]
