from __future__ import annotations

from typing import Dict

from kv_compare.diff.models import ComparisonResult, ComparisonSummary, SecretDiff, VerdictType
from kv_compare.inventory.models import Inventory


class SecretComparator:
    """
    Compares two secret inventories and produces a ComparisonResult.

    Classification per name in the union of both inventories:
    - absent from target -> SOURCE_ONLY
    - absent from source -> TARGET_ONLY
    - equal value outcomes (two unresolved reads are equal) -> MATCH
    - anything else -> DIFFER

    The comparator does no I/O and keeps no state between calls.
    """

    def compare(self, source: Inventory, target: Inventory,
                source_label: str = "Source", target_label: str = "Target") -> ComparisonResult:
        diffs: Dict[str, SecretDiff] = {}
        for name in sorted(source.names | target.names):
            diffs[name] = self._classify(name, source, target)

        summary = ComparisonSummary(
            total=len(diffs),
            matching=sum(1 for d in diffs.values() if d.verdict is VerdictType.MATCH),
            differing=sum(1 for d in diffs.values() if d.verdict is VerdictType.DIFFER),
            source_only=sum(1 for d in diffs.values() if d.verdict is VerdictType.SOURCE_ONLY),
            target_only=sum(1 for d in diffs.values() if d.verdict is VerdictType.TARGET_ONLY),
            source_unresolved=source.unresolved_count,
            target_unresolved=target.unresolved_count,
        )

        return ComparisonResult(
            summary=summary,
            diffs=diffs,
            source_label=source_label,
            target_label=target_label,
            source_warning=source.warning_message,
            target_warning=target.warning_message,
        )

    @staticmethod
    def _classify(name: str, source: Inventory, target: Inventory) -> SecretDiff:
        source_value = source.get(name)
        target_value = target.get(name)

        if target_value is None:
            verdict = VerdictType.SOURCE_ONLY
        elif source_value is None:
            verdict = VerdictType.TARGET_ONLY
        elif source_value == target_value:
            verdict = VerdictType.MATCH
        else:
            verdict = VerdictType.DIFFER

        return SecretDiff(name, verdict, source_value, target_value)


def compare_inventories(source: Inventory, target: Inventory,
                        source_label: str = "Source", target_label: str = "Target") -> ComparisonResult:
    """Convenience wrapper around SecretComparator.compare."""
    return SecretComparator().compare(source, target, source_label, target_label)
