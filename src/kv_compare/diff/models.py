from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from kv_compare.core.version import __version__
from kv_compare.inventory.models import SecretValue


class VerdictType(Enum):
    """Classification of one secret name across two inventories."""
    MATCH = "match"
    DIFFER = "differ"
    SOURCE_ONLY = "source_only"
    TARGET_ONLY = "target_only"


@dataclass(frozen=True)
class SecretDiff:
    """Verdict for a single secret name.

    ``source_value``/``target_value`` are None when the name does not exist on
    that side. An unresolved read is a SecretValue, never None.
    """
    name: str
    verdict: VerdictType
    source_value: Optional[SecretValue] = None
    target_value: Optional[SecretValue] = None

    @property
    def is_difference(self) -> bool:
        return self.verdict is not VerdictType.MATCH


@dataclass(frozen=True)
class ComparisonSummary:
    """Summary statistics for a comparison."""
    total: int = 0
    matching: int = 0
    differing: int = 0
    source_only: int = 0
    target_only: int = 0
    # Unresolved reads among the compared names, per side
    source_unresolved: int = 0
    target_unresolved: int = 0

    @property
    def match_rate(self) -> float:
        """Fraction of the name union classified as MATCH (0.0 when empty)."""
        if self.total == 0:
            return 0.0
        return self.matching / self.total

    @property
    def match_rate_percent(self) -> float:
        return self.match_rate * 100

    @property
    def total_differences(self) -> int:
        return self.differing + self.source_only + self.target_only

    @property
    def has_differences(self) -> bool:
        return self.total_differences > 0

    @property
    def natural_language_summary(self) -> str:
        """Human-readable summary for tickets and CI logs."""
        if self.total == 0:
            return "Both stores are empty"
        if not self.has_differences:
            return f"All {self.total} secrets match"

        parts = []
        if self.differing:
            parts.append(f"{self.differing} with different values")
        if self.source_only:
            parts.append(f"{self.source_only} only in source")
        if self.target_only:
            parts.append(f"{self.target_only} only in target")
        return f"{self.matching} of {self.total} secrets match; " + ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'matching': self.matching,
            'differing': self.differing,
            'source_only': self.source_only,
            'target_only': self.target_only,
            'source_unresolved': self.source_unresolved,
            'target_unresolved': self.target_unresolved,
            'match_rate': self.match_rate,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Complete result of comparing two inventories."""
    summary: ComparisonSummary
    diffs: Mapping[str, SecretDiff]
    source_label: str = "Source"
    target_label: str = "Target"
    generated_at: str = ""
    tool_version: str = ""
    source_warning: Optional[str] = None
    target_warning: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'diffs', MappingProxyType(dict(self.diffs)))
        if not self.generated_at:
            object.__setattr__(self, 'generated_at', datetime.now().strftime('%Y-%m-%d %H:%M:%S'))
        if not self.tool_version:
            object.__setattr__(self, 'tool_version', __version__)

    def verdict_for(self, name: str) -> Optional[VerdictType]:
        diff = self.diffs.get(name)
        return diff.verdict if diff else None

    def diffs_by_verdict(self, verdict: VerdictType) -> List[SecretDiff]:
        return [d for d in self.diffs.values() if d.verdict is verdict]

    @property
    def differences(self) -> List[SecretDiff]:
        """Every diff that is not a MATCH."""
        return [d for d in self.diffs.values() if d.is_difference]

    @property
    def has_differences(self) -> bool:
        return self.summary.has_differences
