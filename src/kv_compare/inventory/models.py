"""Inventory data model: what one secret store held at fetch time.

Each enumerated secret name maps to a ``SecretValue`` that is either
resolved (the value was read, possibly the empty string) or unresolved (the
read failed). A name missing from the mapping means the store does not have
that secret at all; that third state is never stored as a marker value.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class ValueState(Enum):
    """Outcome of reading one secret value."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class SecretValue:
    """Value outcome for one secret.

    Two outcomes are equal when both are resolved to the same string, or when
    both are unresolved. ``error`` is diagnostic only and takes no part in
    equality.
    """

    state: ValueState
    value: str | None = None
    error: str | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.state is ValueState.RESOLVED and self.value is None:
            raise ValueError("A resolved secret value must be a string (use '' for empty)")
        if self.state is ValueState.UNRESOLVED and self.value is not None:
            raise ValueError("An unresolved secret value cannot carry a value")

    @classmethod
    def resolved(cls, value: str) -> SecretValue:
        return cls(ValueState.RESOLVED, value)

    @classmethod
    def unresolved(cls, error: str | None = None) -> SecretValue:
        return cls(ValueState.UNRESOLVED, None, error)

    @property
    def is_resolved(self) -> bool:
        return self.state is ValueState.RESOLVED

    def __repr__(self) -> str:
        # Never echo the secret itself in reprs, tracebacks or logs
        if self.is_resolved:
            return f"SecretValue(resolved, length={len(self.value)})"
        return f"SecretValue(unresolved, error={self.error!r})"


@dataclass(frozen=True)
class SecretRecord:
    """One enumerated secret: its name and the outcome of reading it."""

    name: str
    value: SecretValue

    def __post_init__(self):
        if not self.name:
            raise ValueError("Secret name must be a non-empty string")


@dataclass(frozen=True)
class Inventory:
    """Snapshot of every secret in one store, taken at one point in time.

    Attributes:
        label: Human-readable store label (locator as typed, or vault name)
        secrets: Read-only mapping of secret name -> SecretValue
        store_url: Vault URL the inventory was fetched from, if known
        fetched_at: ISO timestamp of the fetch
    """

    label: str
    secrets: Mapping[str, SecretValue]
    store_url: str = ""
    fetched_at: str = ""

    def __post_init__(self):
        object.__setattr__(self, "secrets", MappingProxyType(dict(self.secrets)))
        if not self.fetched_at:
            object.__setattr__(self, "fetched_at", datetime.now().isoformat(timespec="seconds"))

    @classmethod
    def from_records(cls, label: str, records: Iterable[SecretRecord], **kwargs: Any) -> Inventory:
        """Build an inventory from records; a repeated name keeps its first record."""
        secrets: dict[str, SecretValue] = {}
        for record in records:
            secrets.setdefault(record.name, record.value)
        return cls(label=label, secrets=secrets, **kwargs)

    @classmethod
    def from_values(cls, label: str, values: Mapping[str, str | SecretValue], **kwargs: Any) -> Inventory:
        """Build an inventory from plain strings (resolved) or ready SecretValues."""
        secrets = {
            name: value if isinstance(value, SecretValue) else SecretValue.resolved(value)
            for name, value in values.items()
        }
        return cls(label=label, secrets=secrets, **kwargs)

    def __len__(self) -> int:
        return len(self.secrets)

    def __contains__(self, name: object) -> bool:
        return name in self.secrets

    def __iter__(self) -> Iterator[SecretRecord]:
        for name, value in self.secrets.items():
            yield SecretRecord(name, value)

    def get(self, name: str) -> SecretValue | None:
        """Value outcome for ``name``, or None when the store has no such secret."""
        return self.secrets.get(name)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self.secrets)

    @property
    def total(self) -> int:
        return len(self.secrets)

    @property
    def unresolved_count(self) -> int:
        return sum(1 for v in self.secrets.values() if not v.is_resolved)

    @property
    def resolved_count(self) -> int:
        return self.total - self.unresolved_count

    @property
    def unresolved_names(self) -> list[str]:
        return sorted(name for name, v in self.secrets.items() if not v.is_resolved)

    @property
    def success_rate(self) -> float:
        """Fraction of secrets whose value was read (0.0 for an empty store)."""
        if self.total == 0:
            return 0.0
        return self.resolved_count / self.total

    @property
    def max_value_length(self) -> int:
        lengths = [len(v.value) for v in self.secrets.values() if v.is_resolved]
        return max(lengths, default=0)

    @property
    def average_value_length(self) -> float:
        lengths = [len(v.value) for v in self.secrets.values() if v.is_resolved]
        if not lengths:
            return 0.0
        return sum(lengths) / len(lengths)

    @property
    def warning_message(self) -> str | None:
        """'N of M secrets could not be retrieved', or None when all resolved."""
        if self.unresolved_count == 0:
            return None
        return f"{self.unresolved_count} of {self.total} secrets could not be retrieved"

    def get_statistics(self) -> dict[str, Any]:
        """Summary counters used by the list view."""
        return {
            "total": self.total,
            "resolved": self.resolved_count,
            "unresolved": self.unresolved_count,
            "success_rate": self.success_rate,
            "max_value_length": self.max_value_length,
            "average_value_length": self.average_value_length,
        }
