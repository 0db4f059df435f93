"""JSON rendering for inventories and comparisons.

Values go through ``format_value`` exactly as on the console, so long values
and unresolved reads are replaced by their markers here too.
"""

from __future__ import annotations

import json
from typing import Any

from kv_compare.core.version import __version__
from kv_compare.diff.formatting import format_value
from kv_compare.diff.models import ComparisonResult, SecretDiff
from kv_compare.inventory.models import Inventory, SecretValue


def _serialize_value(outcome: SecretValue | None) -> dict[str, Any]:
    if outcome is None:
        return {"state": "absent", "display": format_value(None)}
    return {"state": outcome.state.value, "display": format_value(outcome)}


def _serialize_diff(diff: SecretDiff) -> dict[str, Any]:
    return {
        "name": diff.name,
        "verdict": diff.verdict.value,
        "source": _serialize_value(diff.source_value),
        "target": _serialize_value(diff.target_value),
    }


def write_inventory_json_output(inventory: Inventory, summary_only: bool = False, indent: int | None = 2) -> str:
    """Render one inventory as a JSON document (statistics plus, unless summary_only, every secret)."""
    data: dict[str, Any] = {
        "metadata": {
            "tool_version": __version__,
            "store": inventory.label,
            "store_url": inventory.store_url,
            "fetched_at": inventory.fetched_at,
        },
        "statistics": inventory.get_statistics(),
        "warning": inventory.warning_message,
    }
    if not summary_only:
        data["secrets"] = [
            {"name": name, **_serialize_value(inventory.get(name))} for name in sorted(inventory.names)
        ]
    return json.dumps(data, indent=indent, ensure_ascii=False)


def write_comparison_json_output(
    result: ComparisonResult,
    show_matches: bool = False,
    summary_only: bool = False,
    indent: int | None = 2,
) -> str:
    """
    Render a comparison as a JSON document.

    Args:
        result: The ComparisonResult to render
        show_matches: Include MATCH entries in ``diffs``
        summary_only: Omit ``diffs`` entirely
        indent: JSON indentation (None for compact)
    """
    data: dict[str, Any] = {
        "metadata": {
            "generated_at": result.generated_at,
            "tool_version": result.tool_version,
            "source_label": result.source_label,
            "target_label": result.target_label,
        },
        "summary": {
            **result.summary.to_dict(),
            "match_rate_percent": round(result.summary.match_rate_percent, 1),
            "has_differences": result.summary.has_differences,
            "natural_language_summary": result.summary.natural_language_summary,
        },
        "warnings": {
            "source": result.source_warning,
            "target": result.target_warning,
        },
    }
    if not summary_only:
        diffs = result.diffs.values() if show_matches else result.differences
        data["diffs"] = [_serialize_diff(d) for d in diffs]
    return json.dumps(data, indent=indent, ensure_ascii=False)
