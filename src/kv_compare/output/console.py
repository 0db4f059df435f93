"""Console rendering for inventories and comparisons.

Every writer returns the text to print; nothing here writes to stdout.
"""

from __future__ import annotations

from kv_compare.core.colors import ConsoleColors
from kv_compare.core.constants import MAX_DISPLAY_VALUE_LENGTH, NOT_FOUND_MARKER, RATE_BAR_WIDTH
from kv_compare.diff.formatting import format_value
from kv_compare.diff.models import ComparisonResult, SecretDiff, VerdictType
from kv_compare.inventory.models import Inventory, SecretValue

REPORT_WIDTH = 80
STAT_LABEL_WIDTH = 24

_VERDICT_SYMBOLS = {
    VerdictType.MATCH: "=",
    VerdictType.DIFFER: "~",
    VerdictType.SOURCE_ONLY: "-",
    VerdictType.TARGET_ONLY: "+",
}


def _rate_bar(fraction: float, width: int = RATE_BAR_WIDTH, use_color: bool = True) -> str:
    """Text bar such as ``[##########----------]  50.0%``."""
    fraction = min(max(fraction, 0.0), 1.0)
    filled = round(fraction * width)
    bar = f"[{'#' * filled}{'-' * (width - filled)}] {fraction * 100:5.1f}%"
    if fraction >= 1.0:
        return ConsoleColors.success(bar, use_color)
    if fraction >= 0.5:
        return ConsoleColors.warning(bar, use_color)
    return ConsoleColors.error(bar, use_color)


def _colored_value(outcome: SecretValue | None, use_color: bool) -> str:
    """format_value output, with the two markers colored."""
    text = format_value(outcome)
    if outcome is None or not outcome.is_resolved:
        return ConsoleColors.error(NOT_FOUND_MARKER, use_color)
    if len(outcome.value) > MAX_DISPLAY_VALUE_LENGTH:
        return ConsoleColors.warning(text, use_color)
    return text


def _stat_line(label: str, value: object) -> str:
    return f"  {label:{STAT_LABEL_WIDTH}s} {value}"


def _verdict_text(diff: SecretDiff, source_label: str, target_label: str) -> str:
    if diff.verdict is VerdictType.MATCH:
        return "Match"
    if diff.verdict is VerdictType.DIFFER:
        return "Different"
    if diff.verdict is VerdictType.SOURCE_ONLY:
        return f"Only in {source_label}"
    return f"Only in {target_label}"


def _colored_symbol(verdict: VerdictType, use_color: bool) -> str:
    symbol = _VERDICT_SYMBOLS[verdict]
    if verdict is VerdictType.TARGET_ONLY:
        return ConsoleColors.success(symbol, use_color)
    if verdict is VerdictType.SOURCE_ONLY:
        return ConsoleColors.error(symbol, use_color)
    if verdict is VerdictType.DIFFER:
        return ConsoleColors.warning(symbol, use_color)
    return ConsoleColors.dim(symbol, use_color)


def write_inventory_console_output(
    inventory: Inventory,
    summary_only: bool = False,
    use_color: bool = True,
) -> str:
    """
    Render the secrets of one store with retrieval statistics.

    Args:
        inventory: The Inventory to render
        summary_only: Only show statistics, not the secret table
        use_color: Use ANSI color codes in output (default: True)

    Returns:
        Formatted string for console output
    """
    c = use_color
    lines = [
        "=" * REPORT_WIDTH,
        ConsoleColors.bold("SECRET INVENTORY", c),
        "=" * REPORT_WIDTH,
        f"Store: {inventory.label}",
    ]
    if inventory.store_url and inventory.store_url != inventory.label:
        lines.append(f"URL: {inventory.store_url}")
    lines.append(f"Fetched: {inventory.fetched_at}")
    lines.append("=" * REPORT_WIDTH)

    if not summary_only:
        lines.append("")
        lines.append(ConsoleColors.bold(f"SECRETS ({inventory.total})", c))
        if inventory.total == 0:
            lines.append("  No secrets found")
        else:
            name_width = max(len(name) for name in inventory.names)
            for name in sorted(inventory.names):
                outcome = inventory.get(name)
                status = ConsoleColors.status(outcome.is_resolved, "✓" if outcome.is_resolved else "✗", c)
                lines.append(f"  {status} {name:{name_width}s}  {_colored_value(outcome, c)}")

    stats = inventory.get_statistics()
    lines.append("")
    lines.append(ConsoleColors.bold("STATISTICS", c))
    lines.append(_stat_line("Total secrets", stats["total"]))
    lines.append(_stat_line("Retrieved", stats["resolved"]))
    failed = str(stats["unresolved"])
    lines.append(_stat_line("Failed", ConsoleColors.error(failed, c) if stats["unresolved"] else failed))
    lines.append(_stat_line("Success rate", _rate_bar(stats["success_rate"], use_color=c)))
    lines.append(_stat_line("Max value length", stats["max_value_length"]))
    lines.append(_stat_line("Average value length", f"{stats['average_value_length']:.1f}"))

    if inventory.warning_message:
        lines.append("")
        lines.append(ConsoleColors.warning(f"⚠ {inventory.warning_message}", c))

    lines.append("=" * REPORT_WIDTH)
    return "\n".join(lines)


def write_comparison_console_output(
    result: ComparisonResult,
    show_matches: bool = False,
    summary_only: bool = False,
    use_color: bool = True,
) -> str:
    """
    Render a comparison as a statistics block plus a per-secret table.

    Args:
        result: The ComparisonResult to render
        show_matches: Include MATCH rows in the table (hidden by default)
        summary_only: Only show statistics
        use_color: Use ANSI color codes in output (default: True)

    Returns:
        Formatted string for console output
    """
    c = use_color
    summary = result.summary
    src, tgt = result.source_label, result.target_label

    lines = [
        "=" * REPORT_WIDTH,
        ConsoleColors.bold("SECRET COMPARISON REPORT", c),
        "=" * REPORT_WIDTH,
        f"Source: {src}",
        f"Target: {tgt}",
        f"Generated: {result.generated_at}",
        "=" * REPORT_WIDTH,
    ]

    if result.source_warning or result.target_warning:
        lines.append("")
        for label, warning in ((src, result.source_warning), (tgt, result.target_warning)):
            if warning:
                lines.append(ConsoleColors.warning(f"⚠ {label}: {warning}", c))

    lines.append("")
    lines.append(ConsoleColors.bold("SUMMARY", c))
    lines.append(_stat_line("Total secrets", summary.total))
    lines.append(_stat_line("Matching", summary.matching))
    lines.append(_stat_line("Different values", summary.differing))
    lines.append(_stat_line(f"Only in {src}", summary.source_only))
    lines.append(_stat_line(f"Only in {tgt}", summary.target_only))
    lines.append(_stat_line("Match rate", f"{summary.match_rate_percent:.1f}%"))
    lines.append(_stat_line("", _rate_bar(summary.match_rate, use_color=c)))
    lines.append("-" * REPORT_WIDTH)

    if not summary.has_differences:
        lines.append(ConsoleColors.success("No differences found", c))
    else:
        lines.append(f"Summary: {summary.natural_language_summary}")

    if summary_only:
        lines.append("=" * REPORT_WIDTH)
        return "\n".join(lines)

    rows = list(result.diffs.values()) if show_matches else result.differences
    if rows:
        title = "ALL SECRETS" if show_matches else "DIFFERENCES"
        lines.append("")
        lines.append(ConsoleColors.bold(f"{title} ({len(rows)})", c))
        label_width = max(len(src), len(tgt)) + 1
        for diff in rows:
            symbol = _colored_symbol(diff.verdict, c)
            lines.append(f"  [{symbol}] {diff.name}  ({_verdict_text(diff, src, tgt)})")
            lines.append(f"      {src + ':':{label_width}s} {_colored_value(diff.source_value, c)}")
            lines.append(f"      {tgt + ':':{label_width}s} {_colored_value(diff.target_value, c)}")

    lines.append("=" * REPORT_WIDTH)
    return "\n".join(lines)
