"""Display rendering for secret value outcomes."""

from __future__ import annotations

from kv_compare.core.constants import MAX_DISPLAY_VALUE_LENGTH, NOT_FOUND_MARKER, VALUE_TOO_LONG_MARKER
from kv_compare.inventory.models import SecretValue


def format_value(outcome: SecretValue | None, max_length: int = MAX_DISPLAY_VALUE_LENGTH) -> str:
    """
    Render one side of a comparison row.

    Args:
        outcome: The value outcome, or None when the store has no such secret
        max_length: Values longer than this are replaced by a marker

    Returns:
        "Not Found" for a missing or unresolved secret, "Value too long to
        display" past ``max_length``, otherwise the literal value.
    """
    if outcome is None or not outcome.is_resolved:
        return NOT_FOUND_MARKER
    if len(outcome.value) > max_length:
        return VALUE_TOO_LONG_MARKER
    return outcome.value
