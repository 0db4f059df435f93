"""Output module - console and JSON renderers."""

from kv_compare.output.console import write_comparison_console_output, write_inventory_console_output
from kv_compare.output.json_output import write_comparison_json_output, write_inventory_json_output

__all__ = [
    "write_comparison_console_output",
    "write_comparison_json_output",
    "write_inventory_console_output",
    "write_inventory_json_output",
]
