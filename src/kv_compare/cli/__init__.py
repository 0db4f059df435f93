"""CLI module - Command-line interface components."""

from kv_compare.cli.main import main, run
from kv_compare.cli.parser import build_parser, parse_arguments

__all__ = [
    "build_parser",
    "main",
    "parse_arguments",
    "run",
]
