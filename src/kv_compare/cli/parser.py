"""Command-line argument parsing for kv_compare."""

from __future__ import annotations

import argparse
import os
import sys

import argcomplete

from kv_compare.api.resilience import _effective_retry_config
from kv_compare.core.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_FETCH_WORKERS,
    DEFAULT_RETRY_CONFIG,
    EXIT_ERROR,
    MAX_FETCH_WORKERS,
)
from kv_compare.core.version import __version__

EPILOG = """
Examples:
  # List every secret in a vault, with retrieval statistics
  kv_compare list kv-app-dev
  kv_compare list https://kv-app-dev.vault.azure.net/

  # Compare two vaults (aliases come from KV_VAULT_<ALIAS> or kv_compare.json)
  kv_compare compare dev stage

  # Custom column labels, include matching secrets
  kv_compare compare kv-app-dev kv-app-stage --labels Dev Stage --show-matches

  # Statistics only, as JSON, failing the build on drift
  kv_compare compare dev stage --summary --format json --fail-on-diff

  # Gentler on a throttled vault
  kv_compare compare dev stage --workers 2 --max-retries 5 --circuit-breaker

Vault locators:
  A locator is resolved in this order: an https:// URL, the KV_VAULT_<ALIAS>
  environment variable (a .env file is loaded automatically), the "vaults"
  object of the --config file, then a bare Key Vault name.

Authentication:
  Uses DefaultAzureCredential: environment variables (AZURE_CLIENT_ID,
  AZURE_TENANT_ID, AZURE_CLIENT_SECRET), managed identity, or 'az login'.

Exit codes:
  0  Success
  1  Error (bad arguments, unresolvable vault, listing failed)
  2  Differences found (only with --fail-on-diff)
"""


def _positive_workers(value: str) -> int:
    try:
        workers = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer, got {value!r}") from None
    if not 1 <= workers <= MAX_FETCH_WORKERS:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_FETCH_WORKERS}, got {workers}")
    return workers


def _common_options() -> argparse.ArgumentParser:
    """Options shared by every subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    # Invalid MAX_RETRIES / RETRY_*_DELAY values fall back to the defaults with a warning
    retry_defaults = _effective_retry_config()

    output_group = common.add_argument_group("Output")
    output_group.add_argument(
        "--format",
        choices=["console", "json"],
        default="console",
        help="Output format (default: console)",
    )
    output_group.add_argument("--summary", action="store_true", help="Only print statistics, no per-secret table")
    output_group.add_argument("--quiet", "-q", action="store_true", help="Suppress progress bars and info logging")
    output_group.add_argument("--no-color", action="store_true", help="Disable ANSI colors (also honours NO_COLOR)")

    config_group = common.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        type=str,
        default=os.environ.get("KV_COMPARE_CONFIG", DEFAULT_CONFIG_FILE),
        help=f"JSON file with vault aliases (default: {DEFAULT_CONFIG_FILE}, or KV_COMPARE_CONFIG env var)",
    )

    reliability_group = common.add_argument_group(
        "Reliability & Performance", "Options for Key Vault resilience and throughput"
    )
    reliability_group.add_argument(
        "--workers",
        type=_positive_workers,
        default=DEFAULT_FETCH_WORKERS,
        metavar="N",
        help=f"Concurrent secret reads per vault (1-{MAX_FETCH_WORKERS}, default: {DEFAULT_FETCH_WORKERS})",
    )
    reliability_group.add_argument(
        "--max-retries",
        type=int,
        default=retry_defaults["max_retries"],
        help=f"Maximum retry attempts (default: {DEFAULT_RETRY_CONFIG['max_retries']}, or MAX_RETRIES env var)",
    )
    reliability_group.add_argument(
        "--retry-base-delay",
        type=float,
        default=retry_defaults["base_delay"],
        help=f"Initial retry delay in seconds (default: {DEFAULT_RETRY_CONFIG['base_delay']})",
    )
    reliability_group.add_argument(
        "--retry-max-delay",
        type=float,
        default=retry_defaults["max_delay"],
        help=f"Maximum retry delay in seconds (default: {DEFAULT_RETRY_CONFIG['max_delay']})",
    )
    reliability_group.add_argument(
        "--circuit-breaker",
        action="store_true",
        help="After repeated throttling or outages, read each remaining secret once without retries",
    )

    logging_group = common.add_argument_group("Logging")
    logging_group.add_argument(
        "--log-level",
        type=str.upper,
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, or LOG_LEVEL environment variable)",
    )
    logging_group.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help='Log output format: "text" (default) or "json" for structured logging',
    )
    logging_group.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help='Directory for rotating log files (default: logs, "" disables file logging)',
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with the list and compare subcommands."""
    parser = argparse.ArgumentParser(
        prog="kv_compare",
        description="Inventory Azure Key Vault secrets and compare two vaults",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show program version and exit"
    )

    common = _common_options()
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List the secrets of one vault with retrieval statistics",
        description="List every secret in a vault with its value and retrieval statistics",
    )
    list_parser.add_argument("vault", metavar="VAULT", help="Vault URL, alias or Key Vault name")

    compare_parser = subparsers.add_parser(
        "compare",
        parents=[common],
        help="Compare the secrets of two vaults",
        description="Compare two vaults and report matching, differing and one-sided secrets",
    )
    compare_parser.add_argument("source", metavar="SOURCE", help="Source vault URL, alias or name")
    compare_parser.add_argument("target", metavar="TARGET", help="Target vault URL, alias or name")

    diff_group = compare_parser.add_argument_group("Comparison", "Options for the compare report")
    diff_group.add_argument(
        "--labels",
        nargs=2,
        metavar=("SOURCE_LABEL", "TARGET_LABEL"),
        help="Column labels for the two vaults (default: the locators as typed)",
    )
    diff_group.add_argument(
        "--show-matches", action="store_true", help="Also list secrets whose values match (hidden by default)"
    )
    diff_group.add_argument(
        "--fail-on-diff", action="store_true", help="Exit with code 2 when any difference is found"
    )

    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments; prints help and exits 1 when no command is given."""
    parser = build_parser()

    # Shell tab-completion (no-op unless invoked by the completion hook)
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_ERROR)
    return args
