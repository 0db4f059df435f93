"""``kv_compare compare``: diff two vaults."""

from __future__ import annotations

import argparse
import logging

from kv_compare.cli.commands.inventory import build_fetcher, fetch_vault
from kv_compare.core.config import CompareConfig
from kv_compare.core.constants import EXIT_DIFFERENCES_FOUND, EXIT_SUCCESS
from kv_compare.core.perf import PerformanceTracker
from kv_compare.core.vaults import VaultResolver
from kv_compare.diff.comparator import SecretComparator
from kv_compare.output import write_comparison_console_output, write_comparison_json_output


def run_compare(args: argparse.Namespace, config: CompareConfig, logger: logging.Logger, credential=None) -> int:
    """Fetch both vaults one after the other, compare them and print the report."""
    perf_tracker = PerformanceTracker(logger)
    resolver = VaultResolver(config.config_file, logger)

    # Resolve both locators before any network call
    source_vault = resolver.resolve(args.source)
    target_vault = resolver.resolve(args.target)
    source_label, target_label = config.labels or (args.source, args.target)

    fetcher = build_fetcher(config, logger, perf_tracker)
    source = fetch_vault(source_vault, source_label, fetcher, config, logger, credential)
    target = fetch_vault(target_vault, target_label, fetcher, config, logger, credential)

    perf_tracker.start("Compare")
    result = SecretComparator().compare(source, target, source_label, target_label)
    perf_tracker.end("Compare", items=result.summary.total)
    logger.info(result.summary.natural_language_summary)

    if config.output_format == "json":
        print(
            write_comparison_json_output(
                result, show_matches=config.show_matches, summary_only=config.summary_only
            )
        )
    else:
        print(
            write_comparison_console_output(
                result,
                show_matches=config.show_matches,
                summary_only=config.summary_only,
                use_color=config.use_color,
            )
        )

    logger.debug(perf_tracker.get_summary())
    if config.fail_on_diff and result.has_differences:
        logger.info(f"Differences found; exiting with code {EXIT_DIFFERENCES_FOUND}")
        return EXIT_DIFFERENCES_FOUND
    return EXIT_SUCCESS
