"""``kv_compare list``: inventory one vault."""

from __future__ import annotations

import argparse
import logging

from kv_compare.api.client import create_secret_store
from kv_compare.api.fetch import InventoryFetcher
from kv_compare.api.resilience import CircuitBreaker
from kv_compare.core.config import CompareConfig
from kv_compare.core.constants import EXIT_SUCCESS
from kv_compare.core.perf import PerformanceTracker
from kv_compare.core.vaults import ResolvedVault, VaultResolver
from kv_compare.inventory.models import Inventory
from kv_compare.output import write_inventory_console_output, write_inventory_json_output


def build_fetcher(config: CompareConfig, logger: logging.Logger, perf_tracker: PerformanceTracker) -> InventoryFetcher:
    return InventoryFetcher(
        logger=logger,
        max_workers=config.fetch_workers,
        quiet=config.quiet,
        perf_tracker=perf_tracker,
    )


def fetch_vault(
    vault: ResolvedVault,
    label: str,
    fetcher: InventoryFetcher,
    config: CompareConfig,
    logger: logging.Logger,
    credential=None,
) -> Inventory:
    """Open a store for ``vault``, fetch its inventory and close the client."""
    breaker = CircuitBreaker(config.circuit_breaker, logger) if config.circuit_breaker else None
    logger.info(f"Fetching secrets from {label} ({vault.vault_url}, via {vault.source})")
    with create_secret_store(
        vault.vault_url, credential=credential, label=label, logger=logger, circuit_breaker=breaker
    ) as store:
        inventory = fetcher.fetch(store)
    if breaker is not None:
        logger.debug(f"Circuit breaker statistics ({label}): {breaker.get_statistics()}")
    return inventory


def run_list(args: argparse.Namespace, config: CompareConfig, logger: logging.Logger, credential=None) -> int:
    """Fetch one vault and print its inventory."""
    perf_tracker = PerformanceTracker(logger)
    vault = VaultResolver(config.config_file, logger).resolve(args.vault)

    inventory = fetch_vault(vault, args.vault, build_fetcher(config, logger, perf_tracker), config, logger, credential)

    if config.output_format == "json":
        print(write_inventory_json_output(inventory, summary_only=config.summary_only))
    else:
        print(write_inventory_console_output(inventory, summary_only=config.summary_only, use_color=config.use_color))

    logger.debug(perf_tracker.get_summary())
    return EXIT_SUCCESS
