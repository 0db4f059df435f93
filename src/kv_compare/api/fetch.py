"""Parallel inventory fetching for kv_compare."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from tqdm import tqdm

from kv_compare.api.client import SecretStore
from kv_compare.core.colors import _format_error_msg
from kv_compare.core.constants import DEFAULT_FETCH_WORKERS
from kv_compare.core.exceptions import EnumerationError
from kv_compare.core.logging import with_log_context
from kv_compare.core.perf import PerformanceTracker
from kv_compare.inventory.models import Inventory, SecretValue

TQDM_BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}]"


class InventoryFetcher:
    """Build an Inventory from a secret store, reading values in parallel.

    Listing the names is all-or-nothing. Reading values is per secret: a
    failed read becomes an unresolved value and the other reads carry on.

    Args:
        logger: Logger instance
        max_workers: Concurrent value reads (default: 4, 1 is sequential)
        quiet: Suppress the progress bar (default: False)
        perf_tracker: Optional performance tracker for phase timings
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        max_workers: int = DEFAULT_FETCH_WORKERS,
        quiet: bool = False,
        perf_tracker: PerformanceTracker | None = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.logger = logger or logging.getLogger(__name__)
        self.max_workers = max_workers
        self.quiet = quiet
        self.perf_tracker = perf_tracker or PerformanceTracker(self.logger)

    def fetch(self, store: SecretStore) -> Inventory:
        """
        Enumerate every secret in ``store`` and read its value.

        Returns:
            Inventory holding every enumerated name exactly once

        Raises:
            EnumerationError: If the secret names cannot be listed
        """
        label = store.label
        logger = with_log_context(self.logger, store=label)

        names = self._enumerate(store, logger)
        logger.info(f"Found {len(names)} secrets in {label}")

        self.perf_tracker.start(f"Resolve values ({label})")
        values = self._resolve_all(store, names, logger)
        self.perf_tracker.end(f"Resolve values ({label})", items=len(names))

        inventory = Inventory(label=label, secrets=values, store_url=getattr(store, "vault_url", ""))
        if inventory.warning_message:
            logger.warning(inventory.warning_message)
        else:
            logger.info(f"All {inventory.total} secrets retrieved from {label}")
        return inventory

    def _enumerate(self, store: SecretStore, logger) -> list[str]:
        self.perf_tracker.start(f"List secrets ({store.label})")
        try:
            names = list(store.list_secret_names())
        except Exception as e:
            logger.error(_format_error_msg("listing secrets", store.label, e))
            raise EnumerationError(
                "Failed to list secrets",
                store_label=store.label,
                details=f"{type(e).__name__}: {e}",
                original_error=e,
            ) from e
        finally:
            self.perf_tracker.end(f"List secrets ({store.label})")

        # Duplicate names from the store keep their first occurrence
        return list(dict.fromkeys(names))

    def _resolve_all(self, store: SecretStore, names: list[str], logger) -> dict[str, SecretValue]:
        values: dict[str, SecretValue] = {}
        if not names:
            return values

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names))) as executor:
            future_to_name = {executor.submit(store.get_secret_value, name): name for name in names}

            with tqdm(
                total=len(names),
                desc=f"Reading {store.label}",
                unit="secret",
                bar_format=TQDM_BAR_FORMAT,
                leave=False,
                disable=self.quiet,
            ) as pbar:
                for future in as_completed(future_to_name):
                    name = future_to_name[future]
                    try:
                        values[name] = SecretValue.resolved(future.result())
                        pbar.set_postfix_str("✓", refresh=False)
                    except Exception as e:
                        values[name] = SecretValue.unresolved(f"{type(e).__name__}: {e}")
                        pbar.set_postfix_str(f"✗ {name}", refresh=True)
                        logger.warning(f"✗ Could not retrieve secret '{name}' ({type(e).__name__})")
                    pbar.update(1)

        return values


def fetch_inventory(store: SecretStore, logger: logging.Logger | None = None, **kwargs) -> Inventory:
    """Fetch one inventory with a throwaway InventoryFetcher."""
    return InventoryFetcher(logger=logger, **kwargs).fetch(store)
