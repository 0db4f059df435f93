"""Tests for InventoryFetcher"""
import logging
from unittest.mock import Mock

import pytest

from kv_compare.api.fetch import InventoryFetcher, fetch_inventory
from kv_compare.core.exceptions import EnumerationError
from kv_compare.inventory.models import SecretValue

LOGGER_NAME = "kv_compare.tests.fetch"


@pytest.fixture
def logger():
    return logging.getLogger(LOGGER_NAME)


class TestInventoryFetcherInit:
    """Test constructor defaults and validation"""

    def test_defaults(self, logger):
        fetcher = InventoryFetcher(logger=logger)
        assert fetcher.max_workers == 4
        assert fetcher.quiet is False

    def test_rejects_zero_workers(self, logger):
        with pytest.raises(ValueError):
            InventoryFetcher(logger=logger, max_workers=0)


class TestInventoryFetcherFetch:
    """Test enumeration and value resolution"""

    def test_all_values_resolved(self, make_store, logger):
        store = make_store("dev", {"a": "1", "b": "", "c": "3"})
        inventory = InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert inventory.label == "dev"
        assert inventory.store_url == "https://dev.vault.azure.net/"
        assert dict(inventory.secrets) == {
            "a": SecretValue.resolved("1"),
            "b": SecretValue.resolved(""),
            "c": SecretValue.resolved("3"),
        }
        assert inventory.warning_message is None

    def test_partial_failure_is_isolated(self, make_store, logger):
        """One failed read becomes unresolved, siblings keep their values"""
        store = make_store("stage", {"a": "1", "c": "3"}, failing={"b": PermissionError("Forbidden")})
        inventory = InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert inventory.total == 3
        assert inventory.get("a") == SecretValue.resolved("1")
        assert inventory.get("c") == SecretValue.resolved("3")
        assert not inventory.get("b").is_resolved
        assert "PermissionError" in inventory.get("b").error
        assert sorted(store.reads) == ["a", "b", "c"]

    def test_scenario_one_of_three_fails(self, make_store, logger, caplog):
        store = make_store("dev", {"a": "1", "b": "2"}, failing={"c": ConnectionError("reset")})
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            inventory = InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert len(inventory) == 3
        assert inventory.unresolved_names == ["c"]
        assert inventory.warning_message == "1 of 3 secrets could not be retrieved"
        messages = [r.getMessage() for r in caplog.records]
        assert "1 of 3 secrets could not be retrieved" in messages
        assert any("'c'" in m and "ConnectionError" in m for m in messages)

    def test_failure_logs_never_include_values(self, make_store, logger, caplog):
        store = make_store("dev", {"a": "s3cr3t-value"}, failing={"b": RuntimeError("boom")})
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            InventoryFetcher(logger=logger, quiet=True).fetch(store)
        assert all("s3cr3t-value" not in r.getMessage() for r in caplog.records)

    def test_log_records_carry_store_context(self, make_store, logger, caplog):
        store = make_store("dev", {"a": "1"})
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            InventoryFetcher(logger=logger, quiet=True).fetch(store)
        assert all(getattr(r, "store", None) == "dev" for r in caplog.records)

    def test_enumeration_failure_raises(self, make_store, logger):
        error = ConnectionError("vault unreachable")
        store = make_store("dev", {}, list_error=error)

        with pytest.raises(EnumerationError) as exc_info:
            InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert exc_info.value.store_label == "dev"
        assert exc_info.value.original_error is error
        assert "store dev" in str(exc_info.value)
        assert store.reads == []

    def test_empty_store(self, make_store, logger):
        inventory = InventoryFetcher(logger=logger, quiet=True).fetch(make_store("empty", {}))
        assert inventory.total == 0
        assert inventory.success_rate == 0.0

    def test_duplicate_names_read_once(self, logger):
        store = Mock()
        store.label = "dup"
        store.vault_url = ""
        store.list_secret_names.return_value = ["a", "a", "b"]
        store.get_secret_value.side_effect = lambda name: name.upper()

        inventory = InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert inventory.total == 2
        assert store.get_secret_value.call_count == 2

    def test_non_string_value_becomes_unresolved(self, logger):
        store = Mock()
        store.label = "odd"
        store.vault_url = ""
        store.list_secret_names.return_value = ["a"]
        store.get_secret_value.return_value = None

        inventory = InventoryFetcher(logger=logger, quiet=True).fetch(store)

        assert not inventory.get("a").is_resolved

    @pytest.mark.parametrize("workers", [1, 2, 16])
    def test_results_independent_of_worker_count(self, make_store, logger, workers):
        secrets = {f"secret-{i}": f"value-{i}" for i in range(20)}
        failing = {"broken-1": TimeoutError(), "broken-2": ValueError("bad")}
        store = make_store("dev", secrets, failing=failing)

        inventory = InventoryFetcher(logger=logger, max_workers=workers, quiet=True).fetch(store)

        assert inventory.total == 22
        assert inventory.unresolved_names == ["broken-1", "broken-2"]
        assert all(inventory.get(name).value == value for name, value in secrets.items())

    def test_perf_tracker_times_both_phases(self, make_store, logger, mock_perf_tracker):
        store = make_store("dev", {"a": "1"})
        InventoryFetcher(logger=logger, quiet=True, perf_tracker=mock_perf_tracker).fetch(store)

        started = [c.args[0] for c in mock_perf_tracker.start.call_args_list]
        assert started == ["List secrets (dev)", "Resolve values (dev)"]
        assert mock_perf_tracker.end.call_count == 2


class TestFetchInventory:
    """Test the convenience wrapper"""

    def test_passes_options_through(self, make_store, logger):
        store = make_store("dev", {"a": "1"})
        inventory = fetch_inventory(store, logger=logger, max_workers=1, quiet=True)
        assert inventory.get("a").value == "1"
