"""Pytest configuration and fixtures for kv_compare tests"""
import logging
import os
from unittest.mock import Mock

import pytest

from kv_compare.core.colors import ConsoleColors
from kv_compare.inventory.models import Inventory, SecretValue

# Variables the CLI writes or reads; isolated per test
_ISOLATED_ENV_VARS = (
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "LOG_LEVEL",
    "NO_COLOR",
    "KV_COMPARE_CONFIG",
    "KV_VAULT_DEV",
    "KV_VAULT_STAGE",
)


@pytest.fixture(autouse=True)
def isolated_environment():
    """Clear kv_compare env vars and restore them (and the color policy) afterwards"""
    saved_env = {name: os.environ.pop(name, None) for name in _ISOLATED_ENV_VARS}
    saved_color = ConsoleColors._enabled
    yield
    for name, value in saved_env.items():
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value
    ConsoleColors._enabled = saved_color


class FakeSecretStore:
    """In-memory SecretStore; names in ``failing`` raise on read"""

    def __init__(self, label, secrets, failing=None, list_error=None):
        self.label = label
        self.vault_url = f"https://{label}.vault.azure.net/"
        self.secrets = dict(secrets)
        self.failing = dict(failing or {})
        self.list_error = list_error
        self.reads = []
        self.closed = False

    def list_secret_names(self):
        if self.list_error is not None:
            raise self.list_error
        return iter(list(self.secrets) + list(self.failing))

    def get_secret_value(self, name):
        self.reads.append(name)
        if name in self.failing:
            raise self.failing[name]
        return self.secrets[name]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


@pytest.fixture
def make_store():
    """Factory for in-memory secret stores"""
    return FakeSecretStore


@pytest.fixture
def mock_logger():
    """Create a mock logger"""
    return Mock(spec=logging.Logger)


@pytest.fixture
def mock_perf_tracker():
    """Create a mock performance tracker"""
    return Mock()


@pytest.fixture
def dev_inventory():
    """Inventory resembling a dev vault"""
    return Inventory.from_values(
        "dev",
        {
            "api-key": "dev-key",
            "db-password": "dev-pass",
            "feature-flag": "on",
            "dev-only": "x",
        },
    )


@pytest.fixture
def stage_inventory():
    """Inventory resembling a stage vault, with one unresolved read"""
    return Inventory.from_values(
        "stage",
        {
            "api-key": "dev-key",
            "db-password": "stage-pass",
            "feature-flag": SecretValue.unresolved("HttpResponseError: Forbidden"),
            "stage-only": "y",
        },
    )


@pytest.fixture
def vault_config_file(tmp_path):
    """Create a kv_compare.json with two aliases"""
    config_file = tmp_path / "kv_compare.json"
    config_file.write_text(
        '{"vaults": {"dev": "https://kv-app-dev.vault.azure.net", "Stage": "kv-app-stage"}}'
    )
    return config_file
