"""Vault locator resolution for kv_compare.

A locator is what the user types on the command line for a store: a full
vault URL, an alias such as ``dev``, or a bare Key Vault name.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from kv_compare.core.constants import DEFAULT_CONFIG_FILE, KEYVAULT_DNS_SUFFIX, VAULT_ENV_PREFIX
from kv_compare.core.exceptions import ConfigurationError

# Key Vault names: 3-24 chars, letters, digits and hyphens, starting with a letter
_VAULT_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9-]{1,22}[A-Za-z0-9]$")


@dataclass(frozen=True)
class ResolvedVault:
    """A vault locator resolved to a concrete URL."""

    locator: str
    vault_url: str
    source: str  # "url", "environment", "config:<file>", "name"

    @property
    def vault_name(self) -> str:
        """Host label of the vault, e.g. ``kv-app-dev``."""
        return urlparse(self.vault_url).hostname.split(".")[0]


def normalize_vault_url(url: str) -> str:
    """Strip whitespace and ensure exactly one trailing slash."""
    return url.strip().rstrip("/") + "/"


def env_var_for_alias(alias: str) -> str:
    """Environment variable consulted for an alias (``dev`` -> ``KV_VAULT_DEV``)."""
    return VAULT_ENV_PREFIX + re.sub(r"[^A-Za-z0-9]", "_", alias).upper()


def load_vault_aliases(config_file: str | Path, logger: logging.Logger | None = None) -> dict[str, str]:
    """Load the ``vaults`` alias table from a JSON config file.

    Expected layout::

        {"vaults": {"dev": "https://kv-app-dev.vault.azure.net/", "stage": "kv-app-stage"}}

    A missing file yields an empty table. A file that exists but cannot be
    parsed raises ConfigurationError.
    """
    logger = logger or logging.getLogger(__name__)
    path = Path(config_file)
    if not path.exists():
        logger.debug(f"Vault config file not found: {path}")
        return {}

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Invalid JSON in vault config file", config_file=str(path), details=f"line {e.lineno}: {e.msg}"
        ) from e
    except OSError as e:
        raise ConfigurationError("Cannot read vault config file", config_file=str(path), details=str(e)) from e

    vaults = data.get("vaults") if isinstance(data, dict) else None
    if vaults is None:
        return {}
    if not isinstance(vaults, dict) or not all(isinstance(v, str) for v in vaults.values()):
        raise ConfigurationError(
            "'vaults' must be an object mapping alias to vault URL or name",
            config_file=str(path),
            field="vaults",
        )
    return {str(alias).lower(): value for alias, value in vaults.items()}


class VaultResolver:
    """Resolve vault locators using URL > environment > config file > bare name."""

    def __init__(self, config_file: str | Path = DEFAULT_CONFIG_FILE, logger: logging.Logger | None = None):
        self.config_file = Path(config_file)
        self.logger = logger or logging.getLogger(__name__)
        self._aliases: dict[str, str] | None = None

    @property
    def aliases(self) -> dict[str, str]:
        if self._aliases is None:
            self._aliases = load_vault_aliases(self.config_file, self.logger)
        return self._aliases

    def resolve(self, locator: str) -> ResolvedVault:
        """Resolve one locator.

        Raises:
            ConfigurationError: If the locator matches none of the supported forms
        """
        text = (locator or "").strip()
        if not text:
            raise ConfigurationError("Empty vault locator")

        if text.lower().startswith("https://"):
            return ResolvedVault(text, self._validated_url(text, locator), "url")

        env_var = env_var_for_alias(text)
        env_value = os.environ.get(env_var, "").strip()
        if env_value:
            self.logger.debug(f"Vault '{text}' resolved from {env_var}")
            return ResolvedVault(text, self._to_url(env_value, locator), "environment")

        configured = self.aliases.get(text.lower())
        if configured:
            self.logger.debug(f"Vault '{text}' resolved from {self.config_file}")
            return ResolvedVault(text, self._to_url(configured, locator), f"config:{self.config_file.name}")

        if _VAULT_NAME_PATTERN.match(text) and "--" not in text:
            return ResolvedVault(text, f"https://{text.lower()}.{KEYVAULT_DNS_SUFFIX}/", "name")

        raise ConfigurationError(
            f"Cannot resolve vault '{text}'",
            details=(
                f"pass a https:// URL, a Key Vault name, set {env_var}, "
                f"or add it under 'vaults' in {self.config_file}"
            ),
        )

    def _to_url(self, value: str, locator: str) -> str:
        value = value.strip()
        if value.lower().startswith("https://"):
            return self._validated_url(value, locator)
        if _VAULT_NAME_PATTERN.match(value):
            return f"https://{value.lower()}.{KEYVAULT_DNS_SUFFIX}/"
        raise ConfigurationError(f"Alias '{locator}' points to an invalid vault: {value!r}")

    @staticmethod
    def _validated_url(url: str, locator: str) -> str:
        parsed = urlparse(url.strip())
        if not parsed.hostname:
            raise ConfigurationError(f"Invalid vault URL for '{locator}': {url!r}")
        return normalize_vault_url(url)
