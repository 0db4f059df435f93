"""Tests for vault locator resolution"""
import os
from unittest.mock import patch

import pytest

from kv_compare.core.exceptions import ConfigurationError
from kv_compare.core.vaults import (
    ResolvedVault,
    VaultResolver,
    env_var_for_alias,
    load_vault_aliases,
    normalize_vault_url,
)


class TestHelpers:
    """Test small helpers"""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://kv.vault.azure.net", "https://kv.vault.azure.net/"),
            ("https://kv.vault.azure.net///", "https://kv.vault.azure.net/"),
            ("  https://kv.vault.azure.net/ ", "https://kv.vault.azure.net/"),
        ],
    )
    def test_normalize_vault_url(self, url, expected):
        assert normalize_vault_url(url) == expected

    @pytest.mark.parametrize("alias,expected", [("dev", "KV_VAULT_DEV"), ("prod-eu", "KV_VAULT_PROD_EU")])
    def test_env_var_for_alias(self, alias, expected):
        assert env_var_for_alias(alias) == expected

    def test_vault_name_property(self):
        vault = ResolvedVault("dev", "https://kv-app-dev.vault.azure.net/", "url")
        assert vault.vault_name == "kv-app-dev"


class TestLoadVaultAliases:
    """Test reading the alias file"""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_vault_aliases(tmp_path / "absent.json") == {}

    def test_aliases_are_lowercased(self, vault_config_file):
        aliases = load_vault_aliases(vault_config_file)
        assert aliases == {"dev": "https://kv-app-dev.vault.azure.net", "stage": "kv-app-stage"}

    def test_file_without_vaults_key(self, tmp_path):
        config_file = tmp_path / "kv_compare.json"
        config_file.write_text('{"other": 1}')
        assert load_vault_aliases(config_file) == {}

    def test_invalid_json(self, tmp_path):
        config_file = tmp_path / "kv_compare.json"
        config_file.write_text("{not json")
        with pytest.raises(ConfigurationError) as exc_info:
            load_vault_aliases(config_file)
        assert exc_info.value.config_file == str(config_file)

    def test_wrong_shape(self, tmp_path):
        config_file = tmp_path / "kv_compare.json"
        config_file.write_text('{"vaults": ["dev"]}')
        with pytest.raises(ConfigurationError) as exc_info:
            load_vault_aliases(config_file)
        assert exc_info.value.field == "vaults"


class TestVaultResolver:
    """Test resolution order URL > environment > config > name"""

    def test_full_url(self, tmp_path):
        resolver = VaultResolver(tmp_path / "none.json")
        vault = resolver.resolve("https://kv-app-dev.vault.azure.net")
        assert vault.vault_url == "https://kv-app-dev.vault.azure.net/"
        assert vault.source == "url"

    def test_environment_alias(self, tmp_path):
        resolver = VaultResolver(tmp_path / "none.json")
        with patch.dict(os.environ, {"KV_VAULT_DEV": "kv-from-env"}):
            vault = resolver.resolve("dev")
        assert vault.vault_url == "https://kv-from-env.vault.azure.net/"
        assert vault.source == "environment"

    def test_environment_beats_config(self, vault_config_file):
        resolver = VaultResolver(vault_config_file)
        with patch.dict(os.environ, {"KV_VAULT_DEV": "https://override.vault.azure.net"}):
            vault = resolver.resolve("dev")
        assert vault.vault_url == "https://override.vault.azure.net/"

    def test_config_alias(self, vault_config_file):
        resolver = VaultResolver(vault_config_file)
        vault = resolver.resolve("dev")
        assert vault.vault_url == "https://kv-app-dev.vault.azure.net/"
        assert vault.source == "config:kv_compare.json"

    def test_config_alias_is_case_insensitive(self, vault_config_file):
        vault = VaultResolver(vault_config_file).resolve("STAGE")
        assert vault.vault_url == "https://kv-app-stage.vault.azure.net/"
        assert vault.locator == "STAGE"

    def test_bare_vault_name(self, tmp_path):
        vault = VaultResolver(tmp_path / "none.json").resolve("KV-App-Prod")
        assert vault.vault_url == "https://kv-app-prod.vault.azure.net/"
        assert vault.source == "name"

    @pytest.mark.parametrize("locator", ["", "  ", "a", "1vault", "has space", "double--hyphen", "x" * 25])
    def test_unresolvable(self, tmp_path, locator):
        with pytest.raises(ConfigurationError):
            VaultResolver(tmp_path / "none.json").resolve(locator)

    def test_error_names_the_env_var(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            VaultResolver(tmp_path / "none.json").resolve("my vault")
        assert "KV_VAULT_MY_VAULT" in str(exc_info.value)

    def test_invalid_alias_target(self, tmp_path):
        config_file = tmp_path / "kv_compare.json"
        config_file.write_text('{"vaults": {"dev": "not a vault"}}')
        with pytest.raises(ConfigurationError):
            VaultResolver(config_file).resolve("dev")

    def test_aliases_loaded_once(self, vault_config_file):
        resolver = VaultResolver(vault_config_file)
        with patch("kv_compare.core.vaults.load_vault_aliases", return_value={"dev": "kv-a"}) as mock_load:
            resolver.resolve("dev")
            resolver.resolve("dev")
        mock_load.assert_called_once()
