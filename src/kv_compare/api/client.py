"""Secret store adapters for kv_compare.

The fetcher only needs two operations from a store: list the secret names and
read one value. ``KeyVaultSecretStore`` provides them over the Azure SDK.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

from azure.core.exceptions import HttpResponseError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from kv_compare.api.resilience import CircuitBreaker, make_api_call_with_retry
from kv_compare.core.constants import RETRYABLE_STATUS_CODES
from kv_compare.core.exceptions import RetryableHTTPError

T = TypeVar("T")


@runtime_checkable
class SecretStore(Protocol):
    """Anything that can enumerate secret names and read secret values."""

    label: str

    def list_secret_names(self) -> Iterable[str]: ...

    def get_secret_value(self, name: str) -> str: ...


def _raise_retryable(func: Callable[[], T]) -> Callable[[], T]:
    """Convert throttling and 5xx responses into RetryableHTTPError for the retry loop."""

    def call() -> T:
        try:
            return func()
        except HttpResponseError as e:
            if e.status_code in RETRYABLE_STATUS_CODES:
                raise RetryableHTTPError(e.status_code, e.reason or "") from e
            raise

    return call


class KeyVaultSecretStore:
    """
    SecretStore backed by an Azure Key Vault ``SecretClient``.

    Args:
        client: Configured SecretClient for one vault
        label: Display label for this store
        logger: Logger instance
        circuit_breaker: Optional breaker applied to value reads
    """

    def __init__(
        self,
        client: SecretClient,
        label: str | None = None,
        logger: logging.Logger | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        self.client = client
        self.vault_url = getattr(client, "vault_url", "")
        self.label = label or self.vault_url
        self.logger = logger or logging.getLogger(__name__)
        self.circuit_breaker = circuit_breaker

    def list_secret_names(self) -> list[str]:
        """All secret names in the vault, including disabled ones."""

        def list_all() -> list[str]:
            # Pages are fetched lazily, so materialize inside the retried call
            return [props.name for props in self.client.list_properties_of_secrets()]

        return make_api_call_with_retry(
            _raise_retryable(list_all),
            logger=self.logger,
            operation_name=f"list secrets ({self.label})",
        )

    def get_secret_value(self, name: str) -> str:
        """Current value of ``name``; a secret without a value reads as ''."""
        secret = make_api_call_with_retry(
            _raise_retryable(lambda: self.client.get_secret(name)),
            logger=self.logger,
            operation_name=f"get secret '{name}'",
            circuit_breaker=self.circuit_breaker,
        )
        return secret.value or ""

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> KeyVaultSecretStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"KeyVaultSecretStore(label={self.label!r}, vault_url={self.vault_url!r})"


def create_secret_store(
    vault_url: str,
    credential: Any | None = None,
    label: str | None = None,
    logger: logging.Logger | None = None,
    circuit_breaker: CircuitBreaker | None = None,
    **client_kwargs: Any,
) -> KeyVaultSecretStore:
    """
    Build a KeyVaultSecretStore for ``vault_url``.

    Uses ``DefaultAzureCredential`` (environment, managed identity, Azure CLI,
    ...) unless a credential is passed in.
    """
    logger = logger or logging.getLogger(__name__)
    if credential is None:
        logger.debug("Using DefaultAzureCredential")
        credential = DefaultAzureCredential()
    client = SecretClient(vault_url=vault_url, credential=credential, **client_kwargs)
    logger.debug(f"Secret client created for {vault_url}")
    return KeyVaultSecretStore(client, label=label, logger=logger, circuit_breaker=circuit_breaker)
