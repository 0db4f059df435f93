"""API module - secret store access.

This module provides:
- The SecretStore protocol and its Azure Key Vault implementation
- The parallel InventoryFetcher
- Retry logic, circuit breaker and error message helpers

The Azure SDK and tqdm are imported on first use.
"""

__all__ = [
    # Resilience (from api/resilience.py)
    "RETRYABLE_EXCEPTIONS",
    "CircuitBreaker",
    "ErrorMessageHelper",
    "make_api_call_with_retry",
    # Stores (from api/client.py)
    "KeyVaultSecretStore",
    "SecretStore",
    "create_secret_store",
    # Fetch (from api/fetch.py)
    "InventoryFetcher",
    "fetch_inventory",
]


from kv_compare.core.lazy import make_getattr

__getattr__ = make_getattr(
    __name__,
    {
        "RETRYABLE_EXCEPTIONS": "kv_compare.api.resilience",
        "CircuitBreaker": "kv_compare.api.resilience",
        "ErrorMessageHelper": "kv_compare.api.resilience",
        "make_api_call_with_retry": "kv_compare.api.resilience",
        "KeyVaultSecretStore": "kv_compare.api.client",
        "SecretStore": "kv_compare.api.client",
        "create_secret_store": "kv_compare.api.client",
        "InventoryFetcher": "kv_compare.api.fetch",
        "fetch_inventory": "kv_compare.api.fetch",
    },
)
