"""Custom exceptions for kv_compare.

All exception classes are designed to provide clear, actionable error messages
with context about what went wrong and how to fix it.

Only store-level failures are raised. A secret whose value cannot be read is
recorded as unresolved in the inventory instead of raising.
"""


class KVCompareError(Exception):
    """Base exception for all kv_compare errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(KVCompareError):
    """Exception raised for configuration-related errors.

    Examples:
        - Vault locator that is neither a URL, a known alias, nor a vault name
        - Invalid JSON in the vaults config file
        - Out-of-range CLI option values
    """

    def __init__(
        self, message: str, config_file: str | None = None, field: str | None = None, details: str | None = None
    ):
        self.config_file = config_file
        self.field = field
        super().__init__(message, details)


class EnumerationError(KVCompareError):
    """Exception raised when the secret names of a store cannot be listed.

    Wraps authentication failures, unreachable vaults and missing vaults.
    This is fatal for the fetch of that store.
    """

    def __init__(
        self,
        message: str,
        store_label: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.store_label = store_label
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.store_label:
            parts.append(f"store {self.store_label}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class RetryableHTTPError(Exception):
    """Exception raised when the vault returns a retryable HTTP status code."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}")
