"""Core module - Foundation components with no dependency on the Azure SDK.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Vault locator resolution
"""

from kv_compare.core.version import __version__

from kv_compare.core.exceptions import (
    KVCompareError,
    ConfigurationError,
    EnumerationError,
    RetryableHTTPError,
)

from kv_compare.core.config import (
    RetryConfig,
    LogConfig,
    CircuitState,
    CircuitBreakerConfig,
    CompareConfig,
)

from kv_compare.core.constants import (
    BANNER_WIDTH,
    MAX_DISPLAY_VALUE_LENGTH,
    NOT_FOUND_MARKER,
    VALUE_TOO_LONG_MARKER,
    DEFAULT_FETCH_WORKERS,
    MAX_FETCH_WORKERS,
    DEFAULT_RETRY_CONFIG,
    RETRYABLE_STATUS_CODES,
)

from kv_compare.core.colors import ConsoleColors
from kv_compare.core.vaults import ResolvedVault, VaultResolver

__all__ = [
    '__version__',
    # Exceptions
    'KVCompareError',
    'ConfigurationError',
    'EnumerationError',
    'RetryableHTTPError',
    # Config dataclasses
    'RetryConfig',
    'LogConfig',
    'CircuitState',
    'CircuitBreakerConfig',
    'CompareConfig',
    # Constants
    'BANNER_WIDTH',
    'MAX_DISPLAY_VALUE_LENGTH',
    'NOT_FOUND_MARKER',
    'VALUE_TOO_LONG_MARKER',
    'DEFAULT_FETCH_WORKERS',
    'MAX_FETCH_WORKERS',
    'DEFAULT_RETRY_CONFIG',
    'RETRYABLE_STATUS_CODES',
    # Colors
    'ConsoleColors',
    # Vaults
    'ResolvedVault',
    'VaultResolver',
]
