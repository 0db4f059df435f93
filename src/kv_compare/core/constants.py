"""Constants and default values for kv_compare.

This module centralizes all magic numbers, display markers and default
configurations used throughout the application.
"""

from typing import Any

from kv_compare.core.config import RetryConfig

# ==================== DISPLAY CONSTANTS ====================

# Width of banner separator lines (used across CLI output)
BANNER_WIDTH: int = 60

# Values longer than this are never printed, only replaced by a marker
MAX_DISPLAY_VALUE_LENGTH: int = 300

NOT_FOUND_MARKER: str = "Not Found"
VALUE_TOO_LONG_MARKER: str = "Value too long to display"

# Width of the text bars drawn for success rate and match rate
RATE_BAR_WIDTH: int = 40

# ==================== WORKER LIMITS ====================

DEFAULT_FETCH_WORKERS: int = 4  # Concurrent get-secret threads per store
MAX_FETCH_WORKERS: int = 64

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# ==================== DEFAULT CONFIG INSTANCES ====================

DEFAULT_RETRY = RetryConfig()

# Dict form read by the retry helpers (env vars may override individual keys)
DEFAULT_RETRY_CONFIG: dict[str, Any] = DEFAULT_RETRY.to_dict()

# ==================== RETRYABLE ERRORS ====================

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES: set[int] = {408, 429, 500, 502, 503, 504}

# ==================== VAULT LOCATORS ====================

KEYVAULT_DNS_SUFFIX: str = "vault.azure.net"
DEFAULT_CONFIG_FILE: str = "kv_compare.json"

# Aliases are looked up as KV_VAULT_<ALIAS> (e.g. KV_VAULT_DEV)
VAULT_ENV_PREFIX: str = "KV_VAULT_"

# ==================== EXIT CODES ====================

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_DIFFERENCES_FOUND: int = 2
