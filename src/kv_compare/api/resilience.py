"""Resilience utilities for Key Vault calls.

Retry with exponential backoff, an opt-in circuit breaker, and actionable
error messages for the failures users actually hit (auth, RBAC, throttling).
"""

import logging
import math
import os
import random
import threading
import time
from collections.abc import Callable
from typing import Any

from azure.core.exceptions import ServiceRequestError, ServiceResponseError

from kv_compare.core.config import CircuitBreakerConfig, CircuitState
from kv_compare.core.constants import BANNER_WIDTH, DEFAULT_RETRY_CONFIG
from kv_compare.core.exceptions import RetryableHTTPError

_RETRY_ENV_VARS = {
    "max_retries": ("MAX_RETRIES", int),
    "base_delay": ("RETRY_BASE_DELAY", float),
    "max_delay": ("RETRY_MAX_DELAY", float),
}


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


def _effective_retry_config() -> dict[str, Any]:
    """Return retry settings with MAX_RETRIES / RETRY_*_DELAY overrides applied.

    The CLI exports its retry flags into these variables, so the defaults
    dict itself is never mutated.
    """
    cfg = dict(DEFAULT_RETRY_CONFIG)
    logger = logging.getLogger(__name__)

    for key, (env_var, cast) in _RETRY_ENV_VARS.items():
        if env_var not in os.environ:
            continue
        parsed = _parse_env_numeric(os.environ[env_var], cast)
        if parsed is not None and parsed >= 0:
            cfg[key] = parsed
        else:
            logger.warning(f"Ignoring invalid {env_var}={os.environ[env_var]!r}; using default {cfg[key]}")

    # A window with max < base would produce a delay below the base
    if cfg["max_delay"] < cfg["base_delay"]:
        logger.warning(
            f"Ignoring invalid retry delay window (max_delay={cfg['max_delay']} < base_delay={cfg['base_delay']}); "
            f"using max_delay={cfg['base_delay']}"
        )
        cfg["max_delay"] = cfg["base_delay"]

    return cfg


class ErrorMessageHelper:
    """Builds multi-line error explanations with suggestions for Key Vault failures."""

    DOCS_URL = "https://learn.microsoft.com/azure/key-vault/general/troubleshooting-access-issues"

    HTTP_MESSAGES: dict[int, dict[str, Any]] = {
        401: {
            "title": "Authentication Failed",
            "reason": "No valid Azure credential was presented to the vault",
            "suggestions": [
                "Run 'az login' or set AZURE_CLIENT_ID / AZURE_TENANT_ID / AZURE_CLIENT_SECRET",
                "Check that the credential's tenant matches the vault's tenant",
                "Managed identities must be assigned to the host running this tool",
            ],
        },
        403: {
            "title": "Access Forbidden",
            "reason": "The identity is authenticated but may not read secrets from this vault",
            "suggestions": [
                "Grant 'Key Vault Secrets User' (RBAC) or 'Get, List' secret permissions (access policy)",
                "Check the vault's firewall and private endpoint rules",
                "Role assignments can take a few minutes to propagate",
            ],
        },
        404: {
            "title": "Not Found",
            "reason": "The vault or secret does not exist, or the secret is disabled",
            "suggestions": [
                "Double-check the vault name or URL for typos",
                "Run 'kv_compare list <vault>' to see what the vault contains",
            ],
        },
        429: {
            "title": "Throttled",
            "reason": "Key Vault's service limits were exceeded",
            "suggestions": [
                "Reduce concurrency (--workers 2)",
                "Retry with longer delays (--retry-max-delay 60)",
                "Use --circuit-breaker to stop early when a vault keeps throttling",
            ],
        },
    }

    SERVER_ERROR: dict[str, Any] = {
        "title": "Service Error",
        "reason": "Key Vault returned a server-side error",
        "suggestions": [
            "This is usually transient, retry in a few minutes",
            "Increase retry attempts (--max-retries 5)",
            "Check Azure status: https://azure.status.microsoft/",
        ],
    }

    @staticmethod
    def _render(header: str, lines: list[str], reason: str, suggestions: list[str]) -> str:
        output = ["=" * BANNER_WIDTH, header, "=" * BANNER_WIDTH, *lines, "", "Why this happened:", f"  {reason}", ""]
        output.append("How to fix it:")
        output.extend(f"  {i}. {s}" for i, s in enumerate(suggestions, 1))
        output.extend(["", f"For more help: {ErrorMessageHelper.DOCS_URL}"])
        return "\n".join(output)

    @classmethod
    def get_http_error_message(cls, status_code: int, operation: str = "Key Vault call") -> str:
        """Explain an HTTP status code returned by the vault."""
        if status_code in cls.HTTP_MESSAGES:
            info = cls.HTTP_MESSAGES[status_code]
        elif status_code >= 500:
            info = cls.SERVER_ERROR
        else:
            info = {
                "title": "Unexpected Response",
                "reason": "The vault returned an unexpected HTTP status",
                "suggestions": ["Re-run with --log-level DEBUG and review the log file"],
            }
        return cls._render(
            f"HTTP {status_code}: {info['title']}", [f"Operation: {operation}"], info["reason"], info["suggestions"]
        )

    @classmethod
    def get_network_error_message(cls, error: Exception, operation: str = "operation") -> str:
        """Explain a connection-level failure."""
        error_type = type(error).__name__
        if isinstance(error, TimeoutError) or "timeout" in error_type.lower():
            reason = "The request to the vault timed out"
            suggestions = [
                "Your network may be slow or unstable",
                "Increase --retry-max-delay and --max-retries",
            ]
        else:
            reason = "Cannot establish a connection to the vault"
            suggestions = [
                "Check the vault URL resolves (private endpoints need private DNS)",
                "Check proxy settings (HTTPS_PROXY) and corporate firewalls",
                "Try again in a few moments",
            ]
        return cls._render(
            f"Network Error: {error_type}",
            [f"During: {operation}", f"Error details: {error!s}"],
            reason,
            suggestions,
        )


# Exceptions that should trigger a retry (transient errors)
RETRYABLE_EXCEPTIONS: tuple[type, ...] = (
    ConnectionError,
    TimeoutError,
    OSError,
    ServiceRequestError,  # request never reached the vault
    ServiceResponseError,  # connection dropped mid-response
    RetryableHTTPError,
)

_NETWORK_EXCEPTIONS: tuple[type, ...] = (OSError, ServiceRequestError, ServiceResponseError)


def _log_exhausted(logger: logging.Logger, error: Exception, operation: str, attempts: int) -> None:
    logger.error(f"All {attempts} attempts failed for {operation}")
    if isinstance(error, RetryableHTTPError):
        logger.error("\n" + ErrorMessageHelper.get_http_error_message(error.status_code, operation=operation))
    elif isinstance(error, _NETWORK_EXCEPTIONS):
        logger.error("\n" + ErrorMessageHelper.get_network_error_message(error, operation=operation))
    else:
        logger.error(f"Error: {error!s}")


def _backoff_delay(attempt: int, base_delay: float, max_delay: float, exponential_base: int, jitter: bool) -> float:
    delay = min(base_delay * (exponential_base**attempt), max_delay)
    if jitter:
        delay = delay * random.uniform(0.5, 1.5)
    return delay


class CircuitBreaker:
    """
    Thread-safe circuit breaker shared by the resolve calls of one fetch.

    Only exhausted transient failures (throttling, 5xx, network) count
    toward tripping. A 403 or 404 on one secret says nothing about the
    vault's health and is never counted.

    - CLOSED: calls get the full retry budget
    - OPEN: tripped after ``failure_threshold`` consecutive transient
      failures; calls still run but get a single attempt with no backoff
      until ``timeout_seconds`` have passed
    - HALF_OPEN: ``success_threshold`` successes close the circuit, any
      transient failure reopens it

    Every secret is always read at least once, so the breaker never turns a
    readable secret into an unresolved one.

    Example:
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=3))
        value = make_api_call_with_retry(client.get_secret, name, circuit_breaker=breaker)
    """

    def __init__(self, config: CircuitBreakerConfig | None = None, logger: logging.Logger | None = None):
        self.config = config or CircuitBreakerConfig()
        self.logger = logger or logging.getLogger(__name__)

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None
        self._lock = threading.Lock()

        self._total_requests = 0
        self._total_failures = 0
        self._single_attempt_calls = 0
        self._trips = 0

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    def allow_retries(self) -> bool:
        """Return False while open (moves OPEN to HALF_OPEN once the timeout elapsed)."""
        with self._lock:
            self._total_requests += 1

            if self._state == CircuitState.OPEN:
                if (
                    self._last_failure_time is not None
                    and time.time() - self._last_failure_time >= self.config.timeout_seconds
                ):
                    self._transition_to(CircuitState.HALF_OPEN)
                    return True
                self._single_attempt_calls += 1
                return False

            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.CLOSED:
                self._failure_count = 0
                return
            if self._state == CircuitState.OPEN:
                # The vault answered a single-attempt call; start probing recovery
                self._transition_to(CircuitState.HALF_OPEN)
            self._success_count += 1
            if self._success_count >= self.config.success_threshold:
                self._transition_to(CircuitState.CLOSED)
                self._failure_count = 0
                self._success_count = 0

    def record_failure(self, exception: Exception | None = None) -> None:
        with self._lock:
            self._failure_count += 1
            self._total_failures += 1
            self._last_failure_time = time.time()

            if self._state == CircuitState.CLOSED and self._failure_count >= self.config.failure_threshold:
                self._transition_to(CircuitState.OPEN)
                self._trips += 1
            elif self._state == CircuitState.HALF_OPEN:
                self._transition_to(CircuitState.OPEN)
                self._success_count = 0

    def _transition_to(self, new_state: CircuitState) -> None:
        # Caller holds the lock
        old_state = self._state
        self._state = new_state
        if old_state != new_state:
            self.logger.info(
                f"Circuit breaker state: {old_state.value} → {new_state.value} (failures={self._failure_count})"
            )

    def get_statistics(self) -> dict[str, Any]:
        with self._lock:
            return {
                "state": self._state.value,
                "total_requests": self._total_requests,
                "total_failures": self._total_failures,
                "single_attempt_calls": self._single_attempt_calls,
                "trips": self._trips,
            }


def make_api_call_with_retry[T](
    api_func: Callable[..., T],
    *args: Any,
    logger: logging.Logger | None = None,
    operation_name: str = "Key Vault call",
    circuit_breaker: CircuitBreaker | None = None,
    **kwargs: Any,
) -> T:
    """
    Execute a vault call with retry logic and an optional circuit breaker.

    Retryable exceptions are retried with backoff using the env-adjusted
    retry settings. Anything else is re-raised on the first attempt. While
    the breaker is open the call gets one attempt and no retries. The
    breaker records one failure per exhausted transient call, not per
    attempt.

    Raises:
        The last exception if all attempts fail
    """
    _logger = logger or logging.getLogger(__name__)
    cfg = _effective_retry_config()
    attempts = cfg["max_retries"] + 1

    if circuit_breaker is not None and not circuit_breaker.allow_retries():
        _logger.debug(f"Circuit breaker open; single attempt for {operation_name}")
        attempts = 1

    for attempt in range(attempts):
        try:
            result = api_func(*args, **kwargs)
        except RETRYABLE_EXCEPTIONS as e:
            if attempt == attempts - 1:
                _log_exhausted(_logger, e, operation_name, attempts)
                if circuit_breaker is not None:
                    circuit_breaker.record_failure(e)
                raise
            delay = _backoff_delay(attempt, cfg["base_delay"], cfg["max_delay"], cfg["exponential_base"], cfg["jitter"])
            _logger.warning(
                f"⚠ {operation_name} attempt {attempt + 1}/{attempts} failed: {e!s}. Retrying in {delay:.1f}s..."
            )
            time.sleep(delay)
            continue
        except Exception as e:
            # Not a vault health signal (missing secret, RBAC); leave the breaker alone
            _logger.debug(f"{operation_name} failed with non-retryable error: {type(e).__name__}")
            raise

        if attempt > 0:
            _logger.info(f"✓ {operation_name} succeeded on attempt {attempt + 1}/{attempts}")
        if circuit_breaker is not None:
            circuit_breaker.record_success()
        return result

    raise RuntimeError(f"Retry loop exited unexpectedly for {operation_name}")
