"""Configuration dataclasses for kv_compare.

Every run is described by one ``CompareConfig`` built from the parsed CLI
arguments; the pieces are plain dataclasses so tests can construct them
directly.
"""

from __future__ import annotations

import argparse
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


@dataclass
class RetryConfig:
    """Exponential backoff settings for Key Vault calls.

    Attributes:
        max_retries: Retries after the first attempt (default: 3)
        base_delay: Delay before the first retry, in seconds (default: 1.0)
        max_delay: Upper bound for any single delay (default: 30.0)
        exponential_base: Growth factor between retries (default: 2)
        jitter: Scale each delay by a random factor in [0.5, 1.5] (default: True)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: int = 2
    jitter: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LogConfig:
    """Log level name and output format ("text" or "json")."""

    level: str = "INFO"
    log_format: str = "text"


class CircuitState(Enum):
    """States for the circuit breaker pattern."""

    CLOSED = "closed"  # Calls flow through
    OPEN = "open"  # Calls get a single attempt, no retries
    HALF_OPEN = "half_open"  # Trial calls decide whether to close again


@dataclass
class CircuitBreakerConfig:
    """Thresholds for the per-store circuit breaker (``--circuit-breaker``).

    Attributes:
        failure_threshold: Consecutive exhausted calls before opening (default: 5)
        success_threshold: Half-open successes needed to close (default: 2)
        timeout_seconds: Time spent open before retries resume (default: 30)
    """

    failure_threshold: int = 5
    success_threshold: int = 2
    timeout_seconds: float = 30.0


@dataclass
class CompareConfig:
    """Everything a list or compare run needs besides the vault locators.

    Attributes:
        retry: Backoff settings, exported to the environment for the retry helpers
        log: Logging settings
        fetch_workers: Concurrent get-secret threads per store
        circuit_breaker: Breaker thresholds, None when the breaker is off
        output_format: "console" or "json"
        config_file: JSON file holding vault aliases
        labels: (source, target) display labels for compare, None for the locators
        show_matches: Include matching secrets in the compare table
        summary_only: Only print statistics
        fail_on_diff: Exit with code 2 when differences are found
        quiet: Hide progress bars and INFO logging
        use_color: Emit ANSI colors
    """

    retry: RetryConfig = field(default_factory=RetryConfig)
    log: LogConfig = field(default_factory=LogConfig)
    fetch_workers: int = 4
    circuit_breaker: CircuitBreakerConfig | None = None
    output_format: str = "console"
    config_file: str = "kv_compare.json"
    labels: tuple[str, str] | None = None
    show_matches: bool = False
    summary_only: bool = False
    fail_on_diff: bool = False
    quiet: bool = False
    use_color: bool = True

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> CompareConfig:
        """Create configuration from parsed command-line arguments."""
        labels = getattr(args, "labels", None)
        return cls(
            retry=RetryConfig(
                max_retries=getattr(args, "max_retries", 3),
                base_delay=getattr(args, "retry_base_delay", 1.0),
                max_delay=getattr(args, "retry_max_delay", 30.0),
            ),
            log=LogConfig(
                level=getattr(args, "log_level", None) or "INFO",
                log_format=getattr(args, "log_format", "text"),
            ),
            fetch_workers=getattr(args, "workers", 4),
            circuit_breaker=CircuitBreakerConfig() if getattr(args, "circuit_breaker", False) else None,
            output_format=getattr(args, "format", "console"),
            config_file=getattr(args, "config", "kv_compare.json"),
            labels=tuple(labels) if labels else None,
            show_matches=getattr(args, "show_matches", False),
            summary_only=getattr(args, "summary", False),
            fail_on_diff=getattr(args, "fail_on_diff", False),
            quiet=getattr(args, "quiet", False),
            use_color=not getattr(args, "no_color", False),
        )
