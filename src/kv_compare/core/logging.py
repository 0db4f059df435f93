"""Logging helpers for kv_compare.

Secret values must never reach a log sink. The code itself only logs secret
names and error types; ``SensitiveDataFilter`` is the backstop for anything
that slips into a message from a third-party exception string (Azure SDK
errors can echo request headers or credential fields).
"""

import atexit
import contextlib
import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from kv_compare.core.constants import LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES

LOGGER_NAME = "kv_compare"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

REDACTED = "[REDACTED]"

# Attributes every LogRecord carries; anything else came in through `extra`
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}
_REDACTED_ATTR = "_kv_redacted"

# Field names whose values are always credentials
_CREDENTIAL_FIELDS = frozenset(
    {
        "password",
        "secret",
        "secret_value",
        "value",
        "client_secret",
        "token",
        "access_token",
        "refresh_token",
        "api_key",
        "private_key",
        "authorization",
        "sig",
    }
)

# key=value / key: value / "key": "value" pairs inside free text
_KEY_VALUE_PATTERN = re.compile(
    r"""(?ix)
    (?P<key>["']?(?<![\w])
        (?:client[_-]?secret|access[_-]?token|refresh[_-]?token|api[_-]?key|
           private[_-]?key|secret[_-]?value|password|token|sig)
    (?![\w])["']?)
    (?P<sep>\s*[:=]\s*)
    (?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^,\s;&}\]]+)
    """
)
_BEARER_PATTERN = re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9._~+/=-]+")


def _field_is_credential(name: str) -> bool:
    # camelCase and kebab-case both normalize to snake_case
    normalized = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower().replace("-", "_")
    if normalized in _CREDENTIAL_FIELDS:
        return True
    parts = normalized.split("_")
    # "secret_name" is safe to log; "db_password" and "sas_token" are not
    return "password" in parts or "token" in parts or parts[-1] == "secret"


def redact_text(text: str) -> str:
    """Mask credential values in free text, keeping keys and quoting intact."""

    def _mask(match: re.Match[str]) -> str:
        value = match.group("value")
        quote = value[0] if value[0] in "'\"" and value[-1] == value[0] and len(value) > 1 else ""
        return f"{match.group('key')}{match.group('sep')}{quote}{REDACTED}{quote}"

    text = _KEY_VALUE_PATTERN.sub(_mask, text)
    return _BEARER_PATTERN.sub(lambda m: f"{m.group(1)} {REDACTED}", text)


def _redact_structure(value: object) -> object:
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and _field_is_credential(k) else _redact_structure(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_structure(v) for v in value)
    if isinstance(value, str):
        return redact_text(value)
    return value


def _render_message(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except (TypeError, ValueError):
        # Mismatched %-placeholders must not kill the log call
        return f"{record.msg} [log-message-format-error]"


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Redact credentials from the message and `extra` fields of each record.

    The message is rendered once (``msg % args``) and frozen, so handlers
    that run after this filter never see the raw arguments.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, _REDACTED_ATTR, False):
            return True

        record.msg = redact_text(_render_message(record))
        record.args = ()
        for key, value in _extra_fields(record).items():
            if _field_is_credential(key):
                setattr(record, key, REDACTED)
            else:
                with contextlib.suppress(Exception):
                    setattr(record, key, _redact_structure(value))

        setattr(record, _REDACTED_ATTR, True)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for Azure Monitor / ELK style ingestion."""

    def format(self, record: logging.LogRecord) -> str:
        message = _render_message(record)
        if not getattr(record, _REDACTED_ATTR, False):
            message = redact_text(message)

        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Store labels and other context added via with_log_context
        entry.update(_redact_structure(_extra_fields(record)))
        return json.dumps(entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose context is merged with per-call ``extra``."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_log_context(logger, **context):
    """Return ``logger`` wrapped so every record carries ``context``.

    Nested calls flatten into one adapter over the underlying Logger.
    ``None`` values are dropped. Objects that are not loggers (test
    doubles) are returned unchanged.
    """
    if not isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        return logger

    merged: dict[str, object] = {}
    while isinstance(logger, logging.LoggerAdapter):
        merged = {**(logger.extra or {}), **merged}
        logger = logger.logger
    merged.update({key: value for key, value in context.items() if value is not None})
    return ContextLoggerAdapter(logger, merged)


def _log_file_path(log_dir: str | Path, command: str | None) -> Path | None:
    directory = Path(log_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Warning: Cannot create logs directory: {e}. Logging to console only.", file=sys.stderr)
        return None
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return directory / f"kv_compare_{command or 'run'}_{stamp}.log"


_shutdown_registered = False


def setup_logging(
    command: str | None = None,
    log_level: str | None = None,
    log_format: str = "text",
    log_dir: str | Path | None = "logs",
) -> logging.Logger:
    """Configure root handlers and return the ``kv_compare`` logger.

    Console records go to stderr so stdout stays clean for rendered output.
    A rotating file handler is added under ``log_dir`` unless it is None.

    Args:
        command: Subcommand name, used in the log file name
        log_level: Level name; falls back to ``LOG_LEVEL`` then INFO
        log_format: "text" or "json"
        log_dir: Directory for log files, None for console only

    Returns:
        The package logger
    """
    global _shutdown_registered
    if not _shutdown_registered:
        atexit.register(logging.shutdown)
        _shutdown_registered = True

    level_name = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    if level_name not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid log level '{level_name}', using INFO", file=sys.stderr)
        level_name = "INFO"
    level = getattr(logging, level_name)

    log_file = _log_file_path(log_dir, command) if log_dir is not None else None

    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT))

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(SensitiveDataFilter())
        root.addHandler(handler)
    root.setLevel(level)

    # The Azure SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(logging.DEBUG if level == logging.DEBUG else logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.NOTSET)
    logger.debug(f"Logging initialized. Log file: {log_file}" if log_file else "Logging initialized. Console only.")
    return logger
