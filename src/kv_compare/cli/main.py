"""CLI entrypoint for kv_compare."""

from __future__ import annotations

import argparse
import os
import sys
from typing import NoReturn

from dotenv import load_dotenv

from kv_compare.cli.parser import parse_arguments
from kv_compare.core.colors import ConsoleColors
from kv_compare.core.config import CompareConfig
from kv_compare.core.constants import EXIT_ERROR
from kv_compare.core.exceptions import EnumerationError, KVCompareError
from kv_compare.core.logging import setup_logging


def _exit_error(msg: str) -> NoReturn:
    """Print a coloured error message to stderr and exit with code 1."""
    print(ConsoleColors.error(f"ERROR: {msg}"), file=sys.stderr)
    sys.exit(EXIT_ERROR)


def _validate_arguments(args: argparse.Namespace) -> None:
    if args.max_retries < 0:
        _exit_error("--max-retries cannot be negative")
    if args.retry_base_delay < 0:
        _exit_error("--retry-base-delay cannot be negative")
    if args.retry_max_delay < args.retry_base_delay:
        _exit_error("--retry-max-delay must be >= --retry-base-delay")


def _export_retry_settings(config: CompareConfig) -> None:
    # The retry helpers read these, so CLI flags reach every call site
    os.environ["MAX_RETRIES"] = str(config.retry.max_retries)
    os.environ["RETRY_BASE_DELAY"] = str(config.retry.base_delay)
    os.environ["RETRY_MAX_DELAY"] = str(config.retry.max_delay)


def _report_enumeration_error(error: EnumerationError) -> None:
    status_code = getattr(error.original_error, "status_code", None)
    if isinstance(status_code, int):
        from kv_compare.api.resilience import ErrorMessageHelper

        print(
            ErrorMessageHelper.get_http_error_message(status_code, operation=f"listing secrets in {error.store_label}"),
            file=sys.stderr,
        )


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run the selected command and return its exit code."""
    load_dotenv()

    args = parse_arguments(argv)
    ConsoleColors.configure(no_color=args.no_color)
    _validate_arguments(args)

    config = CompareConfig.from_args(args)
    _export_retry_settings(config)

    logger = setup_logging(
        command=args.command,
        log_level="WARNING" if config.quiet and config.log.level == "INFO" else config.log.level,
        log_format=config.log.log_format,
        log_dir=args.log_dir or None,
    )

    if args.command == "list":
        from kv_compare.cli.commands import run_list as handler
    else:
        from kv_compare.cli.commands import run_compare as handler

    try:
        return handler(args, config, logger)
    except EnumerationError as e:
        logger.error(str(e))
        _report_enumeration_error(e)
        _exit_error(str(e))
    except KVCompareError as e:
        logger.error(str(e))
        _exit_error(str(e))
    except KeyboardInterrupt:
        print(ConsoleColors.warning("Cancelled by user"), file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        logger.critical(f"Unexpected error during {args.command}: {type(e).__name__}: {e}")
        logger.debug("Full exception details:", exc_info=True)
        _exit_error(f"{type(e).__name__}: {e}")


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the script"""
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
