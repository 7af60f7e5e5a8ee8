"""
CLI entry point for lmk-scraper.

Usage:
    python -m lmk_scraper
    python -m lmk_scraper --new
    python -m lmk_scraper --new --json

Environment:
    LOG_LEVEL    DEBUG, INFO, WARN or ERROR (default: INFO)
    LOG_FORMAT   json or console (default: json)
    SQLITE_FILE  history database for --new (default: ./db.sqlite)
"""

import argparse
import asyncio
import logging
import sys

import structlog

from .core.exceptions import ConfigError, ScraperError

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Configure structured logging on stderr."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="lmk-scraper",
        description="Food-safety inspection findings (Lebensmittelkontrolle) from verbraucherinfo-bw.de",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print all published findings as a table
  python -m lmk_scraper

  # Print only findings not seen in earlier runs, as JSON lines
  SQLITE_FILE=/var/lib/lmk/db.sqlite python -m lmk_scraper --new --json
        """,
    )

    parser.add_argument(
        "--new",
        action="store_true",
        help="new items only (records every finding in SQLITE_FILE)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="print as JSON lines",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to a settings.yml file",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


async def main_async(args, settings):
    """Async main function."""
    from .orchestrator import Scraper

    scraper = Scraper(settings, logger=structlog.get_logger("lmk_scraper"))
    return await scraper.run(new_only=args.new, as_json=args.json)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"lmk-scraper {__version__}")
        sys.exit(0)

    from .config.loader import load_settings

    # Defaults until the settings are known, so config warnings stay off stdout
    setup_logging()

    try:
        settings = load_settings(args.config, logger=structlog.get_logger("lmk_scraper"))
    except ConfigError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    # Setup logging
    setup_logging(settings.log_level, settings.log_format == "json")

    try:
        asyncio.run(main_async(args, settings))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except (ScraperError, OSError) as e:
        logger = structlog.get_logger(__name__)
        logger.error("failed_to_run", error=str(e), error_type=type(e).__name__)
        sys.exit(1)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
