#!/usr/bin/env python3
"""
Main orchestration module for the Latest Books tool.

For each configured author:
build query URL → fetch → locate records → normalize and filter → print

It handles command-line options, configuration validation, logging
setup and error handling for the entire run.

Usage:
    latest-books [-v] [-s] [-d] [-c CONFIG]
"""

import argparse
import sys
import time
from typing import List, Optional, TextIO

import requests

from latest_books.catalog import build_query_url, get_media_code, search_term
from latest_books.config import (
    AuthorEntry,
    CatalogConfig,
    ConfigError,
    load_config,
    validate_config,
)
from latest_books.fetch import TransportError, create_session, fetch_page
from latest_books.locate import get_layout, locate_records
from latest_books.records import current_year, extract_and_filter
from latest_books.report import (
    format_author_titles,
    format_config,
    format_manual_search_warning,
)
from latest_books.utils import setup_logging, get_logger, get_env_var


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 1
EXIT_CONFIG_ERROR = 2


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with EXIT_USAGE on bad options."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = _ArgumentParser(
        prog="latest-books",
        description=(
            "List this year's publications in a library's online catalog "
            "for a configured list of authors."
        ),
    )
    parser.add_argument(
        "-v", dest="view", action="store_true",
        help="view the processed contents of the configuration file",
    )
    parser.add_argument(
        "-s", dest="sort_by_media", action="store_true",
        help=(
            "sort by media type; only if allowed by the online catalog. "
            "If connection or search fails, try without this option"
        ),
    )
    parser.add_argument(
        "-d", dest="debug", action="store_true",
        help="debug mode: log the full URL query and the records found",
    )
    parser.add_argument(
        "-c", dest="config", metavar="CONFIG",
        help="alternative configuration file (default: config/latest_books.json)",
    )
    return parser


def lookup_author(
    author: AuthorEntry,
    config: CatalogConfig,
    session: requests.Session,
    target_year: str,
    sort_by_media: bool = False,
    trace: bool = False
) -> Optional[List[str]]:
    """
    Query the catalog for one author and return this year's titles.

    Args:
        author: Author to look up.
        config: Validated configuration.
        session: Session used for the catalog request.
        target_year: 4-digit year string.
        sort_by_media: Limit the search to the author's media type.
        trace: Log the query URL and the located records.

    Returns:
        Titles to report, or None when the result page was not recognized.

    Raises:
        TransportError: If the catalog page cannot be fetched.
    """
    media = get_media_code(author.media_type or config.media_type)
    url = build_query_url(
        config.library_url,
        author.last_name,
        author.first_name,
        media=media,
        sort_by_media=sort_by_media,
    )

    html = fetch_page(url, session, timeout=config.timeout, trace=trace)
    records = locate_records(html, get_layout(config.layout), trace=trace)

    if records is None:
        return None

    return extract_and_filter(records, author.display_name, target_year, author.ignore)


def run_lookups(
    config: CatalogConfig,
    sort_by_media: bool = False,
    trace: bool = False,
    out: Optional[TextIO] = None,
    target_year: Optional[str] = None,
    session: Optional[requests.Session] = None,
    err: Optional[TextIO] = None
) -> int:
    """
    Look up every configured author in order and print the results.

    Authors whose result page is not recognized get a one-line
    diagnostic on the error stream, whatever the log level, and are
    skipped. A transport failure stops the run.

    Args:
        config: Validated configuration.
        sort_by_media: Limit each search to the author's media type.
        trace: Log query URLs and located records.
        out: Stream for the report. Defaults to sys.stdout.
        target_year: Year to report. Defaults to the current year.
        session: Session to reuse. A new one is created (and closed) if None.
        err: Stream for per-author diagnostics. Defaults to sys.stderr.

    Returns:
        Number of authors skipped because their page was not recognized.

    Raises:
        TransportError: If a catalog page cannot be fetched.
    """
    logger = get_logger("main")
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    if target_year is None:
        target_year = current_year()

    owns_session = session is None
    if session is None:
        session = create_session()

    skipped = 0
    logger.info(f"Looking up {len(config.authors)} author(s) for {target_year}")

    try:
        for i, author in enumerate(config.authors):
            titles = lookup_author(
                author,
                config,
                session,
                target_year,
                sort_by_media=sort_by_media,
                trace=trace,
            )

            if titles is None:
                skipped += 1
                err.write(
                    format_manual_search_warning(
                        search_term(author.last_name, author.first_name)
                    ) + "\n"
                )
                err.flush()
            else:
                out.write(format_author_titles(author.display_name, titles))
                out.flush()

            # Courtesy delay between requests (except after the last one)
            if i < len(config.authors) - 1 and config.request_delay > 0:
                time.sleep(config.request_delay)

    finally:
        if owns_session:
            session.close()

    logger.info(
        f"Lookup complete: {len(config.authors) - skipped}/{len(config.authors)} "
        f"author(s) reported"
    )
    return skipped


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Latest Books tool.

    Parses options, sets up logging, loads and validates the
    configuration and runs the lookups with proper error handling.

    Returns:
        Exit code for the process.
    """
    args = build_parser().parse_args(argv)

    if args.debug:
        log_level = "DEBUG"
    else:
        log_level = get_env_var("LOG_LEVEL", required=False, default="INFO")

    setup_logging(log_level)
    logger = get_logger("main")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    if args.view:
        sys.stdout.write(format_config(config))
        return EXIT_SUCCESS

    if not config.authors:
        logger.warning("Nothing to do -- no authors found in config file")
        return EXIT_SUCCESS

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(error)
        logger.error("To view the processed config file, rerun with option '-v'")
        return EXIT_CONFIG_ERROR

    try:
        run_lookups(config, sort_by_media=args.sort_by_media, trace=args.debug)
        return EXIT_SUCCESS

    except TransportError as e:
        logger.error(f"Library URL is invalid or unreachable: {e}")
        return EXIT_FAILURE

    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
