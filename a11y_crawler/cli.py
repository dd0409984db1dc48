# a11y_crawler/cli.py
# Defines the command-line interface using argparse.

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import IO, NoReturn, Sequence

from a11y_crawler import __version__
from a11y_crawler.api import crawl_site, validate_start_url
from a11y_crawler.budget import DEFAULT_MAX_PAGES
from a11y_crawler.config import load_config
from a11y_crawler.crawler import utc_now
from a11y_crawler.errors import A11yCrawlerError, UsageError
from a11y_crawler.report import default_report_path, render_markdown, summarize, write_report
from a11y_crawler.ui import (
    render_errors_section,
    render_report_written,
    render_start_banner,
    render_summary_line,
    render_usage,
)

log = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with status 2 on bad input; we report usage errors as 1."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def parse_max_pages(value: str | None) -> int:
    """Non-numeric or non-positive values fall back to the default budget."""
    if value is None:
        return DEFAULT_MAX_PAGES
    try:
        parsed = int(value)
    except ValueError:
        return DEFAULT_MAX_PAGES
    return parsed if parsed > 0 else DEFAULT_MAX_PAGES


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Crawl a website and write a markdown accessibility report.",
        prog="a11y-crawler",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("url", nargs="?", help="The URL to start crawling from.")
    parser.add_argument(
        "--max-pages",
        metavar="N",
        default=None,
        help=f"Maximum number of pages to analyze (default: {DEFAULT_MAX_PAGES}).",
    )
    parser.add_argument(
        "--output",
        metavar="FILEPATH",
        default=None,
        help="Where to write the report (default: reports/{hostname}-{timestamp}.md).",
    )
    parser.add_argument(
        "--lighthouse",
        action="store_true",
        default=None,
        help="Also run Lighthouse for a 0-100 accessibility score per page.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        default=None,
        help="Per-page navigation timeout in seconds.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging to stderr."
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log warnings and errors."
    )
    return parser


async def async_main(
    argv: Sequence[str] | None = None,
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
) -> int:
    """Async entry point for the command-line interface."""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
        if not args.url or args.url.startswith("--"):
            raise UsageError("a start URL is required")
        validate_start_url(args.url)
    except UsageError as e:
        render_usage(str(e), file=stderr)
        return 1

    _configure_logging(args.verbose, args.quiet)

    config = load_config()
    if args.max_pages is None:
        max_pages = parse_max_pages(str(config.get("max_pages", DEFAULT_MAX_PAGES)))
    else:
        max_pages = parse_max_pages(args.max_pages)
    if args.output:
        output = Path(args.output)
    else:
        output = default_report_path(
            args.url, utc_now(), config.get("report_dir", "reports")
        )

    render_start_banner(args.url, max_pages, file=stdout)

    try:
        session = await crawl_site(
            args.url,
            max_pages=max_pages,
            timeout=args.timeout,
            lighthouse=args.lighthouse,
            config=config,
        )
        summary = summarize(session)
        write_report(output, render_markdown(session, summary))
    except A11yCrawlerError as e:
        log.critical("Crawl aborted: %s", e)
        return 1
    except OSError as e:
        log.critical("Could not write report to %s: %s", output, e)
        return 1

    render_summary_line(summary, file=stdout)
    render_errors_section(session.errors, file=stdout)
    render_report_written(output, file=stdout)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Synchronous wrapper for the CLI entry point."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
