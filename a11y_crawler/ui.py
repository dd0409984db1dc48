# a11y_crawler/ui.py
# Presentation-only utilities for CLI output.
from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable

from a11y_crawler.models import Summary

USAGE_LINES = (
    "Usage: a11y-crawler <url> [options]",
    "Options:",
    "  --max-pages <number>  Maximum pages to crawl (default: 10)",
    "  --output <file>       Output file name (default: reports/{hostname}-{timestamp}.md)",
    "  --lighthouse          Also record a Lighthouse accessibility score per page",
    "  --timeout <seconds>   Per-page navigation timeout (default: 30)",
)


def _writeln(text: str = "", *, file: IO[str]) -> None:
    file.write(text + "\n")


def render_usage(message: str | None, *, file: IO[str]) -> None:
    if message:
        _writeln(f"Error: {message}", file=file)
    for line in USAGE_LINES:
        _writeln(line, file=file)


def render_start_banner(url: str, max_pages: int, *, file: IO[str]) -> None:
    _writeln("🔍 Starting accessibility crawl...", file=file)
    _writeln(f"URL: {url}", file=file)
    _writeln(f"Max pages: {max_pages}\n", file=file)


def render_summary_line(summary: Summary, *, file: IO[str]) -> None:
    _writeln(
        f"\nPages analyzed: {summary.pages}, violations: {summary.total_violations} "
        f"(critical: {summary.critical}, serious: {summary.serious})",
        file=file,
    )


def render_report_written(path: Path, *, file: IO[str]) -> None:
    _writeln(f"\n✅ Report generated: {path}", file=file)


def render_errors_section(errors: Iterable[str], *, file: IO[str]) -> None:
    errs = list(errors)
    if not errs:
        return
    _writeln("\n--- Pages Not Analyzed ---", file=file)
    for e in errs:
        _writeln(f"- {e}", file=file)
