# Entrypoint for the a11y_crawler package.
# This file makes the public API available to programmers.

from __future__ import annotations

from a11y_crawler.__about__ import __version__
from a11y_crawler.api import crawl_site
from a11y_crawler.models import CrawlSession, Issue, PageResult, Summary
from a11y_crawler.report import render_markdown, summarize

# The __all__ variable defines the public API of the package.
# When a user writes `from a11y_crawler import *`, only these names will be imported.
__all__ = [
    "crawl_site",
    "render_markdown",
    "summarize",
    "CrawlSession",
    "Issue",
    "PageResult",
    "Summary",
    "__version__",
]
