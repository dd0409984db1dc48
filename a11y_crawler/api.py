# a11y_crawler/api.py
# The primary, programmer-facing API for the library.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from a11y_crawler.config import load_config, with_defaults
from a11y_crawler.crawler import Crawler
from a11y_crawler.errors import UsageError
from a11y_crawler.models import CrawlSession
from a11y_crawler.url_logic import is_fetchable_url, origin_of

log = logging.getLogger(__name__)


def validate_start_url(start_url: str) -> str:
    """Return `start_url` if it is an absolute http(s) URL, else raise UsageError."""
    if not start_url or not is_fetchable_url(start_url) or not origin_of(start_url):
        raise UsageError(f"Not an absolute http(s) URL: {start_url!r}")
    return start_url


async def crawl_site(
    start_url: str,
    *,
    max_pages: int | None = None,
    timeout: float | None = None,
    lighthouse: bool | None = None,
    pyproject_path: Path | None = None,
    config: dict[str, Any] | None = None,
    browser: Any = None,
    analyzer: Any = None,
) -> CrawlSession:
    """
    Crawl a site and return its accessibility results.

    Args:
        start_url: The page to start from. Only pages on its origin are visited.
        max_pages: Override the page budget.
        timeout: Override the per-page navigation timeout, in seconds.
        lighthouse: Enable or disable the Lighthouse score for each page.
        pyproject_path: Read `[tool.a11y_crawler]` from this file instead of ./pyproject.toml.
        config: A fully loaded config; skips reading pyproject.toml when given.
        browser: Alternative browser layer (defaults to Playwright/Chromium).
        analyzer: Alternative page analyzer (defaults to axe-core + Lighthouse).

    Returns:
        The finished CrawlSession, with results in the order pages were analyzed.

    Raises:
        UsageError: start_url is not an absolute http(s) URL.
        FatalLaunchFailure: the browser could not be started.
    """
    validate_start_url(start_url)
    log.info("Starting new accessibility crawl for: %s", start_url)

    # Load base config from defaults + pyproject.toml
    if config is None:
        config = load_config(pyproject_path)
        log.debug("Loaded base configuration.")
    else:
        # Fill in anything a partial config leaves out; the caller's dict is not touched.
        config = with_defaults(config)

    # Apply overrides if provided
    if max_pages is not None:
        config["max_pages"] = max_pages
        log.info("Applied override - max_pages set to: %d", max_pages)
    if timeout is not None:
        config["timeout"] = timeout
        log.info("Applied override - timeout set to: %s", timeout)
    if lighthouse is not None:
        config["lighthouse"]["enabled"] = lighthouse
        log.info("Applied override - lighthouse enabled: %s", lighthouse)

    async with Crawler(
        start_url, config, browser=browser, analyzer=analyzer
    ) as crawler:
        session = await crawler.crawl()

    log.info(
        "Crawl complete. Analyzed %d page(s), %d error(s).",
        len(session.results),
        len(session.errors),
    )
    return session
