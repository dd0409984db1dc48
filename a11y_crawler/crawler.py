# a11y_crawler/crawler.py
"""
Depth-first, budget-bounded crawl of one origin.

Responsibilities:
- Own the browser for the whole session and release it on every exit path.
- Walk same-origin links depth-first with an explicit LIFO frontier, one
  page open at a time.
- Reserve each canonical URL before navigating, so a URL is never analyzed
  twice and the visited set never exceeds the page budget.
- Record a PageResult as soon as a page is analyzed, before its links are
  followed.

Per-page failures (navigation, axe-core) are logged, recorded in
`session.errors`, and the crawl moves on. Only a browser launch failure
aborts the session.

Config keys consumed:
  - max_pages: int
  - everything PlaywrightBrowser and PageAnalyzer consume
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from a11y_crawler.analysis import PageAnalyzer
from a11y_crawler.browser import DebugConnection, PlaywrightBrowser
from a11y_crawler.budget import DEFAULT_MAX_PAGES, VisitedSet
from a11y_crawler.errors import ScoreAnalysisFailure, UsageError
from a11y_crawler.models import CrawlSession, PageResult
from a11y_crawler.url_logic import (
    is_document_like,
    is_in_scope,
    normalize_url,
    origin_of,
)

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Crawler:
    """
    Crawls `start_url`'s origin and accumulates accessibility results.

    `browser` and `analyzer` default to the Playwright and axe/Lighthouse
    implementations; anything with the same methods can stand in for them.
    """

    start_url: str
    config: Dict[str, Any]
    browser: Any = None
    analyzer: Any = None
    clock: Callable[[], datetime] = utc_now

    # Frontier: discovered but not yet processed URLs. Last in, first out.
    frontier: List[str] = field(default_factory=list)

    session: CrawlSession = field(init=False)
    _connection: Optional[DebugConnection] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        raw = self.config.get("max_pages", DEFAULT_MAX_PAGES)
        try:
            max_pages = int(raw)
        except (TypeError, ValueError):
            raise UsageError(f"max_pages must be an integer, got {raw!r}") from None
        if max_pages < 0:
            raise UsageError(f"max_pages must be non-negative, got {max_pages}")
        self.session = CrawlSession(
            start_url=self.start_url,
            base_origin=origin_of(self.start_url),
            max_pages=max_pages,
            visited=VisitedSet(max_pages),
        )

    async def __aenter__(self) -> "Crawler":
        """Starts the browser and, if Lighthouse is enabled, finds its debug endpoint."""
        if self.browser is None:
            self.browser = PlaywrightBrowser(self.config)
        if self.analyzer is None:
            self.analyzer = PageAnalyzer.from_config(self.config)

        await self.browser.start()

        if getattr(self.analyzer, "lighthouse", None) is not None:
            try:
                self._connection = await self.browser.debug_connection()
                log.info(
                    "Lighthouse will attach to %s on port %d.",
                    self._connection.browser or "the browser",
                    self._connection.port,
                )
            except ScoreAnalysisFailure as e:
                log.warning("Lighthouse disabled for this crawl: %s", e)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Tears down the browser cleanly, whatever happened during the crawl."""
        await self.browser.close()

    def _timestamp(self) -> str:
        return self.clock().isoformat()

    def _should_visit(self, url: str) -> bool:
        """Visited check first, then scope, then document type."""
        if url in self.session.visited:
            log.debug("Skipping already visited URL: %s", url)
            return False
        if not is_in_scope(url, self.session.base_origin):
            log.debug("Skipping out-of-scope URL: %s", url)
            return False
        if not is_document_like(url):
            log.debug("Skipping non-document URL: %s", url)
            return False
        return True

    def _record_failure(self, url: str, error: BaseException) -> None:
        msg = f"Error crawling {url}: {error}"
        log.error(msg)
        self.session.errors.append(msg)

    async def _visit(self, url: str) -> List[str]:
        """
        Load, analyze and (budget permitting) expand one reserved URL.
        Returns the links to push onto the frontier. The page is closed before
        this returns, so at most one page is ever open.
        """
        page = None
        try:
            page = await self.browser.new_page()
            await self.browser.navigate(page, url)
            analysis = await self.analyzer.analyze(page, url, self._connection)
            self.session.results.append(
                PageResult(
                    url=url,
                    analyzed_at=self._timestamp(),
                    issues=analysis.issues,
                    score=analysis.score,
                )
            )
            log.info(
                "Analyzed %s: %d violation(s).", url, len(analysis.issues)
            )

            if self.session.visited.exhausted:
                return []
            links = await self.browser.extract_hyperlinks(page)
            log.debug("Found %d link(s) on %s.", len(links), url)
            return links
        except Exception as e:
            self._record_failure(url, e)
            return []
        finally:
            if page is not None:
                await self.browser.close_page(page)

    async def crawl(self) -> CrawlSession:
        """Depth-first crawl from start_url until the frontier empties or the budget runs out."""
        visited = self.session.visited
        self.session.started_at = self._timestamp()
        log.info(
            "Crawl start. origin=%s, max_pages=%d",
            self.session.base_origin,
            self.session.max_pages,
        )

        self.frontier.append(self.start_url)
        while self.frontier:
            url = normalize_url(self.frontier.pop())

            if visited.exhausted:
                log.info(
                    "Page budget of %d reached; abandoning %d queued link(s).",
                    visited.max_pages,
                    len(self.frontier) + 1,
                )
                break

            if not self._should_visit(url):
                continue
            if not visited.try_reserve(url):
                continue

            log.info("Crawling: %s (%d/%d)", url, len(visited), visited.max_pages)
            links = await self._visit(url)

            # Reversed so the first link on the page is the next one popped.
            self.frontier.extend(reversed(links))

        self.frontier.clear()
        self.session.finished_at = self._timestamp()
        log.info(
            "Crawl finished. Pages=%d, Errors=%d.",
            len(self.session.results),
            len(self.session.errors),
        )
        return self.session
