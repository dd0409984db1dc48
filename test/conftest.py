# In-memory stand-ins for the browser layer and the page analyzer.
# They let the crawler run end to end without Chromium or axe-core.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from a11y_crawler.browser import DebugConnection
from a11y_crawler.errors import AnalysisFailure, NavigationFailure, ScoreAnalysisFailure
from a11y_crawler.models import Issue, PageAnalysis


class FakePage:
    def __init__(self) -> None:
        self.url = "about:blank"
        self.closed = False


class FakeBrowser:
    """
    `site` maps canonical URLs to the links found on that page.
    URLs missing from `site` behave like a 404.
    """

    def __init__(
        self,
        site: Dict[str, List[str]],
        failing: Iterable[str] = (),
        connection: Optional[DebugConnection] = None,
    ) -> None:
        self.site = site
        self.failing = set(failing)
        self.connection = connection
        self.started = False
        self.closed = False
        self.navigated: List[str] = []
        self.pages: List[FakePage] = []
        self.open_pages = 0
        self.max_open_pages = 0

    async def start(self) -> None:
        self.started = True

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.pages.append(page)
        self.open_pages += 1
        self.max_open_pages = max(self.max_open_pages, self.open_pages)
        return page

    async def navigate(self, page: FakePage, url: str) -> None:
        self.navigated.append(url)
        if url in self.failing:
            raise NavigationFailure(url, "net::ERR_CONNECTION_REFUSED")
        if url not in self.site:
            raise NavigationFailure(url, "HTTP error 404")
        page.url = url

    async def extract_hyperlinks(self, page: FakePage) -> List[str]:
        return list(self.site[page.url])

    async def close_page(self, page: FakePage) -> None:
        page.closed = True
        self.open_pages -= 1

    async def debug_connection(self) -> DebugConnection:
        if self.connection is None:
            raise ScoreAnalysisFailure("Remote debugging is not enabled.")
        return self.connection

    async def close(self) -> None:
        self.closed = True


class FakeAnalyzer:
    """Returns canned issues per URL and remembers what it was asked to analyze."""

    def __init__(
        self,
        issues: Optional[Dict[str, List[Issue]]] = None,
        failing: Iterable[str] = (),
        lighthouse: object = None,
        visited=None,
    ) -> None:
        self.issues = issues or {}
        self.failing = set(failing)
        self.lighthouse = lighthouse
        self.analyzed: List[str] = []
        self.connections: List[Optional[DebugConnection]] = []
        # optional VisitedSet to sample during analysis
        self.visited = visited
        self.visited_sizes: List[int] = []

    async def analyze(self, page, url, connection=None) -> PageAnalysis:
        self.analyzed.append(url)
        self.connections.append(connection)
        if self.visited is not None:
            self.visited_sizes.append(len(self.visited))
        if url in self.failing:
            raise AnalysisFailure("axe-core failed: Execution context was destroyed")
        return PageAnalysis(issues=tuple(self.issues.get(url, ())))


def make_issue(id="image-alt", severity="critical", elements=()) -> Issue:
    return Issue(
        id=id,
        help=f"{id} help",
        description=f"{id} description",
        severity=severity,
        help_url=f"https://dequeuniversity.com/rules/axe/4.8/{id}",
        elements=tuple(elements),
    )


FIXED_NOW = datetime(2024, 5, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
