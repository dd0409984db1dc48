# Exceptions raised across a11y_crawler.

from __future__ import annotations


class A11yCrawlerError(Exception):
    """Base class for every error raised by this package."""


class UsageError(A11yCrawlerError):
    """Malformed or missing command-line input."""


class NavigationFailure(A11yCrawlerError):
    """A single page could not be loaded. The crawl continues without it."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class AnalysisFailure(A11yCrawlerError):
    """The rule-based engine failed on a page. The page is dropped."""


class ScoreAnalysisFailure(AnalysisFailure):
    """The score-based engine failed. The page is kept without a score."""


class FatalLaunchFailure(A11yCrawlerError):
    """The browser could not be started, so no crawl is possible."""
