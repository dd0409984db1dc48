# a11y_crawler/budget.py
"""
Visited set with a page budget.

The crawler runs one page at a time, so `try_reserve` cannot interleave with
another reservation; the check and the mark still happen in one call so
callers never split them.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator

log = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 10


class VisitedSet:
    """Canonical URLs already reserved for a crawl, capped at `max_pages`."""

    def __init__(self, max_pages: int = DEFAULT_MAX_PAGES):
        if max_pages < 0:
            raise ValueError(f"max_pages must be non-negative, got {max_pages}")
        self.max_pages = max_pages
        # dict keeps insertion order, which is reservation order
        self._seen: Dict[str, None] = {}

    @property
    def exhausted(self) -> bool:
        return len(self._seen) >= self.max_pages

    @property
    def remaining(self) -> int:
        return max(0, self.max_pages - len(self._seen))

    def try_reserve(self, canonical_url: str) -> bool:
        """
        Mark `canonical_url` as visited if the budget allows and it was not
        seen before. Returns True when the caller may process the URL.
        """
        if self.exhausted:
            log.debug("Budget exhausted (%d); not reserving %s", self.max_pages, canonical_url)
            return False
        if canonical_url in self._seen:
            return False
        self._seen[canonical_url] = None
        return True

    def __contains__(self, canonical_url: object) -> bool:
        return canonical_url in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        return iter(self._seen)

    def __repr__(self) -> str:
        return f"VisitedSet({len(self._seen)}/{self.max_pages})"
