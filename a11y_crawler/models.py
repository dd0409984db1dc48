# Defines the data structures shared by the crawler, the analyzers and the report.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from a11y_crawler.budget import VisitedSet

# axe-core impact levels, plus an explicit bucket for missing/unrecognized ones.
Severity = Literal["critical", "serious", "moderate", "minor", "unknown"]

SEVERITY_ORDER: tuple[Severity, ...] = (
    "critical",
    "serious",
    "moderate",
    "minor",
    "unknown",
)


@dataclass(frozen=True)
class AffectedElement:
    """An HTML snippet that failed a rule, with the engine's explanation."""

    html: str
    failure_summary: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    """
    One accessibility finding from the rule-based engine.
    Mirrors an axe-core violation after normalization.
    """

    id: str
    help: str
    description: str
    severity: Severity
    help_url: str = ""
    elements: tuple[AffectedElement, ...] = ()


@dataclass(frozen=True)
class ScoreCheck:
    """A check the score-based engine marked as failed."""

    id: str
    title: str
    description: str = ""
    score: Optional[float] = None  # 0..1 as reported by the engine


@dataclass(frozen=True)
class ScoreResult:
    """Accessibility score on a 0-100 scale plus the checks that pulled it down."""

    score: float
    failed_checks: tuple[ScoreCheck, ...] = ()


@dataclass(frozen=True)
class PageAnalysis:
    """Normalized output of both engines for a single page."""

    issues: tuple[Issue, ...]
    score: Optional[ScoreResult] = None


@dataclass(frozen=True)
class PageResult:
    """The outcome for one crawled page. Never mutated once recorded."""

    url: str
    analyzed_at: str  # ISO 8601, UTC
    issues: tuple[Issue, ...] = ()
    score: Optional[ScoreResult] = None


@dataclass
class CrawlSession:
    """
    Root aggregate of a crawl. Mutated only by the crawler while it runs,
    then read by the report code.
    """

    start_url: str
    base_origin: str
    max_pages: int
    visited: VisitedSet
    results: List[PageResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


@dataclass(frozen=True)
class Summary:
    """Aggregate statistics over every page of a session."""

    pages: int
    total_violations: int
    critical: int
    serious: int
    average_score: Optional[float] = None  # None when no page produced a score
