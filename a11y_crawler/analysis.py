# a11y_crawler/analysis.py
"""
Page analysis adapter.

Runs axe-core (required) and Lighthouse (best-effort) against a page the
crawler has already loaded, and folds both outputs into one PageAnalysis so
nothing downstream needs to know which engine said what.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from axe_playwright_python.async_playwright import Axe
from playwright.async_api import Page

from a11y_crawler.browser import DebugConnection
from a11y_crawler.errors import AnalysisFailure, ScoreAnalysisFailure
from a11y_crawler.lighthouse_runner import LighthouseRunner
from a11y_crawler.models import (
    SEVERITY_ORDER,
    AffectedElement,
    Issue,
    PageAnalysis,
    ScoreCheck,
    ScoreResult,
    Severity,
)

log = logging.getLogger(__name__)

# Lighthouse audits with these display modes carry no pass/fail signal.
_UNSCORED_DISPLAY_MODES = {"notApplicable", "manual", "informative", "error"}


def _severity(impact: Any) -> Severity:
    if isinstance(impact, str) and impact.lower() in SEVERITY_ORDER:
        return impact.lower()  # type: ignore[return-value]
    return "unknown"


def issues_from_axe(response: Dict[str, Any]) -> List[Issue]:
    """Normalize the `violations` of an axe-core result, keeping engine order."""
    issues: List[Issue] = []
    for violation in response.get("violations") or []:
        elements = tuple(
            AffectedElement(
                html=str(node.get("html", "")),
                failure_summary=node.get("failureSummary") or None,
            )
            for node in violation.get("nodes") or []
        )
        issues.append(
            Issue(
                id=str(violation.get("id", "")),
                help=str(violation.get("help", "")),
                description=str(violation.get("description", "")),
                severity=_severity(violation.get("impact")),
                help_url=str(violation.get("helpUrl", "")),
                elements=elements,
            )
        )
    return issues


def _failed_checks(audit_ids: Iterable[str], audits: Dict[str, Any]) -> List[ScoreCheck]:
    failed: List[ScoreCheck] = []
    for audit_id in audit_ids:
        audit = audits.get(audit_id)
        if not audit:
            continue
        if audit.get("scoreDisplayMode") in _UNSCORED_DISPLAY_MODES:
            continue
        score = audit.get("score")
        if score is None or score >= 1:
            continue
        failed.append(
            ScoreCheck(
                id=audit_id,
                title=str(audit.get("title", audit_id)),
                description=str(audit.get("description", "")),
                score=float(score),
            )
        )
    return failed


def score_from_lighthouse(lhr: Dict[str, Any]) -> ScoreResult:
    """
    Extract the accessibility score (0-1 in the report, 0-100 here) and the
    failed accessibility audits from a Lighthouse result.

    Raises ScoreAnalysisFailure for a missing category or a report that is not
    shaped like a Lighthouse result.
    """
    try:
        category = (lhr.get("categories") or {}).get("accessibility")
        if not category or category.get("score") is None:
            raise ScoreAnalysisFailure("Lighthouse report has no accessibility score")

        audit_ids = [ref.get("id", "") for ref in category.get("auditRefs") or []]
        return ScoreResult(
            score=round(float(category["score"]) * 100, 1),
            failed_checks=tuple(_failed_checks(audit_ids, lhr.get("audits") or {})),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ScoreAnalysisFailure(f"Malformed Lighthouse report: {e}") from e


class PageAnalyzer:
    """Runs the configured engines against one loaded page at a time."""

    def __init__(
        self,
        axe: Any = None,
        lighthouse: Optional[LighthouseRunner] = None,
        axe_tags: Optional[List[str]] = None,
    ):
        self.axe = axe if axe is not None else Axe()
        self.lighthouse = lighthouse
        self.axe_tags = list(axe_tags or [])

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PageAnalyzer":
        lighthouse_cfg = config.get("lighthouse", {})
        runner = None
        if lighthouse_cfg.get("enabled", False):
            runner = LighthouseRunner(
                command=lighthouse_cfg.get("command", "lighthouse"),
                timeout=float(lighthouse_cfg.get("timeout", 120.0)),
            )
        return cls(lighthouse=runner, axe_tags=config.get("axe", {}).get("tags", []))

    async def run_rules(self, page: Page) -> List[Issue]:
        """Run axe-core on the page. Any failure is an AnalysisFailure."""
        # only violations are reported, so axe need not build the other result types
        options: Dict[str, Any] = {"resultTypes": ["violations"]}
        if self.axe_tags:
            options["runOnly"] = {"type": "tag", "values": self.axe_tags}
        try:
            results = await self.axe.run(page, options=options)
        except Exception as e:
            raise AnalysisFailure(f"axe-core failed: {e}") from e
        response = getattr(results, "response", results)
        if not isinstance(response, dict):
            raise AnalysisFailure(f"Unexpected axe-core result: {type(response).__name__}")
        return issues_from_axe(response)

    async def run_score(
        self, url: str, connection: Optional[DebugConnection]
    ) -> Optional[ScoreResult]:
        """Run Lighthouse if it is configured. Failures are logged, never raised."""
        if self.lighthouse is None:
            return None
        if connection is None:
            log.debug("No debug connection; skipping Lighthouse for %s", url)
            return None
        try:
            lhr = await self.lighthouse.audit(url, connection)
            return score_from_lighthouse(lhr)
        except ScoreAnalysisFailure as e:
            log.warning("Score-based analysis failed for %s: %s", url, e)
            return None

    async def analyze(
        self, page: Page, url: str, connection: Optional[DebugConnection] = None
    ) -> PageAnalysis:
        issues = await self.run_rules(page)
        score = await self.run_score(url, connection)
        log.debug(
            "Analyzed %s: %d violation(s), score=%s",
            url,
            len(issues),
            score.score if score else "n/a",
        )
        return PageAnalysis(issues=tuple(issues), score=score)
