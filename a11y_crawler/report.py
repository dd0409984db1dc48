# a11y_crawler/report.py
"""
Summary statistics and the markdown report.

Rendering only reads the session: the "generated" time is the session's
`finished_at`, so rendering the same session twice gives the same text.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from a11y_crawler.models import (
    SEVERITY_ORDER,
    CrawlSession,
    Issue,
    PageResult,
    ScoreResult,
    Severity,
    Summary,
)

log = logging.getLogger(__name__)

MAX_RENDERED_ELEMENTS = 3

SEVERITY_EMOJI: Dict[Severity, str] = {
    "critical": "🔴",
    "serious": "🟠",
    "moderate": "🟡",
    "minor": "🔵",
    "unknown": "⚪",
}

RATING_EMOJI = {
    "good": "🟢",
    "needs improvement": "🟠",
    "poor": "🔴",
}


def summarize(session: CrawlSession) -> Summary:
    """Violation counts across every page and the mean score where one exists."""
    issues = [issue for result in session.results for issue in result.issues]
    scores = [r.score.score for r in session.results if r.score is not None]
    average = round(sum(scores) / len(scores), 1) if scores else None
    return Summary(
        pages=len(session.results),
        total_violations=len(issues),
        critical=sum(1 for i in issues if i.severity == "critical"),
        serious=sum(1 for i in issues if i.severity == "serious"),
        average_score=average,
    )


def group_by_severity(issues: Iterable[Issue]) -> Dict[Severity, List[Issue]]:
    """
    Bucket issues by severity. Every severity key is present, in report order,
    and issues keep the order the engine reported them in.
    """
    groups: Dict[Severity, List[Issue]] = {severity: [] for severity in SEVERITY_ORDER}
    for issue in issues:
        bucket = issue.severity if issue.severity in groups else "unknown"
        groups[bucket].append(issue)
    return groups


def score_rating(score: float) -> str:
    if score >= 90:
        return "good"
    if score >= 50:
        return "needs improvement"
    return "poor"


def _format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "unknown"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    text = parsed.strftime("%Y-%m-%d %H:%M:%S")
    offset = parsed.utcoffset()
    if offset is None:
        return text
    if not offset:
        return f"{text} UTC"
    return f"{text} {parsed.strftime('%z')}"


def _format_score(score: Optional[float]) -> str:
    if score is None:
        return "N/A"
    return f"{score:g}"


def _render_score(score: ScoreResult) -> List[str]:
    rating = score_rating(score.score)
    lines = [
        f"### {RATING_EMOJI[rating]} Accessibility Score: {_format_score(score.score)}/100 ({rating})",
        "",
    ]
    if score.failed_checks:
        lines.append(f"Failed checks ({len(score.failed_checks)}):")
        lines.append("")
        for check in score.failed_checks:
            lines.append(f"- **{check.title}** (`{check.id}`)")
        lines.append("")
    return lines


def _render_issue(issue: Issue) -> List[str]:
    lines = [
        f"**{issue.help}**",
        "",
        f"- **Description:** {issue.description}",
        f"- **Impact:** {issue.severity}",
        f"- **Affected Elements:** {len(issue.elements)}",
        f"- **Learn More:** [{issue.id}]({issue.help_url})",
        "",
    ]
    if not issue.elements:
        return lines

    lines.extend(["<details>", "<summary>View affected elements</summary>", ""])
    for n, element in enumerate(issue.elements[:MAX_RENDERED_ELEMENTS], start=1):
        lines.extend([f"**Element {n}:**", "```html", element.html, "```"])
        if element.failure_summary:
            lines.extend([element.failure_summary, ""])
    remainder = len(issue.elements) - MAX_RENDERED_ELEMENTS
    if remainder > 0:
        lines.extend([f"... and {remainder} more element(s)", ""])
    lines.extend(["</details>", ""])
    return lines


def _render_page(result: PageResult) -> List[str]:
    lines = [
        f"## Page: {result.url}",
        "",
        f"**Analyzed:** {_format_timestamp(result.analyzed_at)}",
        "",
    ]
    if result.score is not None:
        lines.extend(_render_score(result.score))

    if not result.issues:
        lines.extend(["✅ **No violations found!**", ""])
    else:
        lines.extend([f"### Violations ({len(result.issues)})", ""])
        for severity, issues in group_by_severity(result.issues).items():
            if not issues:
                continue
            lines.extend(
                [f"#### {SEVERITY_EMOJI[severity]} {severity.upper()} ({len(issues)})", ""]
            )
            for issue in issues:
                lines.extend(_render_issue(issue))

    lines.extend(["---", ""])
    return lines


def render_markdown(session: CrawlSession, summary: Optional[Summary] = None) -> str:
    """Render the full report for a finished session."""
    summary = summary or summarize(session)
    lines = [
        "# Accessibility Report",
        "",
        f"**Site:** {session.start_url}",
        f"**Generated:** {_format_timestamp(session.finished_at)}",
        f"**Pages Analyzed:** {summary.pages}",
        "",
        "## Summary",
        "",
        f"- **Total Violations:** {summary.total_violations}",
        f"- **Critical Issues:** {summary.critical}",
        f"- **Serious Issues:** {summary.serious}",
        f"- **Average Accessibility Score:** {_format_score(summary.average_score)}",
        "",
        "---",
        "",
    ]
    for result in session.results:
        lines.extend(_render_page(result))
    return "\n".join(lines)


def write_report(path: Path, text: str) -> Path:
    """Write the report, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(text)
    log.info("Report written to %s", path)
    return path


def default_report_path(
    start_url: str, now: datetime, report_dir: str = "reports"
) -> Path:
    """
    reports/{host with dots as dashes}-{ISO 8601 time with ':' and '.' as dashes}.md

    `now` should be timezone-aware; it is converted to UTC and rendered with
    millisecond precision, e.g. 2024-05-01T12-30-05-123Z.
    """
    host = (urlparse(start_url).hostname or "site").replace(".", "-")
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    stamp = stamp.replace(":", "-").replace(".", "-")
    return Path(report_dir) / f"{host}-{stamp}.md"
