# Normalization of axe-core / Lighthouse output and the analyzer's failure policy.

from __future__ import annotations

import asyncio

import pytest

from a11y_crawler.analysis import PageAnalyzer, issues_from_axe, score_from_lighthouse
from a11y_crawler.browser import DebugConnection
from a11y_crawler.errors import AnalysisFailure, ScoreAnalysisFailure
from a11y_crawler.lighthouse_runner import LighthouseRunner
from a11y_crawler.models import AffectedElement

AXE_RESPONSE = {
    "violations": [
        {
            "id": "color-contrast",
            "impact": "serious",
            "help": "Elements must meet minimum color contrast ratio thresholds",
            "description": "Ensures the contrast between foreground and background colors meets WCAG 2 AA",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.8/color-contrast",
            "nodes": [
                {
                    "html": '<a href="/x" class="faint">x</a>',
                    "failureSummary": "Fix any of the following:\n  Element has insufficient color contrast",
                },
                {"html": "<p>two</p>"},
            ],
        },
        {
            "id": "region",
            "impact": None,
            "help": "All page content should be contained by landmarks",
            "description": "Ensures all page content is contained by landmarks",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.8/region",
            "nodes": [],
        },
        {
            "id": "made-up",
            "impact": "catastrophic",
            "help": "h",
            "description": "d",
            "helpUrl": "",
            "nodes": [],
        },
    ],
    "passes": [{"id": "html-has-lang"}],
}

LHR = {
    "categories": {
        "accessibility": {
            "score": 0.87,
            "auditRefs": [
                {"id": "image-alt", "weight": 10},
                {"id": "color-contrast", "weight": 7},
                {"id": "document-title", "weight": 7},
                {"id": "accesskeys", "weight": 0},
                {"id": "logical-tab-order", "weight": 0},
            ],
        }
    },
    "audits": {
        "image-alt": {"score": 0, "scoreDisplayMode": "binary", "title": "Image elements do not have `[alt]` attributes", "description": "Informative elements should aim for short text."},
        "color-contrast": {"score": 0.5, "scoreDisplayMode": "binary", "title": "Contrast"},
        "document-title": {"score": 1, "scoreDisplayMode": "binary", "title": "Document has a `<title>` element"},
        "accesskeys": {"score": None, "scoreDisplayMode": "notApplicable", "title": "n/a"},
        "logical-tab-order": {"score": None, "scoreDisplayMode": "manual", "title": "manual"},
    },
}


def test_issues_from_axe_keeps_order_and_fields():
    issues = issues_from_axe(AXE_RESPONSE)

    assert [i.id for i in issues] == ["color-contrast", "region", "made-up"]
    first = issues[0]
    assert first.severity == "serious"
    assert first.help_url.endswith("/color-contrast")
    assert first.elements == (
        AffectedElement(
            html='<a href="/x" class="faint">x</a>',
            failure_summary="Fix any of the following:\n  Element has insufficient color contrast",
        ),
        AffectedElement(html="<p>two</p>", failure_summary=None),
    )


def test_missing_or_unrecognized_impact_is_unknown():
    issues = issues_from_axe(AXE_RESPONSE)
    assert issues[1].severity == "unknown"
    assert issues[2].severity == "unknown"


def test_issues_from_axe_without_violations():
    assert issues_from_axe({"violations": []}) == []
    assert issues_from_axe({}) == []


def test_score_from_lighthouse():
    result = score_from_lighthouse(LHR)
    assert result.score == 87.0
    assert [c.id for c in result.failed_checks] == ["image-alt", "color-contrast"]
    assert result.failed_checks[0].score == 0.0


def test_score_from_lighthouse_without_category():
    with pytest.raises(ScoreAnalysisFailure):
        score_from_lighthouse({"categories": {"performance": {"score": 0.5}}})


# ---------- PageAnalyzer ----------

class FakeAxeResults:
    def __init__(self, response):
        self.response = response


class FakeAxe:
    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {"violations": []}
        self.error = error
        self.options = []

    async def run(self, page, options=None):
        self.options.append(options)
        if self.error:
            raise self.error
        return FakeAxeResults(self.response)


class FakeLighthouse(LighthouseRunner):
    def __init__(self, lhr=None, error=None):
        super().__init__()
        self.lhr = lhr
        self.error = error
        self.calls = []

    async def audit(self, url, connection):
        self.calls.append((url, connection))
        if self.error:
            raise self.error
        return self.lhr


CONNECTION = DebugConnection(host="127.0.0.1", port=9222)


def test_analyze_rule_engine_only():
    analyzer = PageAnalyzer(axe=FakeAxe(AXE_RESPONSE))
    analysis = asyncio.run(analyzer.analyze(object(), "https://example.com/"))
    assert len(analysis.issues) == 3
    assert analysis.score is None


def test_analyze_with_score():
    lighthouse = FakeLighthouse(lhr=LHR)
    analyzer = PageAnalyzer(axe=FakeAxe(), lighthouse=lighthouse)
    analysis = asyncio.run(analyzer.analyze(object(), "https://example.com/", CONNECTION))
    assert analysis.issues == ()
    assert analysis.score is not None
    assert analysis.score.score == 87.0
    assert lighthouse.calls == [("https://example.com/", CONNECTION)]


def test_score_failure_keeps_page():
    lighthouse = FakeLighthouse(error=ScoreAnalysisFailure("Lighthouse failed (exit 1)"))
    analyzer = PageAnalyzer(axe=FakeAxe(AXE_RESPONSE), lighthouse=lighthouse)
    analysis = asyncio.run(analyzer.analyze(object(), "https://example.com/", CONNECTION))
    assert len(analysis.issues) == 3
    assert analysis.score is None


@pytest.mark.parametrize(
    "lhr",
    [
        {"categories": {"accessibility": {"score": "n/a"}}},
        [],
        {"categories": {"accessibility": {"score": 0.5, "auditRefs": ["image-alt"]}}},
        {"categories": {"accessibility": {"score": 0.5, "auditRefs": [{"id": "x"}]}}, "audits": {"x": {"score": "low"}}},
        {"categories": "accessibility"},
    ],
)
def test_malformed_lighthouse_report_keeps_page(lhr):
    analyzer = PageAnalyzer(axe=FakeAxe(AXE_RESPONSE), lighthouse=FakeLighthouse(lhr=lhr))
    analysis = asyncio.run(analyzer.analyze(object(), "https://example.com/", CONNECTION))
    assert len(analysis.issues) == 3
    assert analysis.score is None


def test_malformed_lighthouse_report_is_score_failure():
    with pytest.raises(ScoreAnalysisFailure):
        score_from_lighthouse({"categories": {"accessibility": {"score": "n/a"}}})


def test_score_skipped_without_connection():
    lighthouse = FakeLighthouse(lhr=LHR)
    analyzer = PageAnalyzer(axe=FakeAxe(), lighthouse=lighthouse)
    analysis = asyncio.run(analyzer.analyze(object(), "https://example.com/", None))
    assert analysis.score is None
    assert lighthouse.calls == []


def test_rule_engine_failure_raises_analysis_failure():
    analyzer = PageAnalyzer(axe=FakeAxe(error=RuntimeError("Execution context was destroyed")))
    with pytest.raises(AnalysisFailure) as excinfo:
        asyncio.run(analyzer.analyze(object(), "https://example.com/"))
    assert not isinstance(excinfo.value, ScoreAnalysisFailure)


def test_axe_tags_become_run_only_options():
    axe = FakeAxe()
    analyzer = PageAnalyzer(axe=axe, axe_tags=["wcag2a", "wcag2aa"])
    asyncio.run(analyzer.analyze(object(), "https://example.com/"))
    assert axe.options == [
        {
            "resultTypes": ["violations"],
            "runOnly": {"type": "tag", "values": ["wcag2a", "wcag2aa"]},
        }
    ]


def test_axe_asks_only_for_violations_without_tags():
    axe = FakeAxe()
    asyncio.run(PageAnalyzer(axe=axe).analyze(object(), "https://example.com/"))
    assert axe.options == [{"resultTypes": ["violations"]}]


def test_from_config_builds_lighthouse_runner_only_when_enabled():
    config = {
        "axe": {"tags": []},
        "lighthouse": {"enabled": True, "command": "/opt/lh", "timeout": 10},
    }
    analyzer = PageAnalyzer.from_config(config)
    assert isinstance(analyzer.lighthouse, LighthouseRunner)
    assert analyzer.lighthouse.command == "/opt/lh"

    config["lighthouse"]["enabled"] = False
    assert PageAnalyzer.from_config(config).lighthouse is None


# ---------- LighthouseRunner ----------

def test_lighthouse_command_attaches_to_debug_port():
    runner = LighthouseRunner()
    cmd = runner.build_command("https://example.com/", CONNECTION, "/tmp/out.json")
    assert cmd[:2] == ["lighthouse", "https://example.com/"]
    assert "--port=9222" in cmd
    assert "--output-path=/tmp/out.json" in cmd
    assert "--only-categories=accessibility" in cmd


def test_lighthouse_missing_executable_is_score_failure(tmp_path):
    runner = LighthouseRunner(command=str(tmp_path / "no-such-lighthouse"))
    with pytest.raises(ScoreAnalysisFailure):
        asyncio.run(runner.audit("https://example.com/", CONNECTION))
