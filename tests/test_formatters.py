from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from commit_coach.analysis.models import AnalysisResult
from commit_coach.analysis.models import AnalysisSummary
from commit_coach.analysis.models import Insight
from commit_coach.insights.config import OutputConfig
from commit_coach.output.formatters import CommentFormatter
from commit_coach.output.formatters import ConsoleFormatter
from commit_coach.output.formatters import ReportFormatter
from commit_coach.output.formatters import StatusCheckFormatter
from commit_coach.output.formatters import create_formatter
from commit_coach.output.formatters import status_check_state


def _result(make_commit, *insights: Insight) -> AnalysisResult:
    return AnalysisResult(
        commit=make_commit(),
        insights=tuple(insights),
        summary=AnalysisSummary(totalLines=12, filesChanged=2, testFilesChanged=1, documentationFilesChanged=0),
    )


ERROR = Insight(id="breaking-changes", type="error", title="Breaking Changes Detected", message="m1", confidence=0.9)
WARNING = Insight(id="debug-code", type="warning", title="Debug Code Detected", message="m2", confidence=0.9)


def test_console_plain_output(make_commit) -> None:
    text = ConsoleFormatter(colorize=False).format(_result(make_commit, WARNING))
    assert text.startswith("🔍 Commit Coach Analysis for 01234567")
    assert "12 lines changed" in text
    assert "⚠️ Debug Code Detected (90%)" in text
    assert "   m2" in text


def test_console_colorize_toggle(make_commit) -> None:
    result = _result(make_commit, ERROR)
    assert not ConsoleFormatter(colorize=False).render(result).spans
    assert ConsoleFormatter(colorize=True).render(result).spans


def test_console_without_insights_or_summary(make_commit) -> None:
    text = ConsoleFormatter(OutputConfig(include_summary=False), colorize=False).format(_result(make_commit))
    assert "Summary" not in text
    assert "No insights to report" in text


def test_comment_markdown(make_commit) -> None:
    body = CommentFormatter().format(_result(make_commit, ERROR, WARNING))
    assert body.startswith("## 🔍 Commit Coach Analysis")
    assert "- **12** lines changed" in body
    assert "**❌ Breaking Changes Detected** (90%)" in body
    assert body.index("Breaking Changes") < body.index("Debug Code")


def test_comment_no_issues(make_commit) -> None:
    assert "### ✅ No Issues Found" in CommentFormatter().format(_result(make_commit))


@pytest.mark.parametrize(
    ("insights", "state"),
    [((ERROR, WARNING), "failure"), ((WARNING,), "neutral"), ((), "success")],
)
def test_status_check_state(make_commit, insights: tuple[Insight, ...], state: str) -> None:
    assert status_check_state(_result(make_commit, *insights))[0] == state


def test_status_check_json(make_commit) -> None:
    payload = json.loads(StatusCheckFormatter().format(_result(make_commit, ERROR)))
    assert payload["state"] == "failure"
    assert payload["title"] == "Commit Coach: 1 error(s) found"
    assert "- ERROR: Breaking Changes Detected" in payload["details"]
    assert "Author: Dev" in payload["details"]


def test_report_json(make_commit) -> None:
    clock = lambda: datetime(2024, 6, 1, tzinfo=timezone.utc)  # noqa: E731
    report = json.loads(ReportFormatter(clock=clock).format(_result(make_commit, WARNING)))
    assert report["commit"]["hash"] == "0123456789abcdef0123456789abcdef01234567"
    assert report["summary"]["totalLines"] == 12
    assert report["insights"][0]["id"] == "debug-code"
    assert report["generatedAt"] == "2024-06-01T00:00:00+00:00"


def test_create_formatter() -> None:
    assert isinstance(create_formatter("comment"), CommentFormatter)
    assert isinstance(create_formatter("report"), ReportFormatter)
    assert isinstance(create_formatter("console", colorize=False), ConsoleFormatter)
    with pytest.raises(ValueError):
        create_formatter("xml")
