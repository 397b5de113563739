"""
AnalysisResult 渲染（确定性输出，不依赖 LLM）。

- ConsoleFormatter：终端输出（rich 着色，可关闭）
- CommentFormatter：GitHub PR 评论 Markdown
- StatusCheckFormatter：status check JSON（state/title/summary/details）
- ReportFormatter：完整 JSON 报告
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Literal

from rich.text import Text

from commit_coach.analysis.models import AnalysisResult
from commit_coach.analysis.models import Insight
from commit_coach.analysis.models import InsightType
from commit_coach.insights.config import OutputConfig

StatusState = Literal["success", "failure", "neutral"]

_ICONS: dict[InsightType, str] = {"error": "❌", "warning": "⚠️", "suggestion": "💡", "info": "ℹ️"}
_STYLES: dict[InsightType, str] = {"error": "red", "warning": "yellow", "suggestion": "blue", "info": "cyan"}


def insight_icon(insight_type: InsightType) -> str:
    return _ICONS.get(insight_type, "📝")


def _confidence_label(insight: Insight) -> str:
    return f"({round(insight.confidence * 100)}%)"


def count_by_type(result: AnalysisResult, insight_type: InsightType) -> int:
    return sum(1 for i in result.insights if i.type == insight_type)


class OutputFormatter(ABC):
    def __init__(self, config: OutputConfig | None = None) -> None:
        self.config = config or OutputConfig()

    @abstractmethod
    def format(self, result: AnalysisResult) -> str: ...


class ConsoleFormatter(OutputFormatter):
    def __init__(self, config: OutputConfig | None = None, colorize: bool = True) -> None:
        super().__init__(config)
        self.colorize = colorize

    def render(self, result: AnalysisResult) -> Text:
        """返回 rich Text（colorize=False 时不带任何 style）。"""
        text = Text()
        text.append(f"🔍 Commit Coach Analysis for {result.commit.hash[:8]}", style=self._style("bold blue"))

        if self.config.include_summary:
            summary = result.summary
            lines = [
                "",
                "📊 Summary:",
                f"  • {summary.totalLines} lines changed",
                f"  • {summary.filesChanged} files modified",
                f"  • {summary.testFilesChanged} test files changed",
                f"  • {summary.documentationFilesChanged} documentation files changed",
            ]
            text.append("\n" + "\n".join(lines), style=self._style("bright_black"))

        if not result.insights:
            text.append("\n\n✅ No insights to report - great commit!", style=self._style("green"))
            return text

        text.append("\n\n💡 Insights:")
        for insight in result.insights:
            block = f"\n\n{insight_icon(insight.type)} {insight.title} {_confidence_label(insight)}\n   {insight.message}"
            text.append(block, style=self._style(_STYLES.get(insight.type, "white")))
        return text

    def format(self, result: AnalysisResult) -> str:
        return self.render(result).plain

    def _style(self, style: str) -> str | None:
        return style if self.colorize else None


class CommentFormatter(OutputFormatter):
    def format(self, result: AnalysisResult) -> str:
        lines: list[str] = ["## 🔍 Commit Coach Analysis", ""]

        if self.config.include_summary:
            summary = result.summary
            lines.append("### 📊 Summary")
            lines.append("")
            lines.append(f"- **{summary.totalLines}** lines changed")
            lines.append(f"- **{summary.filesChanged}** files modified")
            lines.append(f"- **{summary.testFilesChanged}** test files changed")
            lines.append(f"- **{summary.documentationFilesChanged}** documentation files changed")
            lines.append("")

        if not result.insights:
            lines.append("### ✅ No Issues Found")
            lines.append("")
            lines.append("Great commit! No insights to report.")
            return "\n".join(lines)

        lines.append("### 💡 Insights")
        lines.append("")
        for insight in result.insights:
            lines.append(f"**{insight_icon(insight.type)} {insight.title}** {_confidence_label(insight)}")
            lines.append("")
            lines.append(insight.message)
            lines.append("")
        return "\n".join(lines)


def status_check_state(result: AnalysisResult) -> tuple[StatusState, str, str]:
    """返回 (state, title, summary)：有 error 即 failure；只有 warning 为 neutral。"""
    errors = count_by_type(result, "error")
    warnings = count_by_type(result, "warning")
    if errors > 0:
        return (
            "failure",
            f"Commit Coach: {errors} error(s) found",
            f"Found {errors} error(s) and {warnings} warning(s) in this commit.",
        )
    if warnings > 0:
        return (
            "neutral",
            f"Commit Coach: {warnings} warning(s) found",
            f"Found {warnings} warning(s) in this commit.",
        )
    return "success", "Commit Coach: No issues found", "Great commit! No issues detected."


class StatusCheckFormatter(OutputFormatter):
    def format(self, result: AnalysisResult) -> str:
        state, title, summary = status_check_state(result)
        return json.dumps({"state": state, "title": title, "summary": summary, "details": self._details(result)})

    def _details(self, result: AnalysisResult) -> str:
        commit = result.commit
        lines = [
            f"Commit: {commit.hash[:8]}",
            f"Author: {commit.author}",
            f"Message: {commit.message}",
            "",
            f"Files changed: {result.summary.filesChanged}",
            f"Lines changed: {result.summary.totalLines}",
            "",
        ]
        if result.insights:
            lines.append("Insights:")
            lines.extend(f"- {i.type.upper()}: {i.title}" for i in result.insights)
        return "\n".join(lines)


class ReportFormatter(OutputFormatter):
    def __init__(
        self,
        config: OutputConfig | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        super().__init__(config)
        self._clock = clock

    def format(self, result: AnalysisResult) -> str:
        commit = result.commit
        report = {
            "commit": {
                "hash": commit.hash,
                "message": commit.message,
                "author": commit.author,
                "date": commit.date.isoformat(),
            },
            "summary": result.summary.model_dump(mode="json"),
            "insights": [i.model_dump(mode="json") for i in result.insights],
            "generatedAt": self._clock().isoformat(),
        }
        return json.dumps(report, indent=2, ensure_ascii=False)


def create_formatter(name: str, config: OutputConfig | None = None, colorize: bool = True) -> OutputFormatter:
    if name == "comment":
        return CommentFormatter(config)
    if name == "status-check":
        return StatusCheckFormatter(config)
    if name == "report":
        return ReportFormatter(config)
    if name == "console":
        return ConsoleFormatter(config, colorize=colorize)
    raise ValueError(f"Unknown output format: {name}")
